"""Stopwatch: an identity owning a sequence of laps."""

import time
import uuid
from datetime import datetime
from enum import StrEnum

from stopwatchd.identifiers import Identifier, MatchKind, node_hex
from stopwatchd.lap import Clock, Lap


class State(StrEnum):
    """What a stopwatch is doing."""

    PLAYING = "playing"
    PAUSED = "paused"
    ENDED = "ended"


class Stopwatch:
    """Named stopwatch with laps that can be played, paused, lapped, and ended.

    ``current_lap`` is None exactly when the stopwatch has ended. Once ended, every
    mutating call is a no-op.
    """

    def __init__(self, name: str = "", *, clock: Clock = time.monotonic) -> None:
        """Create a paused stopwatch with one lap standing by.

        Args:
            name: Display name, may be empty and need not be unique.
            clock: Monotonic time source shared by all laps of this stopwatch.

        """
        self._id = uuid.uuid4()
        self._name = name
        self._clock = clock
        self.finished_laps: list[Lap] = []
        self.current_lap: Lap | None = Lap.new_standby(self._id, clock=clock)

    @classmethod
    def new(cls, name: str = "", *, clock: Clock = time.monotonic) -> "Stopwatch":
        """Create a paused stopwatch."""
        return cls(name, clock=clock)

    @classmethod
    def start(cls, name: str = "", *, clock: Clock = time.monotonic) -> "Stopwatch":
        """Create a stopwatch that is already playing."""
        stopwatch = cls(name, clock=clock)
        stopwatch.play()
        return stopwatch

    @property
    def id(self) -> uuid.UUID:
        return self._id

    @property
    def name(self) -> str:
        return self._name

    @property
    def label(self) -> str:
        """Name if set, otherwise the id node: how users refer to this stopwatch."""
        return self._name or node_hex(self._id)

    # --- Transitions ---

    def play(self) -> State:
        """Resume the current lap. Return the state before the call."""
        state = self.state
        if self.current_lap is not None:
            self.current_lap.play()
        return state

    def pause(self) -> State:
        """Pause the current lap. Return the state before the call."""
        state = self.state
        if self.current_lap is not None:
            self.current_lap.pause()
        return state

    def new_lap(self, start_immediately: bool = True) -> State:
        """End the current lap and open a new one. Return the resulting state.

        An ended stopwatch stays ended.
        """
        if self.current_lap is None:
            return State.ENDED
        self.current_lap.end()
        self.finished_laps.append(self.current_lap)
        if start_immediately:
            self.current_lap = Lap.start_immediately(self._id, clock=self._clock)
            return State.PLAYING
        self.current_lap = Lap.new_standby(self._id, clock=self._clock)
        return State.PAUSED

    def end(self) -> State:
        """End the stopwatch permanently. Return the state before the call."""
        state = self.state
        if self.current_lap is not None:
            self.current_lap.end()
            self.finished_laps.append(self.current_lap)
            self.current_lap = None
        return state

    # --- Read accessors ---

    @property
    def state(self) -> State:
        if self.current_lap is None:
            return State.ENDED
        return State.PLAYING if self.current_lap.running else State.PAUSED

    def total_time(self) -> float:
        """Seconds spent playing across all laps."""
        total = sum((lap.accumulated for lap in self.finished_laps), 0.0)
        if self.current_lap is not None:
            total += self.current_lap.total_time()
        return total

    @property
    def lap_count(self) -> int:
        return len(self.finished_laps) + (1 if self.current_lap is not None else 0)

    @property
    def first_lap(self) -> Lap | None:
        if self.finished_laps:
            return self.finished_laps[0]
        return self.current_lap

    @property
    def last_lap(self) -> Lap | None:
        if self.current_lap is not None:
            return self.current_lap
        return self.finished_laps[-1] if self.finished_laps else None

    def all_laps(self) -> list[Lap]:
        """Finished laps followed by the current lap, if any."""
        laps = list(self.finished_laps)
        if self.current_lap is not None:
            laps.append(self.current_lap)
        return laps

    @property
    def start_time(self) -> datetime | None:
        """Wall-clock time the first lap was created."""
        first = self.first_lap
        return first.wall_start if first is not None else None

    def matches_identifier(self, identifier: Identifier) -> MatchKind | None:
        return identifier.matches(self._id, self._name)

    def __repr__(self) -> str:
        return f"Stopwatch(id={self._id}, name={self._name!r}, state={self.state}, laps={self.lap_count})"

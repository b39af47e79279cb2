"""A single timed interval of a stopwatch."""

import time
import uuid
from collections.abc import Callable
from datetime import UTC, datetime

Clock = Callable[[], float]


class Lap:
    """One lap: plays, pauses, and ends exactly once.

    Elapsed time is measured with a monotonic clock. ``wall_start`` is kept only
    for display and is never used for arithmetic.
    """

    def __init__(self, owner_id: uuid.UUID, *, clock: Clock = time.monotonic) -> None:
        """Create a lap that is standing by (not running).

        Args:
            owner_id: Id of the stopwatch that owns this lap.
            clock: Monotonic time source in seconds.

        """
        self.id = uuid.uuid4()
        self.owner_id = owner_id
        self.wall_start = datetime.now(UTC)
        self.accumulated = 0.0  # seconds banked before the current running interval
        self.ended = False
        self._clock = clock
        self._timer: float | None = None  # monotonic reference while running

    @classmethod
    def new_standby(cls, owner_id: uuid.UUID, *, clock: Clock = time.monotonic) -> "Lap":
        """Create a lap that waits for ``play()``."""
        return cls(owner_id, clock=clock)

    @classmethod
    def start_immediately(cls, owner_id: uuid.UUID, *, clock: Clock = time.monotonic) -> "Lap":
        """Create a lap that is already running."""
        lap = cls(owner_id, clock=clock)
        lap.play()
        return lap

    @property
    def running(self) -> bool:
        """Whether the monotonic timer is currently advancing."""
        return self._timer is not None

    def play(self) -> bool:
        """Start or resume the timer. Return True if the lap started running."""
        if self.running or self.ended:
            return False
        self._timer = self._clock()
        return True

    def pause(self) -> bool:
        """Bank the running interval and stop the timer. Return True if the lap was running."""
        if self._timer is None or self.ended:
            return False
        self.accumulated += self._clock() - self._timer
        self._timer = None
        return True

    def end(self) -> bool:
        """End the lap permanently. Return True if it had already ended."""
        if self.ended:
            return True
        self.pause()
        self.ended = True
        return False

    def total_time(self) -> float:
        """Seconds this lap has been running, including the live interval."""
        if self._timer is None:
            return self.accumulated
        return self.accumulated + (self._clock() - self._timer)

    def __repr__(self) -> str:
        return f"Lap(id={self.id}, running={self.running}, ended={self.ended}, total_time={self.total_time():.3f})"

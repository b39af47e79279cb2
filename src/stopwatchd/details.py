"""Point-in-time snapshots of stopwatches and errors, as sent to clients."""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from stopwatchd.errors import InvalidStateError, ResolutionError, StopwatchError
from stopwatchd.lap import Lap
from stopwatchd.stopwatch import State, Stopwatch


class LapDetails(BaseModel):
    """Snapshot of a single lap."""

    model_config = ConfigDict(frozen=True)

    id: uuid.UUID
    owner_id: uuid.UUID
    start_time: datetime = Field(description="Wall-clock time the lap was created")
    duration: float = Field(description="Seconds the lap has been running")
    ended: bool

    @staticmethod
    def from_lap(lap: Lap) -> "LapDetails":
        return LapDetails(id=lap.id, owner_id=lap.owner_id, start_time=lap.wall_start, duration=lap.total_time(), ended=lap.ended)


class StopwatchDetails(BaseModel):
    """Snapshot of a stopwatch. ``laps`` is only filled in verbose mode."""

    model_config = ConfigDict(frozen=True)

    id: uuid.UUID
    name: str
    label: str = Field(description="Name, or the id node when unnamed")
    state: State
    start_time: datetime | None = None
    total_time: float = Field(description="Seconds spent playing across all laps")
    lap_count: int
    current_lap_time: float = Field(description="Seconds on the last lap")
    laps: list[LapDetails] | None = None

    @staticmethod
    def from_stopwatch(stopwatch: Stopwatch, *, verbose: bool = False) -> "StopwatchDetails":
        """Capture a stopwatch's current state."""
        last = stopwatch.last_lap
        return StopwatchDetails(
            id=stopwatch.id,
            name=stopwatch.name,
            label=stopwatch.label,
            state=stopwatch.state,
            start_time=stopwatch.start_time,
            total_time=stopwatch.total_time(),
            lap_count=stopwatch.lap_count,
            current_lap_time=last.total_time() if last is not None else 0.0,
            laps=[LapDetails.from_lap(lap) for lap in stopwatch.all_laps()] if verbose else None,
        )


class StopwatchRef(BaseModel):
    """Identity of a stopwatch without its timing data."""

    model_config = ConfigDict(frozen=True)

    id: uuid.UUID
    name: str
    label: str = ""


class ErrorDetails(BaseModel):
    """Why an identifier could not be acted on."""

    model_config = ConfigDict(frozen=True)

    kind: str = Field(description="not_found, ambiguous or invalid_state")
    identifier: str
    message: str
    duplicates: list[StopwatchRef] = Field(default_factory=list)
    state: State | None = None

    @staticmethod
    def from_error(error: StopwatchError) -> "ErrorDetails":
        duplicates: list[StopwatchRef] = []
        state: State | None = None
        message = str(error)
        if isinstance(error, ResolutionError):
            duplicates = [StopwatchRef(id=d.id, name=d.name) for d in error.duplicates]
            message = error.diagnose()
        elif isinstance(error, InvalidStateError):
            state = error.state
        return ErrorDetails(kind=error.code, identifier=error.identifier, message=message, duplicates=duplicates, state=state)

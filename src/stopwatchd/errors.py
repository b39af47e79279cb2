"""Errors raised while resolving identifiers or changing stopwatch state."""

import uuid
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from stopwatchd.stopwatch import State


@dataclass(frozen=True)
class Duplicate:
    """An ``(id, name)`` pair reported when an identifier is ambiguous."""

    id: uuid.UUID
    name: str


class StopwatchError(Exception):
    """Application-level error tied to one client-supplied identifier."""

    def __init__(self, code: str, identifier: str, message: str) -> None:
        """Initialize with a machine-readable code and a human-readable message.

        Args:
            code: Machine-readable error code (e.g. "not_found").
            identifier: Raw identifier that caused the error.
            message: Human-readable error description.

        """
        super().__init__(message)
        self.code = code
        self.identifier = identifier


class ResolutionError(StopwatchError):
    """No stopwatch, or more than one, matched an identifier.

    ``duplicates`` is empty when nothing matched and lists every colliding
    stopwatch otherwise.
    """

    def __init__(self, identifier: str, duplicates: list[Duplicate]) -> None:
        if duplicates:
            code = "ambiguous"
            message = f"{len(duplicates)} stopwatches were found with identifier: {identifier}"
        else:
            code = "not_found"
            message = f"no stopwatch was found with identifier: {identifier}"
        super().__init__(code, identifier, message)
        self.duplicates = duplicates

    def diagnose(self) -> str:
        """Summary plus one line per colliding stopwatch."""
        lines = [str(self)]
        lines.extend(f"    id: {d.id} name: {d.name!r}" for d in self.duplicates)
        return "\n".join(lines)


class InvalidStateError(StopwatchError):
    """The requested action does not apply in the stopwatch's current state."""

    def __init__(self, identifier: str, state: "State") -> None:
        super().__init__("invalid_state", identifier, f"{identifier} is currently {state}")
        self.state = state

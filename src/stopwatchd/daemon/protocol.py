"""Request/Reply protocol for CLI-daemon communication.

JSON-over-Unix-socket with newline framing. Each message is one JSON line, one
request per connection.

Request: {"command": "pause", "identifiers": ["build"], "verbose": false, "name": ""}
Reply:   {"ok": true, "command": "pause", "successful": {"build": {...}}, "errors": {}, ...}
Error:   {"ok": false, "command": null, "error": "invalid_request", "message": "..."}
"""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

from stopwatchd.details import ErrorDetails, StopwatchDetails, StopwatchRef


class Command(StrEnum):
    """Actions a client can ask the daemon to take."""

    START = "start"
    INFO = "info"
    STOP = "stop"
    LAP = "lap"
    PAUSE = "pause"
    PLAY = "play"
    DELETE = "delete"
    # Answered by the server itself, never queued to the manager.
    HEALTH = "health"
    SHUTDOWN = "shutdown"


class Request(BaseModel):
    """Daemon request: a command, the stopwatches it targets, and options."""

    model_config = ConfigDict(frozen=True)

    command: Command
    identifiers: list[str] = Field(default_factory=list)
    verbose: bool = False
    name: str = Field(default="", description="Name for a new stopwatch (start only)")


class Reply(BaseModel):
    """Daemon reply: one outcome per requested identifier plus command metadata.

    An identifier appears in ``successful`` or in ``errors``, never both. ``ok`` is
    False only for failures of the request as a whole (bad input, internal error).
    """

    ok: bool = True
    command: Command | None = None
    successful: dict[str, StopwatchDetails] = Field(default_factory=dict)
    errors: dict[str, ErrorDetails] = Field(default_factory=dict)
    access_order: list[StopwatchRef] | None = Field(default=None, description="Oldest access first (info all)")
    data: dict[str, object] = Field(default_factory=dict)
    error: str = ""
    message: str = ""

    @staticmethod
    def success(command: Command, data: dict[str, object] | None = None) -> "Reply":
        """Build an empty success reply for a command."""
        return Reply(command=command, data=data or {})

    @staticmethod
    def fail(error: str, message: str, command: Command | None = None) -> "Reply":
        """Build a request-level error reply."""
        return Reply(ok=False, command=command, error=error, message=message)

    def add_success(self, identifier: str, details: StopwatchDetails) -> None:
        self.errors.pop(identifier, None)
        self.successful[identifier] = details

    def add_error(self, identifier: str, error: ErrorDetails) -> None:
        self.successful.pop(identifier, None)
        self.errors[identifier] = error

    @property
    def has_errors(self) -> bool:
        return not self.ok or bool(self.errors)


def encode_request(req: Request) -> bytes:
    """Serialize a Request to a newline-terminated JSON bytes line."""
    return req.model_dump_json().encode() + b"\n"


def decode_request(data: bytes) -> Request:
    """Deserialize a JSON bytes line into a Request.

    Raises:
        pydantic.ValidationError: Malformed JSON or unknown command.

    """
    return Request.model_validate_json(data)


def encode_reply(reply: Reply) -> bytes:
    """Serialize a Reply to a newline-terminated JSON bytes line."""
    return reply.model_dump_json().encode() + b"\n"


def decode_reply(data: bytes) -> Reply:
    """Deserialize a JSON bytes line into a Reply."""
    return Reply.model_validate_json(data)

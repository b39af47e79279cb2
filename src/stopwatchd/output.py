"""Structured output for CLI and JSON modes."""

# ruff: noqa: T201  # print() is how this module writes CLI output

import json
import sys
from typing import NoReturn

import typer
from rich.console import Console
from rich.table import Table

from stopwatchd.daemon.protocol import Reply
from stopwatchd.details import ErrorDetails, StopwatchDetails
from stopwatchd.formatting import format_datetime, format_duration


def order_reply(reply: Reply, requested: list[str]) -> tuple[list[StopwatchDetails], list[tuple[str, ErrorDetails]]]:
    """Order a reply's outcomes for display.

    Info-all replies follow the daemon's access order (most recent last); others
    follow the order identifiers were requested in. Anything left over is appended.
    """
    successful = dict(reply.successful)
    errors = dict(reply.errors)
    keys = [ref.id.hex for ref in reply.access_order] if reply.access_order is not None else requested

    details: list[StopwatchDetails] = []
    failed: list[tuple[str, ErrorDetails]] = []
    for key in keys:
        if key in successful:
            details.append(successful.pop(key))
        if key in errors:
            failed.append((key, errors.pop(key)))
    details.extend(successful.values())
    failed.extend(errors.items())
    return details, failed


class Output:
    """Handles all CLI output in JSON or human-readable format."""

    def __init__(self, *, json_mode: bool, datetime_format: str = "%Y-%m-%d %H:%M:%S") -> None:
        """Initialize output handler.

        Args:
            json_mode: If True, output JSON envelopes; otherwise human-readable tables.
            datetime_format: strftime format for wall-clock columns.

        """
        self._json_mode = json_mode
        self._datetime_format = datetime_format
        self._console = Console()
        self._error_console = Console(stderr=True)

    def _success(self, data: dict[str, object], message: str) -> None:
        """Print a success result in JSON or human-readable format."""
        if self._json_mode:
            print(json.dumps({"ok": True, "data": data}))
        else:
            print(message)

    def print_error_and_exit(self, code: str, message: str) -> NoReturn:
        """Print an error in JSON or human-readable format and exit with code 1.

        Raises:
            typer.Exit: Always, with code 1.

        """
        if self._json_mode:
            print(json.dumps({"ok": False, "error": code, "message": message}))
        else:
            print(f"Error: {message}", file=sys.stderr)
        raise typer.Exit(code=1)

    # --- Stopwatches ---

    def print_reply(self, reply: Reply, requested: list[str], *, verbose: bool, show_datetime: bool) -> None:
        """Print per-identifier outcomes; exit with code 1 if any identifier failed.

        Raises:
            typer.Exit: Some identifier failed or the request was rejected.

        """
        if not reply.ok:
            self.print_error_and_exit(reply.error, reply.message)
        if self._json_mode:
            print(reply.model_dump_json())
            if reply.errors:
                raise typer.Exit(code=1)
            return

        details, failed = order_reply(reply, requested)
        if not details:
            self._console.print("Found nothing")
        elif verbose:
            for d in details:
                self._console.print(self._details_table([d], show_datetime=show_datetime))
                if d.laps is not None:
                    self._console.print(self._laps_table(d, show_datetime=show_datetime))
        else:
            self._console.print(self._details_table(details, show_datetime=show_datetime))

        if failed:
            table = Table(title="Errors", title_style="bold red")
            table.add_column("identifier", style="cyan")
            table.add_column("message")
            for identifier, error in failed:
                table.add_row(identifier, error.message)
            self._error_console.print(table)
            raise typer.Exit(code=1)

    def _details_table(self, details: list[StopwatchDetails], *, show_datetime: bool) -> Table:
        table = Table()
        table.add_column("id", style="dim")
        table.add_column("name", style="bold")
        table.add_column("state")
        if show_datetime:
            table.add_column("start time", style="cyan")
        table.add_column("total duration", style="magenta")
        table.add_column("laps count", justify="right")
        table.add_column("current lap time", style="magenta")
        for d in details:
            row = [str(d.id), d.name, str(d.state)]
            if show_datetime:
                row.append(format_datetime(d.start_time, self._datetime_format))
            row.extend([format_duration(d.total_time), str(d.lap_count), format_duration(d.current_lap_time)])
            table.add_row(*row)
        return table

    def _laps_table(self, details: StopwatchDetails, *, show_datetime: bool) -> Table:
        table = Table(title=f"Laps of {details.label}")
        table.add_column("#", justify="right")
        table.add_column("id", style="dim")
        if show_datetime:
            table.add_column("start time", style="cyan")
        table.add_column("duration", style="magenta")
        table.add_column("ended")
        for index, lap in enumerate(details.laps or [], start=1):
            row = [str(index), str(lap.id)]
            if show_datetime:
                row.append(format_datetime(lap.start_time, self._datetime_format))
            row.extend([format_duration(lap.duration), "yes" if lap.ended else "no"])
            table.add_row(*row)
        return table

    # --- Daemon ---

    def print_stopped(self) -> None:
        """Print daemon stopped confirmation."""
        self._success({}, "Daemon stopped.")

    def print_health(self, *, running: bool, pid: int | None = None, stopwatches: int = 0) -> None:
        """Print daemon health status."""
        if running:
            message = f"Daemon: running (pid {pid}), {stopwatches} stopwatch(es)."
        else:
            message = "Daemon: stopped."
        self._success({"running": running, "pid": pid, "stopwatches": stopwatches}, message)

"""Create and start a new stopwatch."""

from typing import Annotated

import typer

from stopwatchd.commands.common import ShowDatetime, Verbose, run_command
from stopwatchd.daemon.protocol import Command


def start(
    ctx: typer.Context,
    name: Annotated[str, typer.Argument(help="Name of the new stopwatch")] = "",
    *,
    verbose: Verbose = False,
    show_datetime: ShowDatetime = False,
) -> None:
    """Create and start a new stopwatch."""
    run_command(ctx, Command.START, [], verbose=verbose, show_datetime=show_datetime, name=name)

"""Start a new lap."""

import typer

from stopwatchd.commands.common import Identifiers, ShowDatetime, Verbose, run_command
from stopwatchd.daemon.protocol import Command


def lap(
    ctx: typer.Context, identifiers: Identifiers = None, *, verbose: Verbose = False, show_datetime: ShowDatetime = False
) -> None:
    """Start a new lap for each stopwatch."""
    run_command(ctx, Command.LAP, identifiers or [], verbose=verbose, show_datetime=show_datetime)

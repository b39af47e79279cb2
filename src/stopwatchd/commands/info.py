"""Show stopwatch details."""

import typer

from stopwatchd.commands.common import Identifiers, ShowDatetime, Verbose, run_command
from stopwatchd.daemon.protocol import Command


def info(
    ctx: typer.Context, identifiers: Identifiers = None, *, verbose: Verbose = False, show_datetime: ShowDatetime = False
) -> None:
    """Get information about stopwatches. Leave blank to list all of them."""
    run_command(ctx, Command.INFO, identifiers or [], verbose=verbose, show_datetime=show_datetime)

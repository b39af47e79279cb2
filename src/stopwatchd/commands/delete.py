"""Delete stopwatches."""

import typer

from stopwatchd.commands.common import Identifiers, ShowDatetime, Verbose, run_command
from stopwatchd.daemon.protocol import Command


def delete(
    ctx: typer.Context, identifiers: Identifiers = None, *, verbose: Verbose = False, show_datetime: ShowDatetime = False
) -> None:
    """Remove stopwatches from the daemon."""
    run_command(ctx, Command.DELETE, identifiers or [], verbose=verbose, show_datetime=show_datetime)

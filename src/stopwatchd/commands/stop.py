"""End stopwatches permanently."""

import typer

from stopwatchd.commands.common import Identifiers, ShowDatetime, Verbose, run_command
from stopwatchd.daemon.protocol import Command


def stop(
    ctx: typer.Context, identifiers: Identifiers = None, *, verbose: Verbose = False, show_datetime: ShowDatetime = False
) -> None:
    """End stopwatches, preventing them from starting again."""
    run_command(ctx, Command.STOP, identifiers or [], verbose=verbose, show_datetime=show_datetime)

"""Pause stopwatches."""

import typer

from stopwatchd.commands.common import Identifiers, ShowDatetime, Verbose, run_command
from stopwatchd.daemon.protocol import Command


def pause(
    ctx: typer.Context, identifiers: Identifiers = None, *, verbose: Verbose = False, show_datetime: ShowDatetime = False
) -> None:
    """Pause the current lap of each stopwatch."""
    run_command(ctx, Command.PAUSE, identifiers or [], verbose=verbose, show_datetime=show_datetime)

"""Resume stopwatches."""

import typer

from stopwatchd.commands.common import Identifiers, ShowDatetime, Verbose, run_command
from stopwatchd.daemon.protocol import Command


def play(
    ctx: typer.Context, identifiers: Identifiers = None, *, verbose: Verbose = False, show_datetime: ShowDatetime = False
) -> None:
    """Continue the current lap of each stopwatch."""
    run_command(ctx, Command.PLAY, identifiers or [], verbose=verbose, show_datetime=show_datetime)

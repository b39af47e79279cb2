"""Shared plumbing for commands that act on stopwatches through the daemon."""

from typing import Annotated

import typer

from stopwatchd.app_context import use_context
from stopwatchd.daemon.client import DaemonClient
from stopwatchd.daemon.process import ensure_daemon
from stopwatchd.daemon.protocol import Command, Request

Identifiers = Annotated[list[str] | None, typer.Argument(help="Stopwatch names or id fragments", show_default=False)]
Verbose = Annotated[bool, typer.Option("--verbose", "-v", help="Display every lap")]
ShowDatetime = Annotated[bool, typer.Option("--datetime", "-d", help="Show wall-clock start times")]


def run_command(
    ctx: typer.Context, command: Command, identifiers: list[str], *, verbose: bool, show_datetime: bool, name: str = ""
) -> None:
    """Send one stopwatch command to the daemon (spawning it if needed) and print the outcome."""
    app = use_context(ctx)
    try:
        ensure_daemon(app.cfg)
    except RuntimeError as e:
        app.out.print_error_and_exit("daemon_unavailable", str(e))
    req = Request(command=command, identifiers=identifiers, verbose=verbose, name=name)
    reply = DaemonClient(app.cfg).send(req)
    requested = identifiers or list(reply.successful)
    app.out.print_reply(reply, requested, verbose=verbose, show_datetime=show_datetime)

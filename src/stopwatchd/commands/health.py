"""Show daemon status."""

import typer

from stopwatchd.app_context import use_context
from stopwatchd.daemon.client import DaemonClient
from stopwatchd.daemon.process import is_daemon_available


def health(ctx: typer.Context) -> None:
    """Show daemon status (running, number of stopwatches)."""
    app = use_context(ctx)

    if not is_daemon_available(app.cfg):
        app.out.print_health(running=False)
        return

    resp = DaemonClient(app.cfg).health()
    if not resp.ok:
        app.out.print_error_and_exit(resp.error, resp.message)
    pid = resp.data.get("pid")
    count = resp.data.get("stopwatches", 0)
    app.out.print_health(running=True, pid=pid if isinstance(pid, int) else None, stopwatches=count if isinstance(count, int) else 0)

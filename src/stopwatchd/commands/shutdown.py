"""Stop the daemon."""

import time

import typer
from mm_clikit import is_process_running

from stopwatchd.app_context import use_context
from stopwatchd.daemon.client import DaemonClient
from stopwatchd.daemon.process import is_daemon_available, stop_daemon

# Grace period for a socket-requested shutdown before falling back to signals
_GRACE = 0.5


def shutdown(ctx: typer.Context) -> None:
    """Stop the daemon. Every stopwatch it holds is lost."""
    app = use_context(ctx)

    # Only signal a PID whose command line names our data directory.
    owns_pid = is_process_running(app.cfg.daemon_pid_path, command_contains=app.cfg.daemon_marker)

    if is_daemon_available(app.cfg):
        DaemonClient(app.cfg).shutdown()
        time.sleep(_GRACE)
    if owns_pid and is_daemon_available(app.cfg):
        stop_daemon(app.cfg)

    if is_daemon_available(app.cfg):
        app.out.print_error_and_exit("stop_failed", "Daemon is still running after stop attempt.")

    app.out.print_stopped()

"""Hidden CLI command: run the daemon process in the foreground."""

import logging

import typer

from stopwatchd.app_context import use_context
from stopwatchd.daemon.process import is_daemon_available
from stopwatchd.daemon.server import run_server

logger = logging.getLogger(__name__)


def daemon(ctx: typer.Context) -> None:
    """Run the daemon process. Spawned automatically; not intended for manual use."""
    app = use_context(ctx)
    # Never replace the socket of a live daemon.
    if is_daemon_available(app.cfg):
        app.out.print_error_and_exit("already_running", f"A daemon is already listening on {app.cfg.daemon_sock_path}.")
    logger.info("Starting daemon for %s", app.cfg.data_dir)
    run_server(app.cfg)

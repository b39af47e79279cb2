"""Daemon subsystem: background server, client, and process management."""

from stopwatchd.daemon.client import DaemonClient as DaemonClient
from stopwatchd.daemon.process import ensure_daemon as ensure_daemon
from stopwatchd.daemon.process import is_daemon_available as is_daemon_available
from stopwatchd.daemon.protocol import Reply as Reply

"""Locating, spawning, and stopping the daemon process."""

import contextlib
import os
import signal
import socket
import subprocess  # nosec B404
import time
from collections.abc import Callable

from stopwatchd.config import Config

_SPAWN_TIMEOUT = 5.0
_STOP_TIMEOUT = 3.0
_POLL_INTERVAL = 0.05


def _wait_for(condition: Callable[[], bool], timeout: float) -> bool:
    """Poll ``condition`` until it holds or ``timeout`` seconds pass."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if condition():
            return True
        time.sleep(_POLL_INTERVAL)
    return condition()


def _is_alive(pid: int) -> bool:
    try:
        os.kill(pid, 0)
    except ProcessLookupError:
        return False
    except PermissionError:
        pass  # exists, owned by another user
    return True


def is_daemon_available(cfg: Config) -> bool:
    """Whether something accepts connections on the daemon socket."""
    with socket.socket(socket.AF_UNIX, socket.SOCK_STREAM) as s:
        s.settimeout(1.0)
        try:
            s.connect(str(cfg.daemon_sock_path))
        except OSError:
            return False
    return True


def ensure_daemon(cfg: Config) -> None:
    """Spawn a detached daemon unless one is already listening, then wait for its socket.

    Raises:
        RuntimeError: The daemon did not start listening in time.

    """
    if is_daemon_available(cfg):
        return
    # S603: argv is built from our own entry point and a resolved path
    subprocess.Popen(  # noqa: S603  # nosec B603, B607
        cfg.daemon_command(),
        stdin=subprocess.DEVNULL,
        stdout=subprocess.DEVNULL,
        stderr=subprocess.DEVNULL,
        start_new_session=True,
    )
    if not _wait_for(lambda: is_daemon_available(cfg), _SPAWN_TIMEOUT):
        msg = f"Daemon failed to start within {_SPAWN_TIMEOUT}s."
        raise RuntimeError(msg)


def stop_daemon(cfg: Config) -> bool:
    """Terminate the daemon named in the PID file, killing it if SIGTERM is ignored.

    Returns False when there was no live process to stop. The socket and PID
    file are removed either way.
    """
    try:
        pid = int(cfg.daemon_pid_path.read_text().strip())
    except (OSError, ValueError):
        return False

    stopped = True
    try:
        os.kill(pid, signal.SIGTERM)
    except ProcessLookupError:
        stopped = False
    else:
        if not _wait_for(lambda: not _is_alive(pid), _STOP_TIMEOUT):
            with contextlib.suppress(ProcessLookupError):
                os.kill(pid, signal.SIGKILL)

    for path in (cfg.daemon_pid_path, cfg.daemon_sock_path):
        with contextlib.suppress(OSError):
            path.unlink()
    return stopped

"""Synchronous client for CLI → daemon communication."""

import socket

from stopwatchd.config import Config
from stopwatchd.daemon.protocol import Command, Reply, Request, decode_reply, encode_request

# Read buffer size
_BUFSIZE = 65536


def _recv_line(s: socket.socket) -> bytes:
    """Read from socket until newline (protocol framing delimiter) or connection close."""
    chunks: list[bytes] = []
    while True:
        chunk = s.recv(_BUFSIZE)
        if not chunk:
            break
        chunks.append(chunk)
        if b"\n" in chunk:
            break
    return b"".join(chunks)


class DaemonClient:
    """Synchronous client that talks to the daemon over a Unix socket."""

    def __init__(self, cfg: Config) -> None:
        """Initialize client with configuration.

        Args:
            cfg: Application configuration (provides socket path and timeout).

        """
        self._cfg = cfg

    def send(self, req: Request) -> Reply:
        """Send a request to the daemon and return the reply."""
        with socket.socket(socket.AF_UNIX, socket.SOCK_STREAM) as s:
            s.settimeout(self._cfg.request_timeout)
            s.connect(str(self._cfg.daemon_sock_path))
            s.sendall(encode_request(req))
            data = _recv_line(s)
        return decode_reply(data)

    # --- Convenience methods ---

    def health(self) -> Reply:
        """Query daemon health status."""
        return self.send(Request(command=Command.HEALTH))

    def shutdown(self) -> Reply:
        """Ask the daemon to exit."""
        return self.send(Request(command=Command.SHUTDOWN))

    def start(self, name: str = "", *, verbose: bool = False) -> Reply:
        """Create and start a new stopwatch."""
        return self.send(Request(command=Command.START, name=name, verbose=verbose))

    def info(self, identifiers: list[str], *, verbose: bool = False) -> Reply:
        """Get details of stopwatches; all of them when ``identifiers`` is empty."""
        return self.send(Request(command=Command.INFO, identifiers=identifiers, verbose=verbose))

    def stop(self, identifiers: list[str], *, verbose: bool = False) -> Reply:
        """End stopwatches permanently."""
        return self.send(Request(command=Command.STOP, identifiers=identifiers, verbose=verbose))

    def lap(self, identifiers: list[str], *, verbose: bool = False) -> Reply:
        """Start a new lap on stopwatches."""
        return self.send(Request(command=Command.LAP, identifiers=identifiers, verbose=verbose))

    def pause(self, identifiers: list[str], *, verbose: bool = False) -> Reply:
        """Pause stopwatches."""
        return self.send(Request(command=Command.PAUSE, identifiers=identifiers, verbose=verbose))

    def play(self, identifiers: list[str], *, verbose: bool = False) -> Reply:
        """Resume stopwatches."""
        return self.send(Request(command=Command.PLAY, identifiers=identifiers, verbose=verbose))

    def delete(self, identifiers: list[str], *, verbose: bool = False) -> Reply:
        """Remove stopwatches from the daemon."""
        return self.send(Request(command=Command.DELETE, identifiers=identifiers, verbose=verbose))

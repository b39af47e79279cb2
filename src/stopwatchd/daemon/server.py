"""Asyncio Unix socket server: the daemon loop.

Each client connection sends one request. Stopwatch commands are queued to the
manager task and the connection waits for that job's reply; nothing else mutates
the stopwatch collection.
"""

import asyncio
import contextlib
import logging
import os
import signal

from mm_clikit import write_pid_file
from pydantic import ValidationError

from stopwatchd.config import Config
from stopwatchd.daemon.protocol import Command, Reply, decode_request, encode_reply
from stopwatchd.manager import Job, Manager, manage

logger = logging.getLogger(__name__)


async def _hangup(reader: asyncio.StreamReader) -> None:
    """Return once the client closes its end of the connection."""
    with contextlib.suppress(OSError):
        await reader.read()


async def await_reply(reply: asyncio.Future[Reply], reader: asyncio.StreamReader) -> Reply | None:
    """Wait for a queued job's reply, or return None if the client hangs up first.

    A job whose client is gone has its future cancelled, so the manager skips it.
    """
    hangup = asyncio.ensure_future(_hangup(reader))
    try:
        await asyncio.wait({reply, hangup}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        hangup.cancel()
        if not reply.done():
            reply.cancel()
    if reply.cancelled():
        return None
    return reply.result()


class DaemonServer:
    """Background daemon holding every stopwatch in memory."""

    def __init__(self, cfg: Config, manager: Manager | None = None) -> None:
        """Initialize the daemon server.

        Args:
            cfg: Application configuration.
            manager: Stopwatch manager to serve; a fresh one by default.

        """
        self._cfg = cfg
        self._manager = manager if manager is not None else Manager()
        self._server: asyncio.AbstractServer | None = None
        self._queue: asyncio.Queue[Job] | None = None
        self._manager_task: asyncio.Task[None] | None = None
        # Strong references to background tasks to prevent GC
        self._background_tasks: set[asyncio.Task[None]] = set()

    async def start(self) -> None:
        """Bind the socket and start the manager task."""
        sock_path = self._cfg.daemon_sock_path
        # Remove stale socket
        with contextlib.suppress(OSError):
            sock_path.unlink()

        self._queue = asyncio.Queue()
        self._manager_task = asyncio.create_task(manage(self._manager, self._queue))

        # Restrict umask before socket creation to prevent TOCTOU permission window
        old_umask = os.umask(0o077)
        try:
            self._server = await asyncio.start_unix_server(self._handle_client, path=str(sock_path))
        finally:
            os.umask(old_umask)
        sock_path.chmod(0o600)
        logger.info("Daemon listening on %s (pid %d)", sock_path, os.getpid())

    async def run(self) -> None:
        """Start the server and run until shutdown signal."""
        write_pid_file(self._cfg.daemon_pid_path)
        await self.start()

        loop = asyncio.get_running_loop()
        for sig in (signal.SIGTERM, signal.SIGINT):
            loop.add_signal_handler(sig, self._schedule_shutdown)

        if self._server is None:
            return
        async with self._server:
            with contextlib.suppress(asyncio.CancelledError):
                await self._server.serve_forever()

    async def _handle_client(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        """Handle a single client connection: read request, dispatch, send reply."""
        try:
            line = await reader.readline()
            if not line:
                return
            reply = await self._dispatch(line, reader)
            if reply is None:
                logger.debug("Client disconnected before its reply was ready")
                return
            writer.write(encode_reply(reply))
            await writer.drain()
        except Exception:
            logger.exception("Error handling client")
            writer.write(encode_reply(Reply.fail("internal", "Internal server error.")))
            await writer.drain()
        finally:
            writer.close()
            await writer.wait_closed()

    async def _dispatch(self, line: bytes, reader: asyncio.StreamReader) -> Reply | None:
        """Decode a request and route it to the server or the manager queue.

        Returns None when the client disconnected while its job was queued.
        """
        try:
            req = decode_request(line)
        except ValidationError as e:
            logger.warning("Invalid request: %s", e)
            return Reply.fail("invalid_request", "Malformed request.")
        logger.debug("Request: %s %s", req.command, req.identifiers)

        match req.command:
            case Command.HEALTH:
                # Read-only size check. It runs between manager steps on the same loop, never mid-command.
                return Reply.success(Command.HEALTH, {"pid": os.getpid(), "stopwatches": len(self._manager)})
            case Command.SHUTDOWN:
                self._schedule_shutdown()
                return Reply.success(Command.SHUTDOWN)
            case _:
                if self._queue is None:
                    return Reply.fail("not_running", "Daemon is not accepting commands.", req.command)
                future: asyncio.Future[Reply] = asyncio.get_running_loop().create_future()
                await self._queue.put(Job(request=req, reply=future))
                return await await_reply(future, reader)

    def _schedule_shutdown(self) -> None:
        """Schedule a shutdown task with a strong reference to prevent GC."""
        task = asyncio.ensure_future(self.shutdown())
        self._background_tasks.add(task)
        task.add_done_callback(self._background_tasks.discard)

    async def shutdown(self) -> None:
        """Clean shutdown: stop server and manager, remove socket and PID file."""
        logger.info("Shutting down daemon.")
        # Requests arriving from here on get "not_running".
        queue, self._queue = self._queue, None
        if self._server is not None:
            self._server.close()
        if self._manager_task is not None:
            self._manager_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._manager_task
        if queue is not None:
            _fail_pending(queue)
        self._cleanup()

    def _cleanup(self) -> None:
        """Remove socket and PID files."""
        for path in (self._cfg.daemon_sock_path, self._cfg.daemon_pid_path):
            with contextlib.suppress(OSError):
                path.unlink()


def _fail_pending(queue: asyncio.Queue[Job]) -> None:
    """Answer every job the stopped manager never picked up."""
    while not queue.empty():
        job = queue.get_nowait()
        if not job.reply.done():
            job.reply.set_result(Reply.fail("shutting_down", "Daemon is shutting down.", job.request.command))
        queue.task_done()


def run_server(cfg: Config) -> None:
    """Entry point: create server and run the asyncio event loop."""
    server = DaemonServer(cfg)
    asyncio.run(server.run())

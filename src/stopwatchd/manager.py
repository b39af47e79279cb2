"""Single owner of the live stopwatch collection.

The manager is the only code that mutates stopwatches. It runs one command at a
time, drained from a queue by ``manage()``, so the collection needs no locks.
"""

import asyncio
import contextlib
import logging
import time
import uuid
from collections import OrderedDict
from collections.abc import Iterator
from dataclasses import dataclass

from stopwatchd.daemon.protocol import Command, Reply, Request
from stopwatchd.details import ErrorDetails, StopwatchDetails, StopwatchRef
from stopwatchd.errors import InvalidStateError, StopwatchError
from stopwatchd.identifiers import Identifier, resolve_exactly_one
from stopwatchd.lap import Clock
from stopwatchd.stopwatch import State, Stopwatch

logger = logging.getLogger(__name__)

# Previous states in which each transition does nothing.
_NO_OP_STATES: dict[Command, frozenset[State]] = {
    Command.STOP: frozenset({State.ENDED}),
    Command.LAP: frozenset({State.ENDED}),
    Command.PAUSE: frozenset({State.ENDED, State.PAUSED}),
    Command.PLAY: frozenset({State.ENDED, State.PLAYING}),
}


@dataclass(frozen=True)
class Job:
    """A queued request and the future its reply is delivered through."""

    request: Request
    reply: asyncio.Future[Reply]


class Manager:
    """Holds every stopwatch, ordered by access: the last one is the most recent."""

    def __init__(self, *, clock: Clock = time.monotonic) -> None:
        """Initialize an empty collection.

        Args:
            clock: Monotonic time source passed to every stopwatch created here.

        """
        self._clock = clock
        self._stopwatches: OrderedDict[uuid.UUID, Stopwatch] = OrderedDict()

    def __len__(self) -> int:
        return len(self._stopwatches)

    def add(self, stopwatch: Stopwatch) -> None:
        """Insert a stopwatch as the most recently accessed one."""
        self._stopwatches[stopwatch.id] = stopwatch
        self._stopwatches.move_to_end(stopwatch.id)

    def lookup_exactly_one(self, identifier: Identifier) -> Stopwatch:
        """Remove and return the single stopwatch matching ``identifier``.

        The caller must ``add()`` it back unless it is being deleted.

        Raises:
            ResolutionError: Zero or several stopwatches matched.

        """
        stopwatch = resolve_exactly_one(identifier, self._stopwatches.values())
        del self._stopwatches[stopwatch.id]
        return stopwatch

    @contextlib.contextmanager
    def checkout(self, identifier: Identifier) -> Iterator[Stopwatch]:
        """Hand out one stopwatch for the duration of a block, then re-add it as most recent."""
        stopwatch = self.lookup_exactly_one(identifier)
        try:
            yield stopwatch
        finally:
            self.add(stopwatch)

    def access_order(self) -> list[Stopwatch]:
        """All stopwatches, oldest access first. Does not change the order."""
        return list(self._stopwatches.values())

    # --- Commands ---

    def execute(self, request: Request) -> Reply:
        """Run one command and build its reply."""
        match request.command:
            case Command.START:
                return self._start(request)
            case Command.INFO if not request.identifiers:
                return self._info_all(request)
            case Command.DELETE:
                return self._delete(request)
            case Command.INFO | Command.STOP | Command.LAP | Command.PAUSE | Command.PLAY:
                return self._apply(request)
            case _:
                return Reply.fail("unknown_command", f"Command not handled by the manager: {request.command}", request.command)

    def _start(self, request: Request) -> Reply:
        stopwatch = Stopwatch.start(request.name, clock=self._clock)
        self.add(stopwatch)
        logger.info("Started stopwatch %s (%s)", stopwatch.label, stopwatch.id)
        reply = Reply.success(Command.START)
        reply.add_success(stopwatch.label, StopwatchDetails.from_stopwatch(stopwatch, verbose=request.verbose))
        return reply

    def _info_all(self, request: Request) -> Reply:
        reply = Reply.success(Command.INFO)
        reply.access_order = []
        for stopwatch in self.access_order():
            reply.access_order.append(StopwatchRef(id=stopwatch.id, name=stopwatch.name, label=stopwatch.label))
            reply.add_success(stopwatch.id.hex, StopwatchDetails.from_stopwatch(stopwatch, verbose=request.verbose))
        return reply

    def _apply(self, request: Request) -> Reply:
        """Apply a transition (or a plain read for info) to each identifier independently."""
        reply = Reply.success(request.command)
        for raw in _unique(request.identifiers):
            try:
                with self.checkout(Identifier(raw)) as stopwatch:
                    self._transition(request.command, raw, stopwatch)
                    details = StopwatchDetails.from_stopwatch(stopwatch, verbose=request.verbose)
            except StopwatchError as e:
                logger.debug("%s %r failed: %s", request.command, raw, e)
                reply.add_error(raw, ErrorDetails.from_error(e))
            else:
                reply.add_success(raw, details)
        return reply

    @staticmethod
    def _transition(command: Command, raw: str, stopwatch: Stopwatch) -> None:
        """Apply ``command`` to ``stopwatch``.

        Raises:
            InvalidStateError: The transition did nothing in the stopwatch's state.

        """
        match command:
            case Command.STOP:
                previous = stopwatch.end()
            case Command.LAP:
                previous = stopwatch.state
                stopwatch.new_lap(start_immediately=True)
            case Command.PAUSE:
                previous = stopwatch.pause()
            case Command.PLAY:
                previous = stopwatch.play()
            case _:
                return
        if previous in _NO_OP_STATES[command]:
            raise InvalidStateError(raw, previous)

    def _delete(self, request: Request) -> Reply:
        reply = Reply.success(Command.DELETE)
        for raw in _unique(request.identifiers):
            try:
                stopwatch = self.lookup_exactly_one(Identifier(raw))
            except StopwatchError as e:
                reply.add_error(raw, ErrorDetails.from_error(e))
                continue
            logger.info("Deleted stopwatch %s (%s)", stopwatch.label, stopwatch.id)
            reply.add_success(raw, StopwatchDetails.from_stopwatch(stopwatch, verbose=request.verbose))
        return reply


def _unique(identifiers: list[str]) -> list[str]:
    """Drop repeated identifiers, keeping the first occurrence's position."""
    return list(dict.fromkeys(identifiers))


async def manage(manager: Manager, queue: asyncio.Queue[Job]) -> None:
    """Drain ``queue`` forever, executing each job against ``manager`` in FIFO order.

    Each command runs to completion without awaiting, so no other job can observe
    a stopwatch while it is checked out.
    """
    logger.debug("Manager started")
    while True:
        job = await queue.get()
        try:
            if job.reply.done():
                # Client gave up waiting.
                continue
            try:
                reply = manager.execute(job.request)
            except Exception:
                logger.exception("Error executing %s", job.request.command)
                reply = Reply.fail("internal", "Internal server error.", job.request.command)
            job.reply.set_result(reply)
        finally:
            queue.task_done()

"""Tests for the Manager: recency ordering, per-identifier outcomes, and the job queue."""

import asyncio

import pytest

from stopwatchd.daemon.protocol import Command, Reply, Request
from stopwatchd.identifiers import Identifier, node_hex
from stopwatchd.manager import Job, Manager, manage
from stopwatchd.stopwatch import State


@pytest.fixture
def manager(clock) -> Manager:
    """Empty manager on the fake clock."""
    return Manager(clock=clock)


def _start(manager: Manager, name: str = "") -> str:
    """Start a stopwatch and return its reply key."""
    reply = manager.execute(Request(command=Command.START, name=name))
    (key,) = reply.successful
    return key


def _names(manager: Manager) -> list[str]:
    return [sw.name for sw in manager.access_order()]


class TestStart:
    """START creates and registers."""

    def test_start_named(self, manager: Manager):
        """Reply is keyed by the name and the stopwatch is playing."""
        reply = manager.execute(Request(command=Command.START, name="build"))
        assert reply.ok
        assert reply.command == Command.START
        assert reply.successful["build"].state == State.PLAYING
        assert reply.successful["build"].lap_count == 1
        assert len(manager) == 1

    def test_start_unnamed_keyed_by_node(self, manager: Manager):
        """Unnamed stopwatches are keyed by their label."""
        key = _start(manager)
        (sw,) = manager.access_order()
        assert key == sw.label

    def test_start_is_most_recent(self, manager: Manager):
        _start(manager, "a")
        _start(manager, "b")
        assert _names(manager) == ["a", "b"]


class TestRecency:
    """Access order follows every successful lookup."""

    def test_info_moves_to_end(self, manager: Manager):
        """Querying x makes it the most recently accessed."""
        for name in ("x", "y", "z"):
            _start(manager, name)
        manager.execute(Request(command=Command.INFO, identifiers=["x"]))
        reply = manager.execute(Request(command=Command.INFO))
        assert reply.access_order is not None
        assert [ref.name for ref in reply.access_order] == ["y", "z", "x"]

    def test_info_all_does_not_reorder(self, manager: Manager):
        """Listing everything leaves the order untouched."""
        for name in ("a", "b"):
            _start(manager, name)
        manager.execute(Request(command=Command.INFO))
        assert _names(manager) == ["a", "b"]

    def test_info_all_keys(self, manager: Manager):
        """Info-all is keyed by full id hex so unnamed stopwatches cannot collide."""
        _start(manager)
        _start(manager)
        reply = manager.execute(Request(command=Command.INFO))
        assert len(reply.successful) == 2
        assert set(reply.successful) == {sw.id.hex for sw in manager.access_order()}

    def test_failed_lookup_keeps_order(self, manager: Manager):
        """An ambiguous lookup removes nothing and reorders nothing."""
        _start(manager, "dup")
        _start(manager, "other")
        _start(manager, "dup")
        before = [sw.id for sw in manager.access_order()]
        manager.execute(Request(command=Command.PAUSE, identifiers=["dup"]))
        assert [sw.id for sw in manager.access_order()] == before

    def test_id_fragment_lookup(self, manager: Manager):
        """An unnamed stopwatch is reached by a prefix of its node and becomes most recent."""
        _start(manager)
        _start(manager)
        first, second = manager.access_order()
        fragment = node_hex(first.id)[:8].upper()
        reply = manager.execute(Request(command=Command.INFO, identifiers=[fragment]))
        assert reply.errors == {}
        assert reply.successful[fragment].id == first.id
        assert [sw.id for sw in manager.access_order()] == [second.id, first.id]

    def test_checkout_readds_on_error(self, manager: Manager):
        """A stopwatch checked out is returned even if the block raises."""
        _start(manager, "a")
        _start(manager, "b")
        with pytest.raises(RuntimeError), manager.checkout(Identifier("a")):
            raise RuntimeError
        assert _names(manager) == ["b", "a"]


class TestTransitions:
    """Per-identifier transitions and their errors."""

    def test_pause_and_play(self, manager: Manager, clock):
        _start(manager, "w")
        clock.advance(2)
        reply = manager.execute(Request(command=Command.PAUSE, identifiers=["w"]))
        assert reply.successful["w"].state == State.PAUSED
        clock.advance(5)
        reply = manager.execute(Request(command=Command.PLAY, identifiers=["w"]))
        assert reply.successful["w"].state == State.PLAYING
        assert reply.successful["w"].total_time == pytest.approx(2)

    def test_pause_paused_is_invalid(self, manager: Manager):
        _start(manager, "w")
        manager.execute(Request(command=Command.PAUSE, identifiers=["w"]))
        reply = manager.execute(Request(command=Command.PAUSE, identifiers=["w"]))
        assert reply.ok
        assert reply.successful == {}
        assert reply.errors["w"].kind == "invalid_state"
        assert reply.errors["w"].state == State.PAUSED

    def test_play_playing_is_invalid(self, manager: Manager):
        _start(manager, "w")
        reply = manager.execute(Request(command=Command.PLAY, identifiers=["w"]))
        assert reply.errors["w"].kind == "invalid_state"
        assert reply.errors["w"].message == "w is currently playing"

    @pytest.mark.parametrize("command", [Command.STOP, Command.LAP, Command.PAUSE, Command.PLAY])
    def test_ended_rejects_transitions(self, manager: Manager, command: Command):
        """Nothing changes an ended stopwatch, and each attempt says so."""
        _start(manager, "w")
        manager.execute(Request(command=Command.STOP, identifiers=["w"]))
        reply = manager.execute(Request(command=command, identifiers=["w"]))
        assert reply.errors["w"].state == State.ENDED
        (sw,) = manager.access_order()
        assert sw.state == State.ENDED
        assert sw.lap_count == 1

    def test_identifiers_are_independent(self, manager: Manager):
        """One bad identifier does not stop the others from being applied."""
        _start(manager, "a")
        _start(manager, "b")
        reply = manager.execute(Request(command=Command.PAUSE, identifiers=["a", "missing", "b"]))
        assert set(reply.successful) == {"a", "b"}
        assert reply.errors["missing"].kind == "not_found"
        assert reply.errors["missing"].duplicates == []
        assert reply.has_errors

    def test_ambiguous_reports_duplicates(self, manager: Manager):
        _start(manager, "dup")
        _start(manager, "dup")
        reply = manager.execute(Request(command=Command.INFO, identifiers=["dup"]))
        error = reply.errors["dup"]
        assert error.kind == "ambiguous"
        assert len(error.duplicates) == 2
        assert "2 stopwatches were found with identifier: dup" in error.message

    def test_repeated_identifier_applied_once(self, manager: Manager):
        """Naming the same stopwatch twice in one request does not pause it twice."""
        _start(manager, "w")
        reply = manager.execute(Request(command=Command.PAUSE, identifiers=["w", "w"]))
        assert list(reply.successful) == ["w"]
        assert reply.errors == {}

    def test_empty_identifiers(self, manager: Manager):
        """Transitions with no identifiers touch nothing."""
        _start(manager, "w")
        reply = manager.execute(Request(command=Command.STOP, identifiers=[]))
        assert reply.ok
        assert reply.successful == {}
        assert reply.errors == {}
        assert manager.access_order()[0].state == State.PLAYING

    @pytest.mark.parametrize("command", [Command.INFO, Command.PAUSE, Command.LAP])
    def test_laps_only_when_verbose(self, manager: Manager, command: Command):
        """Snapshots carry the lap list only for verbose requests."""
        _start(manager, "w")
        plain = manager.execute(Request(command=command, identifiers=["w"]))
        assert plain.successful["w"].laps is None
        verbose = manager.execute(Request(command=Command.INFO, identifiers=["w"], verbose=True))
        assert verbose.successful["w"].laps is not None
        assert len(verbose.successful["w"].laps) == verbose.successful["w"].lap_count

    def test_health_not_handled(self, manager: Manager):
        reply = manager.execute(Request(command=Command.HEALTH))
        assert not reply.ok
        assert reply.error == "unknown_command"


class TestDelete:
    """DELETE removes for good."""

    def test_delete(self, manager: Manager):
        _start(manager, "a")
        _start(manager, "b")
        reply = manager.execute(Request(command=Command.DELETE, identifiers=["a"]))
        assert reply.successful["a"].name == "a"
        assert _names(manager) == ["b"]

    def test_delete_missing(self, manager: Manager):
        reply = manager.execute(Request(command=Command.DELETE, identifiers=["a"]))
        assert reply.errors["a"].kind == "not_found"


class TestScenario:
    """A full session against one stopwatch."""

    def test_lifecycle(self, manager: Manager, clock):
        """start, pause, lap, stop, delete, then it is gone."""
        _start(manager, "w")
        clock.advance(3)
        assert manager.execute(Request(command=Command.PAUSE, identifiers=["w"])).successful["w"].state == State.PAUSED

        reply = manager.execute(Request(command=Command.LAP, identifiers=["w"], verbose=True))
        details = reply.successful["w"]
        assert details.state == State.PLAYING
        assert details.lap_count == 2
        assert details.laps is not None
        assert len(details.laps) == 2
        assert details.laps[0].ended
        assert details.laps[0].duration == pytest.approx(3)
        assert not details.laps[1].ended

        clock.advance(1)
        reply = manager.execute(Request(command=Command.STOP, identifiers=["w"]))
        assert reply.successful["w"].state == State.ENDED
        assert reply.successful["w"].total_time == pytest.approx(4)

        assert "w" in manager.execute(Request(command=Command.DELETE, identifiers=["w"])).successful
        reply = manager.execute(Request(command=Command.INFO, identifiers=["w"]))
        assert reply.errors["w"].kind == "not_found"
        assert len(manager) == 0


class TestManage:
    """The queue consumer."""

    def test_replies_in_order(self, manager: Manager):
        """Jobs are executed FIFO and each future gets its own reply."""

        async def run() -> list[Reply]:
            queue: asyncio.Queue[Job] = asyncio.Queue()
            task = asyncio.create_task(manage(manager, queue))
            loop = asyncio.get_running_loop()
            jobs = [
                Job(Request(command=Command.START, name="a"), loop.create_future()),
                Job(Request(command=Command.PAUSE, identifiers=["a"]), loop.create_future()),
                Job(Request(command=Command.INFO), loop.create_future()),
            ]
            for job in jobs:
                queue.put_nowait(job)
            replies = [await job.reply for job in jobs]
            task.cancel()
            return replies

        start, pause, info = asyncio.run(run())
        assert "a" in start.successful
        assert pause.successful["a"].state == State.PAUSED
        assert [d.state for d in info.successful.values()] == [State.PAUSED]

    def test_skips_cancelled_jobs(self, manager: Manager):
        """A job whose client already gave up is not executed."""

        async def run() -> None:
            queue: asyncio.Queue[Job] = asyncio.Queue()
            task = asyncio.create_task(manage(manager, queue))
            loop = asyncio.get_running_loop()
            abandoned = Job(Request(command=Command.START, name="gone"), loop.create_future())
            abandoned.reply.cancel()
            queue.put_nowait(abandoned)
            live = Job(Request(command=Command.START, name="kept"), loop.create_future())
            queue.put_nowait(live)
            await live.reply
            task.cancel()

        asyncio.run(run())
        assert _names(manager) == ["kept"]

    def test_internal_error_replies(self, manager: Manager, monkeypatch):
        """An unexpected exception becomes an internal error reply and the loop keeps going."""
        calls = iter([RuntimeError("boom")])
        original = manager.execute

        def flaky(request: Request) -> Reply:
            error = next(calls, None)
            if error is not None:
                raise error
            return original(request)

        monkeypatch.setattr(manager, "execute", flaky)

        async def run() -> tuple[Reply, Reply]:
            queue: asyncio.Queue[Job] = asyncio.Queue()
            task = asyncio.create_task(manage(manager, queue))
            loop = asyncio.get_running_loop()
            first = Job(Request(command=Command.START, name="a"), loop.create_future())
            second = Job(Request(command=Command.START, name="b"), loop.create_future())
            queue.put_nowait(first)
            queue.put_nowait(second)
            replies = (await first.reply, await second.reply)
            task.cancel()
            return replies

        first, second = asyncio.run(run())
        assert not first.ok
        assert first.error == "internal"
        assert "b" in second.successful

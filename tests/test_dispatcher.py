"""Behavior-focused tests for the Dispatcher."""

import asyncio
from collections.abc import Iterator

import pytest

from robot_traffic.application.dispatcher import Dispatcher, is_cutoff, parse_record
from robot_traffic.application.errors import (
    RecordParseError,
    ShutdownProtocolError,
    TerminationError,
)
from robot_traffic.domain.models import Instruction, Point, SkipReason


class FakeWorker:
    """Worker handle that records how the dispatcher drives it."""

    def __init__(self, vehicle_id: int, log: list, accept: bool = True) -> None:
        self.vehicle_id = vehicle_id
        self.log = log
        self.accept = accept
        self.delivered: list = []
        self.halted = False
        self.gate: asyncio.Event | None = None
        self.ack_error: Exception | None = None

    async def deliver(self, route_point) -> bool:
        if self.gate is not None:
            await self.gate.wait()
        if self.accept:
            self.delivered.append(route_point)
        return self.accept

    async def wait_idle(self) -> None:
        self.log.append(("idle", self.vehicle_id))

    def halt(self) -> None:
        self.halted = True
        self.log.append(("halt", self.vehicle_id))

    async def close(self) -> None:
        self.log.append(("close", self.vehicle_id))

    async def wait_acknowledged(self) -> None:
        await asyncio.sleep(0)
        if self.ack_error is not None:
            raise self.ack_error
        self.log.append(("ack", self.vehicle_id))


class FailingSource:
    name = "broken.csv"

    def __iter__(self) -> Iterator[list[str]]:
        yield ["5937", "51.5", "-0.1", "2011-03-22 07:47:55"]
        raise OSError("disk went away")


class TestParseRecord:
    """Tests for route record validation."""

    def test_when_record_is_valid_then_returns_route_point(self) -> None:
        """Given a well-formed record, when parsing, then id, point and time are extracted."""
        record = parse_record(["5937", "51.476105", "-0.100224", "2011-03-22 07:47:55"])

        assert record.vehicle_id == 5937
        assert record.route_point.point == Point(51.476105, -0.100224)
        assert record.route_point.timestamp.isoformat() == "2011-03-22T07:47:55"

    @pytest.mark.parametrize(
        ("row", "reason"),
        [
            (["5937", "51.5", "-0.1"], SkipReason.MALFORMED_RECORD),
            (["5937", "51.5", "-0.1", "2011-03-22 07:47:55", "x"], SkipReason.MALFORMED_RECORD),
            (["robot", "51.5", "-0.1", "2011-03-22 07:47:55"], SkipReason.INVALID_VEHICLE_ID),
            (["59.37", "51.5", "-0.1", "2011-03-22 07:47:55"], SkipReason.INVALID_VEHICLE_ID),
            (["5937", "north", "-0.1", "2011-03-22 07:47:55"], SkipReason.INVALID_LATITUDE),
            (["5937", "51.5", "", "2011-03-22 07:47:55"], SkipReason.INVALID_LONGITUDE),
            (["5937", "51.5", "-0.1", "22/03/2011 07:47"], SkipReason.INVALID_TIMESTAMP),
            (["5937", "51.5", "-0.1", "2011-03-22T07:47:55"], SkipReason.INVALID_TIMESTAMP),
        ],
    )
    def test_when_field_is_malformed_then_raises_with_reason(
        self, row: list[str], reason: SkipReason
    ) -> None:
        """Given a malformed record, when parsing, then RecordParseError names the bad field."""
        with pytest.raises(RecordParseError) as exc_info:
            parse_record(row)

        assert exc_info.value.reason is reason

    @pytest.mark.parametrize(
        ("when", "expected"),
        [
            ("2011-03-22 08:10:00", True),
            ("2011-03-22 08:10:59", True),
            ("2011-03-22 08:09:59", False),
            ("2011-03-22 08:11:00", False),
            ("2011-03-22 20:10:00", False),
        ],
    )
    def test_cutoff_matches_hour_and_minute_only(self, point_at, when: str, expected: bool) -> None:
        """Given a timestamp, when checking the cutoff, then only 08:10 with any second matches."""
        assert is_cutoff(point_at(0, 0, when).timestamp) is expected


class TestProcess:
    """Tests for reading sources and routing records."""

    @pytest.mark.asyncio
    async def test_when_records_are_valid_then_routes_in_source_order(
        self, observer, make_source
    ) -> None:
        """Given records for two robots, when processing, then each worker gets its own points in order."""
        log: list = []
        workers = {5937: FakeWorker(5937, log), 6043: FakeWorker(6043, log)}
        source = make_source(
            "mixed.csv",
            [
                ["5937", "51.1", "-0.1", "2011-03-22 07:47:55"],
                ["6043", "51.2", "-0.2", "2011-03-22 07:48:00"],
                ["5937", "51.3", "-0.3", "2011-03-22 07:49:00"],
            ],
        )
        dispatcher = Dispatcher(workers, [source], observer)

        await dispatcher.process()

        assert [rp.point.lat for rp in workers[5937].delivered] == [51.1, 51.3]
        assert [rp.point.lat for rp in workers[6043].delivered] == [51.2]
        assert observer.names().count("dispatched") == 3
        assert dispatcher.instructions.get_nowait() is Instruction.SHUTDOWN

    @pytest.mark.asyncio
    async def test_when_record_is_malformed_then_skips_and_continues(
        self, observer, make_source
    ) -> None:
        """Given an unparseable timestamp, when processing, then that record is skipped and the next delivered."""
        worker = FakeWorker(5937, [])
        source = make_source(
            "5937.csv",
            [
                ["5937", "51.1", "-0.1", "not a time"],
                ["5937", "51.2", "-0.2", "2011-03-22 07:48:00"],
            ],
        )
        dispatcher = Dispatcher({5937: worker}, [source], observer)

        await dispatcher.process()

        assert [rp.point.lat for rp in worker.delivered] == [51.2]
        assert observer.skipped[0][0] == "5937.csv"
        assert observer.skipped[0][1] is SkipReason.INVALID_TIMESTAMP

    @pytest.mark.asyncio
    async def test_when_vehicle_is_unknown_then_skips_without_worker_interaction(
        self, observer, make_source
    ) -> None:
        """Given a record for an unconfigured robot, when processing, then it is skipped with a diagnostic."""
        worker = FakeWorker(5937, [])
        source = make_source("other.csv", [["1234", "51.1", "-0.1", "2011-03-22 07:47:55"]])
        dispatcher = Dispatcher({5937: worker}, [source], observer)

        await dispatcher.process()

        assert worker.delivered == []
        assert not worker.halted
        assert observer.skipped == [("other.csv", SkipReason.UNKNOWN_VEHICLE, "Robot 1234 not found")]

    @pytest.mark.asyncio
    async def test_when_cutoff_is_reached_then_halts_worker_and_stops_source(
        self, observer, make_source
    ) -> None:
        """Given a record at 08:10, when processing, then the worker is halted and the rest of that source is not read."""
        log: list = []
        first, second = FakeWorker(5937, log), FakeWorker(6043, log)
        cut = make_source(
            "5937.csv",
            [
                ["5937", "51.1", "-0.1", "2011-03-22 08:09:00"],
                ["5937", "51.2", "-0.2", "2011-03-22 08:10:30"],
                ["5937", "51.3", "-0.3", "2011-03-22 08:11:00"],
            ],
        )
        other = make_source(
            "6043.csv",
            [
                ["6043", "51.4", "-0.4", "2011-03-22 08:09:00"],
                ["6043", "51.5", "-0.5", "2011-03-22 08:12:00"],
            ],
        )
        dispatcher = Dispatcher({5937: first, 6043: second}, [cut, other], observer)

        await dispatcher.process()

        assert first.halted
        assert log == [("idle", 5937), ("halt", 5937)]
        assert [rp.point.lat for rp in first.delivered] == [51.1]
        assert cut.consumed == 2
        assert not second.halted
        assert [rp.point.lat for rp in second.delivered] == [51.4, 51.5]
        assert ("halted", 5937) in [event[:2] for event in observer.events]

    @pytest.mark.asyncio
    async def test_when_worker_refuses_point_then_skips_as_stopped(
        self, observer, make_source
    ) -> None:
        """Given a stopped worker, when a point is routed to it, then it is reported as a skip."""
        worker = FakeWorker(5937, [], accept=False)
        source = make_source("extra.csv", [["5937", "51.1", "-0.1", "2011-03-22 08:20:00"]])
        dispatcher = Dispatcher({5937: worker}, [source], observer)

        await dispatcher.process()

        assert observer.skipped[0][1] is SkipReason.WORKER_STOPPED
        assert "dispatched" not in observer.names()

    @pytest.mark.asyncio
    async def test_when_sources_run_together_then_records_interleave(
        self, observer, make_source
    ) -> None:
        """Given two sources, when processing, then neither is read to the end before the other starts."""
        workers = {5937: FakeWorker(5937, []), 6043: FakeWorker(6043, [])}
        first = make_source(
            "5937.csv",
            [["5937", f"51.{i}", "-0.1", f"2011-03-22 07:4{i}:00"] for i in range(1, 4)],
        )
        second = make_source(
            "6043.csv",
            [["6043", f"52.{i}", "-0.2", f"2011-03-22 07:4{i}:00"] for i in range(1, 4)],
        )
        dispatcher = Dispatcher(workers, [first, second], observer)

        await dispatcher.process()

        dispatched = [event[1] for event in observer.events if event[0] == "dispatched"]
        assert dispatched == [5937, 6043, 5937, 6043, 5937, 6043]

    @pytest.mark.asyncio
    async def test_when_source_fails_then_error_propagates(self, observer) -> None:
        """Given a source that raises while reading, when processing, then the error is fatal."""
        dispatcher = Dispatcher({5937: FakeWorker(5937, [])}, [FailingSource()], observer)

        with pytest.raises(OSError, match="disk went away"):
            await dispatcher.process()

        assert dispatcher.instructions.empty()


class TestShutdown:
    """Tests for the control loop and termination."""

    @pytest.mark.asyncio
    async def test_when_shutdown_then_workers_close_and_ack_one_after_another(
        self, observer
    ) -> None:
        """Given two workers, when SHUTDOWN is received, then each is closed and acknowledged before the next."""
        log: list = []
        workers = {5937: FakeWorker(5937, log), 6043: FakeWorker(6043, log)}
        dispatcher = Dispatcher(workers, [], observer)
        dispatcher.start()

        await dispatcher.instructions.put(Instruction.SHUTDOWN)
        terminated = await asyncio.wait_for(dispatcher.wait_terminated(), timeout=1)

        assert terminated is True
        assert log == [("close", 5937), ("ack", 5937), ("close", 6043), ("ack", 6043)]
        assert observer.names() == [
            "shutdown_started",
            "shutdown_acknowledged",
            "shutdown_started",
            "shutdown_acknowledged",
            "terminated",
        ]
        await dispatcher.task

    @pytest.mark.asyncio
    async def test_when_sources_are_still_running_then_shutdown_waits(
        self, observer, make_source
    ) -> None:
        """Given a source blocked on a busy worker, when processing, then no worker is closed until it finishes."""
        log: list = []
        worker = FakeWorker(5937, log)
        worker.gate = asyncio.Event()
        source = make_source("5937.csv", [["5937", "51.1", "-0.1", "2011-03-22 07:47:55"]])
        dispatcher = Dispatcher({5937: worker}, [source], observer)
        dispatcher.start()
        process = asyncio.create_task(dispatcher.process())

        for _ in range(5):
            await asyncio.sleep(0)
        assert log == []

        worker.gate.set()
        await process
        assert await asyncio.wait_for(dispatcher.wait_terminated(), timeout=1) is True
        assert log == [("close", 5937), ("ack", 5937)]

    @pytest.mark.asyncio
    async def test_when_acknowledgement_fails_then_termination_raises(self, observer) -> None:
        """Given a worker that stops without acknowledging, when shutting down, then the protocol error is fatal."""
        worker = FakeWorker(5937, [])
        worker.ack_error = ShutdownProtocolError(5937)
        dispatcher = Dispatcher({5937: worker}, [], observer)
        dispatcher.start()
        await dispatcher.instructions.put(Instruction.SHUTDOWN)

        with pytest.raises(ShutdownProtocolError):
            await asyncio.wait_for(dispatcher.wait_terminated(), timeout=1)
        assert "terminated" not in observer.names()

    @pytest.mark.asyncio
    async def test_when_not_started_then_wait_terminated_raises(self, observer) -> None:
        """Given a dispatcher that was never started, when waiting, then RuntimeError is raised."""
        dispatcher = Dispatcher({}, [], observer)

        with pytest.raises(RuntimeError, match="not been started"):
            await dispatcher.wait_terminated()

    @pytest.mark.asyncio
    async def test_when_control_loop_returns_without_terminating_then_termination_error(
        self, observer
    ) -> None:
        """Given a control loop that exits early, when waiting, then TerminationError is raised."""
        dispatcher = Dispatcher({}, [], observer)

        async def exit_early() -> None:
            return None

        dispatcher.run = exit_early
        dispatcher.start()

        with pytest.raises(TerminationError, match="without signalling termination"):
            await asyncio.wait_for(dispatcher.wait_terminated(), timeout=1)

    @pytest.mark.asyncio
    async def test_when_no_workers_then_terminates_immediately(self, observer) -> None:
        """Given no workers and no sources, when processing, then the dispatcher still terminates once."""
        dispatcher = Dispatcher({}, [], observer)
        dispatcher.start()

        await dispatcher.process()

        assert await asyncio.wait_for(dispatcher.wait_terminated(), timeout=1) is True
        assert observer.names() == ["terminated"]

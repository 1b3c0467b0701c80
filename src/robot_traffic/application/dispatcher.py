"""Dispatcher that feeds route sources to vehicle workers and orchestrates shutdown."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING

from robot_traffic.application.errors import RecordParseError, TerminationError
from robot_traffic.domain.models import (
    REPORT_TIME_FORMAT,
    Instruction,
    Point,
    RoutePoint,
    SkipReason,
)

if TYPE_CHECKING:
    from robot_traffic.domain.contracts.pipeline_observer import PipelineObserver
    from robot_traffic.domain.contracts.vehicle_worker import VehicleWorkerProtocol
    from robot_traffic.domain.ports.route_source import RouteSource

logger = logging.getLogger(__name__)

ROUTE_TIME_FORMAT = REPORT_TIME_FORMAT
RECORD_FIELDS = 4
CUTOFF_HOUR = 8
CUTOFF_MINUTE = 10


@dataclass(frozen=True)
class ParsedRecord:
    """A validated route record, not yet routed."""

    vehicle_id: int
    route_point: RoutePoint


def parse_record(row: Sequence[str]) -> ParsedRecord:
    """Validate a raw route record.

    Raises:
        RecordParseError: Wrong field count, or a field that does not parse.
    """
    if len(row) != RECORD_FIELDS:
        raise RecordParseError(
            SkipReason.MALFORMED_RECORD, f"expected {RECORD_FIELDS} fields, got {len(row)}"
        )

    raw_id, raw_lat, raw_lon, raw_time = row
    try:
        vehicle_id = int(raw_id)
    except ValueError as e:
        raise RecordParseError(SkipReason.INVALID_VEHICLE_ID, str(e)) from e
    try:
        lat = float(raw_lat)
    except ValueError as e:
        raise RecordParseError(SkipReason.INVALID_LATITUDE, str(e)) from e
    try:
        lon = float(raw_lon)
    except ValueError as e:
        raise RecordParseError(SkipReason.INVALID_LONGITUDE, str(e)) from e
    try:
        timestamp = datetime.strptime(raw_time, ROUTE_TIME_FORMAT)
    except ValueError as e:
        raise RecordParseError(SkipReason.INVALID_TIMESTAMP, str(e)) from e

    return ParsedRecord(
        vehicle_id=vehicle_id,
        route_point=RoutePoint(point=Point(lat=lat, lon=lon), timestamp=timestamp),
    )


def is_cutoff(timestamp: datetime) -> bool:
    """True at 08:10, any second."""
    return timestamp.hour == CUTOFF_HOUR and timestamp.minute == CUTOFF_MINUTE


class Dispatcher:
    """Loads route points from the sources and passes them to the vehicle workers.

    Two loops run concurrently: process() reads every source (one task per
    source) and run() is the control loop that reacts to instructions. Once
    all sources are drained process() sends SHUTDOWN; run() then closes each
    worker in turn, waits for its acknowledgement and finally resolves the
    terminate signal.
    """

    def __init__(
        self,
        workers: Mapping[int, VehicleWorkerProtocol],
        sources: Iterable[RouteSource],
        observer: PipelineObserver,
    ) -> None:
        """Initialize the dispatcher.

        Args:
            workers: Routing table of vehicle id -> worker handle.
            sources: Independent route sources, read concurrently.
            observer: Observability hook.
        """
        self.workers = dict(workers)
        self.sources = list(sources)
        self._observer = observer
        self.instructions: asyncio.Queue[Instruction] = asyncio.Queue()
        self._terminate: asyncio.Future[bool] | None = None
        self._task: asyncio.Task[None] | None = None

    @property
    def task(self) -> asyncio.Task[None] | None:
        return self._task

    def start(self) -> asyncio.Task[None]:
        """Start the control loop."""
        if self._task is not None and not self._task.done():
            logger.warning("Dispatcher already running")
            return self._task
        self._terminate = asyncio.get_running_loop().create_future()
        self._task = asyncio.create_task(self.run(), name="dispatcher")
        return self._task

    async def wait_terminated(self) -> bool:
        """Block until the dispatcher signals termination.

        Raises:
            TerminationError: The control loop returned without terminating.
            Exception: Whatever made the control loop fail.
        """
        if self._terminate is None or self._task is None:
            raise RuntimeError("Dispatcher has not been started")

        await asyncio.wait({self._terminate, self._task}, return_when=asyncio.FIRST_COMPLETED)
        if self._terminate.done():
            return self._terminate.result()
        # Control loop ended without terminating; surface its error.
        self._task.result()
        raise TerminationError()

    async def run(self) -> None:
        """Control loop. Ends after the single terminate signal is sent."""
        while True:
            instruction = await self.instructions.get()
            if instruction is Instruction.SHUTDOWN:
                logger.info("Dispatcher received SHUTDOWN signal")
                await self._shutdown_workers()
                self._signal_terminated()
                return
            logger.warning(f"Dispatcher ignoring unknown instruction: {instruction}")

    async def process(self) -> None:
        """Feed every source to the workers, then request shutdown."""
        await asyncio.gather(*(self._feed(source) for source in self.sources))
        logger.info("Dispatcher finished loading sources. Shutting down")
        await self.instructions.put(Instruction.SHUTDOWN)

    async def _feed(self, source: RouteSource) -> None:
        name = getattr(source, "name", repr(source))
        for row in source:
            # One record per turn so sources and workers interleave.
            await asyncio.sleep(0)
            try:
                record = parse_record(row)
            except RecordParseError as e:
                self._observer.record_skipped(name, e.reason, e.detail)
                continue

            worker = self.workers.get(record.vehicle_id)
            if worker is None:
                self._observer.record_skipped(
                    name, SkipReason.UNKNOWN_VEHICLE, f"Robot {record.vehicle_id} not found"
                )
                continue

            if is_cutoff(record.route_point.timestamp):
                # Points already handed over are processed before the halt.
                await worker.wait_idle()
                worker.halt()
                self._observer.vehicle_halted(record.vehicle_id, record.route_point)
                break

            if not await worker.deliver(record.route_point):
                self._observer.record_skipped(
                    name, SkipReason.WORKER_STOPPED, f"Robot {record.vehicle_id} already stopped"
                )
                continue
            self._observer.point_dispatched(record.vehicle_id, record.route_point)
        else:
            logger.info(f"Dispatcher reached end of source {name}")

    async def _shutdown_workers(self) -> None:
        for vehicle_id, worker in self.workers.items():
            self._observer.worker_shutdown_started(vehicle_id)
            await worker.close()
            # Whilst the worker is still running, don't move on.
            await worker.wait_acknowledged()
            self._observer.worker_shutdown_acknowledged(vehicle_id)

    def _signal_terminated(self) -> None:
        if self._terminate is not None and not self._terminate.done():
            self._terminate.set_result(True)
            self._observer.terminated()

"""Per-vehicle worker that turns route points into traffic reports."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

from robot_traffic.application.errors import ShutdownProtocolError
from robot_traffic.application.geo import classify, distance_km, speed_kmh
from robot_traffic.domain.contracts.vehicle_worker import VehicleWorkerProtocol
from robot_traffic.domain.models import RoutePoint, TrafficReport, VehicleState

if TYPE_CHECKING:
    from robot_traffic.application.station_index import StationIndex
    from robot_traffic.domain.contracts.pipeline_observer import PipelineObserver

logger = logging.getLogger(__name__)

DEFAULT_QUEUE_SIZE = 10

# Queued behind the remaining points by close().
_END_OF_STREAM = object()


class VehicleWorker(VehicleWorkerProtocol):
    """Moves one vehicle from point to point and reports traffic near stations.

    The worker owns its VehicleState exclusively. Points arrive through a
    bounded inbox filled by the dispatcher; reports leave through the shared
    report queue. Shutdown is either graceful (close(): drain, then
    acknowledge) or immediate (halt(): acknowledge without draining).
    """

    def __init__(
        self,
        vehicle_id: int,
        stations: StationIndex,
        reports: asyncio.Queue[Any],
        observer: PipelineObserver,
        queue_size: int = DEFAULT_QUEUE_SIZE,
    ) -> None:
        """Initialize the worker.

        Args:
            vehicle_id: Identifier of the vehicle this worker tracks.
            stations: Shared read-only station index.
            reports: Queue consumed by the report sink.
            observer: Observability hook.
            queue_size: Capacity of the inbox; producers wait when it is full.
        """
        self.vehicle_id = vehicle_id
        self.stations = stations
        self.state = VehicleState()
        self._reports = reports
        self._observer = observer
        self._inbox: asyncio.Queue[Any] = asyncio.Queue(maxsize=queue_size)
        self._halted = asyncio.Event()
        self._stopped = asyncio.Event()
        self._acknowledged = asyncio.Event()
        self._task: asyncio.Task[None] | None = None

    @property
    def stopped(self) -> bool:
        return self._stopped.is_set()

    @property
    def acknowledged(self) -> bool:
        return self._acknowledged.is_set()

    @property
    def task(self) -> asyncio.Task[None] | None:
        return self._task

    def start(self) -> asyncio.Task[None]:
        """Start the processing loop."""
        if self._task is not None and not self._task.done():
            logger.warning(f"Robot {self.vehicle_id} already running")
            return self._task
        self._task = asyncio.create_task(self._run(), name=f"robot-{self.vehicle_id}")
        return self._task

    async def deliver(self, route_point: RoutePoint) -> bool:
        """Queue a route point, waiting while the inbox is full.

        Returns:
            False if the worker has stopped and the point was not queued.
        """
        if self._halted.is_set() or self._stopped.is_set():
            return False
        return await self._put_unless_stopped(route_point)

    async def wait_idle(self) -> None:
        """Wait until every queued point has been processed, or the worker stops."""
        join = asyncio.ensure_future(self._inbox.join())
        stopped = asyncio.ensure_future(self._stopped.wait())
        try:
            await asyncio.wait({join, stopped}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for pending in (join, stopped):
                if not pending.done():
                    pending.cancel()

    def halt(self) -> None:
        """Stop immediately. Points still queued are discarded."""
        logger.info(f"Robot {self.vehicle_id} received shutdown signal")
        self._halted.set()

    async def close(self) -> None:
        """Signal end of stream. Points already queued are processed first."""
        if self._halted.is_set() or self._stopped.is_set():
            return
        await self._put_unless_stopped(_END_OF_STREAM)

    async def wait_acknowledged(self) -> None:
        """Wait until the worker acknowledges shutdown.

        Raises:
            ShutdownProtocolError: The worker ended without acknowledging.
        """
        if self._task is None:
            raise ShutdownProtocolError(self.vehicle_id)

        ack = asyncio.ensure_future(self._acknowledged.wait())
        try:
            await asyncio.wait({ack, self._task}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            if not ack.done():
                ack.cancel()

        if not self._acknowledged.is_set():
            raise ShutdownProtocolError(self.vehicle_id)

    async def process(self, route_point: RoutePoint) -> TrafficReport | None:
        """Advance the vehicle to `route_point` and emit a report if near a station.

        Returns:
            The emitted report, or None.
        """
        if self.state.is_stationary(route_point):
            logger.debug(f"Robot {self.vehicle_id} location is the same, not moving")
            return None

        self.state.current = route_point
        last = self.state.last
        if last is None:
            logger.debug(
                f"Robot {self.vehicle_id} starting at point (lat/lon): "
                f"{route_point.point.lat}/{route_point.point.lon}"
            )
        else:
            logger.debug(
                f"Robot {self.vehicle_id} moving from point (lat/lon): "
                f"{last.point.lat}/{last.point.lon} to "
                f"{route_point.point.lat}/{route_point.point.lon} at {route_point.timestamp}"
            )

        report = None
        nearby = self.stations.nearby(route_point.point)
        if nearby:
            report = self._build_report(route_point, last)
            await self._reports.put(report)
            self._observer.report_emitted(report, nearby)

        self.state.last = route_point
        return report

    def _build_report(self, current: RoutePoint, last: RoutePoint | None) -> TrafficReport:
        distance = 0.0
        speed = 0.0
        if last is not None:
            distance = distance_km(last.point, current.point)
            speed = speed_kmh(distance, current.unix - last.unix)

        return TrafficReport(
            vehicle_id=self.vehicle_id,
            timestamp=current.timestamp,
            speed=speed,
            condition=classify(speed, distance),
        )

    async def _run(self) -> None:
        try:
            while not self._halted.is_set():
                item = await self._next()
                if item is None:
                    break
                try:
                    if item is _END_OF_STREAM:
                        break
                    await self.process(item)
                finally:
                    self._inbox.task_done()

            if self._halted.is_set():
                dropped = self._inbox.qsize()
                if dropped:
                    logger.debug(f"Robot {self.vehicle_id} discarded {dropped} queued point(s)")
            self._acknowledged.set()
            logger.debug(f"Robot {self.vehicle_id} acknowledged shutdown")
        finally:
            self._stopped.set()

    async def _next(self) -> Any:
        """Next inbox item, or None once halted. Halt wins over a ready item."""
        if not self._inbox.empty():
            return self._inbox.get_nowait()

        get = asyncio.ensure_future(self._inbox.get())
        halt = asyncio.ensure_future(self._halted.wait())
        try:
            done, _ = await asyncio.wait({get, halt}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for pending in (get, halt):
                if not pending.done():
                    pending.cancel()

        if halt in done:
            return None
        return get.result()

    async def _put_unless_stopped(self, item: Any) -> bool:
        if not self._inbox.full():
            self._inbox.put_nowait(item)
            return True

        put = asyncio.ensure_future(self._inbox.put(item))
        stopped = asyncio.ensure_future(self._stopped.wait())
        try:
            done, _ = await asyncio.wait({put, stopped}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for pending in (put, stopped):
                if not pending.done():
                    pending.cancel()
        return put in done

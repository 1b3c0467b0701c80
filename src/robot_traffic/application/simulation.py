"""Top-level orchestrator that wires stations, workers, dispatcher and sink."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from robot_traffic.application.dispatcher import Dispatcher
from robot_traffic.application.errors import ShutdownProtocolError
from robot_traffic.application.report_sink import ReportSink
from robot_traffic.application.station_index import StationIndex
from robot_traffic.application.vehicle_worker import DEFAULT_QUEUE_SIZE, VehicleWorker

if TYPE_CHECKING:
    from robot_traffic.domain.contracts.pipeline_observer import PipelineObserver
    from robot_traffic.domain.ports import ReportWriter, RouteSource, StationSource

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SimulationResult:
    """Outcome of a completed run."""

    terminated: bool
    reports_written: int


class TrafficSimulation:
    """Owns every channel of one run and blocks until the dispatcher terminates."""

    def __init__(
        self,
        vehicle_ids: Sequence[int],
        stations: StationSource,
        route_sources: Iterable[RouteSource],
        writer: ReportWriter,
        observer: PipelineObserver,
        queue_size: int = DEFAULT_QUEUE_SIZE,
    ) -> None:
        """Initialize the simulation.

        Args:
            vehicle_ids: Vehicles to track; each gets one worker.
            stations: Station reference data, consumed once.
            route_sources: Independent route sources.
            writer: Destination for traffic reports.
            observer: Observability hook shared by all components.
            queue_size: Inbox capacity of each worker.
        """
        self.vehicle_ids = list(dict.fromkeys(vehicle_ids))
        self.station_index = StationIndex.from_stations(stations)
        self.route_sources = list(route_sources)
        self.writer = writer
        self.observer = observer
        self.queue_size = queue_size

    async def run(self) -> SimulationResult:
        """Run until every worker has acknowledged shutdown and all reports are saved."""
        logger.info(
            f"Starting simulation with {len(self.vehicle_ids)} robot(s), "
            f"{len(self.station_index)} station(s) and {len(self.route_sources)} source(s)"
        )
        reports: asyncio.Queue[Any] = asyncio.Queue()
        sink = ReportSink(reports, self.writer)
        workers = {
            vehicle_id: VehicleWorker(
                vehicle_id, self.station_index, reports, self.observer, self.queue_size
            )
            for vehicle_id in self.vehicle_ids
        }
        dispatcher = Dispatcher(workers, self.route_sources, self.observer)

        sink_task = asyncio.create_task(sink.run(), name="report-sink")
        tasks: list[asyncio.Task[Any]] = [sink_task]
        tasks.extend(worker.start() for worker in workers.values())
        tasks.append(dispatcher.start())
        process_task = asyncio.create_task(dispatcher.process(), name="dispatcher-process")
        tasks.append(process_task)

        try:
            terminated = await self._wait_terminated(dispatcher, process_task, sink_task, workers)
            await sink.close()
            written = await sink_task
        except BaseException:
            for task in tasks:
                if not task.done():
                    task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

        logger.info(f"Dispatcher terminated: {terminated}")
        return SimulationResult(terminated=terminated, reports_written=written)

    @staticmethod
    async def _wait_terminated(
        dispatcher: Dispatcher,
        process_task: asyncio.Task[None],
        sink_task: asyncio.Task[int],
        workers: Mapping[int, VehicleWorker],
    ) -> bool:
        """Wait for termination, failing fast when any pipeline task fails first.

        Raises:
            ShutdownProtocolError: A worker crashed before shutdown completed.
            Exception: Whatever made the sources or the report sink fail.
        """
        terminated = asyncio.ensure_future(dispatcher.wait_terminated())
        owners = {worker.task: vehicle_id for vehicle_id, worker in workers.items()}
        watched: set[asyncio.Future[Any]] = {process_task, sink_task, *owners}
        try:
            while not terminated.done():
                done, watched = await asyncio.wait(
                    {terminated, *watched}, return_when=asyncio.FIRST_COMPLETED
                )
                watched.discard(terminated)
                for task in done:
                    if task is terminated or task.exception() is None:
                        continue
                    if task in owners:
                        raise ShutdownProtocolError(owners[task]) from task.exception()
                    task.result()
            return terminated.result()
        finally:
            if not terminated.done():
                terminated.cancel()

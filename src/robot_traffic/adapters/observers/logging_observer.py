"""Pipeline observer that writes events to the standard logging system."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from robot_traffic.domain.contracts.pipeline_observer import PipelineObserver

if TYPE_CHECKING:
    from robot_traffic.domain.models import RoutePoint, SkipReason, TrafficReport

logger = logging.getLogger(__name__)


class LoggingObserver(PipelineObserver):
    """Logs pipeline events. Per-point events are logged at DEBUG."""

    def __init__(self, log: logging.Logger | None = None) -> None:
        self._log = log or logger

    def record_skipped(self, source: str, reason: SkipReason, detail: str) -> None:
        self._log.warning(f"Dispatcher skipping line from {source} - {reason.value}: {detail}")

    def point_dispatched(self, vehicle_id: int, route_point: RoutePoint) -> None:
        self._log.debug(
            f"Dispatcher sent Robot {vehicle_id} to point (lat/lon): "
            f"{route_point.point.lat}/{route_point.point.lon} @ {route_point.timestamp}"
        )

    def report_emitted(self, report: TrafficReport, nearby: dict[str, float]) -> None:
        stations = ", ".join(f"{name} ({distance:.3f}km)" for name, distance in nearby.items())
        self._log.info(
            f"Robot {report.vehicle_id} near {stations} at {report.timestamp}: "
            f"{report.condition.value} traffic, {report.speed:.2f} km/h"
        )

    def vehicle_halted(self, vehicle_id: int, route_point: RoutePoint) -> None:
        self._log.info(
            f"Dispatcher: Robot {vehicle_id} reached "
            f"{route_point.timestamp:%H:%M}. Terminating"
        )

    def worker_shutdown_started(self, vehicle_id: int) -> None:
        self._log.info(f"Dispatcher shutting down Robot {vehicle_id}")

    def worker_shutdown_acknowledged(self, vehicle_id: int) -> None:
        self._log.info(f"Robot {vehicle_id} acknowledged shutdown")

    def terminated(self) -> None:
        self._log.info("Dispatcher terminated")

"""Protocol for observing pipeline events."""

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from robot_traffic.domain.models.pipeline import SkipReason
    from robot_traffic.domain.models.point import RoutePoint
    from robot_traffic.domain.models.traffic_report import TrafficReport


class PipelineObserver(Protocol):
    """Hook points exposed by the dispatcher, workers and sink."""

    def record_skipped(self, source: str, reason: "SkipReason", detail: str) -> None:
        """A route record was dropped.

        Args:
            source: Name of the route source the record came from.
            reason: Why the record was dropped.
            detail: Human readable description (usually the parse error).
        """
        ...

    def point_dispatched(self, vehicle_id: int, route_point: "RoutePoint") -> None:
        """A route point was handed to a vehicle worker."""
        ...

    def report_emitted(self, report: "TrafficReport", nearby: dict[str, float]) -> None:
        """A vehicle worker emitted a traffic report.

        Args:
            report: The emitted report.
            nearby: Station name -> distance in km for stations within range.
        """
        ...

    def vehicle_halted(self, vehicle_id: int, route_point: "RoutePoint") -> None:
        """A vehicle reached the cutoff time and was halted."""
        ...

    def worker_shutdown_started(self, vehicle_id: int) -> None:
        """The dispatcher closed a worker's input stream."""
        ...

    def worker_shutdown_acknowledged(self, vehicle_id: int) -> None:
        """A worker acknowledged shutdown."""
        ...

    def terminated(self) -> None:
        """All workers acknowledged and the dispatcher signalled termination."""
        ...

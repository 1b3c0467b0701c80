"""Report writer port."""

from typing import Protocol

from robot_traffic.domain.models.traffic_report import TrafficReport


class ReportWriter(Protocol):
    """Port for persisting traffic reports in arrival order."""

    def write(self, report: TrafficReport) -> None:
        """Append a single report and flush it to the destination."""
        ...

    def close(self) -> None:
        """Release the destination."""
        ...

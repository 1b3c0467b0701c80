"""Shared test doubles for the simulation pipeline."""

from collections.abc import Iterator, Sequence
from datetime import datetime

import pytest

from robot_traffic.domain.models import (
    Point,
    RoutePoint,
    SkipReason,
    Station,
    TrafficReport,
)

OXFORD_CIRCUS = Station(name="Oxford Circus", point=Point(lat=51.515, lon=-0.1415))


class RecordingObserver:
    """Pipeline observer that keeps every event in order."""

    def __init__(self) -> None:
        self.events: list[tuple] = []
        self.skipped: list[tuple[str, SkipReason, str]] = []
        self.reports: list[TrafficReport] = []

    def record_skipped(self, source: str, reason: SkipReason, detail: str) -> None:
        self.skipped.append((source, reason, detail))
        self.events.append(("skipped", source, reason))

    def point_dispatched(self, vehicle_id: int, route_point: RoutePoint) -> None:
        self.events.append(("dispatched", vehicle_id, route_point))

    def report_emitted(self, report: TrafficReport, nearby: dict[str, float]) -> None:
        self.reports.append(report)
        self.events.append(("report", report.vehicle_id, tuple(nearby)))

    def vehicle_halted(self, vehicle_id: int, route_point: RoutePoint) -> None:
        self.events.append(("halted", vehicle_id, route_point))

    def worker_shutdown_started(self, vehicle_id: int) -> None:
        self.events.append(("shutdown_started", vehicle_id))

    def worker_shutdown_acknowledged(self, vehicle_id: int) -> None:
        self.events.append(("shutdown_acknowledged", vehicle_id))

    def terminated(self) -> None:
        self.events.append(("terminated",))

    def names(self) -> list[str]:
        return [event[0] for event in self.events]


class ListReportWriter:
    """Report writer that collects reports in memory."""

    def __init__(self) -> None:
        self.reports: list[TrafficReport] = []
        self.closed = False

    def write(self, report: TrafficReport) -> None:
        self.reports.append(report)

    def close(self) -> None:
        self.closed = True


class ListRouteSource:
    """Route source backed by a list of raw rows."""

    def __init__(self, name: str, rows: Sequence[Sequence[str]]) -> None:
        self.name = name
        self.rows = [list(row) for row in rows]
        self.consumed = 0

    def __iter__(self) -> Iterator[list[str]]:
        for row in self.rows:
            self.consumed += 1
            yield row


def route_point(lat: float, lon: float, when: str) -> RoutePoint:
    """Build a route point from a `YYYY-MM-DD HH:MM:SS` timestamp."""
    return RoutePoint(
        point=Point(lat=lat, lon=lon),
        timestamp=datetime.strptime(when, "%Y-%m-%d %H:%M:%S"),
    )


@pytest.fixture
def observer() -> RecordingObserver:
    return RecordingObserver()


@pytest.fixture
def writer() -> ListReportWriter:
    return ListReportWriter()


@pytest.fixture
def stations() -> list[Station]:
    return [
        OXFORD_CIRCUS,
        Station(name="Bank", point=Point(lat=51.513347, lon=-0.089052)),
    ]


@pytest.fixture
def point_at():
    """Factory for route points: point_at(lat, lon, "YYYY-MM-DD HH:MM:SS")."""
    return route_point


@pytest.fixture
def make_source():
    """Factory for in-memory route sources: make_source(name, rows)."""
    return ListRouteSource

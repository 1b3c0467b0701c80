"""Point and route point domain models."""

from dataclasses import dataclass
from datetime import UTC, datetime


@dataclass(frozen=True)
class Point:
    """A latitude/longitude pair in degrees.

    Equality is exact field equality.
    """

    lat: float
    lon: float


@dataclass(frozen=True)
class RoutePoint:
    """A vehicle was at `point` at `timestamp`."""

    point: Point
    timestamp: datetime

    @property
    def unix(self) -> int:
        """Whole seconds since the epoch. Naive timestamps are read as UTC."""
        ts = self.timestamp
        if ts.tzinfo is None:
            ts = ts.replace(tzinfo=UTC)
        return int(ts.timestamp())

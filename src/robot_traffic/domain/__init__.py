"""Domain layer - core models, ports and contracts."""

from robot_traffic.domain.models import (
    Point,
    RoutePoint,
    Station,
    TrafficCondition,
    TrafficReport,
)
from robot_traffic.domain.ports import ReportWriter, RouteSource, StationSource

__all__ = [
    "Point",
    "ReportWriter",
    "RouteSource",
    "RoutePoint",
    "Station",
    "StationSource",
    "TrafficCondition",
    "TrafficReport",
]

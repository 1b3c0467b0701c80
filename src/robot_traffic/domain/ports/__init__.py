"""Ports (interfaces) for the ports-and-adapters architecture."""

from robot_traffic.domain.ports.report_writer import ReportWriter
from robot_traffic.domain.ports.route_source import RouteSource
from robot_traffic.domain.ports.station_source import StationSource

__all__ = [
    "ReportWriter",
    "RouteSource",
    "StationSource",
]

"""CSV file adapters for stations, routes and reports."""

from robot_traffic.adapters.csv_files.report_writer import CsvReportWriter
from robot_traffic.adapters.csv_files.route_source import CsvRouteSource, discover_route_sources
from robot_traffic.adapters.csv_files.station_loader import load_stations

__all__ = ["CsvReportWriter", "CsvRouteSource", "discover_route_sources", "load_stations"]

"""Loads station reference data from a CSV file."""

import csv
import logging
from pathlib import Path

from robot_traffic.domain.models import Point, Station

logger = logging.getLogger(__name__)

STATION_FIELDS = 3


def load_stations(path: str | Path) -> list[Station]:
    """Read `name,lat,lon` rows from `path`.

    Malformed rows are skipped with a warning.

    Raises:
        OSError: The file cannot be opened.
    """
    stations: list[Station] = []
    with open(path, newline="", encoding="utf-8") as f:
        for line_number, row in enumerate(csv.reader(f), start=1):
            if not row:
                continue
            if len(row) != STATION_FIELDS:
                logger.warning(
                    f"Skipping station on line {line_number} of {path}: "
                    f"expected {STATION_FIELDS} fields, got {len(row)}"
                )
                continue

            name, raw_lat, raw_lon = row
            try:
                point = Point(lat=float(raw_lat), lon=float(raw_lon))
            except ValueError as e:
                logger.warning(f"Skipping station {name!r} on line {line_number} of {path}: {e}")
                continue

            logger.info(f"Loaded station: {name}  Lat/Lon: {point.lat}, {point.lon}")
            stations.append(Station(name=name, point=point))

    return stations

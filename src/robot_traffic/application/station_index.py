"""Read-only index of reference stations."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping
from types import MappingProxyType

from robot_traffic.application.geo import NEARBY_STATION_PROXIMITY_KM, distance_km
from robot_traffic.domain.models import Point, Station

logger = logging.getLogger(__name__)


class StationIndex:
    """Immutable mapping of station name to position.

    Built once at startup and shared by every vehicle worker. Nothing mutates
    it afterwards, so concurrent reads need no synchronisation.
    """

    def __init__(self, stations: Mapping[str, Point]) -> None:
        self._stations: Mapping[str, Point] = MappingProxyType(dict(stations))

    @classmethod
    def from_stations(cls, stations: Iterable[Station]) -> StationIndex:
        """Build the index from station records. Later duplicates win."""
        by_name: dict[str, Point] = {}
        for station in stations:
            if station.name in by_name:
                logger.warning(f"Duplicate station {station.name!r}, keeping the last position")
            by_name[station.name] = station.point
        return cls(by_name)

    @property
    def names(self) -> list[str]:
        return list(self._stations)

    def __len__(self) -> int:
        return len(self._stations)

    def __contains__(self, name: object) -> bool:
        return name in self._stations

    def __iter__(self) -> Iterator[str]:
        return iter(self._stations)

    def __getitem__(self, name: str) -> Point:
        return self._stations[name]

    def nearby(
        self, point: Point, radius_km: float = NEARBY_STATION_PROXIMITY_KM
    ) -> dict[str, float]:
        """Stations strictly closer than `radius_km` to `point`.

        Returns:
            Station name -> distance in km.
        """
        found: dict[str, float] = {}
        for name, station_point in self._stations.items():
            distance = distance_km(point, station_point)
            if distance < radius_km:
                found[name] = distance
        return found

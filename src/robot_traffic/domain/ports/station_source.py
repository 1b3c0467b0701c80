"""Station source port."""

from collections.abc import Iterator
from typing import Protocol

from robot_traffic.domain.models.station import Station


class StationSource(Protocol):
    """Port for the station reference data, consumed once at startup."""

    def __iter__(self) -> Iterator[Station]:
        """Iterate over stations."""
        ...

"""Route source port."""

from collections.abc import Iterator, Sequence
from typing import Protocol


class RouteSource(Protocol):
    """Port for a finite, non-restartable stream of raw route records.

    Each record is a sequence of string fields:
    vehicle id, latitude, longitude, timestamp (``YYYY-MM-DD HH:MM:SS``).
    """

    name: str

    def __iter__(self) -> Iterator[Sequence[str]]:
        """Iterate over raw route records."""
        ...

"""CSV route sources, one file per robot."""

import csv
import logging
from collections.abc import Iterable, Iterator
from pathlib import Path

logger = logging.getLogger(__name__)


class CsvRouteSource:
    """Lazily reads raw route records from a CSV file.

    The file is opened on iteration and closed once exhausted. Like the
    underlying stream, a source can be consumed only once.

    Reads are blocking and run on the event loop. The dispatcher pulls one
    row per turn, so a source holds the loop for a single buffered line read
    at a time; route files are small enough that no thread offload is used.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self.name = self.path.name
        self._consumed = False

    def __iter__(self) -> Iterator[list[str]]:
        if self._consumed:
            raise RuntimeError(f"Route source {self.name} has already been consumed")
        self._consumed = True
        return self._rows()

    def _rows(self) -> Iterator[list[str]]:
        with open(self.path, newline="", encoding="utf-8") as f:
            for row in csv.reader(f):
                if row:
                    yield row

    def __repr__(self) -> str:
        return f"CsvRouteSource({str(self.path)!r})"


def discover_route_sources(
    routes_dir: str | Path, vehicle_ids: Iterable[int]
) -> dict[int, CsvRouteSource]:
    """Map each robot id to `<routes_dir>/<id>.csv`.

    Robots without a route file are left out with a warning.
    """
    sources: dict[int, CsvRouteSource] = {}
    for vehicle_id in vehicle_ids:
        path = Path(routes_dir) / f"{vehicle_id}.csv"
        if not path.is_file():
            logger.warning(f"No CSV file found for Robot: {vehicle_id} ({path})")
            continue
        sources[vehicle_id] = CsvRouteSource(path)
    return sources

"""CSV destination for traffic reports."""

from __future__ import annotations

import csv
import logging
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from types import TracebackType

    from robot_traffic.domain.models import TrafficReport

logger = logging.getLogger(__name__)


class CsvReportWriter:
    """Appends one CSV row per report and flushes after every row.

    The destination is truncated (or created) when the writer is opened.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self._file = open(self.path, "w", newline="", encoding="utf-8")  # noqa: SIM115
        self._writer = csv.writer(self._file)
        logger.info(f"Writing traffic reports to {self.path}")

    def write(self, report: TrafficReport) -> None:
        self._writer.writerow(report.to_row())
        self._file.flush()

    def close(self) -> None:
        if not self._file.closed:
            self._file.close()

    def __enter__(self) -> CsvReportWriter:
        return self

    def __exit__(
        self,
        _exc_type: type[BaseException] | None,
        _exc_val: BaseException | None,
        _exc_tb: TracebackType | None,
    ) -> None:
        self.close()

"""Sink that persists traffic reports in arrival order."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from robot_traffic.domain.ports.report_writer import ReportWriter

logger = logging.getLogger(__name__)

_END_OF_REPORTS = object()


class ReportSink:
    """Consumes reports from every worker through one shared queue.

    Each report is handed to the writer as soon as it arrives; nothing is
    buffered or reordered. close() queues an end marker so that run() drains
    what is already queued and then returns.
    """

    def __init__(self, reports: asyncio.Queue[Any], writer: ReportWriter) -> None:
        self.reports = reports
        self.writer = writer
        self.written = 0

    async def run(self) -> int:
        """Write reports until closed.

        Returns:
            Number of reports written.
        """
        while True:
            report = await self.reports.get()
            if report is _END_OF_REPORTS:
                break
            self.writer.write(report)
            self.written += 1
            logger.debug(f"Saved traffic report for Robot {report.vehicle_id}")

        logger.info(f"Report sink stopped after {self.written} report(s)")
        return self.written

    async def close(self) -> None:
        """Stop after the reports already queued have been written."""
        await self.reports.put(_END_OF_REPORTS)

"""
Drives the bisector over consecutive month windows, oldest first.
"""

from datetime import datetime

from order_ingestion.core.bisector import RangeBisector
from order_ingestion.core.windows import MonthlyWindows
from order_ingestion.utils.logging_utils import log_section_complete, log_section_start


class WindowScheduler:
    """
    Sequentially ingests every month window in [start, end).

    Args:
        bisector: Bisector that drains each window
        start: Fixed ingestion epoch
        end: Upper bound, normally 'now'
    """

    def __init__(self, bisector: RangeBisector, start: datetime, end: datetime):
        self.bisector = bisector
        self.windows = MonthlyWindows(start, end)

    def run(self) -> None:
        stats = self.bisector.stats
        for window in self.windows:
            stats.windows_scheduled += 1
            section = f"Fetching range {window}"
            log_section_start(section)
            ingested_before = stats.orders_ingested
            self.bisector.ingest(window, 0)
            log_section_complete(
                section, f"{stats.orders_ingested - ingested_before} new orders"
            )

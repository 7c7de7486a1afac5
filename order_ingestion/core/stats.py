"""
Run counters threaded through the scheduler, bisector and page cursor.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List

from order_ingestion.core.windows import TimeWindow


@dataclass
class RunStats:
    windows_scheduled: int = 0
    pages_fetched: int = 0
    orders_ingested: int = 0
    orders_failed: int = 0
    records_skipped: int = 0
    bisections: int = 0
    abandoned_windows: List[TimeWindow] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "windows_scheduled": self.windows_scheduled,
            "pages_fetched": self.pages_fetched,
            "orders_ingested": self.orders_ingested,
            "orders_failed": self.orders_failed,
            "records_skipped": self.records_skipped,
            "bisections": self.bisections,
            "abandoned_windows": [
                {"start": window.start.isoformat(), "end": window.end.isoformat()}
                for window in self.abandoned_windows
            ],
        }

"""
Pages through one time window and detects when pagination stops making progress.

The upstream search has no stable cursor: once a window holds more orders than
its pagination can express, pages start repeating or reshuffling records that
were already seen. A run of full pages with nothing new is treated as "stuck".
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol

from order_ingestion.core.registry import KnownIdRegistry
from order_ingestion.core.stats import RunStats
from order_ingestion.core.windows import TimeWindow
from order_ingestion.models import OrderRecord
from order_ingestion.utils.logging_utils import log_progress, log_warning


class OrderSource(Protocol):
    def fetch_page(self, window: TimeWindow, page: int) -> List[Dict[str, Any]]:
        ...


class OrderSink(Protocol):
    def upsert(self, order: OrderRecord) -> bool:
        ...


@dataclass(frozen=True)
class IngestionOutcome:
    got_stuck: bool


class StuckDetector:
    """Counts consecutive full pages that yielded no new orders."""

    def __init__(self, threshold: int = 3):
        if threshold < 1:
            raise ValueError("Stuck threshold must be at least 1")
        self.threshold = threshold
        self.consecutive = 0

    def record_full_page(self, new_count: int) -> bool:
        """
        Register a full page.

        Returns:
            bool: True once `threshold` consecutive pages had zero new orders
        """
        if new_count == 0:
            self.consecutive += 1
        else:
            self.consecutive = 0
        return self.consecutive >= self.threshold


class PageCursor:
    """
    Drains a window page by page, submitting unseen orders to the sink.

    Args:
        source: Upstream page fetcher
        registry: Ids already stored; updated after every successful upsert
        sink: Persistence target
        stats: Run counters
        page_size: Size of a full page
        stuck_threshold: Consecutive all-known full pages that mean "stuck"
    """

    def __init__(
        self,
        source: OrderSource,
        registry: KnownIdRegistry,
        sink: OrderSink,
        stats: Optional[RunStats] = None,
        page_size: int = 100,
        stuck_threshold: int = 3,
    ):
        self.source = source
        self.registry = registry
        self.sink = sink
        self.stats = stats if stats is not None else RunStats()
        self.page_size = page_size
        self.stuck_threshold = stuck_threshold

    def drain(self, window: TimeWindow) -> IngestionOutcome:
        section = f"Range {window}"
        detector = StuckDetector(self.stuck_threshold)
        page = 1

        while True:
            payloads = self.source.fetch_page(window, page)
            self.stats.pages_fetched += 1
            log_progress(section, f"page={page}, got {len(payloads)} orders")

            if not payloads:
                return IngestionOutcome(got_stuck=False)

            new_count = self._ingest_page(section, payloads)

            if len(payloads) < self.page_size:
                return IngestionOutcome(got_stuck=False)

            if detector.record_full_page(new_count):
                log_warning(
                    section,
                    f"{detector.consecutive} consecutive full pages without new orders, stuck at page {page}",
                )
                return IngestionOutcome(got_stuck=True)

            page += 1

    def _ingest_page(self, section: str, payloads: List[Dict[str, Any]]) -> int:
        new_count = 0
        for payload in payloads:
            try:
                order = OrderRecord.from_api(payload)
            except ValueError as e:
                self.stats.records_skipped += 1
                log_warning(section, f"Skipping malformed order: {e}")
                continue

            if order.id in self.registry:
                continue

            new_count += 1
            if self.sink.upsert(order):
                self.registry.add(order.id)
                self.stats.orders_ingested += 1
            else:
                self.stats.orders_failed += 1
        return new_count

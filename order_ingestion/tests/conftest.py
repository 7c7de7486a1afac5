"""
Shared fakes for the ingestion core tests.
"""

from typing import Any, Callable, Dict, Iterable, List, Optional

import pytest

from order_ingestion.core.windows import TimeWindow
from order_ingestion.models import OrderRecord


def order_payload(order_id: int, **extra: Any) -> Dict[str, Any]:
    payload = {"id": order_id, "date": "2024-12-11 10:00:00", "status": 4}
    payload.update(extra)
    return payload


class InMemorySink:
    """Order store keyed by id; records every upsert call."""

    def __init__(self, failing_ids: Iterable[int] = ()):
        self.orders: Dict[int, OrderRecord] = {}
        self.calls: List[int] = []
        self.failing_ids = set(failing_ids)

    def upsert(self, order: OrderRecord) -> bool:
        self.calls.append(order.id)
        if order.id in self.failing_ids:
            return False
        self.orders[order.id] = order
        return True


class ScriptedSource:
    """Returns pre-scripted pages per page number; unscripted pages are empty."""

    def __init__(self, pages: Optional[Dict[int, List[Dict[str, Any]]]] = None):
        self.pages = pages or {}
        self.calls: List[tuple] = []

    def fetch_page(self, window: TimeWindow, page: int) -> List[Dict[str, Any]]:
        self.calls.append((window, page))
        return self.pages.get(page, [])


@pytest.fixture
def memory_sink() -> InMemorySink:
    return InMemorySink()


@pytest.fixture
def make_page() -> Callable[[Iterable[int]], List[Dict[str, Any]]]:
    """Build a page of order payloads from a range of ids."""

    def _make(ids: Iterable[int]) -> List[Dict[str, Any]]:
        return [order_payload(order_id) for order_id in ids]

    return _make


@pytest.fixture
def scripted_source() -> Callable[..., ScriptedSource]:
    return ScriptedSource


@pytest.fixture
def sink_factory() -> Callable[..., InMemorySink]:
    return InMemorySink

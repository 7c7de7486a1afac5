"""
Typed records for upstream order payloads.

Only the fields the pipeline reasons about are typed; everything else is kept
in an ordered ``attributes`` mapping exactly as received.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional


def _parse_int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse 'YYYY-MM-DD HH:MM:SS' or ISO-8601 strings; anything else is None."""
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        return datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        return None


def _require_id(payload: Dict[str, Any], kind: str) -> int:
    if not isinstance(payload, dict):
        raise ValueError(f"{kind} payload must be an object, got {type(payload).__name__}")
    record_id = _parse_int(payload.get("id"))
    if record_id is None:
        raise ValueError(f"{kind} payload has no usable id: {payload.get('id')!r}")
    return record_id


@dataclass
class LineItem:
    """A product line of an order, keyed by (id, order id)."""

    id: int
    attributes: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_api(cls, payload: Dict[str, Any]) -> "LineItem":
        item_id = _require_id(payload, "Line item")
        attributes = {key: value for key, value in payload.items() if key != "id"}
        return cls(id=item_id, attributes=attributes)


@dataclass
class OrderRecord:
    """
    An order as returned by the order search API.

    Attributes:
        id: Upstream order id, the deduplication key
        date: Creation timestamp
        modified: Last modification timestamp
        status: Order status code
        payment_status: Payment status code
        products: Line items of the order
        attributes: Every other upstream field, plus typed fields that failed to
            parse, in upstream order
    """

    id: int
    date: Optional[datetime] = None
    modified: Optional[datetime] = None
    status: Optional[int] = None
    payment_status: Optional[int] = None
    products: List[LineItem] = field(default_factory=list)
    attributes: Dict[str, Any] = field(default_factory=dict)

    TYPED_FIELDS = ("id", "date", "modified", "status", "payment_status", "products")

    @classmethod
    def from_api(cls, payload: Dict[str, Any]) -> "OrderRecord":
        """
        Build an order from an upstream result entry.

        Raises:
            ValueError: If the payload is not an object or has no integer id
        """
        order_id = _require_id(payload, "Order")

        products = [LineItem.from_api(item) for item in payload.get("products") or []]

        parsed = {
            "date": _parse_timestamp(payload.get("date")),
            "modified": _parse_timestamp(payload.get("modified")),
            "status": _parse_int(payload.get("status")),
            "payment_status": _parse_int(payload.get("payment_status")),
        }

        # Values that fail to parse stay in attributes as received.
        attributes = {
            key: value
            for key, value in payload.items()
            if key not in cls.TYPED_FIELDS
            or (key in parsed and parsed[key] is None and value is not None)
        }

        return cls(
            id=order_id,
            products=products,
            attributes=attributes,
            **parsed,
        )

"""
Maps order records onto `orders` and `products` table rows.

Upstream flags arrive as "1", 1, true, "true" and similar; they are normalized
here, at the persistence boundary, and nowhere else.
"""

from typing import Any, Dict, List, Optional

from psycopg2.extras import Json

from order_ingestion.models import OrderRecord

_TRUE_VALUES = ("1", 1, True, "true")
_FALSE_VALUES = ("0", 0, False, "false")


def to_bool(value: Any) -> Optional[bool]:
    """
    Tri-state boolean normalization.

    "1", 1, 1.0, True, "true"  -> True
    "0", 0, 0.0, False, "false" -> False
    anything else               -> None (unknown)
    """
    if isinstance(value, (int, float, str)):
        if value in _TRUE_VALUES:
            return True
        if value in _FALSE_VALUES:
            return False
    return None


def _to_float(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


ORDER_COLUMNS = [
    "order_id",
    "vendor_name",
    "type",
    "parent_id",
    "date",
    "payment_mode",
    "detailed_payment_method",
    "delivery_mode",
    "observation",
    "modified",
    "status",
    "payment_status",
    "customer_details",
    "shipping_tax",
    "cashed_co",
    "cashed_cod",
    "cancellation_request",
    "has_editable_products",
    "refunded_amount",
    "is_complete",
    "reason_cancellation",
    "refund_status",
    "maximum_date_for_shipment",
    "late_shipment",
    "emag_club",
    "finalization_date",
    "enforced_vendor_courier_accounts",
    "weekend_delivery",
    "payment_mode_id",
    "flags",
    "details",
    "attachments",
]

PRODUCT_COLUMNS = [
    "product_id",
    "order_id",
    "name",
    "ext_part_number",
    "part_number_key",
    "sale_price",
    "quantity",
    "original_price",
    "currency",
    "created",
    "modified",
    "retained_amount",
    "vat",
    "status",
    "part_number",
    "mkt_id",
    "initial_qty",
    "storno_qty",
    "reversible_vat_charging",
    "recycle_warranties",
    "product_voucher_split",
    "details",
    "attachments",
    "cost",
]

_ORDER_PASSTHROUGH = [
    "vendor_name",
    "type",
    "parent_id",
    "payment_mode",
    "detailed_payment_method",
    "delivery_mode",
    "observation",
    "shipping_tax",
    "cashed_co",
    "cashed_cod",
    "refunded_amount",
    "reason_cancellation",
    "maximum_date_for_shipment",
    "finalization_date",
    "payment_mode_id",
]

_ORDER_FLAGS = [
    "cancellation_request",
    "has_editable_products",
    "is_complete",
    "refund_status",
    "late_shipment",
    "emag_club",
    "enforced_vendor_courier_accounts",
    "weekend_delivery",
]

_PRODUCT_PASSTHROUGH = [
    "name",
    "ext_part_number",
    "part_number_key",
    "sale_price",
    "quantity",
    "original_price",
    "currency",
    "created",
    "modified",
    "retained_amount",
    "vat",
    "status",
    "part_number",
    "mkt_id",
    "initial_qty",
    "storno_qty",
]


def order_to_row(order: OrderRecord) -> Dict[str, Any]:
    """Build the `orders` row for an order, keyed by column name."""
    attrs = order.attributes
    row: Dict[str, Any] = {
        "order_id": order.id,
        "date": order.date,
        "modified": order.modified,
        "status": order.status,
        "payment_status": order.payment_status,
        "customer_details": Json(attrs.get("customer") or {}),
        "flags": Json(attrs.get("flags") or {}),
        "details": Json(attrs.get("details") or {}),
        "attachments": Json(attrs.get("attachments") or {}),
    }
    for column in _ORDER_PASSTHROUGH:
        row[column] = attrs.get(column)
    for column in _ORDER_FLAGS:
        row[column] = to_bool(attrs.get(column))
    return {column: row[column] for column in ORDER_COLUMNS}


def line_items_to_rows(order: OrderRecord) -> List[Dict[str, Any]]:
    """Build the `products` rows for every line item of an order."""
    rows = []
    for item in order.products:
        attrs = item.attributes
        row: Dict[str, Any] = {
            "product_id": item.id,
            "order_id": order.id,
            "reversible_vat_charging": to_bool(attrs.get("reversible_vat_charging")),
            "recycle_warranties": Json(attrs.get("recycle_warranties") or []),
            "product_voucher_split": Json(attrs.get("product_voucher_split") or []),
            "details": Json(attrs.get("details") or {}),
            "attachments": Json(attrs.get("attachments") or {}),
            "cost": _to_float(attrs.get("sale_price")) * _to_float(attrs.get("quantity")),
        }
        for column in _PRODUCT_PASSTHROUGH:
            row[column] = attrs.get(column)
        rows.append({column: row[column] for column in PRODUCT_COLUMNS})
    return rows

"""
Console summary of the orders stored by the pipeline.
"""

from typing import Any, Dict, List

from order_ingestion.rds.reader import read_orders_with_products
from order_ingestion.utils.logging_utils import log_error


def format_orders_summary(orders: List[Dict[str, Any]]) -> List[str]:
    """
    Render stored orders and their products as printable lines.

    Args:
        orders: Rows from read_orders_with_products

    Returns:
        List of lines
    """
    lines = ["=== Orders Summary ==="]
    for order in orders:
        products = order.get("products") or []
        lines.extend(
            [
                "",
                f"Order ID: {order.get('order_id')}",
                f"Vendor Name: {order.get('vendor_name')}",
                f"Date: {order.get('date')}",
                f"Status: {order.get('status')}",
                f"Payment Status: {order.get('payment_status')}",
                f"Total Products: {len(products)}",
            ]
        )
        if not products:
            lines.append("No products found for this order.")
            continue

        lines.append("--- Products ---")
        for index, product in enumerate(products, start=1):
            lines.extend(
                [
                    f"Product {index}:",
                    f"  Product ID: {product.get('product_id')}",
                    f"  Name: {product.get('name')}",
                    f"  Quantity: {product.get('quantity')}",
                    f"  Price: {product.get('sale_price')}",
                    f"  Status: {product.get('status')}",
                ]
            )
    return lines


def print_orders_summary(conn) -> int:
    """
    Print every stored order with its products.

    Read errors are logged and do not propagate; the report is informational.

    Returns:
        Number of orders printed
    """
    try:
        orders = read_orders_with_products(conn)
    except Exception as e:
        log_error("Orders Summary", f"Error reading and processing orders: {e}")
        return 0

    for line in format_orders_summary(orders):
        print(line)
    return len(orders)

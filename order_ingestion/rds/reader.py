"""
Reads stored orders back from PostgreSQL.
"""

from typing import Any, Dict, List, Set

import psycopg2
from psycopg2.extras import RealDictCursor

from order_ingestion.utils.logging_utils import log_error, log_progress


def load_existing_order_ids(conn) -> Set[int]:
    """
    Read every stored order id.

    Used once at startup to seed the known-id registry; errors are fatal.

    Args:
        conn: Open psycopg2 connection

    Returns:
        Set of order ids

    Raises:
        psycopg2.Error: If the query fails
    """
    try:
        with conn.cursor() as cursor:
            cursor.execute("SELECT order_id FROM orders")
            order_ids = {row[0] for row in cursor.fetchall()}
    except psycopg2.Error as e:
        log_error("RDS Reader - orders", f"Database error: {e}")
        raise

    log_progress("RDS Reader - orders", f"Loaded {len(order_ids)} existing order ids")
    return order_ids


def read_orders_with_products(conn) -> List[Dict[str, Any]]:
    """
    Read all stored orders, each with a 'products' list of its line items.

    Args:
        conn: Open psycopg2 connection

    Returns:
        List of order rows in storage order
    """
    try:
        with conn.cursor(cursor_factory=RealDictCursor) as cursor:
            cursor.execute("SELECT * FROM orders ORDER BY date, order_id")
            orders = [dict(row) for row in cursor.fetchall()]

            cursor.execute("SELECT * FROM products ORDER BY order_id, product_id")
            products = [dict(row) for row in cursor.fetchall()]
    except psycopg2.Error as e:
        log_error("RDS Reader - report", f"Database error: {e}")
        raise

    products_by_order: Dict[Any, List[Dict[str, Any]]] = {}
    for product in products:
        products_by_order.setdefault(product["order_id"], []).append(product)

    for order in orders:
        order["products"] = products_by_order.get(order["order_id"], [])

    return orders

"""
Idempotent order persistence.

Each order and its line items are written in one transaction with
INSERT ... ON CONFLICT DO UPDATE, so replaying an order replaces the stored
values instead of duplicating them.
"""

from typing import List

import psycopg2
from psycopg2.extras import execute_values

from order_ingestion.models import OrderRecord
from order_ingestion.rds.rows import (
    ORDER_COLUMNS,
    PRODUCT_COLUMNS,
    line_items_to_rows,
    order_to_row,
)
from order_ingestion.utils.logging_utils import log_error, log_progress


def _upsert_sql(table: str, columns: List[str], conflict_columns: List[str]) -> str:
    updates = ",\n            ".join(
        f"{column} = EXCLUDED.{column}"
        for column in columns
        if column not in conflict_columns
    )
    return f"""
        INSERT INTO {table} ({", ".join(columns)})
        VALUES %s
        ON CONFLICT ({", ".join(conflict_columns)}) DO UPDATE SET
            {updates}
    """


ORDER_UPSERT_SQL = _upsert_sql("orders", ORDER_COLUMNS, ["order_id"])
PRODUCT_UPSERT_SQL = _upsert_sql("products", PRODUCT_COLUMNS, ["product_id", "order_id"])


class PostgresOrderSink:
    """
    Writes orders into PostgreSQL.

    A failed write is rolled back and reported as False; it never raises.

    Args:
        conn: Open psycopg2 connection, owned by the caller
    """

    def __init__(self, conn):
        self.conn = conn

    def upsert(self, order: OrderRecord) -> bool:
        order_row = order_to_row(order)
        product_rows = line_items_to_rows(order)

        try:
            with self.conn.cursor() as cursor:
                execute_values(
                    cursor,
                    ORDER_UPSERT_SQL,
                    [tuple(order_row[column] for column in ORDER_COLUMNS)],
                )
                if product_rows:
                    execute_values(
                        cursor,
                        PRODUCT_UPSERT_SQL,
                        [
                            tuple(row[column] for column in PRODUCT_COLUMNS)
                            for row in product_rows
                        ],
                    )
            self.conn.commit()
        except psycopg2.Error as e:
            self.conn.rollback()
            log_error(f"Order Sink - {order.id}", f"Error saving order: {e}")
            return False

        log_progress(f"Order Sink - {order.id}", "Order saved successfully")
        return True

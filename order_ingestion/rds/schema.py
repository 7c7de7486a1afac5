"""
Creates the `orders` and `products` tables when they do not exist yet.
"""

from order_ingestion.utils.logging_utils import log_section_start, log_section_complete, log_error

ORDERS_DDL = """
    CREATE TABLE IF NOT EXISTS orders (
        order_id BIGINT PRIMARY KEY,
        vendor_name TEXT,
        type INTEGER,
        parent_id BIGINT,
        date TIMESTAMP,
        payment_mode TEXT,
        detailed_payment_method TEXT,
        delivery_mode TEXT,
        observation TEXT,
        modified TIMESTAMP,
        status INTEGER,
        payment_status INTEGER,
        customer_details JSONB,
        shipping_tax NUMERIC(12, 2),
        cashed_co NUMERIC(12, 2),
        cashed_cod NUMERIC(12, 2),
        cancellation_request BOOLEAN,
        has_editable_products BOOLEAN,
        refunded_amount NUMERIC(12, 2),
        is_complete BOOLEAN,
        reason_cancellation TEXT,
        refund_status BOOLEAN,
        maximum_date_for_shipment TEXT,
        late_shipment BOOLEAN,
        emag_club BOOLEAN,
        finalization_date TEXT,
        enforced_vendor_courier_accounts BOOLEAN,
        weekend_delivery BOOLEAN,
        payment_mode_id INTEGER,
        flags JSONB,
        details JSONB,
        attachments JSONB
    )
"""

PRODUCTS_DDL = """
    CREATE TABLE IF NOT EXISTS products (
        product_id BIGINT NOT NULL,
        order_id BIGINT NOT NULL REFERENCES orders (order_id),
        name TEXT,
        ext_part_number TEXT,
        part_number_key TEXT,
        sale_price NUMERIC(12, 4),
        quantity INTEGER,
        original_price NUMERIC(12, 4),
        currency VARCHAR(10),
        created TEXT,
        modified TEXT,
        retained_amount NUMERIC(12, 4),
        vat TEXT,
        status INTEGER,
        part_number TEXT,
        mkt_id BIGINT,
        initial_qty INTEGER,
        storno_qty INTEGER,
        reversible_vat_charging BOOLEAN,
        recycle_warranties JSONB,
        product_voucher_split JSONB,
        details JSONB,
        attachments JSONB,
        cost NUMERIC(14, 4),
        PRIMARY KEY (product_id, order_id)
    )
"""


def ensure_schema(conn) -> None:
    """
    Create the ingestion tables if missing.

    Args:
        conn: Open psycopg2 connection
    """
    log_section_start("Schema Setup")
    try:
        with conn.cursor() as cursor:
            cursor.execute(ORDERS_DDL)
            cursor.execute(PRODUCTS_DDL)
        conn.commit()
    except Exception as e:
        conn.rollback()
        log_error("Schema Setup", str(e))
        raise
    log_section_complete("Schema Setup")

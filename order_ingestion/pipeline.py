"""
Batch ingestion run: seeds the known-id registry from the database, then
drains every month window from the fixed epoch up to now.
"""

from datetime import datetime
from typing import Iterable, Optional

from order_ingestion.config import Config
from order_ingestion.core.bisector import RangeBisector
from order_ingestion.core.cursor import OrderSink, OrderSource, PageCursor
from order_ingestion.core.registry import KnownIdRegistry
from order_ingestion.core.scheduler import WindowScheduler
from order_ingestion.core.stats import RunStats
from order_ingestion.extract.order_client import OrderSearchClient
from order_ingestion.rds.connection import get_db_connection
from order_ingestion.rds.reader import load_existing_order_ids
from order_ingestion.rds.schema import ensure_schema
from order_ingestion.rds.upsert import PostgresOrderSink
from order_ingestion.report.summary import print_orders_summary
from order_ingestion.utils.logging_utils import (
    log_error,
    log_progress,
    log_section_complete,
    log_section_start,
    log_warning,
)


def run_windows(
    source: OrderSource,
    sink: OrderSink,
    registry: KnownIdRegistry,
    start: datetime,
    end: datetime,
    max_depth: int = 10,
    abandon_policy: str = "LOG",
) -> RunStats:
    """
    Ingest [start, end) month by month with collaborators already wired.

    Returns:
        RunStats for the run
    """
    stats = RunStats()
    cursor = PageCursor(
        source,
        registry,
        sink,
        stats=stats,
        page_size=Config.PAGE_SIZE,
        stuck_threshold=Config.STUCK_PAGE_THRESHOLD,
    )
    bisector = RangeBisector(cursor, max_depth=max_depth, abandon_policy=abandon_policy)
    WindowScheduler(bisector, start, end).run()
    return stats


def run_ingestion(
    now: Optional[datetime] = None,
    start: Optional[datetime] = None,
    source: Optional[OrderSource] = None,
    sink: Optional[OrderSink] = None,
    known_ids: Optional[Iterable[int]] = None,
    max_depth: Optional[int] = None,
    abandon_policy: Optional[str] = None,
    init_schema: bool = False,
    report: bool = False,
) -> RunStats:
    """
    Run one full ingestion pass.

    Collaborators that are not injected are built from Config. Configuration
    and seeding errors propagate; per-page and per-order failures do not.

    Args:
        now: Upper bound of the run; defaults to the current time
        start: Ingestion epoch; defaults to INGESTION_START_DATE
        source: Upstream page fetcher
        sink: Order persistence
        known_ids: Registry seed; read from the database when omitted
        max_depth: Bisection depth bound; defaults to MAX_BISECT_DEPTH
        abandon_policy: 'LOG' or 'RAISE'; defaults to ABANDON_POLICY
        init_schema: Create the tables before ingesting
        report: Print the stored orders after ingesting

    Returns:
        RunStats for the run
    """
    needs_db = sink is None or known_ids is None or init_schema or report
    needs_api = source is None

    log_section_start("Configuration Validation")
    if needs_db or needs_api:
        Config.validate()
    log_section_complete("Configuration Validation")

    end = now or datetime.now(Config.get_timezone())
    start = start or Config.get_start_datetime()
    max_depth = Config.MAX_BISECT_DEPTH if max_depth is None else max_depth
    abandon_policy = (abandon_policy or Config.ABANDON_POLICY).upper()

    conn = None
    client = None
    try:
        if needs_db:
            conn = get_db_connection()

        if init_schema:
            ensure_schema(conn)

        log_section_start("Known Order Ids")
        if known_ids is None:
            known_ids = load_existing_order_ids(conn)
        registry = KnownIdRegistry(known_ids)
        log_section_complete("Known Order Ids", f"{len(registry)} ids")

        if sink is None:
            sink = PostgresOrderSink(conn)

        if source is None:
            client = OrderSearchClient.from_config()
            source = client

        section = f"Order Ingestion [{start.isoformat()}..{end.isoformat()})"
        log_section_start(section)
        stats = run_windows(
            source,
            sink,
            registry,
            start,
            end,
            max_depth=max_depth,
            abandon_policy=abandon_policy,
        )
        log_section_complete(
            section,
            f"{stats.orders_ingested} new orders, {stats.orders_failed} failed, "
            f"{stats.pages_fetched} pages, {stats.bisections} bisections, "
            f"registry grew by {registry.added_count}",
        )
        for window in stats.abandoned_windows:
            log_warning(section, f"Abandoned window {window} needs a follow-up run")

        if report:
            printed = print_orders_summary(conn)
            log_progress("Orders Summary", f"Printed {printed} orders")

        return stats

    except Exception as e:
        log_error("Order Ingestion", str(e))
        raise
    finally:
        if client is not None:
            client.close()
        if conn is not None:
            conn.close()

"""
End-to-end tests for a dense window that gets stuck and is bisected.
"""

from datetime import datetime, UTC
from unittest.mock import MagicMock, patch

import pytest

from order_ingestion import pipeline
from order_ingestion.core.bisector import WindowAbandonedError
from order_ingestion.core.registry import KnownIdRegistry
from order_ingestion.core.windows import TimeWindow
from order_ingestion.pipeline import run_ingestion, run_windows

START = datetime(2024, 12, 10, tzinfo=UTC)
END = datetime(2025, 1, 10, tzinfo=UTC)
MID = datetime(2024, 12, 25, 12, tzinfo=UTC)


class DenseWindowSource:
    """
    Upstream whose pagination breaks down for the whole month window.

    250 orders: ids 1..125 created before the midpoint, 126..250 after it.
    For the full window, page 1 returns ids 1..100, page 2 ids 51..150 and every
    later page repeats ids 1..100. Narrower windows paginate correctly.
    """

    def __init__(self):
        self.full_window = TimeWindow(START, END)
        self.created = {
            order_id: datetime(2024, 12, 12, tzinfo=UTC) if order_id <= 125 else datetime(2025, 1, 2, tzinfo=UTC)
            for order_id in range(1, 251)
        }
        self.calls = []

    def _payload(self, order_id):
        return {
            "id": order_id,
            "date": self.created[order_id].strftime("%Y-%m-%d %H:%M:%S"),
            "status": 4,
            "vendor_name": "Acme",
            "products": [{"id": order_id * 10, "sale_price": "10.00", "quantity": 2}],
        }

    def fetch_page(self, window, page):
        self.calls.append((window, page))
        if window == self.full_window:
            scripted = {1: range(1, 101), 2: range(51, 151)}
            ids = scripted.get(page, range(1, 101))
        else:
            matching = sorted(
                order_id
                for order_id, created in self.created.items()
                if window.start <= created < window.end
            )
            ids = matching[(page - 1) * 100 : page * 100]
        return [self._payload(order_id) for order_id in ids]


class TestDenseWindowScenario:
    """Test the stuck-then-bisect scenario for December 2024."""

    def test_all_orders_ingested_exactly_once(self, memory_sink):
        """Test 250 orders land once each after a single bisection."""
        source = DenseWindowSource()
        registry = KnownIdRegistry()

        stats = run_windows(source, memory_sink, registry, START, END)

        full_pages = [page for window, page in source.calls if window == source.full_window]
        assert full_pages == [1, 2, 3, 4, 5]

        sub_windows = []
        for window, _ in source.calls:
            if window != source.full_window and window not in sub_windows:
                sub_windows.append(window)
        assert sub_windows == [TimeWindow(START, MID), TimeWindow(MID, END)]

        assert sorted(memory_sink.calls) == list(range(1, 251))
        assert len(memory_sink.calls) == len(set(memory_sink.calls))
        assert registry.added_count == 250
        assert stats.orders_ingested == 250
        assert stats.bisections == 1
        assert stats.abandoned_windows == []

    def test_rerun_submits_nothing(self, memory_sink):
        """Test a second run seeded from storage does not resubmit orders."""
        source = DenseWindowSource()
        registry = KnownIdRegistry(range(1, 251))

        stats = run_windows(source, memory_sink, registry, START, END)

        assert memory_sink.calls == []
        assert stats.orders_ingested == 0

    def test_raise_policy_propagates(self, memory_sink):
        """Test an abandoned window aborts the run under the RAISE policy."""
        source = DenseWindowSource()

        with pytest.raises(WindowAbandonedError):
            run_windows(
                source,
                memory_sink,
                KnownIdRegistry(),
                START,
                END,
                max_depth=0,
                abandon_policy="RAISE",
            )


class TestRunIngestion:
    """Test the wiring of a full ingestion run."""

    def test_injected_collaborators_skip_database(self, memory_sink):
        """Test a run with injected collaborators needs no database or API config."""
        source = DenseWindowSource()

        with patch.object(pipeline, "get_db_connection") as mock_connect:
            stats = run_ingestion(
                now=END,
                start=START,
                source=source,
                sink=memory_sink,
                known_ids=[],
            )

        mock_connect.assert_not_called()
        assert stats.orders_ingested == 250
        assert stats.windows_scheduled == 1

    def test_seeds_registry_from_database(self, memory_sink):
        """Test known ids are read from the database when not injected."""
        source = DenseWindowSource()
        conn = MagicMock()

        with patch.object(pipeline.Config, "validate"), patch.object(
            pipeline, "get_db_connection", return_value=conn
        ), patch.object(
            pipeline, "load_existing_order_ids", return_value=set(range(1, 201))
        ) as mock_load:
            stats = run_ingestion(now=END, start=START, source=source, sink=memory_sink)

        mock_load.assert_called_once_with(conn)
        assert sorted(memory_sink.calls) == list(range(201, 251))
        assert stats.orders_ingested == 50
        conn.close.assert_called_once()

    def test_seeding_failure_is_fatal(self, memory_sink):
        """Test a failing startup read aborts the run and closes the connection."""
        conn = MagicMock()

        with patch.object(pipeline.Config, "validate"), patch.object(
            pipeline, "get_db_connection", return_value=conn
        ), patch.object(
            pipeline, "load_existing_order_ids", side_effect=RuntimeError("db down")
        ):
            with pytest.raises(RuntimeError, match="db down"):
                run_ingestion(now=END, start=START, source=DenseWindowSource(), sink=memory_sink)

        conn.close.assert_called_once()

    def test_configuration_error_is_fatal(self):
        """Test invalid configuration aborts before any work."""
        with patch.object(
            pipeline.Config, "validate", side_effect=ValueError("Missing required environment variables: EMAG_API_URL")
        ), patch.object(pipeline, "get_db_connection") as mock_connect:
            with pytest.raises(ValueError, match="EMAG_API_URL"):
                run_ingestion(now=END, start=START)

        mock_connect.assert_not_called()

"""
Unit tests for the order search API client.
"""

from datetime import datetime, UTC
from unittest.mock import MagicMock, patch

import requests

from order_ingestion.extract.order_client import OrderSearchClient
from order_ingestion.core.windows import TimeWindow

WINDOW = TimeWindow(datetime(2024, 12, 10, tzinfo=UTC), datetime(2025, 1, 10, tzinfo=UTC))


def _client(response_json=None, post_side_effect=None, json_side_effect=None):
    session = MagicMock()
    session.headers = {}
    response = MagicMock()
    if json_side_effect is not None:
        response.json.side_effect = json_side_effect
    else:
        response.json.return_value = response_json
    if post_side_effect is not None:
        session.post.side_effect = post_side_effect
    else:
        session.post.return_value = response
    client = OrderSearchClient(
        "https://marketplace.example.com/api-3/order/read",
        "Basic dXNlcjpwYXNz",
        session=session,
    )
    return client, session


class TestOrderSearchClient:
    """Test request building and error degradation."""

    def test_request_payload_and_headers(self):
        """Test the page request carries window, page size and status filter."""
        client, session = _client({"isError": False, "results": []})

        client.fetch_page(WINDOW, 3)

        session.post.assert_called_once()
        args, kwargs = session.post.call_args
        assert args[0] == "https://marketplace.example.com/api-3/order/read"
        assert kwargs["json"] == {
            "currentPage": 3,
            "itemsPerPage": 100,
            "data": {
                "createdAfter": "2024-12-10T00:00:00+00:00",
                "createdBefore": "2025-01-10T00:00:00+00:00",
                "status": [1, 2, 3, 4],
            },
        }
        assert kwargs["timeout"] == 60
        assert session.headers["Authorization"] == "Basic dXNlcjpwYXNz"
        assert session.headers["Content-Type"] == "application/json"

    def test_returns_results(self):
        """Test result entries are returned unchanged."""
        results = [{"id": 1}, {"id": 2}]
        client, _ = _client({"isError": False, "results": results})

        assert client.fetch_page(WINDOW, 1) == results

    def test_missing_results_is_empty_page(self):
        """Test a response without results is an empty page."""
        client, _ = _client({"isError": False})

        assert client.fetch_page(WINDOW, 1) == []

    def test_upstream_error_flag_is_empty_page(self, capsys):
        """Test an error-flagged response is logged and treated as empty."""
        client, _ = _client({"isError": True, "messages": ["Invalid date"], "results": [{"id": 1}]})

        assert client.fetch_page(WINDOW, 1) == []
        assert "Invalid date" in capsys.readouterr().out

    def test_transport_error_is_empty_page(self, capsys):
        """Test network failures are logged and treated as empty."""
        client, _ = _client(post_side_effect=requests.exceptions.ConnectionError("refused"))

        assert client.fetch_page(WINDOW, 1) == []
        assert "API request failed" in capsys.readouterr().out

    def test_invalid_json_is_empty_page(self):
        """Test a non-JSON body is treated as empty."""
        client, _ = _client(json_side_effect=ValueError("Expecting value"))

        assert client.fetch_page(WINDOW, 1) == []

    def test_unexpected_shapes_are_empty_pages(self):
        """Test non-object bodies and non-list results are treated as empty."""
        client, _ = _client(["not", "an", "object"])
        assert client.fetch_page(WINDOW, 1) == []

        client, _ = _client({"isError": False, "results": {"id": 1}})
        assert client.fetch_page(WINDOW, 1) == []

    def test_from_config(self):
        """Test the client is built from configuration."""
        from order_ingestion.extract import order_client

        with patch.object(order_client.Config, "EMAG_API_URL", "https://api.example.com/order/read"), patch.object(
            order_client.Config, "get_auth_header", return_value="Basic abc"
        ), patch.object(order_client.Config, "REQUEST_TIMEOUT_SECONDS", 15):
            client = OrderSearchClient.from_config()

        assert client.url == "https://api.example.com/order/read"
        assert client.timeout == 15
        assert client.page_size == 100
        assert client.session.headers["Authorization"] == "Basic abc"
        client.close()

"""
Order search API client.

Fetches one page of orders created inside a time window. Every failure mode is
logged and reported as an empty page; callers never see transport errors.
"""

import json
from typing import Any, Dict, List, Optional

import requests

from order_ingestion.config import Config
from order_ingestion.core.windows import TimeWindow
from order_ingestion.utils.logging_utils import log_error


class OrderSearchClient:
    """
    Thin wrapper around the `order/read` endpoint.

    Args:
        url: Endpoint URL
        auth_header: Value of the Authorization header
        page_size: itemsPerPage sent with every request
        statuses: Order status filter
        timeout: Per-request timeout in seconds
        session: Optional pre-built requests.Session
    """

    def __init__(
        self,
        url: str,
        auth_header: str,
        page_size: int = Config.PAGE_SIZE,
        statuses: Optional[List[int]] = None,
        timeout: int = 60,
        session: Optional[requests.Session] = None,
    ):
        self.url = url
        self.page_size = page_size
        self.statuses = list(statuses) if statuses is not None else list(Config.ORDER_STATUSES)
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update(
            {"Content-Type": "application/json", "Authorization": auth_header}
        )

    @classmethod
    def from_config(cls) -> "OrderSearchClient":
        return cls(
            url=Config.EMAG_API_URL,
            auth_header=Config.get_auth_header(),
            page_size=Config.PAGE_SIZE,
            statuses=Config.ORDER_STATUSES,
            timeout=Config.REQUEST_TIMEOUT_SECONDS,
        )

    def build_payload(self, window: TimeWindow, page: int) -> Dict[str, Any]:
        return {
            "currentPage": page,
            "itemsPerPage": self.page_size,
            "data": {
                "createdAfter": window.start.isoformat(),
                "createdBefore": window.end.isoformat(),
                "status": self.statuses,
            },
        }

    def fetch_page(self, window: TimeWindow, page: int) -> List[Dict[str, Any]]:
        """
        Fetch page `page` (1-based) of orders created in `window`.

        Returns:
            List of raw order payloads; empty on any upstream or transport error
        """
        section = f"Order API - {window} page {page}"
        payload = self.build_payload(window, page)

        try:
            response = self.session.post(self.url, json=payload, timeout=self.timeout)
            data = response.json()
        except requests.exceptions.RequestException as e:
            log_error(section, f"API request failed: {e}")
            return []
        except ValueError as e:
            log_error(section, f"Response is not valid JSON: {e}")
            return []

        if not isinstance(data, dict):
            log_error(section, f"Unexpected API response format: {type(data).__name__}")
            return []

        if data.get("isError"):
            log_error(section, f"API returned error: {json.dumps(data.get('messages') or [])}")
            return []

        results = data.get("results") or []
        if not isinstance(results, list):
            log_error(section, f"Unexpected results format: {type(results).__name__}")
            return []
        return results

    def close(self) -> None:
        self.session.close()

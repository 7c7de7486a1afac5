"""
AWS Lambda handler for the order ingestion batch.

Runs one full ingestion pass and reports the run counters as the response body.
"""

import json
from datetime import datetime, UTC
from typing import Any, Dict

from order_ingestion.config import Config
from order_ingestion.pipeline import run_ingestion
from order_ingestion.utils.logging_utils import log_error


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    Main Lambda handler for order ingestion.

    Args:
        event: Lambda event; optional keys 'start_date', 'max_depth',
            'abandon_policy' override the configured values
        context: Lambda context object

    Returns:
        Dict containing execution results and metrics
    """
    run_timestamp = datetime.now(UTC)
    event = event or {}

    try:
        start = None
        if event.get("start_date"):
            start = Config.get_start_datetime(event["start_date"])

        max_depth = event.get("max_depth")
        stats = run_ingestion(
            start=start,
            max_depth=int(max_depth) if max_depth is not None else None,
            abandon_policy=event.get("abandon_policy"),
        )

        return {
            "statusCode": 200,
            "body": json.dumps(
                {
                    "run_timestamp": run_timestamp.isoformat(),
                    "summary": stats.to_dict(),
                }
            ),
        }
    except Exception as e:
        log_error("Order Ingestion Handler", str(e))

        return {
            "statusCode": 500,
            "body": json.dumps(
                {"error": str(e), "run_timestamp": run_timestamp.isoformat()}
            ),
        }

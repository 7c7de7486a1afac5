"""
Configuration module for the order ingestion pipeline.

Reads environment variables and provides configuration values for the
upstream order search API, the PostgreSQL store, and the windowing settings.
"""

import base64
import json
import os
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv


def _load_dotenv_if_present(dotenv_path: str = ".env") -> None:
    """
    Load environment variables from a .env file when not running in AWS.

    Existing environment variables are never overwritten.

    Args:
        dotenv_path (str): Path to the .env file.
    """
    for aws_indicator in (
        "AWS_EXECUTION_ENV",
        "AWS_LAMBDA_FUNCTION_NAME",
        "ECS_CONTAINER_METADATA_URI",
    ):
        if os.getenv(aws_indicator):
            return
    if os.path.exists(dotenv_path):
        load_dotenv(dotenv_path=dotenv_path, override=False)


env_path = Path(__file__).parent.parent / ".env"
_load_dotenv_if_present(str(env_path))


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        # Surfaced by validate()
        return -1


class Config:
    """
    Configuration class that reads environment variables for the ingestion pipeline.
    """

    # Upstream order search API
    EMAG_API_URL: str = os.getenv("EMAG_API_URL", "")
    EMAG_USERNAME: str = os.getenv("EMAG_USERNAME", "")
    EMAG_PASSWORD: str = os.getenv("EMAG_PASSWORD", "")
    EMAG_SECRET_ARN: str = os.getenv("EMAG_SECRET_ARN", "")
    REQUEST_TIMEOUT_SECONDS: int = _int_env("REQUEST_TIMEOUT_SECONDS", 60)

    # Fixed by the upstream contract
    PAGE_SIZE: int = 100
    ORDER_STATUSES: List[int] = [1, 2, 3, 4]
    STUCK_PAGE_THRESHOLD: int = 3

    # RDS / PostgreSQL
    RDS_SECRET_ARN: str = os.getenv("RDS_SECRET_ARN", "")
    RDS_HOST: str = os.getenv("RDS_HOST", "")
    RDS_PORT: int = _int_env("RDS_PORT", 5432)
    RDS_DATABASE: str = os.getenv("RDS_DATABASE", "orders")
    RDS_USERNAME: str = os.getenv("RDS_USERNAME", "")
    RDS_PASSWORD: str = os.getenv("RDS_PASSWORD", "")
    DB_CONNECT_TIMEOUT: int = 10

    # Windowing
    INGESTION_START_DATE: str = os.getenv("INGESTION_START_DATE", "2024-12-10")
    INGESTION_TIMEZONE: str = os.getenv("INGESTION_TIMEZONE", "UTC")
    MAX_BISECT_DEPTH: int = _int_env("MAX_BISECT_DEPTH", 10)
    ABANDON_POLICY: str = os.getenv("ABANDON_POLICY", "LOG").upper()

    # Lazy-loaded secrets caches
    _emag_secret_cache: Dict[str, Any] = {}
    _rds_secret_cache: Dict[str, Any] = {}

    @classmethod
    def _get_secret(cls, secret_arn: str) -> Dict[str, Any]:
        import boto3

        secrets_client = boto3.client("secretsmanager")
        try:
            response = secrets_client.get_secret_value(SecretId=secret_arn)
            return json.loads(response["SecretString"])
        except Exception as e:
            raise ValueError(f"Failed to retrieve secret {secret_arn} from Secrets Manager: {e}")

    @classmethod
    def get_emag_credentials(cls) -> Dict[str, str]:
        """
        Resolve the upstream API credentials.

        Direct EMAG_USERNAME/EMAG_PASSWORD take precedence over EMAG_SECRET_ARN.

        Returns:
            Dict with 'username' and 'password'
        """
        if cls.EMAG_USERNAME and cls.EMAG_PASSWORD:
            return {"username": cls.EMAG_USERNAME, "password": cls.EMAG_PASSWORD}

        if not cls.EMAG_SECRET_ARN:
            raise ValueError(
                "EMAG_USERNAME and EMAG_PASSWORD, or EMAG_SECRET_ARN, are required"
            )

        if not cls._emag_secret_cache:
            cls._emag_secret_cache = cls._get_secret(cls.EMAG_SECRET_ARN)

        secret = cls._emag_secret_cache
        missing = [key for key in ("username", "password") if not secret.get(key)]
        if missing:
            raise ValueError(f"eMAG secret missing required keys: {', '.join(missing)}")
        return {"username": secret["username"], "password": secret["password"]}

    @classmethod
    def get_auth_header(cls) -> str:
        """
        Build the Basic authorization header value for the order search API.

        Returns:
            str: 'Basic <base64(username:password)>'
        """
        credentials = cls.get_emag_credentials()
        token = f"{credentials['username']}:{credentials['password']}"
        encoded = base64.b64encode(token.encode("utf-8")).decode("ascii")
        return f"Basic {encoded}"

    @classmethod
    def get_rds_connection_details(cls) -> Dict[str, Any]:
        """
        Provide database connection details.

        Uses RDS_SECRET_ARN when set, otherwise the RDS_* variables.

        Returns:
            Dict containing host, port, database, user, and password.
        """
        if not cls.RDS_SECRET_ARN:
            return {
                "host": cls.RDS_HOST,
                "port": cls.RDS_PORT,
                "database": cls.RDS_DATABASE,
                "user": cls.RDS_USERNAME,
                "password": cls.RDS_PASSWORD,
            }

        if not cls._rds_secret_cache:
            cls._rds_secret_cache = cls._get_secret(cls.RDS_SECRET_ARN)
        secret = cls._rds_secret_cache

        required_keys = ["host", "port", "username", "password"]
        missing_keys = [key for key in required_keys if key not in secret]
        if missing_keys:
            raise ValueError(
                f"RDS secret missing required keys: {', '.join(missing_keys)}"
            )

        database_name = secret.get("dbname") or secret.get("database")
        if not database_name:
            raise ValueError("RDS secret must include either 'dbname' or 'database'")

        return {
            "host": secret["host"],
            "port": int(secret["port"]),
            "database": database_name,
            "user": secret["username"],
            "password": secret["password"],
        }

    @classmethod
    def get_timezone(cls) -> ZoneInfo:
        """Zone used for the start epoch and for 'now'."""
        return ZoneInfo(cls.INGESTION_TIMEZONE)

    @classmethod
    def get_start_datetime(cls, value: Optional[str] = None) -> datetime:
        """
        Parse the ingestion epoch as an aware datetime.

        Args:
            value: Optional override in ISO format; defaults to INGESTION_START_DATE

        Returns:
            datetime: Start instant localized to INGESTION_TIMEZONE when naive
        """
        parsed = datetime.fromisoformat((value or cls.INGESTION_START_DATE).replace("Z", "+00:00"))
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=cls.get_timezone())
        return parsed

    @classmethod
    def validate(cls) -> None:
        """
        Validate that required configuration values are present.

        Raises:
            ValueError: If any required configuration is missing or invalid.
        """
        problems = []

        if not cls.EMAG_API_URL:
            problems.append("EMAG_API_URL")
        if not (cls.EMAG_USERNAME and cls.EMAG_PASSWORD) and not cls.EMAG_SECRET_ARN:
            problems.append("EMAG_USERNAME/EMAG_PASSWORD or EMAG_SECRET_ARN")
        if not cls.RDS_SECRET_ARN and not (
            cls.RDS_HOST and cls.RDS_USERNAME and cls.RDS_PASSWORD
        ):
            problems.append("RDS_SECRET_ARN or RDS_HOST/RDS_USERNAME/RDS_PASSWORD")

        if problems:
            raise ValueError(
                f"Missing required environment variables: {', '.join(problems)}"
            )

        if cls.ABANDON_POLICY not in ["LOG", "RAISE"]:
            raise ValueError("ABANDON_POLICY must be either 'LOG' or 'RAISE'")

        if cls.MAX_BISECT_DEPTH < 0:
            raise ValueError("MAX_BISECT_DEPTH must be a non-negative integer")

        if cls.REQUEST_TIMEOUT_SECONDS <= 0:
            raise ValueError("REQUEST_TIMEOUT_SECONDS must be a positive integer")

        try:
            cls.get_timezone()
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"Unknown INGESTION_TIMEZONE: {cls.INGESTION_TIMEZONE}")

        try:
            cls.get_start_datetime()
        except ValueError:
            raise ValueError(
                f"INGESTION_START_DATE is not an ISO date: {cls.INGESTION_START_DATE}"
            )

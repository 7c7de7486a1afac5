"""
PostgreSQL connection factory.
"""

import psycopg2

from order_ingestion.config import Config


def get_db_credentials():
    """
    Retrieve database credentials from the environment or Secrets Manager.

    Raises:
        Exception: If credentials cannot be retrieved
    """
    try:
        return Config.get_rds_connection_details()
    except Exception as e:
        raise Exception(f"Failed to retrieve database credentials: {e}")


def get_db_connection():
    """Open a database connection with a connect timeout"""
    db_config = get_db_credentials()
    db_config["connect_timeout"] = Config.DB_CONNECT_TIMEOUT
    return psycopg2.connect(**db_config)

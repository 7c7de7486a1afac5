"""
Order ingestion pipeline.

Pulls orders from the paginated order search API window by window, bisecting
windows whose pagination stalls, and upserts them into PostgreSQL.
"""

"""
PostgreSQL connection helper.
Provides get_db() for use by the Postgres store.
"""

import logging

import psycopg2
from psycopg2.extras import DictCursor


def get_db(database_url: str):
    """
    Returns a new psycopg2 connection with dictionary-based row access.

    Usage:
        conn = get_db(url)
        with conn:
            with conn.cursor() as cur:
                cur.execute(...)

    Args:
        database_url (str): libpq connection string or URL.

    Returns:
        psycopg2.extensions.connection: A connection object with DictCursor factory.

    Raises:
        psycopg2.Error: If connection fails.
    """
    try:
        conn = psycopg2.connect(database_url)

        # Rows come back as dictionaries (e.g., {"id": 1, "email": "..."})
        conn.cursor_factory = DictCursor
        return conn
    except Exception as e:
        logging.error(f"Error connecting to database: {e}")
        # Re-raise so the caller knows the connection failed
        raise

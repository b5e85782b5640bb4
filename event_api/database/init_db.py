"""
Create the database schema.

Run once against a fresh database:

    DATABASE_URL=postgresql://... python -m event_api.database.init_db

Statements are idempotent, so running it again is harmless.
"""

import logging
import os
import sys

from dotenv import load_dotenv

from event_api.database.db_connection import get_db

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS users (
    id SERIAL PRIMARY KEY,
    name VARCHAR(255) NOT NULL,
    email VARCHAR(255) NOT NULL UNIQUE,
    password_hash VARCHAR(255) NOT NULL,
    failed_attempts INTEGER NOT NULL DEFAULT 0 CHECK (failed_attempts >= 0),
    is_locked BOOLEAN NOT NULL DEFAULT FALSE,
    lock_until TIMESTAMPTZ,
    created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
);

CREATE TABLE IF NOT EXISTS events (
    id SERIAL PRIMARY KEY,
    title VARCHAR(255) NOT NULL,
    description VARCHAR(255),
    date TIMESTAMPTZ NOT NULL,
    created_by INTEGER NOT NULL REFERENCES users (id) ON DELETE CASCADE,
    created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
);

CREATE INDEX IF NOT EXISTS idx_events_created_by ON events (created_by);
"""


def init_db(database_url: str) -> None:
    """
    Apply SCHEMA_SQL in a single transaction.

    Args:
        database_url (str): Target database.
    """
    conn = get_db(database_url)
    try:
        with conn:
            with conn.cursor() as cur:
                cur.execute(SCHEMA_SQL)
    finally:
        conn.close()
    logging.info("Database schema is up to date.")


if __name__ == "__main__":
    load_dotenv()
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(asctime)s - %(message)s")

    url = os.getenv("DATABASE_URL")
    if not url:
        logging.error("DATABASE_URL is not set. Please set the environment variable.")
        sys.exit(1)

    init_db(url)

"""
PostgreSQL-backed store for users and events.

Each public method opens its own connection and runs in one transaction:
committed when the block finishes, rolled back if it raises. The schema
lives in init_db.py.
"""

import logging
from contextlib import contextmanager
from dataclasses import replace
from datetime import datetime
from typing import Iterator, List, Optional, Tuple

import psycopg2.errors

from event_api.auth_service.models import User
from event_api.database.db_connection import get_db
from event_api.errors import ConflictError, NotFoundError
from event_api.events_service.models import Event

USER_COLUMNS = "id, name, email, password_hash, failed_attempts, is_locked, lock_until, created_at"

EVENT_SELECT = """
    SELECT e.id, e.title, e.description, e.date, e.created_by,
           e.created_at, e.updated_at, u.name AS creator_name
    FROM events e
    JOIN users u ON u.id = e.created_by
"""


class PostgresStore:
    def __init__(self, database_url: str):
        if not database_url:
            raise RuntimeError("DATABASE_URL is not set. Please set the environment variable.")
        self.database_url = database_url

    @contextmanager
    def _cursor(self) -> Iterator:
        conn = get_db(self.database_url)
        try:
            # The connection context manager commits or rolls back
            with conn:
                with conn.cursor() as cur:
                    yield cur
        finally:
            conn.close()

    # --- USERS ---

    def add_user(self, name: str, email: str, password_hash: str) -> User:
        sql = f"""
            INSERT INTO users (name, email, password_hash)
            VALUES (%s, %s, %s)
            RETURNING {USER_COLUMNS};
        """
        try:
            with self._cursor() as cur:
                cur.execute(sql, (name, email, password_hash))
                row = cur.fetchone()
        except psycopg2.errors.UniqueViolation:
            raise ConflictError("user already exists")
        return User.from_row(row)

    def get_user(self, user_id: int) -> Optional[User]:
        with self._cursor() as cur:
            cur.execute(f"SELECT {USER_COLUMNS} FROM users WHERE id = %s;", (user_id,))
            row = cur.fetchone()
        return User.from_row(row) if row else None

    def find_user_by_email(self, email: str) -> Optional[User]:
        with self._cursor() as cur:
            cur.execute(f"SELECT {USER_COLUMNS} FROM users WHERE email = %s;", (email,))
            row = cur.fetchone()
        return User.from_row(row) if row else None

    def list_users(self) -> List[User]:
        with self._cursor() as cur:
            cur.execute(f"SELECT {USER_COLUMNS} FROM users ORDER BY id ASC;")
            rows = cur.fetchall()
        return [User.from_row(r) for r in rows]

    @contextmanager
    def user_for_update(self, email: str) -> Iterator[Optional[User]]:
        """
        Lock the user's row for the duration of the block.

        The yielded User may be mutated in place; its login counters are
        written back in the same transaction if they changed. Concurrent
        logins for the same account therefore serialize on the row lock.

        Yields:
            User or None if no user has this email.
        """
        with self._cursor() as cur:
            cur.execute(
                f"SELECT {USER_COLUMNS} FROM users WHERE email = %s FOR UPDATE;",
                (email,),
            )
            row = cur.fetchone()
            user = User.from_row(row) if row else None
            snapshot = replace(user) if user else None

            yield user

            if user is not None and user != snapshot:
                cur.execute(
                    """
                    UPDATE users
                       SET failed_attempts = %s,
                           is_locked = %s,
                           lock_until = %s
                     WHERE id = %s;
                    """,
                    (user.failed_attempts, user.is_locked, user.lock_until, user.id),
                )

    def delete_user(self, user_id: int) -> bool:
        # events.created_by is ON DELETE CASCADE
        with self._cursor() as cur:
            cur.execute("DELETE FROM users WHERE id = %s;", (user_id,))
            deleted = cur.rowcount > 0
        if deleted:
            logging.info(f"Deleted user {user_id} and their events")
        return deleted

    # --- EVENTS ---

    def page_events(self, offset: int, limit: int) -> Tuple[int, List[Event]]:
        with self._cursor() as cur:
            cur.execute("SELECT COUNT(*) AS total FROM events;")
            total = cur.fetchone()["total"]
            cur.execute(EVENT_SELECT + " ORDER BY e.id LIMIT %s OFFSET %s;", (limit, offset))
            rows = cur.fetchall()
        return total, [Event.from_row(r) for r in rows]

    def get_event(self, event_id: int) -> Optional[Event]:
        with self._cursor() as cur:
            cur.execute(EVENT_SELECT + " WHERE e.id = %s;", (event_id,))
            row = cur.fetchone()
        return Event.from_row(row) if row else None

    def add_event(
        self, title: str, description: Optional[str], date: datetime, created_by: int
    ) -> Event:
        sql = """
            WITH inserted AS (
                INSERT INTO events (title, description, date, created_by)
                VALUES (%s, %s, %s, %s)
                RETURNING *
            )
            SELECT i.id, i.title, i.description, i.date, i.created_by,
                   i.created_at, i.updated_at, u.name AS creator_name
            FROM inserted i
            JOIN users u ON u.id = i.created_by;
        """
        try:
            with self._cursor() as cur:
                cur.execute(sql, (title, description, date, created_by))
                row = cur.fetchone()
        except psycopg2.errors.ForeignKeyViolation:
            # The creator was removed between the existence check and the insert
            raise NotFoundError(f"User with id {created_by} not found")
        return Event.from_row(row)

    def save_event(self, event: Event) -> Event:
        sql = """
            WITH updated AS (
                UPDATE events
                   SET title = %s,
                       description = %s,
                       date = %s,
                       created_by = %s,
                       updated_at = NOW()
                 WHERE id = %s
                RETURNING *
            )
            SELECT d.id, d.title, d.description, d.date, d.created_by,
                   d.created_at, d.updated_at, u.name AS creator_name
            FROM updated d
            JOIN users u ON u.id = d.created_by;
        """
        try:
            with self._cursor() as cur:
                cur.execute(
                    sql,
                    (event.title, event.description, event.date, event.created_by, event.id),
                )
                row = cur.fetchone()
        except psycopg2.errors.ForeignKeyViolation:
            raise NotFoundError(f"User with id {event.created_by} not found")

        if not row:
            raise NotFoundError(f"Event {event.id} not found")
        return Event.from_row(row)

    def delete_event(self, event_id: int) -> bool:
        with self._cursor() as cur:
            cur.execute("DELETE FROM events WHERE id = %s;", (event_id,))
            return cur.rowcount > 0

"""
In-process store with the same interface as PostgresStore.

Used with STORE_BACKEND=memory for local runs without a database, and by
the test suite. All data is lost when the process exits. A single lock
makes every operation atomic, including the login read-modify-write.
"""

import itertools
import threading
from contextlib import contextmanager
from dataclasses import replace
from datetime import datetime, timezone
from typing import Callable, Dict, Iterator, List, Optional, Tuple

from event_api.auth_service.models import User
from event_api.errors import ConflictError, NotFoundError
from event_api.events_service.models import Event


class MemoryStore:
    def __init__(self, clock: Optional[Callable[[], datetime]] = None):
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._lock = threading.RLock()
        self._users: Dict[int, User] = {}
        self._events: Dict[int, Event] = {}
        self._user_ids = itertools.count(1)
        self._event_ids = itertools.count(1)

    # --- USERS ---

    def add_user(self, name: str, email: str, password_hash: str) -> User:
        with self._lock:
            if any(u.email == email for u in self._users.values()):
                raise ConflictError("user already exists")
            user = User(
                id=next(self._user_ids),
                name=name,
                email=email,
                password_hash=password_hash,
                created_at=self._clock(),
            )
            self._users[user.id] = user
            return replace(user)

    def get_user(self, user_id: int) -> Optional[User]:
        with self._lock:
            user = self._users.get(user_id)
            return replace(user) if user else None

    def find_user_by_email(self, email: str) -> Optional[User]:
        with self._lock:
            for user in self._users.values():
                if user.email == email:
                    return replace(user)
            return None

    def list_users(self) -> List[User]:
        with self._lock:
            return [replace(self._users[k]) for k in sorted(self._users)]

    @contextmanager
    def user_for_update(self, email: str) -> Iterator[Optional[User]]:
        with self._lock:
            stored = next((u for u in self._users.values() if u.email == email), None)
            user = replace(stored) if stored else None

            yield user

            if user is not None and user != stored:
                self._users[user.id] = replace(user)

    def delete_user(self, user_id: int) -> bool:
        with self._lock:
            if self._users.pop(user_id, None) is None:
                return False
            # Cascade to the user's events
            for event_id in [k for k, e in self._events.items() if e.created_by == user_id]:
                del self._events[event_id]
            return True

    # --- EVENTS ---

    def _with_creator(self, event: Event) -> Event:
        return replace(event, creator_name=self._users[event.created_by].name)

    def page_events(self, offset: int, limit: int) -> Tuple[int, List[Event]]:
        with self._lock:
            ids = sorted(self._events)
            page = ids[offset:offset + limit]
            return len(ids), [self._with_creator(self._events[k]) for k in page]

    def get_event(self, event_id: int) -> Optional[Event]:
        with self._lock:
            event = self._events.get(event_id)
            return self._with_creator(event) if event else None

    def add_event(
        self, title: str, description: Optional[str], date: datetime, created_by: int
    ) -> Event:
        with self._lock:
            if created_by not in self._users:
                raise NotFoundError(f"User with id {created_by} not found")
            now = self._clock()
            event = Event(
                id=next(self._event_ids),
                title=title,
                description=description,
                date=date,
                created_by=created_by,
                created_at=now,
                updated_at=now,
            )
            self._events[event.id] = event
            return self._with_creator(event)

    def save_event(self, event: Event) -> Event:
        with self._lock:
            if event.id not in self._events:
                raise NotFoundError(f"Event {event.id} not found")
            if event.created_by not in self._users:
                raise NotFoundError(f"User with id {event.created_by} not found")
            saved = replace(event, creator_name=None, updated_at=self._clock())
            self._events[event.id] = saved
            return self._with_creator(saved)

    def delete_event(self, event_id: int) -> bool:
        with self._lock:
            return self._events.pop(event_id, None) is not None

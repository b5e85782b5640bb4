"""
Event service: paginated listing, lookup, create, partial update, delete.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from event_api.errors import InvalidDateError, NotFoundError, ValidationError
from event_api.events_service.models import Event

# Postgres INTEGER (ids) and BIGINT (LIMIT/OFFSET) ceilings
MAX_ID = 2**31 - 1
MAX_OFFSET = 2**63 - 1
MAX_LIMIT = 1000


def parse_dt(val: Any) -> Optional[datetime]:
    """
    Safely parse an ISO-8601 string to an aware datetime.

    Values without an offset are taken as UTC.

    Args:
        val (str): The date string to parse.

    Returns:
        datetime: The parsed datetime, or None if invalid.
    """
    if not isinstance(val, str) or not val:
        return None
    try:
        # Handles 'YYYY-MM-DD', 'YYYY-MM-DDTHH:MM:SS.sss' and '...Z' or '...+00:00'
        if val.endswith("Z"):
            val = val[:-1] + "+00:00"
        dt = datetime.fromisoformat(val)
    except (ValueError, TypeError):
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def parse_int(val: Any) -> Optional[int]:
    """Return val as an int, or None if it is not an integer."""
    if isinstance(val, bool) or (isinstance(val, float) and not val.is_integer()):
        return None
    try:
        return int(val)
    except (ValueError, TypeError, OverflowError):
        return None


def parse_id(val: Any) -> Optional[int]:
    """Return val as a row id, or None if it is not an integer the id columns can hold."""
    number = parse_int(val)
    if number is None or not 1 <= number <= MAX_ID:
        return None
    return number


def _check_text(data: Dict[str, Any], *fields: str) -> None:
    for field in fields:
        value = data.get(field)
        if value is not None and not isinstance(value, str):
            raise ValidationError(f"Field '{field}' must be a string")


def _supplied(value: Any) -> bool:
    # Partial updates treat falsy values ("", 0, None) as "not supplied", so
    # an empty title or a createdBy of 0 cannot be set through update().
    return bool(value)


class EventService:
    def __init__(self, store):
        self.store = store

    def list_events(self, page: Any = 1, limit: Any = 10) -> Dict[str, Any]:
        """
        Return one page of events ordered by id.

        Raises:
            ValidationError: page or limit is not a positive integer, limit is
                above MAX_LIMIT, or the page starts beyond the largest offset.
        """
        page_number = parse_int(page)
        limit_number = parse_int(limit)
        if page_number is None or limit_number is None or page_number < 1 or limit_number < 1:
            raise ValidationError("page and limit must be positive integers.")
        if limit_number > MAX_LIMIT:
            raise ValidationError(f"limit must not exceed {MAX_LIMIT}.")

        offset = (page_number - 1) * limit_number
        if offset > MAX_OFFSET:
            raise ValidationError("page is out of range.")
        total, events = self.store.page_events(offset, limit_number)

        return {
            "total": total,
            "page": page_number,
            "limit": limit_number,
            "data": [e.to_dict() for e in events],
        }

    def get_event(self, event_id: Any) -> Event:
        eid = parse_id(event_id)
        event = self.store.get_event(eid) if eid is not None else None
        if event is None:
            raise NotFoundError(f"Event No. {event_id} not found")
        return event

    def create_event(self, data: Dict[str, Any]) -> Event:
        """
        Create an event owned by data["createdBy"].

        Raises:
            ValidationError: title, date or createdBy missing, or title /
                description not a string.
            InvalidDateError: date is not a valid ISO-8601 instant.
            NotFoundError: createdBy is not an existing user.
        """
        title = data.get("title")
        date = data.get("date")
        created_by = data.get("createdBy")

        if not title or not date or not created_by:
            raise ValidationError("Fields 'title', 'date', 'createdBy' required")
        _check_text(data, "title", "description")

        event_date = parse_dt(date)
        if event_date is None:
            raise InvalidDateError()

        if parse_int(created_by) is None:
            raise ValidationError("Field 'createdBy' must be an integer")
        creator_id = parse_id(created_by)
        if creator_id is None or self.store.get_user(creator_id) is None:
            raise NotFoundError(f"User with id {created_by} not found")

        event = self.store.add_event(title, data.get("description"), event_date, creator_id)
        logging.info(f"[Events] Created event {event.id} for user {creator_id}")
        return event

    def update_event(self, event_id: Any, data: Dict[str, Any]) -> Event:
        """
        Apply the supplied fields to an existing event.

        Raises:
            NotFoundError: No such event, or a supplied createdBy does not exist.
            InvalidDateError: A supplied date does not parse.
            ValidationError: A supplied title or description is not a string.
        """
        _check_text(data, "title", "description")

        event_date = None
        if _supplied(data.get("date")):
            event_date = parse_dt(data["date"])
            if event_date is None:
                raise InvalidDateError()

        eid = parse_id(event_id)
        event = self.store.get_event(eid) if eid is not None else None
        if event is None:
            raise NotFoundError(f"Event {event_id} not found")

        if _supplied(data.get("title")):
            event.title = data["title"]
        if _supplied(data.get("description")):
            event.description = data["description"]
        if event_date is not None:
            event.date = event_date
        if _supplied(data.get("createdBy")):
            creator_id = parse_id(data["createdBy"])
            if creator_id is None or self.store.get_user(creator_id) is None:
                raise NotFoundError(f"User with id {data['createdBy']} not found")
            event.created_by = creator_id

        updated = self.store.save_event(event)
        logging.info(f"[Events] Updated event {updated.id}")
        return updated

    def delete_event(self, event_id: Any) -> None:
        eid = parse_id(event_id)
        if eid is None or not self.store.delete_event(eid):
            raise NotFoundError(f"Event No. {event_id} not found")
        logging.info(f"[Events] Deleted event {eid}")

"""Helpers shared by the record types - ids, timestamps and document conversion."""

import uuid
from datetime import date, datetime, timezone


def new_id() -> str:
    return uuid.uuid4().hex


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def to_iso(value: datetime | date | None) -> str | None:
    """Serialize a date or datetime for storage."""
    if value is None:
        return None
    return value.isoformat()


def parse_datetime(value) -> datetime | None:
    """
    Parse a stored timestamp.

    Accepts ISO strings (a trailing ``Z`` included), datetimes and epoch
    milliseconds. Naive values are treated as UTC.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        dt = datetime(value.year, value.month, value.day)
    elif isinstance(value, (int, float)):
        return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    else:
        text = str(value)
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        dt = datetime.fromisoformat(text)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def parse_date(value) -> date | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value).split("T")[0])


def str_list(value) -> list[str]:
    """Coerce an optional list field to a list of strings."""
    if not value:
        return []
    return [str(v) for v in value]

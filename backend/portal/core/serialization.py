"""Serialization Helpers — stringified identifiers and wire formats for dates/times.

Invariants:
    - Every numeric identifier leaves the API as a decimal string (or null)
    - Times are HH:MM:SS, dates are ISO YYYY-MM-DD, datetimes are ISO 8601 with offset
"""

from datetime import date, datetime, time, timezone


def serialize_id(value: int | None) -> str | None:
    return None if value is None else str(value)


def serialize_time(value: time | None) -> str | None:
    return None if value is None else value.strftime("%H:%M:%S")


def serialize_date(value: date | None) -> str | None:
    return None if value is None else value.isoformat()


def serialize_datetime(value: datetime | None) -> str | None:
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()


def parse_time(value: str) -> time:
    """Parse HH:MM or HH:MM:SS."""
    for fmt in ("%H:%M:%S", "%H:%M"):
        try:
            return datetime.strptime(value.strip(), fmt).time()
        except ValueError:
            continue
    raise ValueError(f"Invalid time '{value}', expected HH:MM or HH:MM:SS")

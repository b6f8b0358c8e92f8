"""Timestamp conversion between stored and in-memory representations.

Documents store instants as UTC ISO-8601 strings with millisecond
precision, so string order equals chronological order inside the store.
Naive datetimes are interpreted as local time.
"""

from datetime import date, datetime, timezone


def utc_now() -> datetime:
    """Current instant as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def as_aware(value: datetime) -> datetime:
    """Attach the local timezone to naive datetimes."""
    if value.tzinfo is None:
        return value.astimezone()
    return value


def to_iso(value: datetime) -> str:
    """Serialize an instant for storage."""
    return as_aware(value).astimezone(timezone.utc).isoformat(timespec="milliseconds")


def parse_iso(value: str) -> datetime:
    """Parse a stored timestamp into an aware datetime.

    Raises ValueError for anything that is not an ISO string, such as a
    null left by a write that never resolved its timestamp.
    """
    if not isinstance(value, str):
        raise ValueError(f"Expected an ISO timestamp string, got {value!r}")
    # Older Python versions reject the trailing "Z" designator
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return as_aware(datetime.fromisoformat(value))


def optional_iso(value: datetime | None) -> str | None:
    return to_iso(value) if value else None


def optional_datetime(value: str | None) -> datetime | None:
    return parse_iso(value) if value else None


def local_day(value: datetime) -> date:
    """Calendar day of an instant in local time."""
    return as_aware(value).astimezone().date()

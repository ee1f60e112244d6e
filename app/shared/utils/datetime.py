"""UTC timestamps for rows written upstream.

created_at, updated_at and proposed_date are stored as timezone-aware
ISO-8601 strings in UTC.
"""

from datetime import UTC, datetime


def utc_now() -> datetime:
    return datetime.now(UTC)


def ensure_utc(dt: datetime | None) -> datetime | None:
    """Naive values are taken as UTC; aware values are converted to UTC."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def utc_now_iso() -> str:
    return utc_now().isoformat()


def to_iso_utc(dt: datetime) -> str:
    """Serialize a datetime for the data API; naive values are taken as UTC."""
    if not isinstance(dt, datetime):
        raise TypeError(f"Expected a datetime, got {type(dt).__name__}")
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC).isoformat()

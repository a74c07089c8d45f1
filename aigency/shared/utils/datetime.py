"""
UTC datetime helpers.

Task timestamps are stored timezone-aware in UTC. Legacy task documents
sometimes carry ISO strings instead of Firestore timestamps, so reads go
through coerce_utc().
"""

from datetime import UTC, datetime


def utc_now() -> datetime:
    """Return the current time as a timezone-aware UTC datetime."""
    return datetime.now(UTC)


def coerce_utc(value: datetime | str | None) -> datetime | None:
    """
    Normalize a stored timestamp to an aware UTC datetime.

    Accepts datetimes (naive ones are assumed UTC) and ISO 8601 strings
    such as "2024-05-01T10:00:00.000Z". Anything unparseable returns None.

    Args:
        value: Stored value as read from a document

    Returns:
        UTC-aware datetime or None
    """
    if value is None:
        return None
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)

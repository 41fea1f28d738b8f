"""Datetime normalisation helpers."""

from datetime import UTC, datetime


def ensure_utc(value: datetime) -> datetime:
    """Return ``value`` as an aware UTC datetime.

    Some backends (SQLite) hand timezone-aware columns back without tzinfo;
    those values were written as UTC, so a naive datetime is read as UTC.

    Args:
        value: Datetime, naive or aware

    Returns:
        datetime: Aware datetime in UTC
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def to_minor_units(amount) -> int:
    """Convert a decimal price to the smallest currency unit (grosz, cents)."""
    return int(round(float(amount) * 100))

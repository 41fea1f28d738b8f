"""Shared test constants."""

from datetime import UTC, datetime

# Clock starts the day before the reference booking window.
CLOCK_START = datetime(2025, 1, 9, 12, 0, tzinfo=UTC)
BOOKING_START = datetime(2025, 1, 10, 10, 0, tzinfo=UTC)
BOOKING_END = datetime(2025, 1, 10, 12, 0, tzinfo=UTC)

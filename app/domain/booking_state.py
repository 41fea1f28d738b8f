"""Booking state machine.

States:
- PENDING: Requested by a client, waiting for the provider
- ACCEPTED: Provider agreed; service not finished yet
- REJECTED: Provider declined (terminal)
- CANCELLED: Client withdrew before acceptance (terminal)
- AWAITING_PAYMENT: Service window ended, client owes the price
- OVERDUE: Still unpaid after the grace period
- PAID: Settled through the payment gateway (terminal)

Time-driven edges (ACCEPTED -> AWAITING_PAYMENT -> OVERDUE) are not run by a
scheduler. Readers call :func:`compute_refreshed_status` and persist the result
when it differs from the stored value.
"""

from datetime import datetime, timedelta
from enum import Enum

from app.core.exceptions import InvalidTransition
from app.utils.datetime_utils import ensure_utc


class BookingStatus(str, Enum):
    """Booking lifecycle statuses."""

    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"
    CANCELLED = "CANCELLED"
    AWAITING_PAYMENT = "AWAITING_PAYMENT"
    OVERDUE = "OVERDUE"
    PAID = "PAID"


BOOKING_TRANSITIONS: dict[BookingStatus, set[BookingStatus]] = {
    BookingStatus.PENDING: {
        BookingStatus.ACCEPTED,
        BookingStatus.REJECTED,
        BookingStatus.CANCELLED,
    },
    BookingStatus.ACCEPTED: {BookingStatus.AWAITING_PAYMENT},
    BookingStatus.AWAITING_PAYMENT: {BookingStatus.OVERDUE, BookingStatus.PAID},
    BookingStatus.OVERDUE: {BookingStatus.PAID},
    BookingStatus.REJECTED: set(),
    BookingStatus.CANCELLED: set(),
    BookingStatus.PAID: set(),
}

TERMINAL_STATUSES = frozenset(
    {BookingStatus.REJECTED, BookingStatus.CANCELLED, BookingStatus.PAID}
)
PAYABLE_STATUSES = frozenset({BookingStatus.AWAITING_PAYMENT, BookingStatus.OVERDUE})

PAYMENT_GRACE_PERIOD = timedelta(hours=48)


def can_transition(current: str, target: str) -> bool:
    """Whether ``current -> target`` is an edge of the booking graph."""
    return BookingStatus(target) in BOOKING_TRANSITIONS.get(BookingStatus(current), set())


def assert_booking_transition(current: str, target: str) -> None:
    """Validate a booking status transition.

    Args:
        current: Current booking status
        target: Requested booking status

    Raises:
        InvalidTransition: If the edge does not exist. Carries ``current``.
    """
    if not can_transition(current, target):
        raise InvalidTransition(
            current_status=BookingStatus(current).value,
            detail=f"Invalid booking transition: {BookingStatus(current).value} → {BookingStatus(target).value}",
        )


def compute_refreshed_status(
    status: str,
    end_date_time: datetime,
    now: datetime,
    grace_period: timedelta = PAYMENT_GRACE_PERIOD,
) -> BookingStatus:
    """Return the status a booking should have at ``now``.

    Advances at most one edge per call. Both boundaries are strict: at exactly
    ``end_date_time`` a booking stays ACCEPTED, and at exactly
    ``end_date_time + grace_period`` it stays AWAITING_PAYMENT.

    Args:
        status: Stored status
        end_date_time: End of the booked service window
        now: Current instant
        grace_period: Time after the end before an unpaid booking is OVERDUE

    Returns:
        BookingStatus: Refreshed status (may equal ``status``)
    """
    current = BookingStatus(status)
    end = ensure_utc(end_date_time)
    now = ensure_utc(now)

    if current is BookingStatus.ACCEPTED and now > end:
        return BookingStatus.AWAITING_PAYMENT
    if current is BookingStatus.AWAITING_PAYMENT and now > end + grace_period:
        return BookingStatus.OVERDUE
    return current


def pending_time_transition(
    status: str,
    end_date_time: datetime,
    now: datetime,
    grace_period: timedelta = PAYMENT_GRACE_PERIOD,
) -> BookingStatus | None:
    """Return the status to write if a time-driven edge is due, else None."""
    refreshed = compute_refreshed_status(status, end_date_time, now, grace_period)
    if refreshed == BookingStatus(status):
        return None
    return refreshed

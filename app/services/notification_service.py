"""Booking inbox for clients and providers.

The inbox doubles as the lifecycle's scheduler: every booking it returns is
first run through the time-driven rules, and any advance is persisted before
the booking is handed back.
"""

import logging
from datetime import datetime, timedelta
from typing import Literal

from sqlalchemy import ColumnElement, and_, or_
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.exceptions import AuthorizationError
from app.core.permissions import Capabilities
from app.domain.booking_state import BookingStatus
from app.models.booking import Booking
from app.repositories.booking_repository import BookingRepository
from app.services.booking_service import refresh_booking
from app.services.user_service import touch_last_active

logger = logging.getLogger(__name__)

# Must stay visible regardless of age so lazy transitions and payment can happen.
ALWAYS_VISIBLE = (
    BookingStatus.PENDING,
    BookingStatus.ACCEPTED,
    BookingStatus.AWAITING_PAYMENT,
)
CLOSED = (BookingStatus.CANCELLED, BookingStatus.REJECTED)
SETTLED = (BookingStatus.OVERDUE, BookingStatus.PAID)


def _values(statuses: tuple[BookingStatus, ...]) -> list[str]:
    return [s.value for s in statuses]


def inbox_window(now: datetime) -> ColumnElement[bool]:
    """Selection window applied at query time; nothing about it is stored."""
    closed_since = now - timedelta(days=settings.closed_booking_window_days)
    settled_since = now - timedelta(days=settings.settled_booking_window_days)
    return or_(
        Booking.status.in_(_values(ALWAYS_VISIBLE)),
        and_(Booking.status.in_(_values(CLOSED)), Booking.updated_at >= closed_since),
        and_(Booking.status.in_(_values(SETTLED)), Booking.updated_at >= settled_since),
    )


class NotificationService:
    """Inbox queries with read-triggered status refresh."""

    async def list_for_client(
        self, db: AsyncSession, caps: Capabilities, now: datetime
    ) -> list[Booking]:
        """Bookings the user made as a client."""
        if not caps.client_ids:
            return []
        return await self._list(db, caps, "client", now)

    async def list_for_provider(
        self, db: AsyncSession, caps: Capabilities, now: datetime
    ) -> list[Booking]:
        """Bookings addressed to any of the user's providers, active or not."""
        if not caps.provider_ids:
            raise AuthorizationError("User is not a service provider")
        return await self._list(db, caps, "provider", now)

    async def _list(
        self,
        db: AsyncSession,
        caps: Capabilities,
        view: Literal["client", "provider"],
        now: datetime,
    ) -> list[Booking]:
        repo = BookingRepository(db)
        if view == "client":
            party = Booking.client_id.in_(caps.client_ids)
        else:
            party = Booking.provider_id.in_(caps.provider_ids)

        bookings = await repo.scan(party, inbox_window(now))

        # One session cannot run statements concurrently; bookings are
        # independent, so order here carries no meaning.
        for booking in bookings:
            await refresh_booking(repo, booking, now)

        await touch_last_active(db, caps.user_id, now)
        logger.debug("Inbox for user %s (%s): %d bookings", caps.user_id, view, len(bookings))
        return bookings


notification_service = NotificationService()

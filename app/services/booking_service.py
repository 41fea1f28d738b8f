"""Booking lifecycle service.

Creation and the actor-initiated transitions (accept, reject, cancel), plus
the lazy time-driven refresh that every reader applies before returning a
booking.
"""

import logging
from datetime import datetime, timedelta

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.config import settings
from app.core.exceptions import (
    AdvertisementNotAvailable,
    InvalidPetSelection,
    InvalidTransition,
    NotFoundError,
    ProviderInactive,
    SelfBookingForbidden,
    ValidationError,
)
from app.core.permissions import BookingAction, Capabilities, authorize_booking_action
from app.domain.booking_state import (
    BookingStatus,
    assert_booking_transition,
    pending_time_transition,
)
from app.models.advertisement import Advertisement, AdvertisementStatus
from app.models.booking import Booking
from app.models.pet import Pet
from app.repositories.booking_repository import BookingRepository
from app.schemas.booking import BookingCreate
from app.services.user_service import ensure_client, touch_last_active
from app.utils.datetime_utils import ensure_utc

logger = logging.getLogger(__name__)


def payment_grace_period() -> timedelta:
    return timedelta(hours=settings.payment_grace_hours)


async def refresh_booking(repo: BookingRepository, booking: Booking, now: datetime) -> Booking:
    """Persist a due time-driven transition, if any, and return the booking.

    A lost race (another writer moved the row first) leaves the booking as the
    other writer left it; the stored status is re-read in that case.
    """
    target = pending_time_transition(
        booking.status, booking.end_date_time, now, payment_grace_period()
    )
    if target is None:
        return booking

    previous = booking.status
    if await repo.update_status(booking, {BookingStatus(previous)}, target, now):
        logger.info("Booking %s advanced %s -> %s", booking.id, previous, target.value)
    else:
        await repo.reload_status(booking)
    return booking


# Actor transitions: action -> (target status, verb used in messages)
_USER_TRANSITIONS: dict[BookingAction, tuple[BookingStatus, str]] = {
    BookingAction.ACCEPT: (BookingStatus.ACCEPTED, "accept"),
    BookingAction.REJECT: (BookingStatus.REJECTED, "reject"),
    BookingAction.CANCEL: (BookingStatus.CANCELLED, "cancel"),
}


class BookingService:
    """Service for booking creation and actor-initiated transitions."""

    async def create_booking(
        self,
        db: AsyncSession,
        caps: Capabilities,
        data: BookingCreate,
        now: datetime,
    ) -> Booking:
        """Create a PENDING booking for the acting client.

        Every precondition is checked before any row is written; the booking
        and its pet links are flushed in the caller's transaction.

        Args:
            db: Database session
            caps: Acting user's capabilities
            data: Booking request
            now: Current instant

        Returns:
            Booking: New booking with ``pets`` populated
        """
        pet_ids = list(dict.fromkeys(data.pet_ids))
        if not pet_ids:
            raise ValidationError("At least one pet is required")

        start = ensure_utc(data.start_date_time)
        end = ensure_utc(data.end_date_time)
        if start >= end:
            raise ValidationError("Invalid start or end date/time")

        result = await db.execute(
            select(Advertisement)
            .options(selectinload(Advertisement.provider))
            .where(Advertisement.id == data.advertisement_id)
        )
        advertisement = result.scalar_one_or_none()
        if not advertisement:
            raise NotFoundError("Advertisement", str(data.advertisement_id))

        if advertisement.status != AdvertisementStatus.ACTIVE.value:
            raise AdvertisementNotAvailable()

        if not advertisement.provider.is_active:
            raise ProviderInactive()

        if advertisement.provider_id in caps.provider_ids:
            raise SelfBookingForbidden()

        client_id, caps = await ensure_client(db, caps)

        pets_result = await db.execute(select(Pet).where(Pet.id.in_(pet_ids)))
        pets = list(pets_result.scalars().all())
        if len(pets) != len(pet_ids) or any(pet.client_id != client_id for pet in pets):
            raise InvalidPetSelection()

        booking = Booking(
            client_id=client_id,
            provider_id=advertisement.provider_id,
            advertisement_id=advertisement.id,
            start_date_time=start,
            end_date_time=end,
            status=BookingStatus.PENDING.value,
            price=advertisement.price,
            message=data.message,
            created_at=now,
            updated_at=now,
        )
        await BookingRepository(db).add(booking, pets)
        await touch_last_active(db, caps.user_id, now)

        logger.info(
            "Booking %s created by client %s for provider %s (%d pets)",
            booking.id,
            client_id,
            booking.provider_id,
            len(pets),
        )
        return booking

    async def accept_booking(
        self, db: AsyncSession, caps: Capabilities, booking_id: int, now: datetime
    ) -> Booking:
        """Provider accepts a pending booking."""
        return await self._apply_user_transition(db, caps, booking_id, BookingAction.ACCEPT, now)

    async def reject_booking(
        self, db: AsyncSession, caps: Capabilities, booking_id: int, now: datetime
    ) -> Booking:
        """Provider rejects a pending booking."""
        return await self._apply_user_transition(db, caps, booking_id, BookingAction.REJECT, now)

    async def cancel_booking(
        self, db: AsyncSession, caps: Capabilities, booking_id: int, now: datetime
    ) -> Booking:
        """Client cancels their own pending booking."""
        return await self._apply_user_transition(db, caps, booking_id, BookingAction.CANCEL, now)

    async def _apply_user_transition(
        self,
        db: AsyncSession,
        caps: Capabilities,
        booking_id: int,
        action: BookingAction,
        now: datetime,
    ) -> Booking:
        target, verb = _USER_TRANSITIONS[action]
        repo = BookingRepository(db)

        booking = await repo.get(booking_id)
        if not booking:
            raise NotFoundError("Booking", str(booking_id))

        authorize_booking_action(caps, booking, action)

        booking = await refresh_booking(repo, booking, now)
        if booking.status != BookingStatus.PENDING.value:
            raise InvalidTransition(
                current_status=booking.status,
                detail=f"Can only {verb} pending bookings",
            )
        assert_booking_transition(booking.status, target.value)

        if not await repo.update_status(booking, {BookingStatus.PENDING}, target, now):
            current = await repo.reload_status(booking)
            raise InvalidTransition(
                current_status=current,
                detail=f"Booking changed while trying to {verb} it",
            )

        await touch_last_active(db, caps.user_id, now)
        logger.info("Booking %s %s by user %s", booking.id, target.value, caps.user_id)
        return booking


booking_service = BookingService()

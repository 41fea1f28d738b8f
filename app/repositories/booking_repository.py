"""Booking persistence.

Every status write goes through :meth:`BookingRepository.update_status`, a
single conditional UPDATE scoped to one booking id. The expected-status
predicate makes concurrent writers fail loudly instead of overwriting.
"""

import logging
from collections.abc import Iterable
from datetime import datetime

from sqlalchemy import ColumnElement, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from sqlalchemy.orm.attributes import set_committed_value

from app.domain.booking_state import BookingStatus, assert_booking_transition
from app.models.booking import Booking
from app.models.pet import Pet
from app.models.user import Client, ServiceProvider

logger = logging.getLogger(__name__)


def _listing_options():
    return (
        selectinload(Booking.pets).selectinload(Pet.species),
        selectinload(Booking.pets).selectinload(Pet.images),
        selectinload(Booking.client).selectinload(Client.user),
        selectinload(Booking.provider).selectinload(ServiceProvider.user),
    )


class BookingRepository:
    """Reads and conditional writes for booking rows."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, booking_id: int) -> Booking | None:
        result = await self.db.execute(select(Booking).where(Booking.id == booking_id))
        return result.scalar_one_or_none()

    async def get_status(self, booking_id: int) -> str | None:
        """Read the stored status straight from the database."""
        result = await self.db.execute(select(Booking.status).where(Booking.id == booking_id))
        return result.scalar_one_or_none()

    async def reload_status(self, booking: Booking) -> str:
        """Re-read the stored status into ``booking`` without marking it dirty."""
        current = await self.get_status(booking.id)
        if current is not None:
            set_committed_value(booking, "status", current)
        return booking.status

    async def add(self, booking: Booking, pets: list[Pet]) -> Booking:
        """Stage a new booking and its pet links in the current transaction."""
        booking.pets = pets
        self.db.add(booking)
        await self.db.flush()
        return booking

    async def update_status(
        self,
        booking: Booking,
        expected: Iterable[BookingStatus],
        new_status: BookingStatus,
        now: datetime,
    ) -> bool:
        """Compare-and-swap the status of one booking.

        Args:
            booking: Loaded booking; its in-memory state is synced on success
            expected: Statuses the row must still be in
            new_status: Status to write
            now: Value for ``updated_at``

        Returns:
            bool: False if no row matched (status changed underneath us)

        Raises:
            InvalidTransition: If ``new_status`` is not reachable from every
                expected status
        """
        expected_values = [BookingStatus(s).value for s in expected]
        for value in expected_values:
            assert_booking_transition(value, new_status.value)

        result = await self.db.execute(
            update(Booking)
            .where(Booking.id == booking.id, Booking.status.in_(expected_values))
            .values(status=new_status.value, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            logger.info(
                "Booking %s not in %s; %s write skipped",
                booking.id,
                expected_values,
                new_status.value,
            )
            return False

        set_committed_value(booking, "status", new_status.value)
        set_committed_value(booking, "updated_at", now)
        return True

    async def scan(self, *criteria: ColumnElement[bool]) -> list[Booking]:
        """Load bookings matching ``criteria`` with pets and both parties, newest first."""
        result = await self.db.execute(
            select(Booking)
            .where(*criteria)
            .options(*_listing_options())
            .order_by(Booking.id.desc())
        )
        return list(result.scalars().unique().all())

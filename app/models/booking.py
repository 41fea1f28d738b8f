"""Booking-related database models."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from app.database import Base
from app.domain.booking_state import BookingStatus

if TYPE_CHECKING:
    from app.models.advertisement import Advertisement
    from app.models.pet import Pet
    from app.models.review import Report, Review
    from app.models.user import Client, ServiceProvider


class BookingPet(Base):
    """Join between a booking and the pets it covers. Fixed at creation."""

    __tablename__ = "booking_pets"

    booking_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("bookings.id", ondelete="CASCADE"), primary_key=True
    )
    pet_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("pets.id", ondelete="CASCADE"), primary_key=True
    )


class Booking(Base):
    """Booking model."""

    __tablename__ = "bookings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Parties (immutable)
    client_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("clients.id", ondelete="CASCADE"), nullable=False, index=True
    )
    provider_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("service_providers.id", ondelete="CASCADE"), nullable=False, index=True
    )
    advertisement_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("advertisements.id", ondelete="SET NULL"), index=True
    )

    # Schedule (immutable, end > start)
    start_date_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    end_date_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    # Status
    status: Mapped[str] = mapped_column(
        String(20), default=BookingStatus.PENDING.value, nullable=False, index=True
    )

    # Price snapshot from the advertisement
    price: Mapped[Decimal | None] = mapped_column(Numeric(10, 2))

    message: Mapped[str | None] = mapped_column(Text)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, index=True
    )

    # Relationships
    client: Mapped["Client"] = relationship("Client")
    provider: Mapped["ServiceProvider"] = relationship("ServiceProvider")
    advertisement: Mapped["Advertisement | None"] = relationship("Advertisement")
    pets: Mapped[list["Pet"]] = relationship("Pet", secondary="booking_pets")
    review: Mapped["Review | None"] = relationship("Review", back_populates="booking", uselist=False)
    report: Mapped["Report | None"] = relationship("Report", back_populates="booking", uselist=False)

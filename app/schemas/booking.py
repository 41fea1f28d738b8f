"""Booking-related Pydantic schemas."""

from datetime import datetime
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from app.models.booking import Booking
from app.models.pet import Pet
from app.models.user import User


class CamelModel(BaseModel):
    """Accepts and emits camelCase field names."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class BookingCreate(CamelModel):
    """Schema for creating a booking."""

    pet_ids: list[int] = Field(default_factory=list)
    advertisement_id: int
    start_date_time: datetime
    end_date_time: datetime
    message: str | None = Field(None, max_length=1000)


class BookingActionRequest(CamelModel):
    """Accept, reject or cancel a booking."""

    booking_id: int


class BookingSummary(CamelModel):
    """Booking as returned right after creation."""

    id: int
    status: str
    client_id: int
    provider_id: int
    advertisement_id: int | None = None
    start_date_time: datetime
    end_date_time: datetime
    price: Decimal | None = None
    message: str | None = None
    pet_ids: list[int] = Field(default_factory=list)
    updated_at: datetime

    @classmethod
    def from_booking(cls, booking: Booking) -> "BookingSummary":
        return cls(
            id=booking.id,
            status=booking.status,
            client_id=booking.client_id,
            provider_id=booking.provider_id,
            advertisement_id=booking.advertisement_id,
            start_date_time=booking.start_date_time,
            end_date_time=booking.end_date_time,
            price=booking.price,
            message=booking.message,
            pet_ids=[pet.id for pet in booking.pets],
            updated_at=booking.updated_at,
        )


class BookingCreateResponse(CamelModel):
    success: bool = True
    booking: BookingSummary


class BookingActionResponse(CamelModel):
    success: bool = True
    message: str
    status: str


class PetSummary(CamelModel):
    """Pet details shown on a booking card."""

    id: int
    name: str
    age: int | None = None
    description: str | None = None
    chronic_diseases: list[str] = Field(default_factory=list)
    is_healthy: bool | None = None
    species: str | None = None
    key_image: str | None = None

    @classmethod
    def from_pet(cls, pet: Pet) -> "PetSummary":
        return cls(
            id=pet.id,
            name=pet.name,
            age=pet.age,
            description=pet.description,
            chronic_diseases=list(pet.chronic_diseases or []),
            is_healthy=pet.is_healthy,
            species=pet.species_name,
            key_image=pet.key_image,
        )


class ContactInfo(CamelModel):
    """Counterparty contact details."""

    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    phone_number: str | None = None

    @classmethod
    def from_user(cls, user: User) -> "ContactInfo":
        return cls(
            first_name=user.first_name,
            last_name=user.last_name,
            email=user.email,
            phone_number=user.phone_number,
        )


class BookingNotification(CamelModel):
    """Inbox entry with freshly computed status."""

    id: int
    status: str
    start_date_time: datetime
    end_date_time: datetime
    message: str | None = None
    advertisement_id: int | None = None
    price: Decimal | None = None
    updated_at: datetime
    pets: list[PetSummary]
    provider: ContactInfo | None = None
    client: ContactInfo | None = None

    @classmethod
    def from_booking(
        cls, booking: Booking, view: Literal["client", "provider"]
    ) -> "BookingNotification":
        counterparty = {}
        if view == "client":
            counterparty["provider"] = ContactInfo.from_user(booking.provider.user)
        else:
            counterparty["client"] = ContactInfo.from_user(booking.client.user)

        return cls(
            id=booking.id,
            status=booking.status,
            start_date_time=booking.start_date_time,
            end_date_time=booking.end_date_time,
            message=booking.message,
            advertisement_id=booking.advertisement_id,
            price=booking.price,
            updated_at=booking.updated_at,
            pets=[PetSummary.from_pet(pet) for pet in booking.pets],
            **counterparty,
        )


class NotificationListResponse(CamelModel):
    success: bool = True
    bookings: list[BookingNotification]

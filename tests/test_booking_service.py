from datetime import timedelta
from decimal import Decimal

import pytest
from sqlalchemy import func, select

from app.core.exceptions import (
    AdvertisementNotAvailable,
    AuthorizationError,
    InvalidPetSelection,
    InvalidTransition,
    NotFoundError,
    ProviderInactive,
    SelfBookingForbidden,
    ValidationError,
)
from app.domain.booking_state import BookingStatus
from app.models.advertisement import AdvertisementStatus
from app.models.booking import Booking, BookingPet
from app.models.user import Client, User
from app.repositories.booking_repository import BookingRepository
from app.schemas.booking import BookingCreate
from app.services.booking_service import booking_service
from app.services.user_service import ensure_client
from tests.helpers import BOOKING_END, BOOKING_START


@pytest.fixture
async def market(seed):
    """A client with two pets and an active provider advertising."""
    owner = await seed.user("owner")
    owner_client = await seed.client(owner)
    burek = await seed.pet(owner_client, "Burek")
    mruczek = await seed.pet(owner_client, "Mruczek", species="Cat")

    sitter = await seed.user("sitter")
    provider = await seed.provider(sitter)
    ad = await seed.advertisement(provider, price=Decimal("150.00"))

    return {
        "owner": owner,
        "client": owner_client,
        "pets": [burek, mruczek],
        "sitter": sitter,
        "provider": provider,
        "ad": ad,
    }


def booking_request(ad_id: int, pet_ids: list[int], **overrides) -> BookingCreate:
    data = {
        "advertisement_id": ad_id,
        "pet_ids": pet_ids,
        "start_date_time": BOOKING_START,
        "end_date_time": BOOKING_END,
        "message": "He likes long walks",
    }
    data.update(overrides)
    return BookingCreate(**data)


async def count_bookings(db) -> int:
    return (await db.execute(select(func.count(Booking.id)))).scalar_one()


async def test_create_booking_snapshots_price_and_links_pets(db, seed, clock, market):
    caps = await seed.capabilities(market["owner"])
    pet_ids = [p.id for p in market["pets"]]

    booking = await booking_service.create_booking(
        db, caps, booking_request(market["ad"].id, pet_ids + pet_ids[:1]), clock.now()
    )

    assert booking.status == BookingStatus.PENDING.value
    assert booking.price == Decimal("150.00")
    assert booking.client_id == market["client"].id
    assert booking.provider_id == market["provider"].id
    assert booking.updated_at == clock.now()

    links = (
        await db.execute(select(BookingPet.pet_id).where(BookingPet.booking_id == booking.id))
    ).scalars().all()
    assert sorted(links) == sorted(pet_ids)

    last_active = (
        await db.execute(select(User.last_active).where(User.id == market["owner"].id))
    ).scalar_one()
    assert last_active is not None


async def test_create_booking_requires_pets(db, seed, clock, market):
    caps = await seed.capabilities(market["owner"])
    with pytest.raises(ValidationError):
        await booking_service.create_booking(
            db, caps, booking_request(market["ad"].id, []), clock.now()
        )


async def test_create_booking_requires_start_before_end(db, seed, clock, market):
    caps = await seed.capabilities(market["owner"])
    with pytest.raises(ValidationError) as exc_info:
        await booking_service.create_booking(
            db,
            caps,
            booking_request(
                market["ad"].id,
                [market["pets"][0].id],
                end_date_time=BOOKING_START,
            ),
            clock.now(),
        )
    assert exc_info.value.detail == "Invalid start or end date/time"


async def test_create_booking_unknown_advertisement(db, seed, clock, market):
    caps = await seed.capabilities(market["owner"])
    with pytest.raises(NotFoundError):
        await booking_service.create_booking(
            db, caps, booking_request(9999, [market["pets"][0].id]), clock.now()
        )


async def test_create_booking_inactive_advertisement(db, seed, clock, market):
    ad = await seed.advertisement(market["provider"], status=AdvertisementStatus.INACTIVE)
    caps = await seed.capabilities(market["owner"])
    with pytest.raises(AdvertisementNotAvailable):
        await booking_service.create_booking(
            db, caps, booking_request(ad.id, [market["pets"][0].id]), clock.now()
        )


async def test_create_booking_inactive_provider(db, seed, clock, market):
    retired = await seed.provider(await seed.user("retired"), active=False)
    ad = await seed.advertisement(retired)
    caps = await seed.capabilities(market["owner"])
    with pytest.raises(ProviderInactive):
        await booking_service.create_booking(
            db, caps, booking_request(ad.id, [market["pets"][0].id]), clock.now()
        )


async def test_cannot_book_own_advertisement(db, seed, clock, market):
    caps = await seed.capabilities(market["sitter"])
    with pytest.raises(SelfBookingForbidden) as exc_info:
        await booking_service.create_booking(
            db, caps, booking_request(market["ad"].id, [market["pets"][0].id]), clock.now()
        )
    assert isinstance(exc_info.value, AuthorizationError)
    assert exc_info.value.status_code == 403

    # Refused before the client record is created
    clients = (
        await db.execute(select(Client.id).where(Client.user_id == market["sitter"].id))
    ).scalars().all()
    assert clients == []
    assert await count_bookings(db) == 0


async def test_cannot_book_with_someone_elses_pet(db, seed, clock, market):
    stranger = await seed.user("stranger")
    stranger_client = await seed.client(stranger)
    stranger_pet = await seed.pet(stranger_client, "Azor")
    caps = await seed.capabilities(market["owner"])

    with pytest.raises(InvalidPetSelection):
        await booking_service.create_booking(
            db,
            caps,
            booking_request(market["ad"].id, [market["pets"][0].id, stranger_pet.id]),
            clock.now(),
        )
    assert await count_bookings(db) == 0


async def test_client_record_created_on_first_use(db, seed):
    newcomer = await seed.user("newcomer")
    caps = await seed.capabilities(newcomer)
    assert not caps.client_ids

    client_id, caps = await ensure_client(db, caps)
    assert caps.client_ids == frozenset({client_id})

    again, _ = await ensure_client(db, caps)
    assert again == client_id
    created = (
        await db.execute(select(Client.id).where(Client.user_id == newcomer.id))
    ).scalars().all()
    assert created == [client_id]


async def test_provider_accepts_pending_booking(db, seed, clock, market):
    booking = await seed.booking(market["client"], market["provider"], market["pets"])
    caps = await seed.capabilities(market["sitter"])
    clock.advance(timedelta(minutes=5))

    accepted = await booking_service.accept_booking(db, caps, booking.id, clock.now())

    assert accepted.status == BookingStatus.ACCEPTED.value
    assert accepted.updated_at == clock.now()
    assert await BookingRepository(db).get_status(booking.id) == "ACCEPTED"


async def test_provider_rejects_pending_booking(db, seed, clock, market):
    booking = await seed.booking(market["client"], market["provider"], market["pets"])
    caps = await seed.capabilities(market["sitter"])

    rejected = await booking_service.reject_booking(db, caps, booking.id, clock.now())

    assert rejected.status == BookingStatus.REJECTED.value


async def test_client_cancels_pending_booking(db, seed, clock, market):
    booking = await seed.booking(market["client"], market["provider"], market["pets"])
    caps = await seed.capabilities(market["owner"])

    cancelled = await booking_service.cancel_booking(db, caps, booking.id, clock.now())

    assert cancelled.status == BookingStatus.CANCELLED.value


async def test_cancel_accepted_booking_is_invalid(db, seed, clock, market):
    booking = await seed.booking(
        market["client"], market["provider"], market["pets"], status=BookingStatus.ACCEPTED
    )
    caps = await seed.capabilities(market["owner"])

    with pytest.raises(InvalidTransition) as exc_info:
        await booking_service.cancel_booking(db, caps, booking.id, clock.now())

    assert exc_info.value.context == {"current_status": "ACCEPTED"}
    assert await BookingRepository(db).get_status(booking.id) == "ACCEPTED"


async def test_other_provider_cannot_accept(db, seed, clock, market):
    booking = await seed.booking(market["client"], market["provider"], market["pets"])
    rival = await seed.user("rival")
    await seed.provider(rival)
    caps = await seed.capabilities(rival)

    with pytest.raises(AuthorizationError):
        await booking_service.accept_booking(db, caps, booking.id, clock.now())
    with pytest.raises(AuthorizationError):
        await booking_service.reject_booking(db, caps, booking.id, clock.now())

    assert await BookingRepository(db).get_status(booking.id) == "PENDING"


async def test_deactivated_provider_cannot_accept(db, seed, clock, market):
    booking = await seed.booking(market["client"], market["provider"], market["pets"])
    market["provider"].is_active = False
    await db.commit()
    caps = await seed.capabilities(market["sitter"])

    with pytest.raises(AuthorizationError):
        await booking_service.accept_booking(db, caps, booking.id, clock.now())


async def test_accept_unknown_booking(db, seed, clock, market):
    caps = await seed.capabilities(market["sitter"])
    with pytest.raises(NotFoundError):
        await booking_service.accept_booking(db, caps, 4242, clock.now())


async def test_losing_writer_fails_loudly(db, seed, clock, market):
    booking = await seed.booking(market["client"], market["provider"], market["pets"])
    repo = BookingRepository(db)

    # Another writer rejects first; this caller still holds the PENDING snapshot.
    assert await repo.update_status(
        booking, {BookingStatus.PENDING}, BookingStatus.REJECTED, clock.now()
    )
    assert not await repo.update_status(
        booking, {BookingStatus.PENDING}, BookingStatus.ACCEPTED, clock.now()
    )
    assert await repo.get_status(booking.id) == "REJECTED"


async def test_store_refuses_off_graph_write(db, seed, clock, market):
    booking = await seed.booking(
        market["client"], market["provider"], market["pets"], status=BookingStatus.PAID
    )
    repo = BookingRepository(db)

    with pytest.raises(InvalidTransition) as exc_info:
        await repo.update_status(booking, {BookingStatus.PAID}, BookingStatus.OVERDUE, clock.now())
    assert exc_info.value.context == {"current_status": "PAID"}
    assert await repo.get_status(booking.id) == "PAID"


async def test_store_checks_every_expected_status(db, seed, clock, market):
    booking = await seed.booking(market["client"], market["provider"], market["pets"])
    repo = BookingRepository(db)

    # PENDING -> CANCELLED is an edge, ACCEPTED -> CANCELLED is not.
    with pytest.raises(InvalidTransition):
        await repo.update_status(
            booking,
            {BookingStatus.PENDING, BookingStatus.ACCEPTED},
            BookingStatus.CANCELLED,
            clock.now(),
        )
    assert await repo.get_status(booking.id) == "PENDING"

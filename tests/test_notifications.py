from datetime import UTC, datetime, timedelta

import pytest

from app.core.exceptions import AuthorizationError
from app.domain.booking_state import BookingStatus
from app.repositories.booking_repository import BookingRepository
from app.services.notification_service import notification_service
from app.utils.datetime_utils import ensure_utc
from tests.helpers import BOOKING_END


@pytest.fixture
async def parties(seed):
    owner = await seed.user("owner")
    owner_client = await seed.client(owner)
    pet = await seed.pet(owner_client)
    sitter = await seed.user("sitter")
    provider = await seed.provider(sitter)
    return owner, owner_client, pet, sitter, provider


async def test_accepted_booking_moves_to_awaiting_payment_on_read(db, seed, clock, parties):
    owner, owner_client, pet, _, provider = parties
    booking = await seed.booking(owner_client, provider, [pet], status=BookingStatus.ACCEPTED)
    caps = await seed.capabilities(owner)

    clock.set(BOOKING_END + timedelta(hours=1))
    [listed] = await notification_service.list_for_client(db, caps, clock.now())

    assert listed.id == booking.id
    assert listed.status == BookingStatus.AWAITING_PAYMENT.value
    assert ensure_utc(listed.updated_at) == clock.now()
    assert await BookingRepository(db).get_status(booking.id) == "AWAITING_PAYMENT"


async def test_awaiting_payment_moves_to_overdue_after_grace(db, seed, clock, parties):
    _, owner_client, pet, sitter, provider = parties
    booking = await seed.booking(
        owner_client, provider, [pet], status=BookingStatus.AWAITING_PAYMENT
    )
    caps = await seed.capabilities(sitter)

    clock.set(BOOKING_END + timedelta(hours=48, seconds=1))
    [listed] = await notification_service.list_for_provider(db, caps, clock.now())

    assert listed.status == BookingStatus.OVERDUE.value
    assert await BookingRepository(db).get_status(booking.id) == "OVERDUE"


async def test_boundaries_are_strict(db, seed, clock, parties):
    owner, owner_client, pet, _, provider = parties
    accepted = await seed.booking(owner_client, provider, [pet], status=BookingStatus.ACCEPTED)
    awaiting = await seed.booking(
        owner_client,
        provider,
        [pet],
        status=BookingStatus.AWAITING_PAYMENT,
        end=BOOKING_END - timedelta(hours=48),
    )
    caps = await seed.capabilities(owner)
    seeded_at = clock.now()

    clock.set(BOOKING_END)
    listed = await notification_service.list_for_client(db, caps, clock.now())

    statuses = {b.id: b.status for b in listed}
    assert statuses[accepted.id] == "ACCEPTED"
    assert statuses[awaiting.id] == "AWAITING_PAYMENT"
    assert ensure_utc(accepted.updated_at) == seeded_at


async def test_missed_boundaries_advance_one_step_per_read(db, seed, clock, parties):
    owner, owner_client, pet, _, provider = parties
    booking = await seed.booking(owner_client, provider, [pet], status=BookingStatus.ACCEPTED)
    caps = await seed.capabilities(owner)

    clock.set(BOOKING_END + timedelta(days=10))
    await notification_service.list_for_client(db, caps, clock.now())
    assert await BookingRepository(db).get_status(booking.id) == "AWAITING_PAYMENT"

    await notification_service.list_for_client(db, caps, clock.now())
    assert await BookingRepository(db).get_status(booking.id) == "OVERDUE"


async def test_window_policy(db, seed, clock, parties):
    owner, owner_client, pet, _, provider = parties
    now = datetime(2025, 6, 1, 12, 0, tzinfo=UTC)
    clock.set(now)

    def booking(status, age_days):
        return seed.booking(
            owner_client,
            provider,
            [pet],
            status=status,
            updated_at=now - timedelta(days=age_days),
        )

    old_pending = await booking(BookingStatus.PENDING, 400)
    recent_cancel = await booking(BookingStatus.CANCELLED, 29)
    stale_reject = await booking(BookingStatus.REJECTED, 31)
    recent_paid = await booking(BookingStatus.PAID, 89)
    stale_paid = await booking(BookingStatus.PAID, 91)
    recent_overdue = await booking(BookingStatus.OVERDUE, 60)
    stale_overdue = await booking(BookingStatus.OVERDUE, 120)

    caps = await seed.capabilities(owner)
    listed = await notification_service.list_for_client(db, caps, now)
    ids = [b.id for b in listed]

    assert old_pending.id in ids
    assert recent_cancel.id in ids
    assert recent_paid.id in ids
    assert recent_overdue.id in ids
    assert stale_reject.id not in ids
    assert stale_paid.id not in ids
    assert stale_overdue.id not in ids
    assert ids == sorted(ids, reverse=True)


async def test_client_only_sees_own_bookings(db, seed, parties, clock):
    owner, owner_client, pet, _, provider = parties
    mine = await seed.booking(owner_client, provider, [pet])

    other = await seed.user("other")
    other_client = await seed.client(other)
    other_pet = await seed.pet(other_client, "Azor")
    await seed.booking(other_client, provider, [other_pet])

    caps = await seed.capabilities(owner)
    listed = await notification_service.list_for_client(db, caps, clock.now())

    assert [b.id for b in listed] == [mine.id]


async def test_user_without_client_record_has_empty_inbox(db, seed, clock):
    loner = await seed.user("loner")
    caps = await seed.capabilities(loner)

    assert await notification_service.list_for_client(db, caps, clock.now()) == []


async def test_provider_inbox_requires_provider(db, seed, clock, parties):
    owner = parties[0]
    caps = await seed.capabilities(owner)

    with pytest.raises(AuthorizationError):
        await notification_service.list_for_provider(db, caps, clock.now())


async def test_inactive_provider_still_sees_existing_bookings(db, seed, clock, parties):
    _, owner_client, pet, sitter, provider = parties
    booking = await seed.booking(owner_client, provider, [pet], status=BookingStatus.ACCEPTED)
    provider.is_active = False
    await db.commit()
    caps = await seed.capabilities(sitter)

    listed = await notification_service.list_for_provider(db, caps, clock.now())

    assert [b.id for b in listed] == [booking.id]

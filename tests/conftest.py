"""Pytest configuration: SQLite database, fixed clock and API client."""

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("IDENTITY_TOKEN_SECRET", "test-identity-secret")
os.environ.setdefault("PAYMENT_GATEWAY", "manual")

from datetime import datetime
from decimal import Decimal

import pytest
from httpx import ASGITransport, AsyncClient
from jose import jwt
from sqlalchemy import select
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

import app.models  # noqa: F401
from app.config import settings
from app.core.clock import FixedClock, get_clock
from app.core.permissions import Capabilities, load_capabilities
from app.database import Base, get_db
from app.domain.booking_state import BookingStatus
from app.gateways.base import CheckoutResult, GatewayType, PaymentGateway
from app.main import app
from app.models.advertisement import Advertisement, AdvertisementStatus
from app.models.booking import Booking
from app.models.pet import Pet, PetImage, Species
from app.models.user import Admin, Client, ServiceProvider, User
from app.services.gateway_service import get_payment_gateway
from tests.helpers import BOOKING_END, BOOKING_START, CLOCK_START


class FakeGateway(PaymentGateway):
    """Checkout adapter that records calls instead of calling a processor."""

    def __init__(self):
        self.calls: list[dict] = []
        self.fail_with: str | None = None

    @property
    def gateway_type(self) -> GatewayType:
        return GatewayType.STRIPE

    async def create_checkout_session(
        self,
        amount,
        currency,
        description,
        success_url,
        cancel_url,
        customer_email=None,
        metadata=None,
    ) -> CheckoutResult:
        self.calls.append(
            {
                "amount": amount,
                "currency": currency,
                "success_url": success_url,
                "cancel_url": cancel_url,
                "customer_email": customer_email,
                "metadata": metadata,
            }
        )
        if self.fail_with:
            return CheckoutResult(success=False, error_message=self.fail_with)
        session_id = f"cs_test_{len(self.calls)}"
        return CheckoutResult(
            success=True,
            session_id=session_id,
            url=f"https://checkout.test/pay/{session_id}",
        )

    def verify_webhook(self, payload, signature):
        return None


class Seeder:
    """Creates committed rows for tests."""

    def __init__(self, session, clock: FixedClock):
        self.session = session
        self.clock = clock
        self._seq = 0

    def _next(self) -> int:
        self._seq += 1
        return self._seq

    async def _save(self, obj):
        self.session.add(obj)
        await self.session.commit()
        return obj

    async def user(self, name: str = "user", verified: bool = True, **fields) -> User:
        n = self._next()
        return await self._save(
            User(
                external_uid=f"{name}-uid-{n}",
                email=f"{name}{n}@example.com",
                first_name=name.capitalize(),
                last_name="Tester",
                phone_number=f"+4860000{n:04d}",
                is_verified=verified,
                created_at=self.clock.now(),
                **fields,
            )
        )

    async def client(self, user: User) -> Client:
        return await self._save(Client(user_id=user.id))

    async def provider(self, user: User, active: bool = True) -> ServiceProvider:
        return await self._save(ServiceProvider(user_id=user.id, is_active=active))

    async def admin(self, user: User) -> Admin:
        return await self._save(Admin(user_id=user.id))

    async def advertisement(
        self,
        provider: ServiceProvider,
        price: Decimal | None = Decimal("120.00"),
        status: AdvertisementStatus = AdvertisementStatus.ACTIVE,
    ) -> Advertisement:
        return await self._save(
            Advertisement(
                provider_id=provider.id,
                title="Dog sitting in Krakow",
                price=price,
                status=status.value,
                created_at=self.clock.now(),
            )
        )

    async def pet(self, client: Client, name: str = "Burek", species: str | None = "Dog") -> Pet:
        species_id = None
        if species:
            result = await self.session.execute(select(Species).where(Species.name == species))
            row = result.scalar_one_or_none() or await self._save(Species(name=species))
            species_id = row.id
        pet = await self._save(
            Pet(
                client_id=client.id,
                species_id=species_id,
                name=name,
                age=3,
                chronic_diseases=[],
                is_healthy=True,
                created_at=self.clock.now(),
            )
        )
        await self._save(PetImage(pet_id=pet.id, image_url=f"https://img.test/{name}.jpg", order=0))
        return pet

    async def booking(
        self,
        client: Client,
        provider: ServiceProvider,
        pets: list[Pet],
        status: BookingStatus = BookingStatus.PENDING,
        start: datetime = BOOKING_START,
        end: datetime = BOOKING_END,
        updated_at: datetime | None = None,
        advertisement: Advertisement | None = None,
        price: Decimal | None = Decimal("120.00"),
    ) -> Booking:
        booking = Booking(
            client_id=client.id,
            provider_id=provider.id,
            advertisement_id=advertisement.id if advertisement else None,
            start_date_time=start,
            end_date_time=end,
            status=status.value,
            price=price,
            created_at=self.clock.now(),
            updated_at=updated_at or self.clock.now(),
        )
        booking.pets = list(pets)
        return await self._save(booking)

    async def capabilities(self, user: User) -> Capabilities:
        return await load_capabilities(self.session, user)


@pytest.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(engine):
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest.fixture
async def db(session_maker):
    async with session_maker() as session:
        yield session


@pytest.fixture
def clock():
    return FixedClock(CLOCK_START)


@pytest.fixture
def seed(db, clock):
    return Seeder(db, clock)


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
async def client(session_maker, clock, gateway):
    """HTTP client against the app with test database, clock and gateway."""

    async def override_get_db():
        async with session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clock] = lambda: clock
    app.dependency_overrides[get_payment_gateway] = lambda: gateway

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


def auth_headers(user: User) -> dict[str, str]:
    """Bearer header with an identity token for ``user``."""
    token = jwt.encode(
        {"sub": user.external_uid},
        settings.identity_token_secret,
        algorithm=settings.identity_token_algorithm,
    )
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def headers():
    return auth_headers


@pytest.fixture
def stored_status(session_maker):
    """Read a booking's status through a fresh session."""

    async def read(booking_id: int) -> str | None:
        async with session_maker() as session:
            result = await session.execute(select(Booking.status).where(Booking.id == booking_id))
            return result.scalar_one_or_none()

    return read

"""User bookkeeping shared by the booking flows."""

import logging
from datetime import datetime

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ValidationError
from app.core.permissions import Capabilities
from app.models.user import Client, ServiceProvider, User

logger = logging.getLogger(__name__)


async def touch_last_active(db: AsyncSession, user_id: int, now: datetime) -> None:
    """Record that the user just did something."""
    await db.execute(
        update(User)
        .where(User.id == user_id)
        .values(last_active=now)
        .execution_options(synchronize_session=False)
    )


async def ensure_client(db: AsyncSession, caps: Capabilities) -> tuple[int, Capabilities]:
    """Return the user's client id, creating the client record on first use.

    Returns:
        Tuple of (client_id, capabilities including that client)
    """
    if caps.client_ids:
        return min(caps.client_ids), caps

    client = Client(user_id=caps.user_id)
    db.add(client)
    await db.flush()
    return client.id, caps.with_client(client.id)


async def deactivate_provider(db: AsyncSession, caps: Capabilities, now: datetime) -> list[int]:
    """Switch off every active provider of the user.

    The provider rows stay, so existing bookings keep their provider and can
    still be rejected, reported and listed. Accepting needs an active provider.

    Returns:
        Ids of the providers that were deactivated

    Raises:
        ValidationError: If the user has no active provider
    """
    if not caps.active_provider_ids:
        raise ValidationError("User is not a service provider")

    provider_ids = sorted(caps.active_provider_ids)
    await db.execute(
        update(ServiceProvider)
        .where(ServiceProvider.id.in_(provider_ids), ServiceProvider.is_active.is_(True))
        .values(is_active=False)
        .execution_options(synchronize_session=False)
    )
    await touch_last_active(db, caps.user_id, now)

    logger.info("User %s deactivated providers %s", caps.user_id, provider_ids)
    return provider_ids

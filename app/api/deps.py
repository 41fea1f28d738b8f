"""API dependencies for authentication and common operations."""

from datetime import datetime
from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clock import Clock, get_clock
from app.core.exceptions import AuthorizationError, NotFoundError
from app.core.permissions import Capabilities, load_capabilities
from app.core.security import token_subject
from app.database import get_db
from app.models.user import User

# Security scheme
security = HTTPBearer()


async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(security)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User:
    """Resolve the identity token's subject to a verified local user."""
    external_uid = token_subject(credentials.credentials)

    result = await db.execute(select(User).where(User.external_uid == external_uid))
    user = result.scalar_one_or_none()

    if not user:
        raise NotFoundError("User")
    if not user.is_verified:
        raise AuthorizationError("Account is not verified")

    return user


async def get_capabilities(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Capabilities:
    """Role memberships of the current user, resolved once per request."""
    return await load_capabilities(db, current_user)


async def require_provider(
    caps: Annotated[Capabilities, Depends(get_capabilities)],
) -> Capabilities:
    """Any linked provider, active or not; finer checks happen per booking."""
    if not caps.provider_ids:
        raise AuthorizationError("Service provider access required")
    return caps


def get_now(clock: Annotated[Clock, Depends(get_clock)]) -> datetime:
    """Current instant from the injected clock."""
    return clock.now()


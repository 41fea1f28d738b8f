"""Role resolution and booking authorization.

Roles are derived from side-table membership (clients, service_providers,
admins) and resolved once per request into a :class:`Capabilities` value.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import AuthorizationError
from app.models.user import Admin, Client, ServiceProvider, User


class UserRole(str, Enum):
    """User roles in the system."""

    CLIENT = "client"
    SERVICE_PROVIDER = "service_provider"
    ADMIN = "admin"


class BookingAction(str, Enum):
    """Actor-initiated operations on an existing booking."""

    ACCEPT = "accept"
    REJECT = "reject"
    CANCEL = "cancel"
    PAY = "pay"
    REVIEW = "review"
    REPORT = "report"


CLIENT_ACTIONS = frozenset({BookingAction.CANCEL, BookingAction.PAY, BookingAction.REVIEW})
PROVIDER_ACTIONS = frozenset({BookingAction.ACCEPT, BookingAction.REJECT, BookingAction.REPORT})
# Already-accepted bookings survive provider deactivation; new acceptances do not.
ACTIVE_PROVIDER_ACTIONS = frozenset({BookingAction.ACCEPT})


class BookingParties(Protocol):
    client_id: int
    provider_id: int


@dataclass(frozen=True)
class Capabilities:
    """What the acting user is, resolved once per request."""

    user_id: int
    client_ids: frozenset[int] = field(default_factory=frozenset)
    provider_ids: frozenset[int] = field(default_factory=frozenset)
    active_provider_ids: frozenset[int] = field(default_factory=frozenset)
    is_admin: bool = False

    @property
    def is_client(self) -> bool:
        return bool(self.client_ids)

    @property
    def is_provider(self) -> bool:
        """True when at least one linked provider is active.

        Only active providers may accept bookings or publish advertisements.
        """
        return bool(self.active_provider_ids)

    @property
    def roles(self) -> list[str]:
        # Everyone can act as a client; the record is created on first booking.
        roles = [UserRole.CLIENT.value]
        if self.is_admin:
            roles.append(UserRole.ADMIN.value)
        if self.is_provider:
            roles.append(UserRole.SERVICE_PROVIDER.value)
        return roles

    def with_client(self, client_id: int) -> "Capabilities":
        """Copy with an extra client id (after lazily creating a client record)."""
        return Capabilities(
            user_id=self.user_id,
            client_ids=self.client_ids | {client_id},
            provider_ids=self.provider_ids,
            active_provider_ids=self.active_provider_ids,
            is_admin=self.is_admin,
        )


async def load_capabilities(db: AsyncSession, user: User) -> Capabilities:
    """Resolve a user's capability set from role side tables."""
    client_rows = await db.execute(select(Client.id).where(Client.user_id == user.id))
    provider_rows = await db.execute(
        select(ServiceProvider.id, ServiceProvider.is_active).where(
            ServiceProvider.user_id == user.id
        )
    )
    admin_row = await db.execute(select(Admin.id).where(Admin.user_id == user.id))

    providers = provider_rows.all()
    return Capabilities(
        user_id=user.id,
        client_ids=frozenset(client_rows.scalars().all()),
        provider_ids=frozenset(p.id for p in providers),
        active_provider_ids=frozenset(p.id for p in providers if p.is_active),
        is_admin=admin_row.scalar_one_or_none() is not None,
    )


def authorize_booking_action(
    caps: Capabilities,
    booking: BookingParties,
    action: BookingAction,
) -> None:
    """Check that ``caps`` may perform ``action`` on ``booking``.

    Raises:
        AuthorizationError: If the actor is not the owning party, or the owning
            provider is deactivated for an action that requires an active one.
    """
    if action in CLIENT_ACTIONS:
        if booking.client_id not in caps.client_ids:
            raise AuthorizationError(f"Unauthorized to {action.value} this booking")
        return

    if booking.provider_id not in caps.provider_ids:
        raise AuthorizationError(f"Unauthorized to {action.value} this booking")

    if action in ACTIVE_PROVIDER_ACTIONS and booking.provider_id not in caps.active_provider_ids:
        raise AuthorizationError("Service provider is not active")

"""User-related Pydantic schemas."""

from app.core.permissions import Capabilities
from app.schemas.booking import CamelModel


class RoleResponse(CamelModel):
    """Roles the current user can act in."""

    roles: list[str]
    client_ids: list[int]
    service_provider_ids: list[int]
    is_admin: bool = False

    @classmethod
    def from_capabilities(cls, caps: Capabilities) -> "RoleResponse":
        return cls(
            roles=caps.roles,
            client_ids=sorted(caps.client_ids),
            service_provider_ids=sorted(caps.active_provider_ids),
            is_admin=caps.is_admin,
        )


class ProviderDeactivationResponse(CamelModel):
    success: bool = True
    message: str = "Service provider role deactivated successfully"
    service_provider_ids: list[int]

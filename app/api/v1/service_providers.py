"""Service provider role endpoints."""

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_capabilities, get_db, get_now
from app.core.permissions import Capabilities
from app.schemas.user import ProviderDeactivationResponse
from app.services.user_service import deactivate_provider

router = APIRouter()


@router.delete("/unbecome", response_model=ProviderDeactivationResponse)
async def unbecome_provider(
    caps: Annotated[Capabilities, Depends(get_capabilities)],
    db: Annotated[AsyncSession, Depends(get_db)],
    now: Annotated[datetime, Depends(get_now)],
) -> ProviderDeactivationResponse:
    """Stop offering services. Existing bookings and advertisements are kept."""
    provider_ids = await deactivate_provider(db, caps, now)
    return ProviderDeactivationResponse(service_provider_ids=provider_ids)

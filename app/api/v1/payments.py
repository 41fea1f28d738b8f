"""Payment endpoints."""

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_capabilities, get_current_user, get_db, get_now
from app.core.permissions import Capabilities
from app.gateways.base import PaymentGateway
from app.models.user import User
from app.schemas.payment import CheckoutSessionCreate, CheckoutSessionResponse
from app.services.gateway_service import get_payment_gateway
from app.services.payment_service import payment_service

router = APIRouter()


@router.post("/create-booking-session", response_model=CheckoutSessionResponse)
async def create_booking_session(
    request: CheckoutSessionCreate,
    current_user: Annotated[User, Depends(get_current_user)],
    caps: Annotated[Capabilities, Depends(get_capabilities)],
    db: Annotated[AsyncSession, Depends(get_db)],
    gateway: Annotated[PaymentGateway, Depends(get_payment_gateway)],
    now: Annotated[datetime, Depends(get_now)],
    origin: Annotated[str | None, Header()] = None,
) -> CheckoutSessionResponse:
    """Open a hosted checkout page for a booking awaiting payment."""
    url = await payment_service.create_checkout_session(
        db, caps, current_user, request.booking_id, gateway, now, origin=origin
    )
    return CheckoutSessionResponse(url=url)

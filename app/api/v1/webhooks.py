"""Webhook endpoints for payment gateways."""

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_db, get_now
from app.gateways.base import GatewayType
from app.schemas.payment import WebhookAck
from app.services.gateway_service import gateway_service
from app.services.payment_service import payment_service

router = APIRouter()


@router.post("/stripe", response_model=WebhookAck, status_code=status.HTTP_200_OK)
async def stripe_webhook(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
    now: Annotated[datetime, Depends(get_now)],
    stripe_signature: Annotated[str | None, Header(alias="Stripe-Signature")] = None,
) -> WebhookAck:
    """Handle Stripe webhook events."""
    if not gateway_service.stripe_webhook_configured():
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Stripe webhook secret is not configured",
        )

    if not stripe_signature:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing signature",
        )

    # Raw body is needed for signature verification
    payload = await request.body()

    event = gateway_service.get_gateway(GatewayType.STRIPE).verify_webhook(
        payload, stripe_signature
    )
    if event is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid signature",
        )

    await payment_service.handle_stripe_event(db, event, now)
    return WebhookAck()

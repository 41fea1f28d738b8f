"""Booking endpoints."""

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_capabilities, get_db, get_now, require_provider
from app.core.permissions import Capabilities
from app.schemas.booking import (
    BookingActionRequest,
    BookingActionResponse,
    BookingCreate,
    BookingCreateResponse,
    BookingNotification,
    BookingSummary,
    NotificationListResponse,
)
from app.schemas.review import ReportCreate, ReportResponse
from app.services.booking_service import booking_service
from app.services.feedback_service import feedback_service
from app.services.notification_service import notification_service

router = APIRouter()


@router.post("", response_model=BookingCreateResponse, status_code=status.HTTP_201_CREATED)
async def create_booking(
    request: BookingCreate,
    caps: Annotated[Capabilities, Depends(get_capabilities)],
    db: Annotated[AsyncSession, Depends(get_db)],
    now: Annotated[datetime, Depends(get_now)],
) -> BookingCreateResponse:
    """Request a booking of an advertisement for some of the caller's pets."""
    booking = await booking_service.create_booking(db, caps, request, now)
    return BookingCreateResponse(booking=BookingSummary.from_booking(booking))


@router.post("/client/cancel", response_model=BookingActionResponse)
async def cancel_booking(
    request: BookingActionRequest,
    caps: Annotated[Capabilities, Depends(get_capabilities)],
    db: Annotated[AsyncSession, Depends(get_db)],
    now: Annotated[datetime, Depends(get_now)],
) -> BookingActionResponse:
    """Client withdraws a pending booking."""
    booking = await booking_service.cancel_booking(db, caps, request.booking_id, now)
    return BookingActionResponse(message="Booking cancelled", status=booking.status)


@router.post("/service-provider/accept", response_model=BookingActionResponse)
async def accept_booking(
    request: BookingActionRequest,
    caps: Annotated[Capabilities, Depends(require_provider)],
    db: Annotated[AsyncSession, Depends(get_db)],
    now: Annotated[datetime, Depends(get_now)],
) -> BookingActionResponse:
    booking = await booking_service.accept_booking(db, caps, request.booking_id, now)
    return BookingActionResponse(message="Booking accepted", status=booking.status)


@router.post("/service-provider/reject", response_model=BookingActionResponse)
async def reject_booking(
    request: BookingActionRequest,
    caps: Annotated[Capabilities, Depends(require_provider)],
    db: Annotated[AsyncSession, Depends(get_db)],
    now: Annotated[datetime, Depends(get_now)],
) -> BookingActionResponse:
    booking = await booking_service.reject_booking(db, caps, request.booking_id, now)
    return BookingActionResponse(message="Booking rejected", status=booking.status)


@router.get("/client/notifications", response_model=NotificationListResponse)
async def client_notifications(
    caps: Annotated[Capabilities, Depends(get_capabilities)],
    db: Annotated[AsyncSession, Depends(get_db)],
    now: Annotated[datetime, Depends(get_now)],
) -> NotificationListResponse:
    """Bookings made by the caller, with provider contact details."""
    bookings = await notification_service.list_for_client(db, caps, now)
    return NotificationListResponse(
        bookings=[BookingNotification.from_booking(b, "client") for b in bookings]
    )


@router.get("/service-provider/notifications", response_model=NotificationListResponse)
async def provider_notifications(
    caps: Annotated[Capabilities, Depends(require_provider)],
    db: Annotated[AsyncSession, Depends(get_db)],
    now: Annotated[datetime, Depends(get_now)],
) -> NotificationListResponse:
    """Bookings addressed to the caller's providers, with client contact details."""
    bookings = await notification_service.list_for_provider(db, caps, now)
    return NotificationListResponse(
        bookings=[BookingNotification.from_booking(b, "provider") for b in bookings]
    )


@router.post(
    "/service-provider/report",
    response_model=ReportResponse,
    status_code=status.HTTP_201_CREATED,
)
async def report_client(
    request: ReportCreate,
    caps: Annotated[Capabilities, Depends(require_provider)],
    db: Annotated[AsyncSession, Depends(get_db)],
    now: Annotated[datetime, Depends(get_now)],
) -> ReportResponse:
    """Report the client of an overdue booking."""
    report = await feedback_service.create_report(db, caps, request, now)
    return ReportResponse.model_validate(report)

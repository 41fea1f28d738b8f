"""Pydantic schemas for API validation."""

from app.schemas.booking import (
    BookingActionRequest,
    BookingActionResponse,
    BookingCreate,
    BookingCreateResponse,
    BookingNotification,
    BookingSummary,
    NotificationListResponse,
)
from app.schemas.payment import (
    CheckoutSessionCreate,
    CheckoutSessionResponse,
    PaymentEvent,
    WebhookAck,
)
from app.schemas.review import (
    ClientReview,
    ClientReviewListResponse,
    ReportCreate,
    ReportResponse,
    ReviewCreate,
    ReviewResponse,
    ReviewUpdate,
)
from app.schemas.user import ProviderDeactivationResponse, RoleResponse

__all__ = [
    # Booking
    "BookingCreate",
    "BookingCreateResponse",
    "BookingActionRequest",
    "BookingActionResponse",
    "BookingSummary",
    "BookingNotification",
    "NotificationListResponse",
    # Payment
    "CheckoutSessionCreate",
    "CheckoutSessionResponse",
    "PaymentEvent",
    "WebhookAck",
    # Review
    "ReviewCreate",
    "ReviewResponse",
    "ReviewUpdate",
    "ClientReview",
    "ClientReviewListResponse",
    "ReportCreate",
    "ReportResponse",
    # User
    "RoleResponse",
    "ProviderDeactivationResponse",
]

"""Core utilities: errors, time source, security and permissions."""

from app.core.exceptions import (
    AdvertisementNotAvailable,
    AppException,
    AuthenticationError,
    AuthorizationError,
    InvalidPetSelection,
    InvalidTransition,
    NotFoundError,
    ProviderInactive,
    SelfBookingForbidden,
    UpstreamFailure,
    ValidationError,
)

__all__ = [
    "AdvertisementNotAvailable",
    "AppException",
    "AuthenticationError",
    "AuthorizationError",
    "InvalidPetSelection",
    "InvalidTransition",
    "NotFoundError",
    "ProviderInactive",
    "SelfBookingForbidden",
    "UpstreamFailure",
    "ValidationError",
]

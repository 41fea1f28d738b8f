"""Custom application exceptions."""

from typing import Any

from fastapi import HTTPException, status


class AppException(HTTPException):
    """Base application exception."""

    def __init__(
        self,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail: str = "An unexpected error occurred",
        headers: dict[str, str] | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        self.context = context or {}
        super().__init__(status_code=status_code, detail=detail, headers=headers)


class ValidationError(AppException):
    """Malformed or missing input. Always user-correctable."""

    def __init__(self, detail: str = "Validation failed", errors: list[dict[str, Any]] | None = None) -> None:
        self.errors = errors
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class NotFoundError(AppException):
    """Resource not found exception."""

    def __init__(self, resource: str = "Resource", identifier: str | None = None) -> None:
        detail = f"{resource} not found"
        if identifier:
            detail = f"{resource} with ID '{identifier}' not found"
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class AuthenticationError(AppException):
    """Authentication failed exception."""

    def __init__(self, detail: str = "Authentication failed") -> None:
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class AuthorizationError(AppException):
    """Authorization denied exception."""

    def __init__(self, detail: str = "You don't have permission to access this resource") -> None:
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class SelfBookingForbidden(AuthorizationError):
    """A provider tried to book their own advertisement."""

    def __init__(self, detail: str = "You cannot book your own advertisement") -> None:
        super().__init__(detail=detail)


class InvalidTransition(AppException):
    """Action attempted on a booking in the wrong status."""

    def __init__(self, current_status: str, detail: str | None = None) -> None:
        self.current_status = current_status
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail or f"This operation is not allowed for a booking in status {current_status}",
            context={"current_status": current_status},
        )


class AdvertisementNotAvailable(AppException):
    """Advertisement is not open for bookings."""

    def __init__(self, detail: str = "This advertisement is not available") -> None:
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class ProviderInactive(AppException):
    """Service provider behind an advertisement is deactivated."""

    def __init__(self, detail: str = "Invalid or inactive service provider") -> None:
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class InvalidPetSelection(ValidationError):
    """One or more pets do not belong to the requesting client."""

    def __init__(self, detail: str = "Invalid pet selection") -> None:
        super().__init__(detail=detail)


class UpstreamFailure(AppException):
    """Payment provider or storage unavailable. Safe to retry."""

    def __init__(self, service: str, detail: str | None = None) -> None:
        message = f"External service '{service}' is unavailable"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=message)

"""Review and report schemas."""

from datetime import datetime

from pydantic import Field, field_validator

from app.models.review import Review
from app.schemas.booking import CamelModel

REMOVED_ADVERTISEMENT_TITLE = "Service removed"


class ReviewCreate(CamelModel):
    """Schema for reviewing a paid booking."""

    booking_id: int
    rating: int = Field(..., ge=1, le=5)
    comment: str | None = Field(None, max_length=2000)

    @field_validator("comment")
    @classmethod
    def strip_comment(cls, v: str | None) -> str | None:
        if v is None:
            return v
        return v.strip() or None


class ReviewUpdate(CamelModel):
    """Schema for editing a review. Omitted fields stay as they are."""

    rating: int | None = Field(None, ge=1, le=5)
    comment: str | None = Field(None, max_length=2000)

    @field_validator("comment")
    @classmethod
    def strip_comment(cls, v: str | None) -> str | None:
        if v is None:
            return v
        return v.strip() or None


class ReviewResponse(CamelModel):
    id: int
    booking_id: int
    provider_id: int
    rating: int
    comment: str | None
    created_at: datetime


class ReportCreate(CamelModel):
    """Schema for reporting a client over an overdue booking."""

    booking_id: int
    message: str | None = Field(None, max_length=2000)


class ReportResponse(CamelModel):
    id: int
    booking_id: int
    client_id: int
    message: str | None
    created_at: datetime


class ReviewedProvider(CamelModel):
    name: str
    profile_picture_url: str | None = None


class ClientReview(CamelModel):
    """A review written by the caller, with who and what it was about."""

    id: int
    rating: int
    comment: str | None
    created_at: datetime
    service_provider: ReviewedProvider
    advertisement_title: str

    @classmethod
    def from_review(cls, review: Review) -> "ClientReview":
        user = review.provider.user
        advertisement = review.booking.advertisement
        return cls(
            id=review.id,
            rating=review.rating,
            comment=review.comment,
            created_at=review.created_at,
            service_provider=ReviewedProvider(
                name=" ".join(part for part in (user.first_name, user.last_name) if part),
                profile_picture_url=user.profile_picture_url,
            ),
            advertisement_title=advertisement.title if advertisement else REMOVED_ADVERTISEMENT_TITLE,
        )


class ClientReviewListResponse(CamelModel):
    reviews: list[ClientReview]
    total: int

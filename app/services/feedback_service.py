"""Reviews by clients and reports by providers.

Both hang off a single booking and are allowed once: a review only after the
booking is PAID, a report only while it is OVERDUE. Clients may later edit
their reviews.
"""

import logging
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.exceptions import (
    AuthorizationError,
    InvalidTransition,
    NotFoundError,
    ValidationError,
)
from app.core.permissions import BookingAction, Capabilities, authorize_booking_action
from app.domain.booking_state import BookingStatus
from app.models.booking import Booking
from app.models.review import Report, Review
from app.models.user import ServiceProvider
from app.repositories.booking_repository import BookingRepository
from app.schemas.review import ReportCreate, ReviewCreate, ReviewUpdate
from app.services.booking_service import refresh_booking
from app.services.user_service import touch_last_active

logger = logging.getLogger(__name__)


class FeedbackService:
    """Reviews by clients and reports by providers."""

    async def _load(
        self,
        db: AsyncSession,
        caps: Capabilities,
        booking_id: int,
        action: BookingAction,
        required: BookingStatus,
        now: datetime,
    ) -> Booking:
        repo = BookingRepository(db)
        booking = await repo.get(booking_id)
        if not booking:
            raise NotFoundError("Booking", str(booking_id))

        authorize_booking_action(caps, booking, action)

        await refresh_booking(repo, booking, now)
        if booking.status != required.value:
            raise InvalidTransition(
                current_status=booking.status,
                detail=f"Can only {action.value} {required.value.lower()} bookings",
            )
        return booking

    async def create_review(
        self, db: AsyncSession, caps: Capabilities, data: ReviewCreate, now: datetime
    ) -> Review:
        """Client reviews the provider of a paid booking."""
        booking = await self._load(
            db, caps, data.booking_id, BookingAction.REVIEW, BookingStatus.PAID, now
        )

        existing = await db.execute(select(Review.id).where(Review.booking_id == booking.id))
        if existing.scalar_one_or_none() is not None:
            raise ValidationError("Booking already reviewed")

        review = Review(
            booking_id=booking.id,
            client_id=booking.client_id,
            provider_id=booking.provider_id,
            rating=data.rating,
            comment=data.comment,
            created_at=now,
        )
        db.add(review)
        await db.flush()
        await touch_last_active(db, caps.user_id, now)

        logger.info("Review %s added for booking %s", review.id, booking.id)
        return review

    async def create_report(
        self, db: AsyncSession, caps: Capabilities, data: ReportCreate, now: datetime
    ) -> Report:
        """Provider reports the client of an overdue booking."""
        booking = await self._load(
            db, caps, data.booking_id, BookingAction.REPORT, BookingStatus.OVERDUE, now
        )

        existing = await db.execute(select(Report.id).where(Report.booking_id == booking.id))
        if existing.scalar_one_or_none() is not None:
            raise ValidationError("Booking already reported")

        report = Report(
            booking_id=booking.id,
            client_id=booking.client_id,
            provider_id=booking.provider_id,
            message=data.message,
            created_at=now,
        )
        db.add(report)
        await db.flush()
        await touch_last_active(db, caps.user_id, now)

        logger.info("Report %s filed for booking %s", report.id, booking.id)
        return report

    async def update_review(
        self,
        db: AsyncSession,
        caps: Capabilities,
        review_id: int,
        data: ReviewUpdate,
        now: datetime,
    ) -> Review:
        """Client edits the rating or comment of their own review.

        An explicit empty comment clears it; omitted fields are left alone.
        """
        if not data.model_fields_set & {"rating", "comment"}:
            raise ValidationError("Provide a rating or a comment")
        if "rating" in data.model_fields_set and data.rating is None:
            raise ValidationError("Rating must be between 1 and 5")

        review = await db.get(Review, review_id)
        if not review:
            raise NotFoundError("Review", str(review_id))
        if review.client_id not in caps.client_ids:
            raise AuthorizationError("You can only edit your own reviews")

        if data.rating is not None:
            review.rating = data.rating
        if "comment" in data.model_fields_set:
            review.comment = data.comment
        await db.flush()
        await touch_last_active(db, caps.user_id, now)

        logger.info("Review %s updated", review.id)
        return review

    async def list_client_reviews(self, db: AsyncSession, caps: Capabilities) -> list[Review]:
        """Reviews written by the caller, newest first."""
        if not caps.client_ids:
            raise NotFoundError("Client")

        result = await db.execute(
            select(Review)
            .where(Review.client_id.in_(caps.client_ids))
            .options(
                selectinload(Review.provider).selectinload(ServiceProvider.user),
                selectinload(Review.booking).selectinload(Booking.advertisement),
            )
            .order_by(Review.created_at.desc(), Review.id.desc())
        )
        return list(result.scalars().all())


feedback_service = FeedbackService()

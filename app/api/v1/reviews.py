"""Review endpoints."""

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_capabilities, get_db, get_now
from app.core.permissions import Capabilities
from app.schemas.review import ReviewCreate, ReviewResponse, ReviewUpdate
from app.services.feedback_service import feedback_service

router = APIRouter()


@router.post("", response_model=ReviewResponse, status_code=status.HTTP_201_CREATED)
async def create_review(
    request: ReviewCreate,
    caps: Annotated[Capabilities, Depends(get_capabilities)],
    db: Annotated[AsyncSession, Depends(get_db)],
    now: Annotated[datetime, Depends(get_now)],
) -> ReviewResponse:
    """Review the provider of a paid booking."""
    review = await feedback_service.create_review(db, caps, request, now)
    return ReviewResponse.model_validate(review)


@router.put("/{review_id}", response_model=ReviewResponse)
async def update_review(
    review_id: int,
    request: ReviewUpdate,
    caps: Annotated[Capabilities, Depends(get_capabilities)],
    db: Annotated[AsyncSession, Depends(get_db)],
    now: Annotated[datetime, Depends(get_now)],
) -> ReviewResponse:
    """Edit the rating or comment of one of the caller's reviews."""
    review = await feedback_service.update_review(db, caps, review_id, request, now)
    return ReviewResponse.model_validate(review)

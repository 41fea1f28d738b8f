"""User endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_capabilities, get_db
from app.core.permissions import Capabilities
from app.schemas.review import ClientReview, ClientReviewListResponse
from app.schemas.user import RoleResponse
from app.services.feedback_service import feedback_service

router = APIRouter()


@router.get("/check-role", response_model=RoleResponse)
async def check_role(
    caps: Annotated[Capabilities, Depends(get_capabilities)],
) -> RoleResponse:
    """Roles the current user can act in."""
    return RoleResponse.from_capabilities(caps)


@router.get("/my-reviews", response_model=ClientReviewListResponse)
async def my_reviews(
    caps: Annotated[Capabilities, Depends(get_capabilities)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ClientReviewListResponse:
    """Reviews the caller has written."""
    reviews = await feedback_service.list_client_reviews(db, caps)
    return ClientReviewListResponse(
        reviews=[ClientReview.from_review(r) for r in reviews],
        total=len(reviews),
    )

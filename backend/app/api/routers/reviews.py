from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.db import get_db
from app.models import User
from app.schemas import BusinessReviewCreate, BusinessReviewOut
from app.services import storage
from app.services.auth_service import get_current_user

router = APIRouter(prefix="/api", tags=["reviews"])


@router.get("/businesses/{business_id}/reviews", response_model=List[BusinessReviewOut])
async def list_business_reviews(business_id: int, db: AsyncSession = Depends(get_db)):
    return await storage.get_business_reviews(db, business_id)


@router.post(
    "/businesses/{business_id}/reviews",
    response_model=BusinessReviewOut,
    status_code=status.HTTP_201_CREATED,
)
async def create_business_review(
    business_id: int,
    review_in: BusinessReviewCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    business = await storage.get_business_profile(db, business_id)
    if business is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Business not found")

    review = await storage.create_business_review(db, current_user.id, business_id, review_in.model_dump())

    await storage.create_activity_log(
        db,
        user_id=current_user.id,
        action="review_create",
        description=f"Reviewed {business.business_name}: {review.rating}/5",
        metadata={"businessId": business_id, "reviewId": review.id, "rating": review.rating},
    )
    return review


@router.get("/reviews/mine", response_model=List[BusinessReviewOut])
async def list_my_reviews(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await storage.get_user_reviews(db, current_user.id)

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.db import get_db
from app.models import User
from app.schemas import RecommendationOut, MessageResponse
from app.services import storage
from app.services.auth_service import get_current_user

router = APIRouter(prefix="/api/recommendations", tags=["recommendations"])


@router.get("", response_model=List[RecommendationOut])
async def list_recommendations(
    limit: int = Query(10, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Caller's recommendations with their business, highest score first
    (ties: newest first). Scores are written by an external process.
    """
    return await storage.get_user_recommendations(db, current_user.id, limit)


@router.post("/{recommendation_id}/viewed", response_model=MessageResponse)
async def mark_viewed(
    recommendation_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    ok = await storage.mark_recommendation_as_viewed(db, recommendation_id, current_user.id)
    if not ok:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Recommendation not found")
    return MessageResponse(message="Recommendation marked as viewed")

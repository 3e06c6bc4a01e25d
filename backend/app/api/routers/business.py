from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.db import get_db
from app.models import User
from app.schemas import (
    BusinessProfileCreate, BusinessProfileUpdate, BusinessProfileOut, MessageResponse,
)
from app.services import storage
from app.services.auth_service import get_current_user

router = APIRouter(prefix="/api", tags=["business"])


# public: browse / search
@router.get("/businesses", response_model=List[BusinessProfileOut])
async def list_businesses(
    q: Optional[str] = Query(None, max_length=200),
    category: Optional[str] = Query(None, max_length=100),
    limit: int = Query(50, ge=1, le=500),
    db: AsyncSession = Depends(get_db),
):
    """
    Active businesses. With `q` and/or `category` this is a name search ordered
    by name; without either it is the newest `limit` profiles.
    """
    if q or category:
        return await storage.search_businesses(db, q or "", category, limit)
    return await storage.get_all_businesses(db, limit)


@router.get("/businesses/{business_id}", response_model=BusinessProfileOut)
async def get_business(business_id: int, db: AsyncSession = Depends(get_db)):
    profile = await storage.get_business_profile(db, business_id)
    if profile is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Business not found")
    return profile


# owner side
@router.get("/business-profile", response_model=BusinessProfileOut)
async def get_my_business_profile(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    profile = await storage.get_business_profile_by_user_id(db, current_user.id)
    if profile is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Business profile not found")
    return profile


@router.post("/business-profile", response_model=BusinessProfileOut, status_code=status.HTTP_201_CREATED)
async def create_business_profile(
    profile_in: BusinessProfileCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    profile = await storage.create_business_profile(db, current_user.id, profile_in.model_dump())

    await storage.create_activity_log(
        db,
        user_id=current_user.id,
        action="business_create",
        description=f"Created business profile: {profile.business_name}",
        metadata={"businessId": profile.id},
    )
    return profile


@router.patch("/businesses/{business_id}", response_model=BusinessProfileOut)
async def update_business(
    business_id: int,
    profile_in: BusinessProfileUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    update_data = profile_in.model_dump(exclude_unset=True)
    if not update_data:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Nothing to update")

    profile = await storage.update_business_profile(db, business_id, current_user.id, update_data)
    if profile is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Business not found")

    await storage.create_activity_log(
        db,
        user_id=current_user.id,
        action="business_update",
        description=f"Updated business profile: {profile.business_name}",
        metadata={"businessId": profile.id, "fields": sorted(update_data)},
    )
    return profile


@router.delete("/businesses/{business_id}", response_model=MessageResponse)
async def delete_business(
    business_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    deleted = await storage.delete_business_profile(db, business_id, current_user.id)
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Business not found")

    await storage.create_activity_log(
        db,
        user_id=current_user.id,
        action="business_delete",
        description=f"Deleted business profile #{business_id}",
        metadata={"businessId": business_id},
    )
    return MessageResponse(message="Business profile deleted successfully")

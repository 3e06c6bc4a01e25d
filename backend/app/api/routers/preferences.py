from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.db import get_db
from app.models import User
from app.schemas import CustomerPreferencesCreate, CustomerPreferencesUpdate, CustomerPreferencesOut
from app.services import storage
from app.services.auth_service import get_current_user

router = APIRouter(prefix="/api/customer-preferences", tags=["preferences"])


@router.get("", response_model=CustomerPreferencesOut)
async def get_preferences(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    prefs = await storage.get_customer_preferences(db, current_user.id)
    if prefs is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Preferences not found")
    return prefs


@router.post("", response_model=CustomerPreferencesOut, status_code=status.HTTP_201_CREATED)
async def create_preferences(
    prefs_in: CustomerPreferencesCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if await storage.get_customer_preferences(db, current_user.id) is not None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Preferences already exist, use PUT")

    prefs = await storage.create_customer_preferences(db, current_user.id, prefs_in.model_dump())

    await storage.create_activity_log(
        db,
        user_id=current_user.id,
        action="preferences_create",
        description="Saved customer preferences",
        metadata={"categories": prefs.preferred_categories or []},
    )
    return prefs


@router.put("", response_model=CustomerPreferencesOut)
async def update_preferences(
    prefs_in: CustomerPreferencesUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    update_data = prefs_in.model_dump(exclude_unset=True)
    if not update_data:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Nothing to update")

    prefs = await storage.update_customer_preferences(db, current_user.id, update_data)
    if prefs is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Preferences not found")

    await storage.create_activity_log(
        db,
        user_id=current_user.id,
        action="preferences_update",
        description="Updated customer preferences",
        metadata={"fields": sorted(update_data)},
    )
    return prefs

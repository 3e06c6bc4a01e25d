import logging
from decimal import Decimal
from typing import List

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.db import get_db
from app.models import User
from app.schemas import (
    WeightEntryCreate, WeightEntryUpdate, WeightEntryOut, PhotoUploadResponse, MessageResponse,
)
from app.services import storage, uploads, weight_detector
from app.services.auth_service import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["weight"])


@router.post("/weight-entries", response_model=WeightEntryOut)
async def create_weight_entry(
    entry_in: WeightEntryCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    entry = await storage.create_weight_entry(db, current_user.id, entry_in.model_dump())

    await storage.create_activity_log(
        db,
        user_id=current_user.id,
        action="weight_entry",
        description=f"Manually added weight: {entry.weight} {entry.unit}",
        metadata={"entryId": entry.id, "entryType": entry.entry_type},
    )
    return entry


@router.get("/weight-entries", response_model=List[WeightEntryOut])
async def list_weight_entries(
    limit: int = Query(50, ge=1, le=500),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await storage.get_weight_entries(db, current_user.id, limit)


@router.get("/weight-entries/{entry_id}", response_model=WeightEntryOut)
async def get_weight_entry(
    entry_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    entry = await storage.get_weight_entry(db, entry_id, current_user.id)
    if entry is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Weight entry not found")
    return entry


@router.patch("/weight-entries/{entry_id}", response_model=WeightEntryOut)
async def update_weight_entry(
    entry_id: int,
    entry_in: WeightEntryUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    update_data = entry_in.model_dump(exclude_unset=True)
    if not update_data:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Nothing to update")

    entry = await storage.update_weight_entry(db, entry_id, current_user.id, update_data)
    if entry is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Weight entry not found")

    await storage.create_activity_log(
        db,
        user_id=current_user.id,
        action="weight_update",
        description=f"Updated weight entry: {entry.weight} {entry.unit}",
        metadata={"entryId": entry.id, "fields": sorted(update_data)},
    )
    return entry


@router.delete("/weight-entries/{entry_id}", response_model=MessageResponse)
async def delete_weight_entry(
    entry_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    # fetched first so the log can describe what was removed
    entry = await storage.get_weight_entry(db, entry_id, current_user.id)
    if entry is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Weight entry not found")
    weight, unit = entry.weight, entry.unit

    deleted = await storage.delete_weight_entry(db, entry_id, current_user.id)
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Weight entry not found")

    await storage.create_activity_log(
        db,
        user_id=current_user.id,
        action="weight_delete",
        description=f"Deleted weight entry: {weight} {unit}",
        metadata={"entryId": entry_id, "deletedWeight": str(weight), "deletedUnit": unit},
    )
    return MessageResponse(message="Weight entry deleted successfully")


@router.post("/upload-weight-photo", response_model=PhotoUploadResponse)
async def upload_weight_photo(
    image: UploadFile = File(...),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    photo_path, content = await uploads.save_image_upload(image)
    detected_weight = weight_detector.detect_weight(content)

    try:
        entry = await storage.create_weight_entry(
            db,
            current_user.id,
            {
                "weight": Decimal(str(detected_weight)),
                "unit": "lbs",
                "entry_type": "photo",
                "photo_path": photo_path,
            },
        )
    except Exception:
        # no row points at the file, so it must not outlive the failed insert
        uploads.discard_upload(photo_path)
        raise

    await storage.create_activity_log(
        db,
        user_id=current_user.id,
        action="photo_upload",
        description=f"Uploaded scale photo and detected weight: {detected_weight} lbs",
        metadata={
            "entryId": entry.id,
            "photoPath": photo_path,
            "detectedWeight": detected_weight,
            "entryType": "photo",
        },
    )
    logger.info("User %s uploaded weight photo -> %s lbs", current_user.id, detected_weight)

    return PhotoUploadResponse(
        weight_entry=WeightEntryOut.model_validate(entry),
        detected_weight=detected_weight,
        photo_path=photo_path,
        message="Photo uploaded and weight detected successfully",
    )

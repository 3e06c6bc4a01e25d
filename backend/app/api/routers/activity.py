from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.db import get_db
from app.models import User
from app.schemas import ActivityLogOut
from app.services import storage
from app.services.auth_service import get_current_user

router = APIRouter(prefix="/api", tags=["activity"])


@router.get("/activity-logs", response_model=List[ActivityLogOut])
async def list_activity_logs(
    limit: int = Query(10, ge=1, le=500),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Newest-first audit trail of the caller's own mutations."""
    return await storage.get_activity_logs(db, current_user.id, limit)

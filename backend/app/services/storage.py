"""
Typed CRUD access per entity.

Every function takes the request's AsyncSession first, runs a single-table
(or single-join) statement and commits when it writes. "Not found" is None / False;
database errors propagate to the route, which turns them into a 500.
"""
from __future__ import annotations
from typing import Any, Optional, List

from sqlalchemy import select, delete, desc, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from app.models import (
    User, WeightEntry, ActivityLog, BusinessProfile,
    CustomerPreferences, BusinessReview, Recommendation,
)


# --- users -------------------------------------------------------------------

async def get_user(db: AsyncSession, user_id: str) -> Optional[User]:
    return await db.get(User, user_id)


async def upsert_user(
    db: AsyncSession,
    *,
    id: str,
    email: Optional[str] = None,
    first_name: Optional[str] = None,
    last_name: Optional[str] = None,
    profile_image_url: Optional[str] = None,
) -> User:
    user = await db.get(User, id)
    if user is None:
        user = User(id=id)
        db.add(user)
    else:
        user.updated_at = func.now()

    user.email = email
    user.first_name = first_name
    user.last_name = last_name
    user.profile_image_url = profile_image_url

    await db.commit()
    await db.refresh(user)
    return user


# --- weight entries ----------------------------------------------------------

async def create_weight_entry(db: AsyncSession, user_id: str, data: dict[str, Any]) -> WeightEntry:
    entry = WeightEntry(user_id=user_id, **data)
    db.add(entry)
    await db.commit()
    await db.refresh(entry)
    return entry


async def get_weight_entries(db: AsyncSession, user_id: str, limit: int = 50) -> List[WeightEntry]:
    q = (
        select(WeightEntry)
        .where(WeightEntry.user_id == user_id)
        .order_by(desc(WeightEntry.recorded_at), desc(WeightEntry.id))
        .limit(limit)
    )
    return list((await db.execute(q)).scalars().all())


async def get_weight_entry(db: AsyncSession, entry_id: int, user_id: str) -> Optional[WeightEntry]:
    q = select(WeightEntry).where(WeightEntry.id == entry_id, WeightEntry.user_id == user_id)
    return (await db.execute(q)).scalar_one_or_none()


async def update_weight_entry(
    db: AsyncSession, entry_id: int, user_id: str, data: dict[str, Any]
) -> Optional[WeightEntry]:
    entry = await get_weight_entry(db, entry_id, user_id)
    if entry is None:
        return None
    for key, value in data.items():
        setattr(entry, key, value)
    await db.commit()
    await db.refresh(entry)
    return entry


async def delete_weight_entry(db: AsyncSession, entry_id: int, user_id: str) -> bool:
    result = await db.execute(
        delete(WeightEntry).where(WeightEntry.id == entry_id, WeightEntry.user_id == user_id)
    )
    await db.commit()
    return (result.rowcount or 0) > 0


# --- activity logs -----------------------------------------------------------

async def create_activity_log(
    db: AsyncSession,
    *,
    user_id: str,
    action: str,
    description: Optional[str] = None,
    metadata: Optional[dict[str, Any]] = None,
) -> ActivityLog:
    log = ActivityLog(user_id=user_id, action=action, description=description, meta=metadata)
    db.add(log)
    await db.commit()
    await db.refresh(log)
    return log


async def get_activity_logs(db: AsyncSession, user_id: str, limit: int = 10) -> List[ActivityLog]:
    q = (
        select(ActivityLog)
        .where(ActivityLog.user_id == user_id)
        .order_by(desc(ActivityLog.created_at), desc(ActivityLog.id))
        .limit(limit)
    )
    return list((await db.execute(q)).scalars().all())


# --- business profiles -------------------------------------------------------

async def create_business_profile(
    db: AsyncSession, user_id: str, data: dict[str, Any]
) -> BusinessProfile:
    profile = BusinessProfile(user_id=user_id, **data)
    db.add(profile)
    await db.commit()
    await db.refresh(profile)
    return profile


async def get_business_profile(db: AsyncSession, business_id: int) -> Optional[BusinessProfile]:
    return await db.get(BusinessProfile, business_id)


async def get_business_profile_by_user_id(db: AsyncSession, user_id: str) -> Optional[BusinessProfile]:
    q = (
        select(BusinessProfile)
        .where(BusinessProfile.user_id == user_id)
        .order_by(BusinessProfile.id)
        .limit(1)
    )
    return (await db.execute(q)).scalar_one_or_none()


async def update_business_profile(
    db: AsyncSession, business_id: int, user_id: str, data: dict[str, Any]
) -> Optional[BusinessProfile]:
    q = select(BusinessProfile).where(
        BusinessProfile.id == business_id, BusinessProfile.user_id == user_id
    )
    profile = (await db.execute(q)).scalar_one_or_none()
    if profile is None:
        return None
    for key, value in data.items():
        setattr(profile, key, value)
    profile.updated_at = func.now()
    await db.commit()
    await db.refresh(profile)
    return profile


async def delete_business_profile(db: AsyncSession, business_id: int, user_id: str) -> bool:
    result = await db.execute(
        delete(BusinessProfile).where(
            BusinessProfile.id == business_id, BusinessProfile.user_id == user_id
        )
    )
    await db.commit()
    return (result.rowcount or 0) > 0


async def search_businesses(
    db: AsyncSession, query: str, category: Optional[str] = None, limit: int = 50
) -> List[BusinessProfile]:
    q = select(BusinessProfile).where(
        BusinessProfile.is_active.is_(True),
        BusinessProfile.business_name.ilike(f"%{query}%"),
    )
    if category:
        q = q.where(BusinessProfile.category == category)
    q = q.order_by(BusinessProfile.business_name, BusinessProfile.id).limit(limit)
    return list((await db.execute(q)).scalars().all())


async def get_all_businesses(db: AsyncSession, limit: int = 50) -> List[BusinessProfile]:
    q = (
        select(BusinessProfile)
        .where(BusinessProfile.is_active.is_(True))
        .order_by(desc(BusinessProfile.created_at), desc(BusinessProfile.id))
        .limit(limit)
    )
    return list((await db.execute(q)).scalars().all())


# --- customer preferences ----------------------------------------------------

async def create_customer_preferences(
    db: AsyncSession, user_id: str, data: dict[str, Any]
) -> CustomerPreferences:
    prefs = CustomerPreferences(user_id=user_id, **data)
    db.add(prefs)
    await db.commit()
    await db.refresh(prefs)
    return prefs


async def get_customer_preferences(db: AsyncSession, user_id: str) -> Optional[CustomerPreferences]:
    q = select(CustomerPreferences).where(CustomerPreferences.user_id == user_id)
    return (await db.execute(q)).scalar_one_or_none()


async def update_customer_preferences(
    db: AsyncSession, user_id: str, data: dict[str, Any]
) -> Optional[CustomerPreferences]:
    prefs = await get_customer_preferences(db, user_id)
    if prefs is None:
        return None
    for key, value in data.items():
        setattr(prefs, key, value)
    prefs.updated_at = func.now()
    await db.commit()
    await db.refresh(prefs)
    return prefs


# --- reviews -----------------------------------------------------------------

async def create_business_review(
    db: AsyncSession, customer_id: str, business_id: int, data: dict[str, Any]
) -> BusinessReview:
    review = BusinessReview(customer_id=customer_id, business_id=business_id, **data)
    db.add(review)
    await db.commit()
    await db.refresh(review)
    return review


async def get_business_reviews(db: AsyncSession, business_id: int) -> List[BusinessReview]:
    q = (
        select(BusinessReview)
        .where(BusinessReview.business_id == business_id)
        .order_by(desc(BusinessReview.created_at), desc(BusinessReview.id))
    )
    return list((await db.execute(q)).scalars().all())


async def get_user_reviews(db: AsyncSession, user_id: str) -> List[BusinessReview]:
    q = (
        select(BusinessReview)
        .where(BusinessReview.customer_id == user_id)
        .order_by(desc(BusinessReview.created_at), desc(BusinessReview.id))
    )
    return list((await db.execute(q)).scalars().all())


# --- recommendations ---------------------------------------------------------

async def create_recommendation(db: AsyncSession, data: dict[str, Any]) -> Recommendation:
    # Entry point for the external scoring process; no route exposes it.
    rec = Recommendation(**data)
    db.add(rec)
    await db.commit()
    await db.refresh(rec)
    return rec


async def get_user_recommendations(
    db: AsyncSession, user_id: str, limit: int = 10
) -> List[Recommendation]:
    q = (
        select(Recommendation)
        .join(BusinessProfile, Recommendation.business_id == BusinessProfile.id)
        .where(Recommendation.user_id == user_id)
        .options(joinedload(Recommendation.business))
        .order_by(desc(Recommendation.score), desc(Recommendation.created_at), desc(Recommendation.id))
        .limit(limit)
    )
    return list((await db.execute(q)).unique().scalars().all())


async def mark_recommendation_as_viewed(db: AsyncSession, recommendation_id: int, user_id: str) -> bool:
    q = select(Recommendation).where(
        Recommendation.id == recommendation_id, Recommendation.user_id == user_id
    )
    rec = (await db.execute(q)).scalar_one_or_none()
    if rec is None:
        return False
    if not rec.is_viewed:
        rec.is_viewed = True
        await db.commit()
    return True

"""
Database-backed session store (the `sessions` table).

The cookie only carries the opaque sid; the session blob and its expiry live in
Postgres so every worker process sees the same sessions.
"""
from __future__ import annotations

import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from app.models import Session

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _as_aware(value: datetime) -> datetime:
    # sqlite hands back naive datetimes
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


async def create_session(db: AsyncSession, data: dict[str, Any], ttl_seconds: int) -> str:
    sid = secrets.token_urlsafe(32)
    db.add(Session(sid=sid, sess=data, expire=_utc_now() + timedelta(seconds=ttl_seconds)))
    await db.commit()
    return sid


async def get_session(db: AsyncSession, sid: str) -> Optional[dict[str, Any]]:
    """Return the session blob, or None if missing/expired (expired rows are removed)."""
    if not sid:
        return None
    row = await db.get(Session, sid)
    if row is None:
        return None
    if _as_aware(row.expire) <= _utc_now():
        logger.info("Session expired, removing sid=%s...", sid[:8])
        await db.delete(row)
        await db.commit()
        return None
    return row.sess


async def touch_session(db: AsyncSession, sid: str, ttl_seconds: int) -> None:
    row = await db.get(Session, sid)
    if row is None:
        return
    row.expire = _utc_now() + timedelta(seconds=ttl_seconds)
    await db.commit()


async def delete_session(db: AsyncSession, sid: str) -> None:
    await db.execute(delete(Session).where(Session.sid == sid))
    await db.commit()


async def purge_expired_sessions(db: AsyncSession) -> int:
    result = await db.execute(delete(Session).where(Session.expire <= _utc_now()))
    await db.commit()
    return result.rowcount or 0

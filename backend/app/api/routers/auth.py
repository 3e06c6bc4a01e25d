import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app import config
from app.db import get_db
from app.models import User
from app.schemas import UserPublic
from app.services import auth_service, session_store
from app.services.auth_service import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["auth"])


@router.get("/login")
async def login():
    """Redirect the browser to the Auth0 universal login page."""
    state = auth_service.create_login_state()
    return RedirectResponse(auth_service.build_authorize_url(state), status_code=status.HTTP_302_FOUND)


@router.get("/callback")
async def callback(
    code: Optional[str] = None,
    state: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
):
    payload = auth_service.verify_login_state(state)
    if not code:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing authorization code")

    try:
        claims = await auth_service.fetch_auth0_profile(code)
    except auth_service.ProviderError as e:
        logger.error("Auth0 login failed: %s", e)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Failed to communicate with identity provider")

    user = await auth_service.upsert_user_from_claims(db, claims)
    sid = await session_store.create_session(
        db,
        {"user": {"sub": user.id, "claims": claims}},
        config.SESSION_TTL_SECONDS,
    )
    logger.info("User %s logged in", user.id)

    return_to = payload.get("return_to") or "/"
    if not return_to.startswith("/") or return_to.startswith("//"):
        return_to = "/"

    response = RedirectResponse(return_to, status_code=status.HTTP_302_FOUND)
    response.set_cookie(
        key=config.SESSION_COOKIE_NAME,
        value=sid,
        max_age=config.SESSION_TTL_SECONDS,
        httponly=True,
        secure=config.SESSION_COOKIE_SECURE,
        samesite="lax",
    )
    return response


@router.get("/logout")
async def logout(request: Request, db: AsyncSession = Depends(get_db)):
    sid = request.cookies.get(config.SESSION_COOKIE_NAME)
    if sid:
        await session_store.delete_session(db, sid)
        logger.info("Session %s... logged out", sid[:8])

    response = RedirectResponse(auth_service.build_logout_url(), status_code=status.HTTP_302_FOUND)
    response.delete_cookie(
        config.SESSION_COOKIE_NAME,
        httponly=True,
        secure=config.SESSION_COOKIE_SECURE,
        samesite="lax",
    )
    return response


@router.get("/auth/user", response_model=UserPublic)
async def get_auth_user(
    request: Request,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Currently logged-in user (used by the client to decide login state).
    Each call slides the session expiry forward.
    """
    await session_store.touch_session(
        db, request.cookies.get(config.SESSION_COOKIE_NAME), config.SESSION_TTL_SECONDS
    )
    return current_user

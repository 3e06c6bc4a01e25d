import logging
from datetime import datetime, timedelta, timezone
from typing import Optional
from urllib.parse import urlencode

import httpx
from fastapi import Depends, HTTPException, Request, status
from jose import JWTError, jwt
from sqlalchemy.ext.asyncio import AsyncSession

from app import config
from app.db import get_db
from app.models import User
from app.services import session_store, storage

logger = logging.getLogger(__name__)

STATE_TTL_MINUTES = 10


class ProviderError(RuntimeError):
    """Auth0 token exchange / userinfo call failed."""


def auth0_base_url() -> str:
    return f"https://{config.AUTH0_DOMAIN}"


def create_login_state(return_to: str = "/") -> str:
    """Short-lived signed `state` for the authorize redirect (checked again on /callback)."""
    expire = datetime.now(timezone.utc) + timedelta(minutes=STATE_TTL_MINUTES)
    to_encode = {"return_to": return_to, "exp": expire, "scope": "login"}
    return jwt.encode(to_encode, config.SESSION_SECRET, algorithm=config.SESSION_ALGORITHM)


def verify_login_state(state: Optional[str]) -> dict:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid or expired login state",
    )
    if not state:
        raise credentials_exception
    try:
        payload = jwt.decode(state, config.SESSION_SECRET, algorithms=[config.SESSION_ALGORITHM])
    except JWTError:
        raise credentials_exception
    if payload.get("scope") != "login":
        raise credentials_exception
    return payload


def build_authorize_url(state: str) -> str:
    params = {
        "response_type": "code",
        "client_id": config.AUTH0_CLIENT_ID,
        "redirect_uri": f"{config.BASE_URL}/api/callback",
        "scope": config.AUTH0_SCOPE,
        "state": state,
    }
    return f"{auth0_base_url()}/authorize?{urlencode(params)}"


def build_logout_url() -> str:
    params = {"client_id": config.AUTH0_CLIENT_ID, "returnTo": config.BASE_URL}
    return f"{auth0_base_url()}/v2/logout?{urlencode(params)}"


async def fetch_auth0_profile(code: str) -> dict:
    """
    Exchange the authorization code and return the OIDC userinfo claims
    (sub, name, email, picture, ...).
    """
    token_payload = {
        "grant_type": "authorization_code",
        "client_id": config.AUTH0_CLIENT_ID,
        "client_secret": config.AUTH0_CLIENT_SECRET,
        "redirect_uri": f"{config.BASE_URL}/api/callback",
        "code": code,
    }
    try:
        async with httpx.AsyncClient(base_url=auth0_base_url(), timeout=15.0) as client:
            token_resp = await client.post("/oauth/token", data=token_payload)
            token_resp.raise_for_status()
            access_token = token_resp.json().get("access_token")
            if not access_token:
                raise ProviderError("Auth0 returned no access_token")

            headers = {"Authorization": f"Bearer {access_token}"}
            user_info_resp = await client.get("/userinfo", headers=headers)
            user_info_resp.raise_for_status()
            claims = user_info_resp.json()
    except httpx.HTTPError as e:
        raise ProviderError(f"Failed to communicate with Auth0: {e}") from e

    if not claims.get("sub"):
        raise ProviderError("Auth0 userinfo has no subject")
    return claims


def split_display_name(name: Optional[str]) -> tuple[Optional[str], Optional[str]]:
    """'Ada King Lovelace' -> ('Ada', 'King Lovelace')"""
    parts = (name or "").split(" ")
    first = parts[0] or None
    last = " ".join(parts[1:]) or None
    return first, last


async def upsert_user_from_claims(db: AsyncSession, claims: dict) -> User:
    first_name, last_name = split_display_name(claims.get("name"))
    return await storage.upsert_user(
        db,
        id=str(claims["sub"]),
        email=claims.get("email") or None,
        first_name=claims.get("given_name") or first_name,
        last_name=claims.get("family_name") or last_name,
        profile_image_url=claims.get("picture"),
    )


async def get_current_user(request: Request, db: AsyncSession = Depends(get_db)) -> User:
    """
    Session-cookie guard for protected routes.
    Resolves cookie -> session row -> user claim -> users row, or 401.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Unauthorized",
    )
    sid = request.cookies.get(config.SESSION_COOKIE_NAME)
    if not sid:
        raise credentials_exception

    sess = await session_store.get_session(db, sid)
    if sess is None:
        raise credentials_exception

    subject = (sess.get("user") or {}).get("sub")
    if not subject:
        raise credentials_exception

    user = await storage.get_user(db, str(subject))
    if user is None:
        raise credentials_exception
    return user

import asyncio
import os
import tempfile

# app.config reads the environment at import time
_TMP_DIR = tempfile.mkdtemp(prefix="weightwise-tests-")
os.environ["ASYNC_DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(_TMP_DIR, 'test.db')}"
os.environ["UPLOAD_DIR"] = os.path.join(_TMP_DIR, "uploads")
os.environ["SESSION_COOKIE_SECURE"] = "true"
os.environ.setdefault("SESSION_SECRET", "test-session-secret")
os.environ.setdefault("AUTH0_DOMAIN", "example.auth0.test")
os.environ.setdefault("AUTH0_CLIENT_ID", "test-client-id")
os.environ.setdefault("AUTH0_CLIENT_SECRET", "test-client-secret")
os.environ.setdefault("BASE_URL", "https://testserver")

import pytest
from fastapi.testclient import TestClient

from app import config
from app.db import Base, engine, SessionLocal
from app.main import app
from app.services import session_store, storage


async def _reset_schema():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    # connections are bound to this loop; the app opens its own
    await engine.dispose()


async def _seed_user_session(user_id: str, email: str, first_name: str) -> str:
    async with SessionLocal() as db:
        await storage.upsert_user(db, id=user_id, email=email, first_name=first_name)
        return await session_store.create_session(
            db, {"user": {"sub": user_id}}, config.SESSION_TTL_SECONDS
        )


@pytest.fixture
def client():
    asyncio.run(_reset_schema())
    with TestClient(app, base_url="https://testserver") as c:
        yield c


@pytest.fixture
def login(client):
    """login("auth0|alice") -> sid; the client sends that session cookie from then on."""

    def _login(user_id: str = "auth0|alice", email: str | None = None, first_name: str = "Alice") -> str:
        email = email or f"{user_id.split('|')[-1]}@example.com"
        sid = client.portal.call(_seed_user_session, user_id, email, first_name)
        client.cookies.set(config.SESSION_COOKIE_NAME, sid)
        return sid

    return _login


@pytest.fixture
def run_db(client):
    """Run `async fn(db, *args)` against the app's database on the client's loop."""

    async def _with_session(fn, *args):
        async with SessionLocal() as db:
            return await fn(db, *args)

    def _run(fn, *args):
        return client.portal.call(_with_session, fn, *args)

    return _run

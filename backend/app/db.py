from sqlalchemy import event
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.orm import DeclarativeBase

from app.config import ASYNC_DB_URL


class Base(DeclarativeBase):
    pass


engine = create_async_engine(ASYNC_DB_URL, echo=False, pool_pre_ping=True)

if engine.dialect.name == "sqlite":
    # ON DELETE CASCADE (reviews, recommendations) needs this on every sqlite connection
    @event.listens_for(engine.sync_engine, "connect")
    def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


SessionLocal = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)


async def get_db():
    """Request-scoped session; handlers commit explicitly through app.services.storage."""
    async with SessionLocal() as session:
        yield session

"""
Database Session Management

Async SQLAlchemy engine and session factory for the links table, built
through the database adapter so the backend can be swapped without touching
the store.
"""

from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession as SQLModelAsyncSession

from shortbox.core.setting import settings
from shortbox.db import models  # noqa: F401  registers tables on SQLModel.metadata
from shortbox.db.sqlite_adapter import get_database_adapter

db_adapter = get_database_adapter(settings.DATABASE_URL)

engine = db_adapter.create_engine(settings.DATABASE_URL)

async_session_maker = async_sessionmaker(
    engine,
    class_=SQLModelAsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def init_models() -> None:
    """Create missing tables. Used on startup when CREATE_TABLES is set."""
    async with engine.begin() as connection:
        await connection.run_sync(SQLModel.metadata.create_all)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency function for FastAPI to get database session.

    Commits on success, rolls back on exception; the context manager
    closes the session.

    Usage in FastAPI:
        @router.get("/endpoint")
        async def endpoint(session: AsyncSession = Depends(get_session)):
            pass
    """
    async with async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise

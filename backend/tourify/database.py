"""
Tourify Backend — Database Session Management
==============================================

What:  Async SQLAlchemy engine, session factory, declarative base and the
       FastAPI session dependency.
How:   One pooled engine per process; one AsyncSession per request. The
       dependency commits when the handler returns and rolls back on any
       exception, so each API operation (including the multi-row replace of a
       tour's steps) is a single transaction.
"""

from typing import Any, AsyncGenerator, Dict

from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from tourify.config import settings


def _engine_options(database_url: str) -> Dict[str, Any]:
    """Pool sizing only applies to server databases; SQLite picks its own pool."""
    options: Dict[str, Any] = {
        "echo": settings.log_level == "DEBUG",
    }
    if not database_url.startswith("sqlite"):
        options.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=settings.db_pool_pre_ping,
            pool_recycle=3600,
        )
    return options


engine = create_async_engine(settings.database_url, **_engine_options(settings.database_url))

# expire_on_commit=False: response models are built from ORM objects after commit
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """Base class for all ORM models; its metadata drives Alembic."""
    pass


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    1. Opens a session from the factory
    2. Yields it to the route handler
    3. Commits on success, rolls back on any exception (then re-raises)
    4. Always closes the session, returning the connection to the pool

    Example:
        @router.get("/tours")
        async def list_tours(db: AsyncSession = Depends(get_db_session)):
            ...
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def dispose_engine() -> None:
    """Close every pooled connection. Called from the lifespan shutdown."""
    await engine.dispose()

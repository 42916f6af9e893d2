"""
Async database engine and session scopes.

Production runs on PostgreSQL through a transaction pooler; tests point
DATABASE_URL at an in-memory SQLite database.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, AsyncIterator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from commissiondesk.config import settings

logger = logging.getLogger(__name__)


def _connect_args(url: str) -> dict:
    # Transaction poolers reject prepared statements
    if url.startswith("postgresql+asyncpg"):
        return {"statement_cache_size": 0}
    return {}


def _engine_options(url: str) -> dict:
    options = {
        "echo": settings.log_level == "DEBUG",
        "connect_args": _connect_args(url),
    }
    # The pooler owns connection reuse; a local pool would pin server connections
    if url.startswith("postgresql"):
        options["poolclass"] = NullPool
    return options


engine = create_async_engine(settings.database_url, **_engine_options(settings.database_url))

AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


@asynccontextmanager
async def _unit_of_work() -> AsyncIterator[AsyncSession]:
    """One session per request or job: commit if the body finished, roll back otherwise."""
    session = AsyncSessionLocal()
    try:
        yield session
        await session.commit()
    except Exception:
        logger.debug("Rolling back session after error")
        await session.rollback()
        raise
    finally:
        await session.close()


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency yielding the request's session.

    Sale flows commit on their own; the final commit here only covers
    reads and audit rows added after the last flow commit.
    """
    async with _unit_of_work() as session:
        yield session


def get_db_context():
    """
    Session scope for scripts.

        async with get_db_context() as db:
            await create_sale(db, data, salesperson)
    """
    return _unit_of_work()

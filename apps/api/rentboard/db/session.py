"""Database session management for store snapshots."""
from __future__ import annotations

import logging
from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from ..core.config import settings
from ..models.base import Base

logger = logging.getLogger(__name__)

connect_args: dict[str, object] = {}
if settings.database_ssl_required:
    connect_args["ssl"] = True

engine = create_async_engine(
    settings.database_async_url,
    echo=False,
    pool_pre_ping=True,
    connect_args=connect_args,
)
SessionLocal = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)


async def create_schema(bind: AsyncEngine | None = None) -> None:
    """Create missing tables; existing ones are left untouched."""

    from .. import models  # noqa: F401 - registers the mappers on Base.metadata

    target = bind or engine
    async with target.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Snapshot schema ready on %s", target.url.render_as_string(hide_password=True))


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency to provide an async session."""

    async with SessionLocal() as session:
        yield session

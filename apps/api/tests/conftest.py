"""Shared fixtures: an in-memory snapshot database and a mocked backend client."""
from __future__ import annotations

from collections.abc import Callable

import httpx
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from rentboard.core.http import create_client
from rentboard.data.apartments import DEMO_APARTMENTS
from rentboard.db.session import create_schema

BACKEND_URL = "http://backend.test"


@pytest_asyncio.fixture
async def db_session():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await create_schema(engine)
    maker = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)
    async with maker() as session:
        yield session
    await engine.dispose()


@pytest.fixture
def backend() -> Callable[[Callable[[httpx.Request], httpx.Response]], httpx.AsyncClient]:
    """Build a backend client whose requests are answered by ``handler``."""

    def factory(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
        return create_client(base_url=BACKEND_URL, transport=httpx.MockTransport(handler))

    return factory


@pytest.fixture
def demo_apartments() -> list[dict]:
    return [dict(item) for item in DEMO_APARTMENTS]

"""FastAPI application serving list pages and edit sessions for the rental front-end."""
from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse, Response

from .core.config import settings
from .db.session import create_schema
from .routers import apartments, bookings, edit

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    await create_schema()
    logger.info("rentboard started (env=%s, backend=%s)", settings.app_env, settings.backend_base_url)
    yield


app = FastAPI(title="Rentboard View API", version="0.1.0", lifespan=lifespan)

if settings.cors_allow_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

app.include_router(apartments.router, prefix="/api", tags=["apartments"])
app.include_router(bookings.router, prefix="/api", tags=["bookings"])
app.include_router(edit.router, prefix="/api/edit", tags=["edit"])


@app.get("/api/health", tags=["meta"])
async def health() -> dict[str, str]:
    """Simple liveness check."""

    return {"status": "ok"}


@app.head("/api/health", tags=["meta"])
async def health_head() -> Response:
    """Allow HEAD for uptime monitors that only need the status code."""

    return Response(status_code=200)


@app.get("/robots.txt", response_class=PlainTextResponse, include_in_schema=False)
async def robots() -> PlainTextResponse:
    return PlainTextResponse("User-agent: *\nDisallow:")

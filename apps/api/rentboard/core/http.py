"""HTTP client for the marketplace backend and status-to-error mapping."""
from __future__ import annotations

import hashlib
import logging
from collections.abc import AsyncGenerator, Mapping
from typing import Any

import httpx
from fastapi import Request

from .config import settings
from .errors import (
    ApiError,
    AuthorizationError,
    ConflictError,
    NetworkError,
    NotFoundError,
    ServerError,
    ValidationError,
)

logger = logging.getLogger(__name__)

TOKEN_COOKIE = "jwt_token"


def create_client(
    *,
    base_url: str | None = None,
    token: str | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Build a JSON client for the backend, attaching the bearer token if any."""

    headers = {"Content-Type": "application/json", "Accept": "application/json"}
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return httpx.AsyncClient(
        base_url=base_url or settings.backend_base_url,
        headers=headers,
        timeout=settings.backend_timeout_seconds,
        transport=transport,
    )


def token_from_request(request: Request) -> str | None:
    """Return the caller's token from the Authorization header or the jwt cookie."""

    header = request.headers.get("authorization", "")
    if header.lower().startswith("bearer "):
        return header[7:].strip() or None
    return request.cookies.get(TOKEN_COOKIE) or None


def caller_scope(client: httpx.AsyncClient) -> str | None:
    """Short digest of the credentials a client acts with; None when anonymous."""

    authorization = client.headers.get("Authorization")
    if not authorization:
        return None
    return hashlib.sha256(authorization.encode("utf-8")).hexdigest()[:16]


async def get_client(request: Request) -> AsyncGenerator[httpx.AsyncClient, None]:
    """FastAPI dependency providing a backend client on behalf of the caller."""

    token = token_from_request(request) or settings.backend_token or None
    async with create_client(token=token) as client:
        yield client


async def request_json(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    *,
    json: Any = None,
    params: Mapping[str, Any] | None = None,
    not_found_message: str | None = None,
) -> Any:
    """Perform a request and return the decoded body, raising taxonomy errors."""

    query = {key: value for key, value in (params or {}).items() if value is not None}
    try:
        response = await client.request(method, url, json=json, params=query or None)
    except httpx.TransportError as exc:
        logger.warning("Backend %s %s failed: %s", method, url, exc)
        raise NetworkError("No response received from server") from exc

    raise_for_api_error(response, not_found_message=not_found_message)
    if not response.content:
        return None
    return response.json()


def raise_for_api_error(response: httpx.Response, *, not_found_message: str | None = None) -> None:
    """Translate a non-success response into the matching ApiError subclass."""

    if response.is_success:
        return

    status = response.status_code
    if status == 404:
        raise NotFoundError(not_found_message)
    if status in (401, 403):
        raise AuthorizationError()
    if status == 409:
        raise ConflictError(_detail_text(response))
    if status == 422:
        raise ValidationError(_detail_messages(response))
    if status >= 500:
        raise ServerError()
    raise ApiError(_detail_text(response))


def _payload(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None


def _detail_messages(response: httpx.Response) -> list[str]:
    """Extract messages from a FastAPI-style ``{"detail": [{"msg": ...}]}`` body."""

    body = _payload(response)
    detail = body.get("detail") if isinstance(body, dict) else None
    if isinstance(detail, str):
        return [detail]
    if not isinstance(detail, list):
        return []

    messages: list[str] = []
    for item in detail:
        if isinstance(item, dict) and item.get("msg"):
            location = ".".join(str(part) for part in item.get("loc", []) if part != "body")
            messages.append(f"{location}: {item['msg']}" if location else str(item["msg"]))
        elif isinstance(item, str):
            messages.append(item)
    return messages


def _detail_text(response: httpx.Response) -> str | None:
    messages = _detail_messages(response)
    return "; ".join(messages) if messages else None

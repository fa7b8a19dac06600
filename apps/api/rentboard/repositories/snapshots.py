"""Snapshot repository: last-known canonical records per store key."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.snapshot import StoreSnapshot


def snapshot_key(kind: str, record_id: str | None, scope: str | None = None) -> str:
    """Key of one record's snapshot; ``scope`` separates callers of per-user records."""

    key = f"{kind}:{record_id or 'me'}"
    return f"{key}@{scope}" if scope else key


async def load_snapshot(session: AsyncSession, key: str) -> dict[str, Any] | None:
    """Return the stored snapshot payload, or None when nothing was saved yet."""

    row = await session.get(StoreSnapshot, key)
    if row is None:
        return None
    return dict(row.payload)


async def save_snapshot(
    session: AsyncSession, key: str, kind: str, payload: dict[str, Any]
) -> StoreSnapshot:
    """Insert or replace the snapshot stored under ``key``."""

    row = await session.get(StoreSnapshot, key)
    if row is None:
        row = StoreSnapshot(key=key, kind=kind, payload=payload)
        session.add(row)
    else:
        row.payload = payload
        row.updated_at = datetime.now(timezone.utc)
    await session.flush()
    return row


async def delete_snapshot(session: AsyncSession, key: str) -> bool:
    row = await session.get(StoreSnapshot, key)
    if row is None:
        return False
    await session.delete(row)
    await session.flush()
    return True


async def list_snapshots(session: AsyncSession, kind: str | None = None) -> list[StoreSnapshot]:
    stmt = select(StoreSnapshot).order_by(StoreSnapshot.key)
    if kind is not None:
        stmt = stmt.where(StoreSnapshot.kind == kind)
    result = await session.execute(stmt)
    return list(result.scalars().all())

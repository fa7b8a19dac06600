"""Persisted canonical record of an edit store."""
from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, JSONType


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class StoreSnapshot(Base):
    """Last server-confirmed record of one entity, keyed by ``kind:record_id``.

    Only the canonical record is stored; working copies and edit flags are
    session state and never persisted.
    """

    __tablename__ = "store_snapshots"

    key: Mapped[str] = mapped_column(String, primary_key=True)
    kind: Mapped[str] = mapped_column(String, nullable=False, index=True)
    payload: Mapped[dict] = mapped_column(JSONType, default=dict, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False
    )

"""Edit sessions: one store, pipeline and notification buffer per open view.

Sessions live in memory and are evicted after a period of inactivity, which
stands in for the view being unmounted without an explicit close.
"""
from __future__ import annotations

import logging
import time
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass, field
from typing import Any
from uuid import uuid4

import httpx
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import settings
from ..core.errors import ApiError, NotFoundError, StaleResultError, user_message
from ..core.http import caller_scope
from ..repositories import snapshots as snapshots_repo
from .edit_state import EditStateStore, RefetchPolicy
from .fetch import LatestRequest
from .notifications import CollectingNotifier
from .submission import SubmissionPipeline, SubmitResult
from .validation import ValidationSchema

logger = logging.getLogger(__name__)

Loader = Callable[[httpx.AsyncClient, str | None], Awaitable[BaseModel]]
RemoteWriter = Callable[[httpx.AsyncClient, str | None, dict[str, Any]], Awaitable[BaseModel]]


@dataclass(slots=True)
class EditKind:
    """How one entity type is loaded, validated and written back."""

    name: str
    schema: ValidationSchema
    load: Loader
    write: RemoteWriter
    requires_record_id: bool = False
    per_caller: bool = False
    changes_only: bool = False
    read_only_fields: tuple[str, ...] = ()
    unordered_fields: tuple[str, ...] = ()
    success_message: str = "Changes saved successfully"
    not_found_message: str = "This record no longer exists."


@dataclass(slots=True)
class EditSession:
    session_id: str
    kind: EditKind
    record_id: str | None
    store: EditStateStore
    pipeline: SubmissionPipeline
    notifier: CollectingNotifier
    fetch: LatestRequest = field(default_factory=LatestRequest)
    from_cache: bool = False

    def snapshot_key(self, client: httpx.AsyncClient) -> str | None:
        """Snapshot key for this record; per-caller kinds have none for anonymous clients."""

        scope = None
        if self.kind.per_caller:
            scope = caller_scope(client)
            if scope is None:
                return None
        return snapshots_repo.snapshot_key(self.kind.name, self.record_id, scope)


@dataclass
class _SessionEntry:
    session: EditSession
    last_seen: float


class EditSessionRegistry:
    """In-memory edit session registry with TTL eviction."""

    def __init__(
        self,
        ttl_seconds: int = 900,
        *,
        refetch_policy: RefetchPolicy = RefetchPolicy.PRESERVE_EDITS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._ttl = ttl_seconds
        self._clock = clock
        self.refetch_policy = refetch_policy
        self._sessions: dict[str, _SessionEntry] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def open(self, kind: EditKind, record_id: str | None) -> EditSession:
        self._evict_expired()
        session_id = uuid4().hex
        notifier = CollectingNotifier()
        store = EditStateStore(
            f"{kind.name}:{record_id or 'me'}",
            unordered_fields=kind.unordered_fields,
            refetch_policy=self.refetch_policy,
        )
        pipeline = SubmissionPipeline(
            store,
            kind.schema,
            None,
            notifier,
            changes_only=kind.changes_only,
            read_only_fields=kind.read_only_fields,
            success_message=kind.success_message,
        )
        session = EditSession(
            session_id=session_id,
            kind=kind,
            record_id=record_id,
            store=store,
            pipeline=pipeline,
            notifier=notifier,
            fetch=LatestRequest(store.name),
        )
        self._sessions[session_id] = _SessionEntry(session=session, last_seen=self._clock())
        logger.info("Opened edit session %s for %s", session_id, store.name)
        return session

    def get(self, session_id: str) -> EditSession | None:
        self._evict_expired()
        entry = self._sessions.get(session_id)
        if not entry:
            return None
        entry.last_seen = self._clock()
        return entry.session

    def close(self, session_id: str) -> bool:
        entry = self._sessions.pop(session_id, None)
        if entry is None:
            return False
        entry.session.fetch.cancel()
        logger.info("Closed edit session %s", session_id)
        return True

    def sessions(self) -> Iterable[EditSession]:
        self._evict_expired()
        return [entry.session for entry in self._sessions.values()]

    def _evict_expired(self) -> None:
        now = self._clock()
        expired = [key for key, entry in self._sessions.items() if now - entry.last_seen > self._ttl]
        for key in expired:
            logger.info("Evicting idle edit session %s", key)
            self.close(key)


async def load_record(
    edit: EditSession, client: httpx.AsyncClient, db: AsyncSession
) -> None:
    """Fetch the record into the session's store and refresh its snapshot.

    When the backend cannot be reached the last stored snapshot is shown
    instead. NotFound is terminal and never falls back.
    """

    try:
        record = await edit.fetch.run(lambda: edit.kind.load(client, edit.record_id))
    except StaleResultError:
        logger.debug("Session %s: dropped superseded load", edit.session_id)
        return
    except NotFoundError:
        edit.notifier.notify("error", edit.kind.not_found_message)
        raise
    except ApiError as exc:
        key = edit.snapshot_key(client)
        cached = await snapshots_repo.load_snapshot(db, key) if key else None
        if cached is None:
            edit.notifier.notify("error", user_message(exc))
            raise
        logger.warning("Session %s: backend unavailable, using snapshot: %s", edit.session_id, exc)
        edit.store.restore(cached)
        edit.from_cache = True
        edit.notifier.notify("info", "Showing the last saved copy. " + user_message(exc))
        return

    edit.store.set_record(record)
    edit.from_cache = False
    await persist_snapshot(edit, client, db)


async def save(edit: EditSession, client: httpx.AsyncClient, db: AsyncSession) -> SubmitResult:
    """Submit the working copy; a confirmed save also refreshes the snapshot."""

    async def writer(payload: dict[str, Any]) -> BaseModel:
        return await edit.kind.write(client, edit.record_id, payload)

    result = await edit.pipeline.submit(writer)
    if result.ok:
        # Loads started before the commit carry the pre-save record.
        edit.fetch.cancel()
        edit.from_cache = False
        await persist_snapshot(edit, client, db)
    return result


async def persist_snapshot(edit: EditSession, client: httpx.AsyncClient, db: AsyncSession) -> None:
    key = edit.snapshot_key(client)
    snapshot = edit.store.snapshot()
    if key is None or snapshot.get("record") is None:
        return
    await snapshots_repo.save_snapshot(db, key, edit.kind.name, snapshot)
    await db.commit()


registry = EditSessionRegistry(ttl_seconds=settings.edit_session_ttl_seconds)

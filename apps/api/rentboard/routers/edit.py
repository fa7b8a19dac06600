"""Edit session endpoints for apartments and the signed-in user's profile."""
from __future__ import annotations

import httpx
from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.errors import ApiError, NotFoundError, SubmissionInProgressError, user_message
from ..core.http import get_client
from ..db.session import get_session
from ..schemas import views as views_schema
from ..services import apartments as apartments_service
from ..services import edit_sessions
from ..services.edit_sessions import EditKind, EditSession, EditSessionRegistry
from ..services.profile import PROFILE_EDIT

router = APIRouter()

EDIT_KINDS: dict[str, EditKind] = {
    apartments_service.APARTMENT_EDIT.name: apartments_service.APARTMENT_EDIT,
    PROFILE_EDIT.name: PROFILE_EDIT,
}


def get_registry() -> EditSessionRegistry:
    return edit_sessions.registry


def _kind(kind: str) -> EditKind:
    edit_kind = EDIT_KINDS.get(kind)
    if edit_kind is None:
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail=f"Unknown record kind: {kind}")
    return edit_kind


def _session(registry: EditSessionRegistry, kind: str, session_id: str) -> EditSession:
    edit = registry.get(session_id)
    if edit is None or edit.kind.name != kind:
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail="Edit session not found")
    return edit


def _idle(edit: EditSession) -> None:
    try:
        edit.pipeline.ensure_idle()
    except SubmissionInProgressError as exc:
        raise HTTPException(status.HTTP_409_CONFLICT, detail="A save is in progress") from exc


def _out(edit: EditSession) -> views_schema.EditSessionOut:
    store = edit.store
    return views_schema.EditSessionOut(
        session_id=edit.session_id,
        kind=edit.kind.name,
        record_id=edit.record_id,
        phase=store.phase.value,
        is_editing=store.is_editing,
        loading=store.loading,
        has_changes=store.has_changes(),
        changed_fields=store.changed_fields(),
        record=store.record,
        working_copy=store.working_copy,
        from_cache=edit.from_cache,
        error=user_message(store.error) if store.error is not None else None,
        notifications=[
            views_schema.NotificationOut(kind=n.kind, message=n.message) for n in edit.notifier.drain()
        ],
    )


async def _load(
    edit: EditSession, client: httpx.AsyncClient, db: AsyncSession, registry: EditSessionRegistry
) -> None:
    try:
        await edit_sessions.load_record(edit, client, db)
    except NotFoundError as exc:
        registry.close(edit.session_id)
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail=edit.kind.not_found_message) from exc
    except ApiError as exc:
        registry.close(edit.session_id)
        raise HTTPException(status.HTTP_502_BAD_GATEWAY, detail=user_message(exc)) from exc


@router.post("/{kind}", response_model=views_schema.EditSessionOut, status_code=status.HTTP_201_CREATED)
async def open_session(
    kind: str,
    payload: views_schema.OpenSessionRequest | None = None,
    client: httpx.AsyncClient = Depends(get_client),
    db: AsyncSession = Depends(get_session),
    registry: EditSessionRegistry = Depends(get_registry),
) -> views_schema.EditSessionOut:
    """Open a view on one record, falling back to its snapshot when offline."""

    edit_kind = _kind(kind)
    record_id = payload.record_id if payload else None
    if edit_kind.requires_record_id and not record_id:
        raise HTTPException(status.HTTP_422_UNPROCESSABLE_ENTITY, detail="record_id is required")
    edit = registry.open(edit_kind, record_id)
    await _load(edit, client, db, registry)
    return _out(edit)


@router.get("/{kind}/{session_id}", response_model=views_schema.EditSessionOut)
async def get_edit_session(
    kind: str, session_id: str, registry: EditSessionRegistry = Depends(get_registry)
) -> views_schema.EditSessionOut:
    return _out(_session(registry, kind, session_id))


@router.post("/{kind}/{session_id}/refresh", response_model=views_schema.EditSessionOut)
async def refresh_session(
    kind: str,
    session_id: str,
    client: httpx.AsyncClient = Depends(get_client),
    db: AsyncSession = Depends(get_session),
    registry: EditSessionRegistry = Depends(get_registry),
) -> views_schema.EditSessionOut:
    """Refetch the record; unsaved edits follow the registry's refetch policy."""

    edit = _session(registry, kind, session_id)
    _idle(edit)
    await _load(edit, client, db, registry)
    return _out(edit)


@router.post("/{kind}/{session_id}/start", response_model=views_schema.EditSessionOut)
async def start_editing(
    kind: str, session_id: str, registry: EditSessionRegistry = Depends(get_registry)
) -> views_schema.EditSessionOut:
    edit = _session(registry, kind, session_id)
    _idle(edit)
    if not edit.store.start_editing():
        raise HTTPException(status.HTTP_409_CONFLICT, detail="No record loaded")
    return _out(edit)


@router.patch("/{kind}/{session_id}/fields", response_model=views_schema.EditSessionOut)
async def update_fields(
    kind: str,
    session_id: str,
    payload: views_schema.FieldUpdateRequest,
    registry: EditSessionRegistry = Depends(get_registry),
) -> views_schema.EditSessionOut:
    """Apply field edits to the working copy only."""

    edit = _session(registry, kind, session_id)
    _idle(edit)
    if not edit.store.is_editing:
        raise HTTPException(status.HTTP_409_CONFLICT, detail="Start editing first")
    try:
        for update in payload.updates:
            edit.store.update_field(update.path, update.value)
    except ValueError as exc:
        raise HTTPException(status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc
    return _out(edit)


@router.post("/{kind}/{session_id}/items", response_model=views_schema.EditSessionOut)
async def add_item(
    kind: str,
    session_id: str,
    payload: views_schema.ListItemRequest,
    registry: EditSessionRegistry = Depends(get_registry),
) -> views_schema.EditSessionOut:
    """Append an entry to a list field such as ``rules``."""

    edit = _session(registry, kind, session_id)
    _idle(edit)
    if not edit.store.is_editing:
        raise HTTPException(status.HTTP_409_CONFLICT, detail="Start editing first")
    apartments_service.add_list_item(edit.store, edit.notifier, payload.path, payload.value)
    return _out(edit)


@router.delete("/{kind}/{session_id}/items", response_model=views_schema.EditSessionOut)
async def remove_item(
    kind: str,
    session_id: str,
    path: str = Query(min_length=1),
    index: int = Query(ge=0),
    registry: EditSessionRegistry = Depends(get_registry),
) -> views_schema.EditSessionOut:
    edit = _session(registry, kind, session_id)
    _idle(edit)
    if not apartments_service.remove_list_item(edit.store, path, index):
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail="List entry not found")
    return _out(edit)


@router.post("/{kind}/{session_id}/cancel", response_model=views_schema.EditSessionOut)
async def cancel_editing(
    kind: str, session_id: str, registry: EditSessionRegistry = Depends(get_registry)
) -> views_schema.EditSessionOut:
    edit = _session(registry, kind, session_id)
    _idle(edit)
    edit.store.cancel_editing()
    return _out(edit)


@router.post("/{kind}/{session_id}/save", response_model=views_schema.SaveResponse)
async def save(
    kind: str,
    session_id: str,
    client: httpx.AsyncClient = Depends(get_client),
    db: AsyncSession = Depends(get_session),
    registry: EditSessionRegistry = Depends(get_registry),
) -> views_schema.SaveResponse:
    """Validate and submit the working copy."""

    edit = _session(registry, kind, session_id)
    result = await edit_sessions.save(edit, client, db)
    return views_schema.SaveResponse(
        status=result.status.value,
        errors=result.errors,
        field_errors=result.field_errors,
        session=_out(edit),
    )


@router.delete("/{kind}/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def close_session(
    kind: str, session_id: str, registry: EditSessionRegistry = Depends(get_registry)
) -> Response:
    """Called when the view unmounts; unsaved edits are dropped."""

    _session(registry, kind, session_id)
    registry.close(session_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

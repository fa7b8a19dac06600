"""Tests for the validate → write → reconcile submission pipeline."""
from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock

import pytest

from rentboard.core.errors import (
    ConflictError,
    NetworkError,
    SubmissionInProgressError,
    ValidationError,
)
from rentboard.services.edit_state import EditPhase, EditStateStore
from rentboard.services.notifications import CollectingNotifier, Notification
from rentboard.services.profile import PROFILE_SCHEMA
from rentboard.services.submission import SubmissionPipeline, SubmitStatus
from rentboard.services.validation import Required, ValidationSchema

SCHEMA = ValidationSchema(rules=(Required("name", "Name is required"),))
RECORD = {"id": "u1", "name": "Aruzhan", "city": "Astana", "created_at": "2025-01-01"}


def _pipeline(writer, **kwargs) -> tuple[SubmissionPipeline, EditStateStore, CollectingNotifier]:
    store = EditStateStore("profile:u1")
    store.set_record(RECORD)
    store.start_editing()
    notifier = CollectingNotifier()
    return SubmissionPipeline(store, SCHEMA, writer, notifier, **kwargs), store, notifier


@pytest.mark.asyncio
async def test_invalid_record_never_reaches_writer() -> None:
    writer = AsyncMock()
    pipeline, store, notifier = _pipeline(writer)
    store.update_field("name", "")

    result = await pipeline.submit()

    assert result.status is SubmitStatus.INVALID
    assert result.field_errors == {"name": ["Name is required"]}
    writer.assert_not_awaited()
    assert store.phase is EditPhase.EDITING
    assert notifier.drain() == [Notification("error", "Name is required")]


@pytest.mark.asyncio
async def test_successful_save_commits_server_record() -> None:
    server_record = {**RECORD, "city": "Almaty", "updated_at": "2025-06-01"}
    writer = AsyncMock(return_value=server_record)
    pipeline, store, notifier = _pipeline(
        writer, read_only_fields=("created_at",), success_message="Profile updated successfully"
    )
    store.update_field("city", "Almaty")

    result = await pipeline.submit()

    assert result.ok
    writer.assert_awaited_once_with({"id": "u1", "name": "Aruzhan", "city": "Almaty"})
    assert store.is_editing is False
    assert store.record == server_record
    assert result.record == server_record
    assert notifier.drain() == [Notification("success", "Profile updated successfully")]


@pytest.mark.asyncio
async def test_changes_only_sends_changed_fields() -> None:
    writer = AsyncMock(return_value={**RECORD, "city": "Almaty"})
    pipeline, store, _ = _pipeline(writer, changes_only=True)
    store.update_field("city", "Almaty")

    await pipeline.submit()

    writer.assert_awaited_once_with({"city": "Almaty"})


@pytest.mark.asyncio
async def test_nothing_changed_skips_network() -> None:
    writer = AsyncMock()
    pipeline, store, notifier = _pipeline(writer, changes_only=True)

    result = await pipeline.submit()

    assert result.status is SubmitStatus.UNCHANGED
    writer.assert_not_awaited()
    assert store.is_editing is False
    assert notifier.drain() == [Notification("info", "No changes to save")]


@pytest.mark.asyncio
async def test_submit_outside_edit_mode_is_rejected() -> None:
    writer = AsyncMock()
    pipeline, store, _ = _pipeline(writer)
    store.cancel_editing()

    result = await pipeline.submit()

    assert result.status is SubmitStatus.NOT_EDITING
    writer.assert_not_awaited()


@pytest.mark.asyncio
async def test_remote_failure_keeps_working_copy() -> None:
    error = ConflictError()
    writer = AsyncMock(side_effect=error)
    pipeline, store, notifier = _pipeline(writer)
    store.update_field("city", "Almaty")

    result = await pipeline.submit()

    assert result.status is SubmitStatus.FAILED
    assert result.error is error
    assert store.phase is EditPhase.EDITING
    assert store.error is error
    assert store.working_copy["city"] == "Almaty"
    assert store.record["city"] == "Astana"
    assert notifier.drain() == [
        Notification("error", "Apartment is not available for the selected dates.")
    ]
    assert pipeline.pending is False


@pytest.mark.asyncio
async def test_server_validation_messages_are_surfaced() -> None:
    writer = AsyncMock(side_effect=ValidationError(["city: too short"]))
    pipeline, store, notifier = _pipeline(writer)
    store.update_field("city", "A")

    result = await pipeline.submit()

    assert result.errors == ["city: too short"]
    assert "city: too short" in notifier.drain()[0].message


@pytest.mark.asyncio
async def test_unexpected_errors_are_reported_not_raised() -> None:
    writer = AsyncMock(side_effect=KeyError("boom"))
    pipeline, store, notifier = _pipeline(writer)
    store.update_field("city", "Almaty")

    result = await pipeline.submit()

    assert result.status is SubmitStatus.FAILED
    assert store.is_editing
    assert notifier.drain()[0].kind == "error"


@pytest.mark.asyncio
async def test_concurrent_submit_is_rejected_while_pending() -> None:
    release = asyncio.Event()

    async def slow_writer(payload):
        await release.wait()
        return {**RECORD, **payload}

    pipeline, store, _ = _pipeline(slow_writer)
    store.update_field("city", "Almaty")

    first = asyncio.create_task(pipeline.submit())
    while not pipeline.pending:
        await asyncio.sleep(0)

    second = await pipeline.submit()
    assert second.status is SubmitStatus.BUSY
    assert store.phase is EditPhase.SAVING
    with pytest.raises(SubmissionInProgressError):
        pipeline.ensure_idle()

    release.set()
    assert (await first).status is SubmitStatus.SAVED
    assert store.record["city"] == "Almaty"


@pytest.mark.asyncio
async def test_writer_can_be_supplied_per_call() -> None:
    pipeline, store, _ = _pipeline(None)
    store.update_field("city", "Almaty")
    writer = AsyncMock(side_effect=NetworkError())

    result = await pipeline.submit(writer)

    writer.assert_awaited_once()
    assert result.status is SubmitStatus.FAILED
    assert result.errors == ["Network error. Check your connection and retry."]


@pytest.mark.asyncio
async def test_inverted_budget_range_blocks_profile_write() -> None:
    store = EditStateStore("profile:me")
    store.set_record({"name": "Aruzhan", "surname": "Sadykova", "budget_range": {"min": 50000, "max": 150000}})
    store.start_editing()
    writer = AsyncMock()
    pipeline = SubmissionPipeline(store, PROFILE_SCHEMA, writer, CollectingNotifier(), changes_only=True)
    store.update_field("budget_range.max", 40000)

    result = await pipeline.submit()

    assert result.status is SubmitStatus.INVALID
    assert result.field_errors == {"budget_range.max": ["Maximum value must be greater than minimum value"]}
    writer.assert_not_awaited()
    assert store.working_copy["budget_range"] == {"min": 50000, "max": 40000}

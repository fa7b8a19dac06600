"""Validate a working copy, write it to the backend and reconcile the store.

Per record the flow is::

    VIEW --start_editing--> EDITING --cancel_editing--> VIEW
    EDITING --submit(valid)--> SAVING --success--> VIEW (canonical updated)
    SAVING --failure--> EDITING (working copy kept, error notified)
"""
from __future__ import annotations

import enum
import logging
from collections.abc import Awaitable, Callable, Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel

from ..core.errors import ApiError, SubmissionInProgressError, ValidationError, user_message
from .edit_state import EditStateStore, Record
from .notifications import Notifier
from .validation import ValidationSchema, validate

logger = logging.getLogger(__name__)

Writer = Callable[[Record], Awaitable[BaseModel | Mapping[str, Any]]]


class SubmitStatus(str, enum.Enum):
    SAVED = "saved"
    INVALID = "invalid"
    UNCHANGED = "unchanged"
    BUSY = "busy"
    NOT_EDITING = "not_editing"
    FAILED = "failed"


@dataclass(slots=True)
class SubmitResult:
    status: SubmitStatus
    record: Record | None = None
    errors: list[str] = field(default_factory=list)
    field_errors: dict[str, list[str]] = field(default_factory=dict)
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        return self.status is SubmitStatus.SAVED


class SubmissionPipeline:
    """Submits one store's working copy through a remote writer.

    At most one submission runs at a time; a second ``submit`` while one is
    pending is rejected with ``SubmitStatus.BUSY``. Remote failures never
    escape: they are reported through the notifier and the result.
    """

    def __init__(
        self,
        store: EditStateStore,
        schema: ValidationSchema,
        writer: Writer | None,
        notifier: Notifier,
        *,
        changes_only: bool = False,
        require_changes: bool = True,
        read_only_fields: Iterable[str] = (),
        success_message: str = "Changes saved successfully",
    ) -> None:
        self.store = store
        self.schema = schema
        self._writer = writer
        self._notifier = notifier
        self.changes_only = changes_only
        self.require_changes = require_changes
        self._read_only = frozenset(read_only_fields)
        self.success_message = success_message
        self._pending = False

    @property
    def pending(self) -> bool:
        return self._pending

    def ensure_idle(self) -> None:
        """Raise ``SubmissionInProgressError`` while a save is in flight."""

        if self._pending:
            raise SubmissionInProgressError(f"{self.store.name} is being saved")

    async def submit(self, writer: Writer | None = None) -> SubmitResult:
        """Run one submission; ``writer`` overrides the configured writer for this call."""

        writer = writer or self._writer
        if writer is None:
            raise ValueError(f"No writer configured for {self.store.name}")
        if self._pending:
            logger.warning("Store %s: submit rejected, a save is already pending", self.store.name)
            return SubmitResult(SubmitStatus.BUSY, errors=["A save is already in progress"])
        if not self.store.is_editing:
            return SubmitResult(SubmitStatus.NOT_EDITING, errors=["Nothing is being edited"])
        if self.require_changes and not self.store.has_changes():
            self._notifier.notify("info", "No changes to save")
            self.store.cancel_editing()
            return SubmitResult(SubmitStatus.UNCHANGED, record=self.store.record)

        working = self.store.full_record()
        checked = validate(working, self.schema)
        if not checked.valid:
            self._notifier.notify("error", "; ".join(checked.errors))
            return SubmitResult(
                SubmitStatus.INVALID, errors=checked.errors, field_errors=checked.field_errors
            )

        payload = self.store.changes() if self.changes_only else working
        payload = {key: value for key, value in payload.items() if key not in self._read_only}

        self._pending = True
        self.store.mark_saving()
        try:
            saved = await writer(payload)
        except ApiError as exc:
            logger.warning("Store %s: save failed: %s", self.store.name, exc)
            return self._failed(exc)
        except Exception as exc:  # noqa: BLE001 - no failure may reach the rendering layer
            logger.exception("Store %s: unexpected save failure", self.store.name)
            return self._failed(exc)
        except BaseException as exc:
            self.store.mark_failed(exc)
            raise
        finally:
            self._pending = False

        self.store.save_success(saved)
        self._notifier.notify("success", self.success_message)
        return SubmitResult(SubmitStatus.SAVED, record=self.store.record)

    def _failed(self, exc: BaseException) -> SubmitResult:
        self.store.mark_failed(exc)
        self._notifier.notify("error", user_message(exc))
        errors = list(exc.errors) if isinstance(exc, ValidationError) else [user_message(exc)]
        return SubmitResult(SubmitStatus.FAILED, errors=errors, error=exc)

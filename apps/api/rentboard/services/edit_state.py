"""Canonical/working-copy store for one record being viewed and edited.

The store keeps the last server-confirmed record (canonical) next to a clone
the user edits (working copy). The working copy exists exactly while edit mode
is active. Records are held as JSON-compatible dicts; pydantic models are
dumped on the way in so field paths and comparisons work on plain data.
"""
from __future__ import annotations

import enum
import json
import logging
from collections import Counter
from collections.abc import Iterable, Mapping, Sequence
from copy import deepcopy
from typing import Any

from pydantic import BaseModel

logger = logging.getLogger(__name__)

Record = dict[str, Any]
FieldPath = str | Sequence[str]


class EditPhase(str, enum.Enum):
    VIEW = "view"
    EDITING = "editing"
    SAVING = "saving"


class RefetchPolicy(str, enum.Enum):
    """What a background refetch does to an in-progress working copy."""

    PRESERVE_EDITS = "preserve_edits"
    DISCARD_EDITS = "discard_edits"


def split_path(path: FieldPath) -> tuple[str, ...]:
    """Return the keys of a dotted path or key sequence."""

    parts = tuple(path.split(".")) if isinstance(path, str) else tuple(str(part) for part in path)
    if not parts or any(not part for part in parts):
        raise ValueError(f"Invalid field path: {path!r}")
    return parts


def normalise_record(record: BaseModel | Mapping[str, Any] | None) -> Record | None:
    """Return a detached, JSON-compatible dict for the record."""

    if record is None:
        return None
    if isinstance(record, BaseModel):
        return record.model_dump(mode="json")
    return deepcopy(dict(record))


def structurally_equal(
    left: Any, right: Any, *, unordered: frozenset[str] = frozenset(), path: str = ""
) -> bool:
    """Deep comparison; list values at paths in ``unordered`` compare as multisets."""

    if isinstance(left, Mapping) and isinstance(right, Mapping):
        if set(left) != set(right):
            return False
        return all(
            structurally_equal(
                left[key], right[key], unordered=unordered, path=f"{path}.{key}" if path else str(key)
            )
            for key in left
        )
    if isinstance(left, (list, tuple)) and isinstance(right, (list, tuple)):
        if len(left) != len(right):
            return False
        if path in unordered:
            return _multiset(left) == _multiset(right)
        return all(
            structurally_equal(a, b, unordered=unordered, path=path) for a, b in zip(left, right)
        )
    return left == right


def _multiset(items: Iterable[Any]) -> Counter[str]:
    return Counter(json.dumps(item, sort_keys=True, default=str) for item in items)


class EditStateStore:
    """Edit-state container for a single record of one entity type."""

    def __init__(
        self,
        name: str,
        *,
        unordered_fields: Iterable[str] = (),
        refetch_policy: RefetchPolicy = RefetchPolicy.PRESERVE_EDITS,
    ) -> None:
        self.name = name
        self.refetch_policy = refetch_policy
        self._unordered = frozenset(unordered_fields)
        self._record: Record | None = None
        self._working: Record | None = None
        self._saving = False
        self.error: BaseException | None = None

    # -- read side -------------------------------------------------------

    @property
    def record(self) -> Record | None:
        return deepcopy(self._record)

    @property
    def working_copy(self) -> Record | None:
        return deepcopy(self._working)

    @property
    def is_editing(self) -> bool:
        return self._working is not None

    @property
    def loading(self) -> bool:
        return self._saving

    @property
    def phase(self) -> EditPhase:
        if self._working is None:
            return EditPhase.VIEW
        return EditPhase.SAVING if self._saving else EditPhase.EDITING

    def full_record(self) -> Record:
        """Working copy while editing, otherwise the canonical record."""

        source = self._working if self._working is not None else self._record
        return deepcopy(source) if source is not None else {}

    def has_changes(self) -> bool:
        if self._working is None:
            return False
        return not structurally_equal(self._working, self._record or {}, unordered=self._unordered)

    def changed_fields(self) -> list[str]:
        """Top-level keys whose working value differs from the canonical one."""

        if self._working is None:
            return []
        canonical = self._record or {}
        return [
            key
            for key in self._working
            if key not in canonical
            or not structurally_equal(
                self._working[key], canonical[key], unordered=self._unordered, path=key
            )
        ]

    def changes(self) -> Record:
        """Patch holding only the changed top-level fields of the working copy."""

        if self._working is None:
            return {}
        return {key: deepcopy(self._working[key]) for key in self.changed_fields()}

    # -- transitions -----------------------------------------------------

    def set_record(self, record: BaseModel | Mapping[str, Any] | None) -> None:
        """Replace the canonical record, e.g. after a fetch.

        An active working copy survives under PRESERVE_EDITS and is re-cloned
        from the new record under DISCARD_EDITS. Clearing the record also
        leaves edit mode since there is nothing left to edit against.
        """

        self._record = normalise_record(record)
        if self._record is None:
            self._working = None
            self._saving = False
            return
        if self._working is not None and self.refetch_policy is RefetchPolicy.DISCARD_EDITS:
            logger.info("Store %s: refetch discarded unsaved edits", self.name)
            self._working = deepcopy(self._record)

    def start_editing(self) -> bool:
        if self._record is None:
            logger.debug("Store %s: start_editing ignored, no record loaded", self.name)
            return False
        self._working = deepcopy(self._record)
        self.error = None
        return True

    def cancel_editing(self) -> None:
        self._working = None
        self._saving = False
        self.error = None

    def update_field(self, path: FieldPath, value: Any) -> bool:
        """Set ``value`` at ``path`` in the working copy only.

        Parent objects along a nested path are copied and merged, never
        replaced, so sibling fields of e.g. ``address`` survive.
        """

        if self._working is None:
            logger.debug("Store %s: update_field ignored outside edit mode", self.name)
            return False

        keys = split_path(path)
        target = self._working
        for key in keys[:-1]:
            child = target.get(key)
            child = dict(child) if isinstance(child, Mapping) else {}
            target[key] = child
            target = child
        target[keys[-1]] = deepcopy(value)
        return True

    def reset_changes(self) -> None:
        if self._working is not None and self._record is not None:
            self._working = deepcopy(self._record)

    def mark_saving(self) -> None:
        self._saving = True
        self.error = None

    def mark_failed(self, error: BaseException) -> None:
        """Return to EDITING after a failed save, keeping the working copy."""

        self._saving = False
        self.error = error

    def save_success(self, server_record: BaseModel | Mapping[str, Any]) -> None:
        """Commit: the server's record becomes canonical and edit mode ends."""

        self._record = normalise_record(server_record)
        self._working = None
        self._saving = False
        self.error = None

    # -- persistence -----------------------------------------------------

    def snapshot(self) -> dict[str, Any]:
        """Persistable state: the canonical record only, never an edit in progress."""

        return {"record": deepcopy(self._record)}

    def restore(self, snapshot: Mapping[str, Any]) -> None:
        self.set_record(snapshot.get("record"))

"""User feedback side channel (success / error / info toasts)."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Literal, Protocol

logger = logging.getLogger(__name__)

NotificationKind = Literal["success", "error", "info"]

_LOG_LEVELS = {"success": logging.INFO, "info": logging.INFO, "error": logging.WARNING}


@dataclass(slots=True, frozen=True)
class Notification:
    kind: NotificationKind
    message: str


class Notifier(Protocol):
    def notify(self, kind: NotificationKind, message: str) -> None: ...


class CollectingNotifier:
    """Buffers notifications until the caller drains them into a response."""

    def __init__(self) -> None:
        self._pending: list[Notification] = []

    def notify(self, kind: NotificationKind, message: str) -> None:
        logger.log(_LOG_LEVELS.get(kind, logging.INFO), "notify[%s] %s", kind, message)
        self._pending.append(Notification(kind=kind, message=message))

    @property
    def pending(self) -> list[Notification]:
        return list(self._pending)

    def drain(self) -> list[Notification]:
        drained, self._pending = self._pending, []
        return drained

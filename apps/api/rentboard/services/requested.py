"""Per-user cache of apartments the user has already sent a booking request for.

The cache only drives display ("Request sent"); the backend stays the
authority and ``reconcile`` replaces local marks with its list.
"""
from __future__ import annotations

import logging
from collections.abc import Iterable

logger = logging.getLogger(__name__)


class RequestedTracker:
    def __init__(self) -> None:
        self._requested: dict[str, set[str]] = {}

    def mark(self, user_id: str, apartment_id: str) -> None:
        self._requested.setdefault(user_id, set()).add(apartment_id)

    def is_requested(self, user_id: str, apartment_id: str) -> bool:
        return apartment_id in self._requested.get(user_id, set())

    def requested_ids(self, user_id: str) -> set[str]:
        return set(self._requested.get(user_id, set()))

    def reconcile(self, user_id: str, apartment_ids: Iterable[str]) -> None:
        authoritative = {str(apartment_id) for apartment_id in apartment_ids}
        dropped = self._requested.get(user_id, set()) - authoritative
        if dropped:
            logger.info("User %s: dropping %d unconfirmed request marks", user_id, len(dropped))
        self._requested[user_id] = authoritative

    def forget(self, user_id: str) -> None:
        self._requested.pop(user_id, None)


requested_tracker = RequestedTracker()

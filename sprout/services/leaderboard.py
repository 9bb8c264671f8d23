"""XP accumulation and leaderboard ranking."""
from __future__ import annotations

import threading
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Protocol

from loguru import logger

from sprout.config import get_settings
from sprout.utils.exceptions import PreconditionError


class ProgressLedger(Protocol):
    """Accumulates XP deltas per learner and course."""

    def add_xp(
        self,
        user_id: str,
        course_id: str | None,
        xp_delta: int,
        *,
        now: datetime | None = None,
        learned: bool = False,
    ) -> None:
        ...


@dataclass
class LeaderboardEntry:
    """Running totals for one learner, overall or within one course."""

    user_id: str
    course_id: str | None
    xp: int = 0
    items_learned: int = 0
    last_updated: datetime | None = None


class InMemoryLeaderboard:
    """Keep per-course and overall XP totals in memory."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._entries: dict[tuple[str, str | None], LeaderboardEntry] = {}

    def _entry(self, user_id: str, course_id: str | None) -> LeaderboardEntry:
        key = (user_id, course_id)
        entry = self._entries.get(key)
        if entry is None:
            entry = LeaderboardEntry(user_id=user_id, course_id=course_id)
            self._entries[key] = entry
        return entry

    def add_xp(
        self,
        user_id: str,
        course_id: str | None,
        xp_delta: int,
        *,
        now: datetime | None = None,
        learned: bool = False,
    ) -> None:
        """Add ``xp_delta`` to the course entry and to the learner's overall entry."""

        if xp_delta < 0:
            raise PreconditionError("XP deltas cannot be negative", {"xp_delta": xp_delta})
        scopes = [None] if course_id is None else [course_id, None]
        with self._lock:
            for scope in scopes:
                entry = self._entry(user_id, scope)
                entry.xp += xp_delta
                entry.items_learned += 1 if learned else 0
                entry.last_updated = now or entry.last_updated
        if xp_delta:
            logger.info(f"Awarded {xp_delta} XP to {user_id} (course={course_id})")

    def _ranked(self, course_id: str | None, limit: int | None) -> list[LeaderboardEntry]:
        if limit is None:
            limit = get_settings().LEADERBOARD_LIMIT
        with self._lock:
            entries = [
                replace(entry) for (_, scope), entry in self._entries.items() if scope == course_id
            ]
        entries.sort(key=lambda entry: (-entry.xp, entry.user_id))
        return entries[:limit]

    def overall(self, limit: int | None = None) -> list[LeaderboardEntry]:
        return self._ranked(None, limit)

    def for_course(self, course_id: str, limit: int | None = None) -> list[LeaderboardEntry]:
        return self._ranked(course_id, limit)

    def total_xp(self, user_id: str, course_id: str | None = None) -> int:
        with self._lock:
            entry = self._entries.get((user_id, course_id))
            return entry.xp if entry else 0

    def rank(self, user_id: str, course_id: str | None = None) -> int | None:
        """Return the learner's 1-based position, or ``None`` when unranked."""

        with self._lock:
            size = len(self._entries)
        ranked = self._ranked(course_id, max(size, 1))
        for position, entry in enumerate(ranked, start=1):
            if entry.user_id == user_id:
                return position
        return None

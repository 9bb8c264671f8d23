"""Review session workflow.

Runs the load -> engine -> save loop around the pure engine functions: an
answer is applied with the progress tracker, its XP is derived by the reward
mapper, the new record goes back to the item store and the XP is reported to
the progress ledger.
"""
from __future__ import annotations

import random
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterable

from loguru import logger

from sprout.config import Settings, get_settings
from sprout.core.srs.dependencies import current_level, unlock_ready
from sprout.core.srs.ladder import ItemKind, LadderShape, shape_of
from sprout.core.srs.rewards import Transition, xp_for
from sprout.core.srs.selector import available_to_learn, due_for_review, lesson_queue
from sprout.core.srs.tracker import OutcomeLike, review
from sprout.schemas.items import GradedItem, ItemBase
from sprout.services.leaderboard import ProgressLedger
from sprout.utils.exceptions import (
    CorruptRecordError,
    PreconditionError,
    handle_engine_error,
)
from sprout.utils.store import ItemStore


@dataclass(slots=True)
class Answer:
    """One answer submitted by the presentation layer."""

    kind: ItemKind
    item_id: str
    outcome: OutcomeLike


@dataclass(slots=True)
class AnswerReceipt:
    """Outcome of a processed answer."""

    item: ItemBase
    transition: Transition
    xp: int


@dataclass
class BatchReport:
    """Processed answers plus the items that had to be skipped."""

    receipts: list[AnswerReceipt] = field(default_factory=list)
    skipped: dict[str, dict[str, Any]] = field(default_factory=dict)

    @property
    def total_xp(self) -> int:
        return sum(receipt.xp for receipt in self.receipts)


class ReviewService:
    """High level helper for answer, unlock and queue workflows."""

    def __init__(
        self,
        store: ItemStore,
        ledger: ProgressLedger | None = None,
        *,
        settings: Settings | None = None,
    ) -> None:
        self.store = store
        self.ledger = ledger
        self.settings = settings or get_settings()

    # ------------------------------------------------------------------
    # Answers
    # ------------------------------------------------------------------
    def _get_item(self, kind: ItemKind, item_id: str) -> ItemBase:
        for item in self.store.load(kind):
            if item.id == item_id:
                return item
        raise PreconditionError(
            f"No {ItemKind(kind).value} with id {item_id!r}",
            {"kind": ItemKind(kind).value, "id": item_id},
        )

    def submit_answer(
        self,
        kind: ItemKind,
        item_id: str,
        outcome: OutcomeLike,
        *,
        now: datetime,
        user_id: str | None = None,
        course_id: str | None = None,
    ) -> AnswerReceipt:
        """Apply one answer, persist the record and report its XP."""

        item = self._get_item(kind, item_id)
        result = review(item, outcome, now=now, settings=self.settings)
        xp = xp_for(item.item_kind, result.transition, self.settings)
        self.store.save(kind, [result.item])
        if self.ledger is not None and user_id is not None:
            self.ledger.add_xp(
                user_id,
                course_id or item.course_id,
                xp,
                now=now,
                learned=item.next_review_at is None,
            )
        return AnswerReceipt(item=result.item, transition=result.transition, xp=xp)

    def submit_batch(
        self,
        answers: Iterable[Answer],
        *,
        now: datetime,
        user_id: str | None = None,
        course_id: str | None = None,
    ) -> BatchReport:
        """Process answers in order, skipping items the engine rejects."""

        report = BatchReport()
        for answer in answers:
            try:
                receipt = self.submit_answer(
                    answer.kind,
                    answer.item_id,
                    answer.outcome,
                    now=now,
                    user_id=user_id,
                    course_id=course_id,
                )
            except (PreconditionError, CorruptRecordError) as exc:
                logger.warning(f"Skipping {ItemKind(answer.kind).value} {answer.item_id}: {exc.message}")
                report.skipped[answer.item_id] = handle_engine_error(exc)
                continue
            report.receipts.append(receipt)
        return report

    # ------------------------------------------------------------------
    # Unlocks
    # ------------------------------------------------------------------
    def unlock_ready(self, *, now: datetime, active_level: int | None = None) -> list[GradedItem]:
        """Unlock every character item whose level and components allow it."""

        radicals = self.store.load(ItemKind.RADICAL)
        kanji = self.store.load(ItemKind.KANJI)
        vocabulary = self.store.load(ItemKind.VOCABULARY)
        if active_level is None:
            active_level = current_level(radicals, kanji, vocabulary, self.settings)

        unlocked: list[GradedItem] = []
        for kind, candidates in (
            (ItemKind.RADICAL, radicals),
            (ItemKind.KANJI, kanji),
            (ItemKind.VOCABULARY, vocabulary),
        ):
            fresh = unlock_ready(
                candidates,
                radicals,
                kanji,
                vocabulary,
                now=now,
                active_level=active_level,
                settings=self.settings,
            )
            if fresh:
                self.store.save(kind, fresh)
                unlocked.extend(fresh)
        if unlocked:
            logger.info(f"Unlocked {len(unlocked)} item(s) at level {active_level}")
        return unlocked

    # ------------------------------------------------------------------
    # Queues
    # ------------------------------------------------------------------
    def session_queue(
        self,
        kind: ItemKind,
        *,
        now: datetime,
        limit: int | None = None,
        rng: random.Random | None = None,
    ) -> list[ItemBase]:
        """Return due reviews followed by lessons, optionally shuffled by ``rng``."""

        items = self.store.load(kind)
        due = due_for_review(items, now, self.settings)
        if shape_of(kind) is LadderShape.GRADED:
            lessons = lesson_queue(items, self.settings)
        else:
            level = current_level(items, (), (), self.settings)
            lessons = available_to_learn(items, active_level=level, settings=self.settings)
        if rng is not None:
            rng.shuffle(due)
            rng.shuffle(lessons)
        queue = due + lessons
        return queue[:limit] if limit is not None else queue

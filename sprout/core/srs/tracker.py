"""Progress tracker: apply one answer to one item.

The tracker is a pure transform. ``advance`` takes a record, an answer outcome
and the caller's clock and returns a new record; nothing is persisted and no
ambient clock is read.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import TypeVar, Union

from loguru import logger

from sprout.config import Settings, get_settings
from sprout.core.srs.ladder import check_stage, interval_for
from sprout.core.srs.rewards import Transition
from sprout.schemas.items import GradedItem, ItemBase, ensure_utc
from sprout.utils.exceptions import PreconditionError

ItemT = TypeVar("ItemT", bound=ItemBase)


class Outcome(str, Enum):
    # Four-way difficulty rating used by word and cloze practice
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"
    IMPOSSIBLE = "impossible"
    # Binary result used by character practice
    CORRECT = "correct"
    INCORRECT = "incorrect"

    @property
    def promotes(self) -> bool:
        return _STEPS[self] > 0

    @property
    def steps(self) -> int:
        """Signed number of stages this outcome moves an item."""

        return _STEPS[self]


_STEPS = {
    Outcome.EASY: 2,
    Outcome.MEDIUM: 1,
    Outcome.CORRECT: 1,
    Outcome.HARD: -1,
    Outcome.IMPOSSIBLE: -1,
    Outcome.INCORRECT: -1,
}

OutcomeLike = Union[Outcome, str, bool]


def coerce_outcome(outcome: OutcomeLike) -> Outcome:
    """Accept an :class:`Outcome`, its string value, or a correctness flag."""

    if isinstance(outcome, bool):
        return Outcome.CORRECT if outcome else Outcome.INCORRECT
    try:
        return Outcome(outcome)
    except ValueError as exc:
        raise PreconditionError(f"Unknown answer outcome {outcome!r}", {"outcome": outcome}) from exc


@dataclass(slots=True)
class ReviewResult:
    """New record plus the stage transition it went through."""

    item: ItemBase
    transition: Transition


def next_stage(stage: int, outcome: Outcome, *, first_active: int, last: int) -> int:
    """Move ``stage`` by the outcome's step, clamped to the active range."""

    moved = stage + outcome.steps
    return max(first_active, min(last, moved))


def advance(
    item: ItemT,
    outcome: OutcomeLike,
    *,
    now: datetime,
    settings: Settings | None = None,
) -> ItemT:
    """Return ``item`` updated for one answer given at ``now``."""

    return review(item, outcome, now=now, settings=settings).item  # type: ignore[return-value]


def review(
    item: ItemBase,
    outcome: OutcomeLike,
    *,
    now: datetime,
    settings: Settings | None = None,
) -> ReviewResult:
    """Apply an answer and report the resulting :class:`Transition`."""

    if now is None:
        raise PreconditionError("A review needs an explicit clock value", {"id": item.id})
    settings = settings or get_settings()
    outcome = coerce_outcome(outcome)
    now = ensure_utc(now)

    ladder = check_stage(item.item_kind, item.stage, settings)
    if isinstance(item, GradedItem) and item.is_locked:
        raise PreconditionError(
            f"Item {item.id!r} is locked and must be unlocked before review",
            {"id": item.id, "kind": item.kind},
        )

    new_stage = next_stage(item.stage, outcome, first_active=ladder.first_active, last=ladder.last)
    promoted = outcome.promotes
    updated = item.model_copy(
        update={
            "stage": new_stage,
            "next_review_at": now + interval_for(item.item_kind, new_stage, settings),
            "last_reviewed_at": now,
            "correct_count": item.correct_count + (1 if promoted else 0),
            "wrong_count": item.wrong_count + (0 if promoted else 1),
        }
    )
    logger.debug(
        f"{item.kind} {item.id}: {outcome.value} moved stage {item.stage} -> {new_stage}"
    )
    transition = Transition(
        kind=item.item_kind,
        old_stage=item.stage,
        new_stage=new_stage,
        promoted=promoted,
    )
    return ReviewResult(item=updated, transition=transition)

"""Sprout spaced-repetition and prerequisite-unlock engine."""

from sprout.core.srs.dependencies import (
    can_unlock_level,
    current_level,
    unlock,
    unlock_ready,
    unlockable,
)
from sprout.core.srs.ladder import ItemKind, interval_for, is_mastered, mastery_label
from sprout.core.srs.rewards import Transition, xp_for
from sprout.core.srs.selector import (
    available_to_learn,
    difficult_items,
    due_for_review,
    lesson_queue,
)
from sprout.core.srs.tracker import Outcome, advance, review
from sprout.utils.exceptions import CorruptRecordError, PreconditionError, SproutError

__version__ = "0.1.0"

__all__ = [
    "CorruptRecordError",
    "ItemKind",
    "Outcome",
    "PreconditionError",
    "SproutError",
    "Transition",
    "advance",
    "available_to_learn",
    "can_unlock_level",
    "current_level",
    "difficult_items",
    "due_for_review",
    "interval_for",
    "is_mastered",
    "lesson_queue",
    "mastery_label",
    "review",
    "unlock",
    "unlock_ready",
    "unlockable",
    "xp_for",
]

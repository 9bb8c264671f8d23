"""Stage ladders for every item kind.

Two surface representations exist for mastery. Characters (radicals, kanji
and character vocabulary) move along a named, plant-themed ladder::

    locked -> seed -> sprout -> seedling -> plant -> tree

Words and cloze sentences carry a plain integer SRS level ``0..N`` where level
0 means the item has never been answered. Both are projections of a single
:class:`Ladder` description: an ordered tuple of stage names, one review
interval per stage, the index of the first active stage and the index from
which a stage counts as mastered for unlock purposes. Stage positions are
always plain ladder indices.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from enum import Enum
from functools import lru_cache

from sprout.config import Settings, get_settings
from sprout.utils.exceptions import CorruptRecordError, PreconditionError


class ItemKind(str, Enum):
    WORD = "word"
    CLOZE = "cloze"
    RADICAL = "radical"
    KANJI = "kanji"
    VOCABULARY = "vocabulary"


class LadderShape(str, Enum):
    GRADED = "graded"
    NUMERIC = "numeric"


GRADED_KINDS = frozenset({ItemKind.RADICAL, ItemKind.KANJI, ItemKind.VOCABULARY})
NUMERIC_KINDS = frozenset({ItemKind.WORD, ItemKind.CLOZE})

GRADED_STAGES: tuple[str, ...] = ("locked", "seed", "sprout", "seedling", "plant", "tree")
MASTERY_LABELS: tuple[str, ...] = ("seed", "sprout", "seedling", "plant", "tree")

# Stage names written by older releases of the character tracker.
LEGACY_STAGE_NAMES = {
    "apprentice": "seed",
    "guru": "sprout",
    "master": "seedling",
    "enlightened": "plant",
    "burned": "tree",
}


@dataclass(frozen=True, slots=True)
class Ladder:
    """Per-kind stage configuration."""

    shape: LadderShape
    stages: tuple[str, ...]
    intervals: tuple[timedelta | None, ...]
    first_active: int
    mastery_index: int

    @property
    def entry(self) -> int:
        """Index items are created at (``locked`` or ``new``)."""

        return 0

    @property
    def last(self) -> int:
        return len(self.stages) - 1

    def contains(self, stage: int) -> bool:
        return 0 <= stage <= self.last

    def is_active(self, stage: int) -> bool:
        return self.first_active <= stage <= self.last


def shape_of(kind: ItemKind) -> LadderShape:
    """Return which ladder shape serves ``kind``."""

    return LadderShape.GRADED if ItemKind(kind) in GRADED_KINDS else LadderShape.NUMERIC


@lru_cache(maxsize=32)
def _graded_ladder(interval_hours: tuple[float, ...]) -> Ladder:
    intervals = (None,) + tuple(timedelta(hours=hours) for hours in interval_hours)
    return Ladder(
        shape=LadderShape.GRADED,
        stages=GRADED_STAGES,
        intervals=intervals,
        first_active=1,
        mastery_index=GRADED_STAGES.index("seedling"),
    )


@lru_cache(maxsize=32)
def _numeric_ladder(max_level: int, interval_hours: tuple[float, ...], mastery_level: int) -> Ladder:
    stages = ("new",) + tuple(str(level) for level in range(1, max_level + 1))
    return Ladder(
        shape=LadderShape.NUMERIC,
        stages=stages,
        intervals=tuple(timedelta(hours=hours) for hours in interval_hours),
        first_active=1,
        mastery_index=mastery_level,
    )


def ladder_for(kind: ItemKind, settings: Settings | None = None) -> Ladder:
    """Return the ladder for ``kind`` under the active settings.

    Ladders are cached per distinct interval configuration.
    """

    settings = settings or get_settings()
    if shape_of(kind) is LadderShape.GRADED:
        return _graded_ladder(tuple(settings.GRADED_INTERVAL_HOURS))
    return _numeric_ladder(
        settings.NUMERIC_MAX_LEVEL,
        tuple(settings.NUMERIC_INTERVAL_HOURS),
        settings.NUMERIC_MASTERY_LEVEL,
    )


def check_stage(kind: ItemKind, stage: int, settings: Settings | None = None) -> Ladder:
    """Return the ladder for ``kind`` after verifying ``stage`` lies on it."""

    ladder = ladder_for(kind, settings)
    if not isinstance(stage, int) or isinstance(stage, bool) or not ladder.contains(stage):
        raise CorruptRecordError(
            f"Stage {stage!r} is outside the {ladder.shape.value} ladder",
            {"kind": ItemKind(kind).value, "stage": stage, "max_stage": ladder.last},
        )
    return ladder


def interval_for(kind: ItemKind, stage: int, settings: Settings | None = None) -> timedelta:
    """Return how long an item waits at ``stage`` before its next review."""

    ladder = check_stage(kind, stage, settings)
    interval = ladder.intervals[stage]
    if interval is None:
        raise PreconditionError(
            "Locked items have no review interval",
            {"kind": ItemKind(kind).value, "stage": stage},
        )
    return interval


def is_mastered(kind: ItemKind, stage: int, settings: Settings | None = None) -> bool:
    """Return whether ``stage`` satisfies another item's prerequisite."""

    ladder = check_stage(kind, stage, settings)
    return stage >= ladder.mastery_index


def stage_name(kind: ItemKind, stage: int, settings: Settings | None = None) -> str:
    return check_stage(kind, stage, settings).stages[stage]


def migrate_stage_name(name: str | None) -> str:
    """Normalise a stored graded stage name, translating legacy names."""

    if not name or not isinstance(name, str):
        raise CorruptRecordError("Graded stage name is missing", {"stage": name})
    normalized = name.strip().lower()
    normalized = LEGACY_STAGE_NAMES.get(normalized, normalized)
    if normalized not in GRADED_STAGES:
        raise CorruptRecordError(f"Unknown stage name {name!r}", {"stage": name})
    return normalized


def stage_index(kind: ItemKind, name: str, settings: Settings | None = None) -> int:
    """Translate a stage name (or numeric level string) into a ladder index."""

    ladder = ladder_for(kind, settings)
    if ladder.shape is LadderShape.GRADED:
        return GRADED_STAGES.index(migrate_stage_name(name))
    if name in ladder.stages:
        return ladder.stages.index(name)
    raise CorruptRecordError(f"Unknown stage name {name!r}", {"kind": ItemKind(kind).value, "stage": name})


def mastery_label(level: int) -> str:
    """Bucket a numeric SRS level into the plant-themed mastery label."""

    if level <= 0:
        return "seed"
    if level <= 2:
        return "sprout"
    if level <= 5:
        return "seedling"
    if level <= 9:
        return "plant"
    return "tree"


def mastery_rank(level: int) -> int:
    """Return the 0-4 ordinal of :func:`mastery_label` for ``level``."""

    return MASTERY_LABELS.index(mastery_label(level))

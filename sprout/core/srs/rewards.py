"""Reward mapper: experience points for stage transitions."""
from __future__ import annotations

from dataclasses import dataclass

from sprout.config import Settings, get_settings
from sprout.core.srs.ladder import ItemKind, LadderShape, check_stage


@dataclass(frozen=True, slots=True)
class Transition:
    """Stage movement produced by one answer."""

    kind: ItemKind
    old_stage: int
    new_stage: int
    promoted: bool


def xp_for(kind: ItemKind, transition: Transition, settings: Settings | None = None) -> int:
    """Return the XP earned by ``transition``.

    Demotions earn nothing, and neither does a correct answer on the
    terminal stage. A promotion earns the value of the stage it reached, so
    deeper stages are worth strictly more.
    """

    settings = settings or get_settings()
    ladder = check_stage(kind, transition.new_stage, settings)
    if not transition.promoted or transition.new_stage <= transition.old_stage:
        return 0
    if ladder.shape is LadderShape.GRADED:
        # GRADED_XP has one entry per active stage, seed first
        return settings.GRADED_XP[transition.new_stage - ladder.first_active]
    return settings.NUMERIC_XP_BASE + settings.NUMERIC_XP_PER_LEVEL * transition.new_stage

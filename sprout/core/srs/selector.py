"""Due-set selection over a snapshot of items.

Every query here is read-only and deterministic. Results are sorted so that
calling a query twice on the same snapshot returns the same list; shuffling
for presentation is left to the caller.
"""
from __future__ import annotations

from datetime import datetime
from typing import Iterable, Sequence, TypeVar

from sprout.config import Settings, get_settings
from sprout.core.srs.ladder import check_stage, is_mastered
from sprout.schemas.items import ItemBase, ensure_utc, prerequisites_of
from sprout.utils.exceptions import PreconditionError

ItemT = TypeVar("ItemT", bound=ItemBase)


def _is_active(item: ItemBase, settings: Settings) -> bool:
    return check_stage(item.item_kind, item.stage, settings).is_active(item.stage)


def due_for_review(
    items: Iterable[ItemT],
    now: datetime,
    settings: Settings | None = None,
) -> list[ItemT]:
    """Return active items whose review time has come, oldest first."""

    settings = settings or get_settings()
    now = ensure_utc(now)
    due = [
        item
        for item in items
        if _is_active(item, settings)
        and item.next_review_at is not None
        and item.next_review_at <= now
    ]
    return sorted(due, key=lambda item: (item.next_review_at, item.id))


def lesson_queue(items: Iterable[ItemT], settings: Settings | None = None) -> list[ItemT]:
    """Return unlocked items still waiting for their first lesson."""

    settings = settings or get_settings()
    pending = [
        item for item in items if _is_active(item, settings) and item.next_review_at is None
    ]
    return sorted(pending, key=lambda item: (item.level, item.id))


def prerequisites_met(
    item: ItemBase,
    index: dict[str, ItemBase],
    settings: Settings | None = None,
) -> bool:
    """Return whether every prerequisite of ``item`` in ``index`` is mastered."""

    for prerequisite_id in prerequisites_of(item):
        prerequisite = index.get(prerequisite_id)
        if prerequisite is None:
            raise PreconditionError(
                f"Prerequisite {prerequisite_id!r} of {item.id!r} is not in the supplied collections",
                {"id": item.id, "prerequisite_id": prerequisite_id},
            )
        if not is_mastered(prerequisite.item_kind, prerequisite.stage, settings):
            return False
    return True


def available_to_learn(
    items: Sequence[ItemT],
    *,
    pool: Iterable[ItemBase] = (),
    active_level: int | None = None,
    settings: Settings | None = None,
) -> list[ItemT]:
    """Return items at their entry stage whose prerequisites are satisfied.

    Prerequisites are looked up in ``items`` and in ``pool``. When
    ``active_level`` is given, items above that level are left out as well.
    """

    settings = settings or get_settings()
    index = {item.id: item for item in pool}
    index.update((item.id, item) for item in items)
    ready = []
    for item in items:
        if check_stage(item.item_kind, item.stage, settings).entry != item.stage:
            continue
        if active_level is not None and item.level > active_level:
            continue
        if prerequisites_met(item, index, settings):
            ready.append(item)
    return sorted(ready, key=lambda item: (item.level, item.id))


def difficult_items(items: Iterable[ItemT]) -> list[ItemT]:
    """Return flagged items and items answered wrong more often than right."""

    difficult = [
        item
        for item in items
        if item.is_difficult or 0 < item.correct_count < item.wrong_count
    ]
    return sorted(difficult, key=lambda item: (-item.wrong_count, item.id))


def next_review_time(items: Iterable[ItemBase]) -> datetime | None:
    """Return the earliest scheduled review, if any item is scheduled."""

    scheduled = [item.next_review_at for item in items if item.next_review_at is not None]
    return min(scheduled) if scheduled else None

"""Dependency resolver for tiered character items.

Radicals compose kanji and kanji compose vocabulary. A locked item becomes
unlockable only when two independent conditions hold: its level is open for
the learner, and every component it is built from has reached a mastered
stage. Unlocking is one-way.
"""
from __future__ import annotations

from datetime import datetime
from typing import Iterable, Sequence, TypeVar

from loguru import logger

from sprout.config import Settings, get_settings
from sprout.core.srs.ladder import is_mastered, ladder_for
from sprout.schemas.items import GradedItem, ItemBase, Kanji, Vocabulary, ensure_utc
from sprout.utils.exceptions import PreconditionError

GradedT = TypeVar("GradedT", bound=GradedItem)


def component_index(*collections: Iterable[ItemBase]) -> dict[str, ItemBase]:
    """Index items by id, and by character where no id claims that key."""

    index: dict[str, ItemBase] = {}
    characters: dict[str, ItemBase] = {}
    for collection in collections:
        for item in collection:
            index[item.id] = item
            character = getattr(item, "character", "")
            if character:
                characters.setdefault(character, item)
    for character, item in characters.items():
        index.setdefault(character, item)
    return index


def components_met(
    item: ItemBase,
    radical_index: dict[str, ItemBase],
    kanji_index: dict[str, ItemBase],
    shared_index: dict[str, ItemBase],
    settings: Settings | None = None,
) -> bool:
    """Return whether every component and prerequisite of ``item`` is mastered.

    Kanji components resolve against radicals only and vocabulary components
    against kanji only, so a radical and a kanji sharing a character or an id
    never stand in for each other. Generic ``prerequisite_ids`` resolve
    against ``shared_index``.
    """

    if isinstance(item, Kanji):
        groups = [(item.radical_ids, radical_index, "radical")]
    elif isinstance(item, Vocabulary):
        groups = [(item.kanji_ids, kanji_index, "kanji")]
    else:
        groups = []
    groups.append((item.prerequisite_ids, shared_index, "prerequisite"))

    for component_ids, index, tier in groups:
        for component_id in component_ids:
            component = index.get(component_id)
            if component is None:
                raise PreconditionError(
                    f"{tier.capitalize()} {component_id!r} of {item.id!r} is not in the supplied collections",
                    {"id": item.id, "prerequisite_id": component_id, "tier": tier},
                )
            if not is_mastered(component.item_kind, component.stage, settings):
                return False
    return True


def unlockable(
    candidates: Iterable[GradedT],
    radicals: Sequence[ItemBase],
    kanji: Sequence[ItemBase],
    vocabulary: Sequence[ItemBase],
    *,
    active_level: int,
    settings: Settings | None = None,
) -> list[GradedT]:
    """Return the locked candidates that may be unlocked now."""

    settings = settings or get_settings()
    radical_index = component_index(radicals)
    kanji_index = component_index(kanji)
    shared_index = component_index(radicals, kanji, vocabulary)
    ready = [
        item
        for item in candidates
        if isinstance(item, GradedItem)
        and item.is_locked
        and item.level <= active_level
        and components_met(item, radical_index, kanji_index, shared_index, settings)
    ]
    return sorted(ready, key=lambda item: (item.level, item.id))


def unlock(item: GradedT, *, now: datetime, settings: Settings | None = None) -> GradedT:
    """Move a locked item onto the first active stage.

    The item is not scheduled yet: it has to be presented once as a lesson,
    and that first answer sets ``next_review_at``.
    """

    if not isinstance(item, GradedItem) or not item.is_locked:
        raise PreconditionError(
            f"Item {item.id!r} is not locked", {"id": item.id, "stage": item.stage}
        )
    ladder = ladder_for(item.item_kind, settings)
    logger.debug(f"{item.kind} {item.id} unlocked at level {item.level}")
    return item.model_copy(
        update={"stage": ladder.first_active, "unlocked_at": ensure_utc(now), "next_review_at": None}
    )


def level_complete(
    level: int,
    items: Iterable[ItemBase],
    settings: Settings | None = None,
) -> bool:
    """Return whether enough of the items on ``level`` are mastered."""

    settings = settings or get_settings()
    on_level = [item for item in items if item.level == level]
    if not on_level:
        return True
    mastered = sum(1 for item in on_level if is_mastered(item.item_kind, item.stage, settings))
    return mastered / len(on_level) >= settings.LEVEL_UNLOCK_RATIO


def can_unlock_level(
    level: int,
    radicals: Sequence[ItemBase],
    kanji: Sequence[ItemBase],
    vocabulary: Sequence[ItemBase],
    settings: Settings | None = None,
) -> bool:
    """Level 1 is always open; level N opens once level N-1 is complete."""

    if level <= 1:
        return True
    return level_complete(level - 1, [*radicals, *kanji, *vocabulary], settings)


def current_level(
    radicals: Sequence[ItemBase],
    kanji: Sequence[ItemBase],
    vocabulary: Sequence[ItemBase],
    settings: Settings | None = None,
) -> int:
    """Return the highest level reachable without skipping an incomplete one."""

    items = [*radicals, *kanji, *vocabulary]
    top = max((item.level for item in items), default=1)
    level = 1
    while level < top and level_complete(level, items, settings):
        level += 1
    return level


def unlock_ready(
    candidates: Iterable[GradedT],
    radicals: Sequence[ItemBase],
    kanji: Sequence[ItemBase],
    vocabulary: Sequence[ItemBase],
    *,
    now: datetime,
    active_level: int | None = None,
    settings: Settings | None = None,
) -> list[GradedT]:
    """Unlock every candidate that :func:`unlockable` lets through."""

    if active_level is None:
        active_level = current_level(radicals, kanji, vocabulary, settings)
    ready = unlockable(
        candidates, radicals, kanji, vocabulary, active_level=active_level, settings=settings
    )
    return [unlock(item, now=now, settings=settings) for item in ready]

"""Pydantic schemas package."""

from sprout.schemas.items import (
    ClozeSentence,
    GradedItem,
    ItemBase,
    Kanji,
    LearnableItem,
    NumericItem,
    Radical,
    Vocabulary,
    Word,
    parse_item,
    parse_items,
    prerequisites_of,
)

__all__ = [
    "ClozeSentence",
    "GradedItem",
    "ItemBase",
    "Kanji",
    "LearnableItem",
    "NumericItem",
    "Radical",
    "Vocabulary",
    "Word",
    "parse_item",
    "parse_items",
    "prerequisites_of",
]

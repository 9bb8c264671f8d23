"""Pydantic models for learnable item records.

Records arrive from the item store as plain dictionaries. They are validated
into immutable models here; the engine never mutates a record in place and
always hands back a copy.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Annotated, Any, Iterable, Literal, Union

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from sprout.config import Settings
from sprout.core.srs.ladder import (
    GRADED_STAGES,
    ItemKind,
    check_stage,
    mastery_label,
    migrate_stage_name,
)
from sprout.utils.exceptions import CorruptRecordError


def ensure_utc(value: datetime | None) -> datetime | None:
    """Treat naive timestamps as UTC."""

    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class ItemBase(BaseModel):
    """Progress fields shared by every item kind."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    id: str = Field(..., min_length=1)
    stage: int = Field(0, ge=0)
    correct_count: int = Field(0, ge=0)
    wrong_count: int = Field(0, ge=0)
    next_review_at: datetime | None = None
    unlocked_at: datetime | None = None
    last_reviewed_at: datetime | None = None
    level: int = Field(1, ge=1)
    course_id: str | None = None
    prerequisite_ids: list[str] = Field(default_factory=list)
    is_difficult: bool = False

    @field_validator("next_review_at", "unlocked_at", "last_reviewed_at")
    @classmethod
    def _timestamps_are_aware(cls, value: datetime | None) -> datetime | None:
        return ensure_utc(value)

    @property
    def item_kind(self) -> ItemKind:
        return ItemKind(self.kind)  # type: ignore[attr-defined]

    @property
    def answer_count(self) -> int:
        return self.correct_count + self.wrong_count


class NumericItem(ItemBase):
    """Item scheduled on the numeric SRS-level ladder."""

    stage: int = Field(0, ge=0, validation_alias=AliasChoices("stage", "srs_level", "srsLevel"))

    @model_validator(mode="after")
    def _new_items_are_unscheduled(self) -> "NumericItem":
        if self.stage == 0 and self.next_review_at is not None:
            raise ValueError("new items cannot carry a next review time")
        return self

    @property
    def srs_level(self) -> int:
        return self.stage

    @property
    def mastery_label(self) -> str:
        return mastery_label(self.stage)


class GradedItem(ItemBase):
    """Character item scheduled on the named seed..tree ladder."""

    @model_validator(mode="before")
    @classmethod
    def _stage_from_name(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        name = data.pop("srs_stage", None) or data.pop("srsStage", None)
        if isinstance(data.get("stage"), str):
            name = data.pop("stage")
        if name is not None:
            try:
                data["stage"] = GRADED_STAGES.index(migrate_stage_name(name))
            except CorruptRecordError as exc:
                raise ValueError(exc.message) from exc
        return data

    @model_validator(mode="after")
    def _unlock_is_consistent(self) -> "GradedItem":
        if self.stage == 0:
            if self.unlocked_at is not None:
                raise ValueError("locked items cannot carry an unlock time")
            if self.next_review_at is not None:
                raise ValueError("locked items cannot carry a next review time")
        elif self.unlocked_at is None:
            raise ValueError("unlocked items must record when they were unlocked")
        return self

    @property
    def srs_stage(self) -> str:
        return GRADED_STAGES[self.stage]

    @property
    def is_locked(self) -> bool:
        return self.stage == 0


class Word(NumericItem):
    kind: Literal["word"] = "word"
    native: str = ""
    target: str = ""


class ClozeSentence(NumericItem):
    kind: Literal["cloze"] = "cloze"
    native: str = ""
    target: str = ""
    cloze_text: str = ""
    answer: str = ""


class Radical(GradedItem):
    kind: Literal["radical"] = "radical"
    character: str = ""
    meaning: str = ""


class Kanji(GradedItem):
    kind: Literal["kanji"] = "kanji"
    character: str = ""
    meaning: str = ""
    reading: str = ""
    radical_ids: list[str] = Field(default_factory=list)


class Vocabulary(GradedItem):
    kind: Literal["vocabulary"] = "vocabulary"
    word: str = ""
    meaning: str = ""
    reading: str = ""
    kanji_ids: list[str] = Field(default_factory=list)


LearnableItem = Annotated[
    Union[Word, ClozeSentence, Radical, Kanji, Vocabulary],
    Field(discriminator="kind"),
]

_item_adapter: TypeAdapter[LearnableItem] = TypeAdapter(LearnableItem)


def prerequisites_of(item: ItemBase) -> tuple[str, ...]:
    """Return the ids an item depends on, composite components first."""

    components: list[str] = []
    if isinstance(item, Kanji):
        components.extend(item.radical_ids)
    elif isinstance(item, Vocabulary):
        components.extend(item.kanji_ids)
    components.extend(item.prerequisite_ids)
    return tuple(dict.fromkeys(components))


def parse_item(data: Any, *, settings: Settings | None = None) -> ItemBase:
    """Validate a raw record (or re-check a model) into a learnable item."""

    if isinstance(data, ItemBase):
        item = data
    else:
        try:
            item = _item_adapter.validate_python(data)
        except ValidationError as exc:
            record_id = data.get("id") if isinstance(data, dict) else None
            raise CorruptRecordError(
                f"Item record {record_id!r} failed validation",
                {"id": record_id, "errors": [error["msg"] for error in exc.errors()]},
            ) from exc
    check_stage(item.item_kind, item.stage, settings)
    return item


def parse_items(
    rows: Iterable[Any],
    *,
    kind: ItemKind | None = None,
    settings: Settings | None = None,
) -> list[ItemBase]:
    """Validate a collection of records, rejecting mixed kinds and duplicate ids."""

    items: list[ItemBase] = []
    seen: set[str] = set()
    for row in rows:
        item = parse_item(row, settings=settings)
        if kind is not None and item.item_kind is not ItemKind(kind):
            raise CorruptRecordError(
                f"Item {item.id!r} is a {item.kind}, expected {ItemKind(kind).value}",
                {"id": item.id, "kind": item.kind},
            )
        if item.id in seen:
            raise CorruptRecordError(f"Duplicate item id {item.id!r}", {"id": item.id})
        seen.add(item.id)
        items.append(item)
    return items

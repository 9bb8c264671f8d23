"""Tests for item record validation."""
from __future__ import annotations

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from sprout.config import Settings
from sprout.core.srs.ladder import ItemKind
from sprout.schemas.items import Kanji, Radical, Word, parse_item, parse_items, prerequisites_of
from sprout.utils.exceptions import CorruptRecordError


def test_parse_legacy_character_record():
    record = {
        "kind": "radical",
        "id": "r1",
        "srsStage": "guru",
        "correctCount": 3,
        "wrongCount": 1,
        "level": 2,
        "unlockedAt": "2024-01-01T00:00:00Z",
        "nextReviewAt": "2024-01-02T00:00:00Z",
        "character": "一",
    }

    radical = parse_item(record)

    assert isinstance(radical, Radical)
    assert radical.srs_stage == "sprout"
    assert radical.stage == 2
    assert radical.correct_count == 3
    assert radical.next_review_at == datetime(2024, 1, 2, tzinfo=timezone.utc)


def test_parse_word_with_srs_level_alias():
    word = parse_item({"kind": "word", "id": "w1", "srsLevel": 4, "nextReviewAt": "2024-01-02T00:00:00"})

    assert isinstance(word, Word)
    assert word.srs_level == 4
    assert word.mastery_label == "seedling"
    assert word.next_review_at.tzinfo is not None


@pytest.mark.parametrize(
    "record",
    [
        {"kind": "radical", "srs_stage": "seed"},
        {"kind": "scroll", "id": "x1"},
        {"id": "w1"},
        {"kind": "radical", "id": "r1", "srs_stage": "wilted"},
        {"kind": "radical", "id": "r1", "srs_stage": "seed"},
        {"kind": "radical", "id": "r1", "srs_stage": "locked", "unlocked_at": "2024-01-01T00:00:00Z"},
        {"kind": "word", "id": "w1", "srs_level": 0, "next_review_at": "2024-01-01T00:00:00Z"},
        {"kind": "word", "id": "w1", "srs_level": 11, "next_review_at": "2024-01-01T00:00:00Z"},
        {"kind": "word", "id": "w1", "correct_count": -1},
        {"kind": "kanji", "id": "k1", "level": 0},
    ],
)
def test_malformed_records_are_corrupt(record):
    with pytest.raises(CorruptRecordError):
        parse_item(record)


def test_stage_range_follows_settings():
    record = {"kind": "word", "id": "w1", "srs_level": 4, "next_review_at": "2024-01-01T00:00:00Z"}
    small = Settings(NUMERIC_MAX_LEVEL=3, NUMERIC_INTERVAL_HOURS=[1, 2, 3, 4])

    assert parse_item(record).srs_level == 4
    with pytest.raises(CorruptRecordError):
        parse_item(record, settings=small)


def test_parse_items_rejects_duplicates_and_mixed_kinds():
    rows = [{"kind": "word", "id": "w1"}, {"kind": "word", "id": "w1"}]
    with pytest.raises(CorruptRecordError):
        parse_items(rows)

    with pytest.raises(CorruptRecordError):
        parse_items([{"kind": "word", "id": "w1"}, {"kind": "cloze", "id": "c1"}], kind=ItemKind.WORD)


def test_prerequisites_of_combines_components_and_declared_ids():
    kanji = Kanji(id="k1", radical_ids=["r1", "r2"], prerequisite_ids=["r2", "r3"])

    assert prerequisites_of(kanji) == ("r1", "r2", "r3")
    assert prerequisites_of(Word(id="w1")) == ()


def test_records_are_immutable():
    word = Word(id="w1")

    with pytest.raises(ValidationError):
        word.stage = 3

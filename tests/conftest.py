"""Pytest fixtures for engine tests."""
from __future__ import annotations

from collections.abc import Callable, Generator
from datetime import datetime, timedelta, timezone

import pytest
from loguru import logger

from sprout.config import Settings
from sprout.schemas.items import ClozeSentence, Kanji, Radical, Vocabulary, Word, parse_item
from sprout.services.leaderboard import InMemoryLeaderboard
from sprout.utils.store import InMemoryItemStore

NOW = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)
UNLOCKED_AT = NOW - timedelta(days=30)


@pytest.fixture()
def now() -> datetime:
    return NOW


@pytest.fixture()
def settings() -> Settings:
    return Settings()


@pytest.fixture()
def captured_logs() -> Generator[list[str], None, None]:
    messages: list[str] = []
    handler_id = logger.add(messages.append, level="DEBUG", format="{level}:{message}")
    try:
        yield messages
    finally:
        logger.remove(handler_id)


def _graded(kind: str, item_id: str, stage: str, level: int, **fields) -> dict:
    data = {"kind": kind, "id": item_id, "srs_stage": stage, "level": level, **fields}
    if stage != "locked":
        data.setdefault("unlocked_at", UNLOCKED_AT)
    return data


@pytest.fixture()
def make_radical() -> Callable[..., Radical]:
    def _make(item_id: str, stage: str = "locked", *, level: int = 1, **fields) -> Radical:
        return parse_item(_graded("radical", item_id, stage, level, **fields))

    return _make


@pytest.fixture()
def make_kanji() -> Callable[..., Kanji]:
    def _make(
        item_id: str,
        radical_ids: list[str],
        stage: str = "locked",
        *,
        level: int = 1,
        **fields,
    ) -> Kanji:
        return parse_item(
            _graded("kanji", item_id, stage, level, radical_ids=radical_ids, **fields)
        )

    return _make


@pytest.fixture()
def make_vocabulary() -> Callable[..., Vocabulary]:
    def _make(
        item_id: str,
        kanji_ids: list[str],
        stage: str = "locked",
        *,
        level: int = 1,
        **fields,
    ) -> Vocabulary:
        return parse_item(
            _graded("vocabulary", item_id, stage, level, kanji_ids=kanji_ids, **fields)
        )

    return _make


@pytest.fixture()
def make_word() -> Callable[..., Word]:
    def _make(
        item_id: str,
        srs_level: int = 0,
        *,
        level: int = 1,
        next_review_at: datetime | None = None,
        kind: str = "word",
        **fields,
    ) -> Word | ClozeSentence:
        if srs_level > 0 and next_review_at is None:
            next_review_at = NOW + timedelta(days=1)
        return parse_item(
            {
                "kind": kind,
                "id": item_id,
                "srs_level": srs_level,
                "level": level,
                "next_review_at": next_review_at,
                **fields,
            }
        )

    return _make


@pytest.fixture()
def store() -> Generator[InMemoryItemStore, None, None]:
    backend = InMemoryItemStore()
    try:
        yield backend
    finally:
        backend.clear()


@pytest.fixture()
def leaderboard() -> InMemoryLeaderboard:
    return InMemoryLeaderboard()

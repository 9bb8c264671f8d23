"""Tests for the progress tracker."""
from __future__ import annotations

import itertools
from datetime import datetime, timedelta, timezone

import pytest

from sprout.core.srs.ladder import ItemKind, interval_for
from sprout.core.srs.tracker import Outcome, advance, coerce_outcome, review
from sprout.utils.exceptions import PreconditionError


def test_correct_answer_promotes_radical_one_stage(make_radical, now):
    radical = make_radical("r1", "seed")

    updated = advance(radical, Outcome.CORRECT, now=now)

    assert updated.srs_stage == "sprout"
    assert updated.next_review_at == now + interval_for(ItemKind.RADICAL, updated.stage)
    assert updated.last_reviewed_at == now
    assert (updated.correct_count, updated.wrong_count) == (1, 0)


def test_advance_returns_a_new_record(make_radical, now):
    radical = make_radical("r1", "seed")

    updated = advance(radical, "correct", now=now)

    assert radical.stage == 1
    assert radical.correct_count == 0
    assert updated is not radical


def test_easy_promotes_word_two_levels(make_word, now):
    word = make_word("w1", 3)

    updated = advance(word, "easy", now=now)

    assert updated.srs_level == 5
    assert updated.mastery_label == "seedling"
    assert updated.next_review_at == now + timedelta(hours=96)


def test_impossible_demotes_word_one_level(make_word, now):
    word = make_word("w1", 3)

    updated = advance(word, "impossible", now=now)

    assert updated.srs_level == 2
    assert updated.wrong_count == 1


@pytest.mark.parametrize("outcome", ["hard", "impossible", False])
def test_word_never_drops_below_level_one(make_word, now, outcome):
    word = make_word("w1", 1)

    updated = advance(word, outcome, now=now)

    assert updated.srs_level == 1


def test_graded_demotion_floor_is_seed(make_kanji, now):
    kanji = make_kanji("k1", [], "seed")

    updated = advance(kanji, Outcome.INCORRECT, now=now)

    assert updated.srs_stage == "seed"
    assert updated.wrong_count == 1


def test_graded_demotion_moves_back_one_stage(make_vocabulary, now):
    vocab = make_vocabulary("v1", [], "plant")

    assert advance(vocab, "incorrect", now=now).srs_stage == "seedling"


def test_promotion_clamps_at_terminal_stage(make_radical, make_word, now, settings):
    assert advance(make_radical("r1", "plant"), "easy", now=now).srs_stage == "tree"
    assert advance(make_radical("r2", "tree"), "correct", now=now).srs_stage == "tree"
    top = settings.NUMERIC_MAX_LEVEL
    assert advance(make_word("w1", top - 1), "easy", now=now).srs_level == top


def test_first_lesson_of_new_word(make_word, now):
    new_word = make_word("w1")

    assert advance(new_word, "medium", now=now).srs_level == 1
    assert advance(new_word, "easy", now=now).srs_level == 2
    failed = advance(new_word, "hard", now=now)
    assert failed.srs_level == 1
    assert failed.next_review_at == now + timedelta(hours=4)


def test_cloze_sentences_share_the_numeric_ladder(make_word, now):
    sentence = make_word("c1", 4, kind="cloze", cloze_text="Je ___ faim", answer="ai")

    updated = advance(sentence, "medium", now=now)

    assert updated.kind == "cloze"
    assert updated.srs_level == 5


def test_advancing_locked_item_is_a_precondition_error(make_radical, now):
    with pytest.raises(PreconditionError):
        advance(make_radical("r1"), "correct", now=now)


def test_unknown_outcome_is_rejected(make_word, now):
    with pytest.raises(PreconditionError):
        advance(make_word("w1", 2), "meh", now=now)


def test_boolean_outcomes_map_to_correctness():
    assert coerce_outcome(True) is Outcome.CORRECT
    assert coerce_outcome(False) is Outcome.INCORRECT
    assert coerce_outcome("easy") is Outcome.EASY


def test_naive_clock_is_treated_as_utc(make_word):
    naive = datetime(2024, 3, 1, 12, 0)

    updated = advance(make_word("w1", 2), "medium", now=naive)

    assert updated.next_review_at.tzinfo is not None
    assert updated.next_review_at == datetime(2024, 3, 2, 12, 0, tzinfo=timezone.utc)


def test_review_reports_transition(make_radical, now):
    result = review(make_radical("r1", "sprout"), "correct", now=now)

    assert result.transition.kind is ItemKind.RADICAL
    assert (result.transition.old_stage, result.transition.new_stage) == (2, 3)
    assert result.transition.promoted is True


OUTCOMES = ["easy", "medium", "hard", "impossible", "correct", "incorrect"]


@pytest.mark.parametrize("sequence", list(itertools.product(OUTCOMES, repeat=3)))
def test_answer_sequences_keep_invariants(make_radical, make_word, now, sequence):
    for item in (make_radical("r1", "seed"), make_word("w1")):
        clock = now
        for count, outcome in enumerate(sequence, start=1):
            item = advance(item, outcome, now=clock)
            assert item.correct_count + item.wrong_count == count
            assert item.next_review_at > clock
            assert item.stage >= 1
            clock = clock + timedelta(hours=count)

# tests/test_sm2.py
from datetime import datetime, timedelta, timezone

import pytest

from vocab_srs.errors import InvalidRating
from vocab_srs.models import LearningStatus, Rating, VocabularyCard
from vocab_srs.sm2 import apply_rating, default_srs_values, learning_status_for

NOW = datetime(2026, 3, 10, 9, 30, tzinfo=timezone.utc)


def make_card(**fields):
    defaults = dict(id="c1", text="ubiquitous", next_review_date=NOW)
    defaults.update(fields)
    return VocabularyCard(**defaults)


def review(card, rating, now=NOW):
    """Apply a rating and return the card in its new state."""
    fields = apply_rating(card, rating, now)
    return VocabularyCard(**{**card.__dict__, **fields})


def test_first_review_correct():
    """First correct answer: interval=1, repetitions=1, ease unchanged at quality 4."""
    card = make_card(ease_factor=2.5, repetitions=0, interval_days=1)
    result = apply_rating(card, 4, NOW)
    assert result["ease_factor"] == 2.5
    assert result["repetitions"] == 1
    assert result["interval_days"] == 1
    assert result["learning_status"] == LearningStatus.LEARNING


def test_three_good_reviews_in_sequence():
    card = make_card(ease_factor=2.5, repetitions=0, interval_days=1)
    card = review(card, 4)
    card = review(card, 4)
    assert card.repetitions == 2
    assert card.interval_days == 6
    assert card.learning_status == LearningStatus.LEARNING
    card = review(card, 4)
    assert card.repetitions == 3
    assert card.interval_days == 15  # round(6 * 2.5)
    assert card.learning_status == LearningStatus.REVIEW


def test_failure_resets_mature_card():
    card = make_card(
        learning_status=LearningStatus.MATURE, ease_factor=2.8,
        repetitions=7, interval_days=120,
    )
    result = apply_rating(card, 1, NOW)
    assert result["repetitions"] == 0
    assert result["interval_days"] == 1
    assert result["learning_status"] == LearningStatus.LEARNING


@pytest.mark.parametrize("score", [0, 1, 2])
def test_failure_leaves_ease_factor_alone(score):
    card = make_card(ease_factor=1.9, repetitions=3, interval_days=10)
    result = apply_rating(card, score, NOW)
    assert result["ease_factor"] == 1.9
    assert result["next_review_date"] == NOW + timedelta(days=1)


def test_ease_factor_minimum():
    """Hard answers never push ease below 1.3."""
    card = make_card(ease_factor=1.3, repetitions=4, interval_days=10)
    result = apply_rating(card, 3, NOW)
    assert result["ease_factor"] == 1.3


def test_hard_lowers_ease():
    card = make_card(ease_factor=2.5, repetitions=2, interval_days=6)
    result = apply_rating(card, Rating.HARD, NOW)
    assert result["ease_factor"] == 2.36


def test_easy_increases_ease():
    card = make_card(ease_factor=2.5, repetitions=2, interval_days=6)
    result = apply_rating(card, 5, NOW)
    assert result["ease_factor"] == 2.6


def test_interval_uses_ease_before_review():
    card = make_card(ease_factor=2.0, repetitions=3, interval_days=10)
    result = apply_rating(card, 5, NOW)
    assert result["interval_days"] == 20
    assert result["ease_factor"] == 2.1


def test_sixth_success_matures_card():
    card = make_card(learning_status=LearningStatus.REVIEW, repetitions=5, interval_days=40)
    result = apply_rating(card, 4, NOW)
    assert result["repetitions"] == 6
    assert result["learning_status"] == LearningStatus.MATURE


def test_counters_on_success_and_failure():
    card = make_card(times_practiced=4, times_correct=3, times_incorrect=1)
    ok = apply_rating(card, 3, NOW)
    assert (ok["times_practiced"], ok["times_correct"], ok["times_incorrect"]) == (5, 4, 1)
    miss = apply_rating(card, 2, NOW)
    assert (miss["times_practiced"], miss["times_correct"], miss["times_incorrect"]) == (5, 3, 2)
    assert ok["last_practiced_at"] == NOW


def test_next_review_date_is_now_plus_interval():
    now = datetime(2026, 12, 30, 23, 59, tzinfo=timezone.utc)
    card = make_card(ease_factor=2.5, repetitions=2, interval_days=6)
    result = apply_rating(card, 4, now)
    assert result["next_review_date"] == now + timedelta(days=result["interval_days"])
    assert result["next_review_date"].date().isoformat() == "2027-01-14"


def test_apply_rating_does_not_mutate_card():
    card = make_card(repetitions=2, interval_days=6)
    apply_rating(card, 5, NOW)
    assert card.repetitions == 2
    assert card.interval_days == 6
    assert card.times_practiced == 0


@pytest.mark.parametrize("bad", [-1, 6, 4.0, "4", None, True])
def test_out_of_range_rating_rejected(bad):
    with pytest.raises(InvalidRating):
        apply_rating(make_card(), bad, NOW)


def test_learning_status_thresholds():
    assert learning_status_for(0) == LearningStatus.LEARNING
    assert learning_status_for(2) == LearningStatus.LEARNING
    assert learning_status_for(3) == LearningStatus.REVIEW
    assert learning_status_for(5) == LearningStatus.REVIEW
    assert learning_status_for(6) == LearningStatus.MATURE


def test_default_srs_values():
    values = default_srs_values(NOW)
    assert values["learning_status"] == LearningStatus.NEW
    assert values["ease_factor"] == 2.5
    assert values["interval_days"] == 1
    assert values["repetitions"] == 0
    assert values["next_review_date"] == NOW + timedelta(days=1)

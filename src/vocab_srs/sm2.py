"""SM-2 spaced repetition algorithm."""
from datetime import datetime, timedelta

from vocab_srs.models import (
    DEFAULT_EASE_FACTOR,
    MIN_EASE_FACTOR,
    LearningStatus,
    Rating,
    VocabularyCard,
)


def learning_status_for(repetitions: int) -> LearningStatus:
    if repetitions < 3:
        return LearningStatus.LEARNING
    elif repetitions < 6:
        return LearningStatus.REVIEW
    return LearningStatus.MATURE


def next_ease_factor(ease_factor: float, quality: int) -> float:
    new_ef = ease_factor + (0.1 - (5 - quality) * (0.08 + (5 - quality) * 0.02))
    return round(max(MIN_EASE_FACTOR, new_ef), 2)


def apply_rating(card: VocabularyCard, rating, now: datetime) -> dict:
    """Calculate a card's next scheduling state using SM-2.

    Args:
        card: Card as currently persisted.
        rating: Rating or 0-5 score (0=complete blackout, 5=perfect).
        now: Review time; the next review date is counted from it.

    Returns:
        Dict of the updated card fields, keyed by attribute name.
    """
    rating = Rating.from_score(rating)

    if rating.is_success:
        repetitions = card.repetitions + 1
        if repetitions == 1:
            interval = 1
        elif repetitions == 2:
            interval = 6
        else:
            interval = max(1, round(card.interval_days * card.ease_factor))
        ease_factor = next_ease_factor(card.ease_factor, int(rating))
        status = learning_status_for(repetitions)
    else:
        # Failed recall: start over, ease factor untouched
        repetitions = 0
        interval = 1
        ease_factor = card.ease_factor
        status = LearningStatus.LEARNING

    return {
        "learning_status": status,
        "ease_factor": ease_factor,
        "interval_days": interval,
        "repetitions": repetitions,
        "next_review_date": now + timedelta(days=interval),
        "last_practiced_at": now,
        "times_practiced": card.times_practiced + 1,
        "times_correct": card.times_correct + (1 if rating.is_success else 0),
        "times_incorrect": card.times_incorrect + (0 if rating.is_success else 1),
    }


def default_srs_values(now: datetime) -> dict:
    """Scheduling state of a freshly added item: new, due tomorrow."""
    return {
        "learning_status": LearningStatus.NEW,
        "ease_factor": DEFAULT_EASE_FACTOR,
        "interval_days": 1,
        "repetitions": 0,
        "next_review_date": now + timedelta(days=1),
    }

"""Deck statistics and review activity."""
from datetime import date, datetime, timedelta, timezone
from typing import Iterable, Optional

from vocab_srs.db import get_connection
from vocab_srs.items import get_items
from vocab_srs.models import LearningStatus, SRSStats, VocabularyCard, utcnow

DUE_STATUSES = (LearningStatus.LEARNING, LearningStatus.REVIEW)


def is_due(card: VocabularyCard, today: date) -> bool:
    return card.learning_status in DUE_STATUSES and card.next_review_date.date() <= today


def calculate_streak(cards: Iterable[VocabularyCard], now: datetime) -> tuple[int, int]:
    """Return (current, longest) streak in days.

    Simplified: the current streak is 1 if anything was practiced in the
    last 24 hours, and the longest streak is a placeholder 1 once anything
    has been practiced at all.
    """
    practiced = [c.last_practiced_at for c in cards if c.last_practiced_at is not None]
    if not practiced:
        return 0, 0
    current = 1 if any(now - ts <= timedelta(days=1) for ts in practiced) else 0
    return current, 1


def compute_stats(cards: list[VocabularyCard], now: Optional[datetime] = None) -> SRSStats:
    now = now or utcnow()
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    now = now.astimezone(timezone.utc)
    today = now.date()
    counts = {status: 0 for status in LearningStatus}
    for card in cards:
        counts[card.learning_status] += 1

    total_reviews = sum(c.times_practiced for c in cards)
    correct_reviews = sum(c.times_correct for c in cards)
    # Percentage rounded half up
    accuracy = (200 * correct_reviews + total_reviews) // (2 * total_reviews) if total_reviews else 0
    current_streak, longest_streak = calculate_streak(cards, now)

    return SRSStats(
        total_cards=len(cards),
        due_today=sum(1 for c in cards if is_due(c, today)),
        new_cards=counts[LearningStatus.NEW],
        learning_cards=counts[LearningStatus.LEARNING],
        review_cards=counts[LearningStatus.REVIEW],
        mature_cards=counts[LearningStatus.MATURE],
        current_streak=current_streak,
        longest_streak=longest_streak,
        total_reviews=total_reviews,
        accuracy_rate=accuracy,
    )


def get_stats(db_path: str, now: Optional[datetime] = None) -> SRSStats:
    return compute_stats(get_items(db_path), now)


def get_activity_data(db_path: str, days: int = 365, today: Optional[date] = None) -> list[dict]:
    """Reviews per day for the last `days` days, oldest first, zero-filled."""
    today = today or utcnow().date()
    start = today - timedelta(days=days - 1)
    conn = get_connection(db_path)
    rows = conn.execute(
        """SELECT substr(reviewed_at, 1, 10) as day, COUNT(*) as reviews,
            SUM(is_correct) as correct
        FROM vocabulary_reviews
        WHERE substr(reviewed_at, 1, 10) BETWEEN ? AND ?
        GROUP BY day""",
        (start.isoformat(), today.isoformat()),
    ).fetchall()
    conn.close()
    by_day = {r["day"]: r for r in rows}
    activity = []
    for offset in range(days):
        day = (start + timedelta(days=offset)).isoformat()
        row = by_day.get(day)
        activity.append({
            "date": day,
            "reviews": row["reviews"] if row else 0,
            "correct": row["correct"] if row else 0,
        })
    return activity

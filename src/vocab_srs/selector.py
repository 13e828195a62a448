"""Picks the due and new cards that make up a review session."""
import random
from datetime import date
from typing import Optional

from vocab_srs.items import get_due_items, get_items
from vocab_srs.models import LearningStatus, VocabularyCard

# Due cards get 4/5 of a session (rounded up), new cards 1/5 (rounded down)
DUE_FIFTHS = 4
NEW_FIFTHS = 1


def select_due_cards(db_path: str, limit: int, today: Optional[date] = None) -> list[VocabularyCard]:
    if limit <= 0:
        return []
    return get_due_items(db_path, limit=limit, today=today)


def select_new_cards(db_path: str, limit: int) -> list[VocabularyCard]:
    if limit <= 0:
        return []
    return get_items(db_path, status=LearningStatus.NEW, limit=limit)


def build_session_pool(
    db_path: str,
    max_cards: int,
    rng: Optional[random.Random] = None,
    today: Optional[date] = None,
) -> list[VocabularyCard]:
    """Mix of due (80%) and new (20%) cards, shuffled, at most max_cards long."""
    if max_cards <= 0:
        return []
    rng = rng or random.Random()
    due = select_due_cards(db_path, -(-max_cards * DUE_FIFTHS // 5), today=today)
    new = select_new_cards(db_path, max_cards * NEW_FIFTHS // 5)
    pool = (due + new)[:max_cards]
    rng.shuffle(pool)
    return pool

from datetime import datetime, timedelta, timezone

import pytest

from vocab_srs.db import init_db
from vocab_srs.items import add_item, update_item
from vocab_srs.models import LearningStatus

NOW = datetime(2026, 3, 10, 9, 30, tzinfo=timezone.utc)


@pytest.fixture
def tmp_db(tmp_path):
    """Provide a temporary SQLite database path for tests."""
    db_path = str(tmp_path / "test_srs.db")
    return db_path


@pytest.fixture
def deck(tmp_db):
    """An initialized, empty deck database."""
    init_db(tmp_db)
    return tmp_db


@pytest.fixture
def make_card(deck):
    """Add a card to the deck and move it into the given scheduling state."""

    def _make(text, status=LearningStatus.NEW, due_in_days=1, **fields):
        card = add_item(deck, text, definition=f"meaning of {text}", now=NOW)
        updates = dict(fields)
        if status != LearningStatus.NEW:
            updates["learning_status"] = status
        updates["next_review_date"] = NOW + timedelta(days=due_in_days)
        update_item(deck, card.id, updates)
        return card.id

    return _make


@pytest.fixture
def now():
    return NOW

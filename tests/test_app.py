import random
from unittest.mock import patch

import pytest

from vocab_srs.app import (
    SessionExitRequested, cmd_add, cmd_review, cmd_stats, run_review_session,
    session_int_prompt, session_prompt,
)
from vocab_srs.db import get_connection
from vocab_srs.items import get_items
from vocab_srs.models import LearningStatus
from vocab_srs.session import ReviewSessionManager
from vocab_srs.session_store import LocalSessionStore, SessionStore


@pytest.fixture
def manager(deck, now):
    store = SessionStore(LocalSessionStore(deck))
    yield ReviewSessionManager(deck, store, rng=random.Random(3), clock=lambda: now)
    store.close()


@pytest.fixture
def three_due(make_card):
    return [make_card(f"word{i}", status=LearningStatus.REVIEW, due_in_days=-1) for i in range(3)]


def test_session_exit_requested_is_exception():
    with pytest.raises(SessionExitRequested):
        raise SessionExitRequested()


def test_session_prompt_raises_on_q():
    with patch("vocab_srs.app.Prompt.ask", return_value="q"):
        with pytest.raises(SessionExitRequested):
            session_prompt("test prompt")


def test_session_prompt_raises_on_menu():
    with patch("vocab_srs.app.Prompt.ask", return_value="menu"):
        with pytest.raises(SessionExitRequested):
            session_prompt("test prompt")


def test_session_prompt_returns_normal_input():
    with patch("vocab_srs.app.Prompt.ask", return_value="hello"):
        assert session_prompt("test prompt") == "hello"


def test_session_int_prompt_returns_normal_input():
    with patch("vocab_srs.app.Prompt.ask", return_value="3"):
        assert session_int_prompt("rate", choices=["0", "1", "2", "3", "4", "5"]) == 3


def test_run_review_session_exits_on_q(manager, three_due):
    """User rates the first card, then types 'q' on the second card's reveal prompt."""
    session = manager.start("cli", max_cards=3)
    with patch("vocab_srs.app.Prompt.ask", side_effect=["", "4", "q"]):
        with pytest.raises(SessionExitRequested):
            run_review_session(manager, session)
    saved = manager.session_store.load("cli")
    assert saved.current_index == 1
    assert saved.session_stats.good == 1


def test_cmd_review_resumes_and_completes(manager, three_due):
    with patch("vocab_srs.app.Prompt.ask", side_effect=["", "5", "q"]):
        cmd_review(manager, "cli", 3)
    assert manager.session_store.load("cli").current_index == 1

    # Two cards left: reveal + rate each
    with patch("vocab_srs.app.Prompt.ask", side_effect=["", "3", "", "0"]):
        cmd_review(manager, "cli", 3)
    assert manager.session_store.load("cli") is None
    stats = manager.get_stats()
    assert stats.total_reviews == 3
    assert stats.accuracy_rate == 67


def test_run_review_session_skips_deleted_card(deck, manager, three_due):
    session = manager.start("cli", max_cards=3)
    conn = get_connection(deck)
    conn.execute("DELETE FROM vocabulary_items WHERE id = ?", (session.cards[0].id,))
    conn.commit()
    conn.close()
    with patch("vocab_srs.app.Prompt.ask", side_effect=["", "4", "", "4", "", "4"]):
        run_review_session(manager, session)
    assert session.is_complete
    assert session.session_stats.reviewed == 2


def test_cmd_review_nothing_due(manager):
    with patch("vocab_srs.app.Prompt.ask") as ask:
        cmd_review(manager, "cli", 10)
    ask.assert_not_called()


def test_cmd_stats_renders(manager, three_due):
    with patch("vocab_srs.app.console.print") as printed:
        cmd_stats(manager)
    assert printed.called


def test_cmd_add(deck):
    with patch("vocab_srs.app.Prompt.ask", side_effect=["take for granted", "to fail to appreciate", ""]):
        cmd_add(deck)
    items = get_items(deck)
    assert len(items) == 1
    assert items[0].item_type == "phrase"
    assert items[0].example is None

"""SQLite-backed vocabulary item store."""
import logging
import sqlite3
import uuid
from datetime import date, datetime
from enum import Enum
from typing import Optional

from vocab_srs.db import get_connection
from vocab_srs.errors import PersistenceWriteFailure
from vocab_srs.models import LearningStatus, VocabularyCard, to_iso, utcnow
from vocab_srs.sm2 import default_srs_values

logger = logging.getLogger(__name__)

UPDATABLE_COLUMNS = {
    "learning_status",
    "ease_factor",
    "interval_days",
    "repetitions",
    "next_review_date",
    "last_practiced_at",
    "times_practiced",
    "times_correct",
    "times_incorrect",
    "definition",
    "example",
}


def _to_db_value(value):
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return to_iso(value)
    return value


def add_item(
    db_path: str,
    text: str,
    definition: str = "",
    item_type: str = "word",
    example: Optional[str] = None,
    now: Optional[datetime] = None,
) -> VocabularyCard:
    """Add a word or phrase to the deck. Returns the existing card on duplicates."""
    now = now or utcnow()
    conn = get_connection(db_path)
    existing = conn.execute(
        "SELECT * FROM vocabulary_items WHERE text = ? AND item_type = ?",
        (text, item_type),
    ).fetchone()
    if existing:
        conn.close()
        return VocabularyCard.from_row(existing)
    item_id = uuid.uuid4().hex
    defaults = default_srs_values(now)
    conn.execute(
        """INSERT INTO vocabulary_items
        (id, text, item_type, definition, example, learning_status, ease_factor,
         interval_days, repetitions, next_review_date, created_at, updated_at)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
        (
            item_id, text, item_type, definition, example,
            defaults["learning_status"].value, defaults["ease_factor"],
            defaults["interval_days"], defaults["repetitions"],
            to_iso(defaults["next_review_date"]), to_iso(now), to_iso(now),
        ),
    )
    conn.commit()
    row = conn.execute("SELECT * FROM vocabulary_items WHERE id = ?", (item_id,)).fetchone()
    conn.close()
    logger.debug("Added %s %r as %s", item_type, text, item_id)
    return VocabularyCard.from_row(row)


def get_item(db_path: str, item_id: str) -> Optional[VocabularyCard]:
    conn = get_connection(db_path)
    row = conn.execute("SELECT * FROM vocabulary_items WHERE id = ?", (item_id,)).fetchone()
    conn.close()
    return VocabularyCard.from_row(row) if row else None


def get_items(
    db_path: str,
    status: Optional[LearningStatus] = None,
    limit: Optional[int] = None,
) -> list[VocabularyCard]:
    """Items in the deck, newest first, optionally filtered by status."""
    query = "SELECT * FROM vocabulary_items"
    params: list = []
    if status is not None:
        query += " WHERE learning_status = ?"
        params.append(LearningStatus(status).value)
    query += " ORDER BY created_at DESC, rowid DESC"
    if limit is not None:
        query += " LIMIT ?"
        params.append(limit)
    conn = get_connection(db_path)
    rows = conn.execute(query, params).fetchall()
    conn.close()
    return [VocabularyCard.from_row(r) for r in rows]


def get_due_items(
    db_path: str,
    limit: Optional[int] = None,
    today: Optional[date] = None,
) -> list[VocabularyCard]:
    """Learning/review items whose next review date is today or earlier.

    Timestamps are stored as UTC ISO strings, so the first ten characters
    are the calendar date.
    """
    today = today or utcnow().date()
    query = """SELECT * FROM vocabulary_items
        WHERE learning_status IN ('learning', 'review')
        AND substr(next_review_date, 1, 10) <= ?
        ORDER BY next_review_date ASC"""
    params: list = [today.isoformat()]
    if limit is not None:
        query += " LIMIT ?"
        params.append(limit)
    conn = get_connection(db_path)
    rows = conn.execute(query, params).fetchall()
    conn.close()
    return [VocabularyCard.from_row(r) for r in rows]


def _update_query(item_id: str, fields: dict) -> tuple[str, tuple]:
    unknown = set(fields) - UPDATABLE_COLUMNS
    if unknown:
        raise ValueError(f"Cannot update columns: {', '.join(sorted(unknown))}")
    columns = sorted(fields)
    assignments = "".join(f"{col} = ?, " for col in columns)
    values = [_to_db_value(fields[col]) for col in columns]
    query = f"UPDATE vocabulary_items SET {assignments}updated_at = ? WHERE id = ?"
    return query, (*values, to_iso(utcnow()), item_id)


def _insert_review(conn, item_id: str, score: int, fields: dict, now: datetime) -> None:
    conn.execute(
        """INSERT INTO vocabulary_reviews
        (item_id, rating, is_correct, new_ease_factor, new_interval_days,
         new_next_review_date, reviewed_at)
        VALUES (?, ?, ?, ?, ?, ?, ?)""",
        (
            item_id, score, int(score >= 3), fields["ease_factor"],
            fields["interval_days"], to_iso(fields["next_review_date"]), to_iso(now),
        ),
    )


def update_item(db_path: str, item_id: str, fields: dict) -> bool:
    """Write the given fields to an item. Returns False if no such item exists."""
    query, params = _update_query(item_id, fields)
    if not fields:
        return get_item(db_path, item_id) is not None
    try:
        conn = get_connection(db_path)
        try:
            cursor = conn.execute(query, params)
            conn.commit()
        finally:
            conn.close()
    except sqlite3.Error as e:
        raise PersistenceWriteFailure("item store", str(e)) from e
    return cursor.rowcount > 0


def record_review(db_path: str, item_id: str, score: int, fields: dict, now: datetime) -> None:
    """Append a review log entry with the scheduling state it produced."""
    try:
        conn = get_connection(db_path)
        try:
            _insert_review(conn, item_id, score, fields, now)
            conn.commit()
        finally:
            conn.close()
    except sqlite3.Error as e:
        raise PersistenceWriteFailure("item store", str(e)) from e


def apply_review(db_path: str, item_id: str, score: int, fields: dict, now: datetime) -> bool:
    """Write a review's new card state and its log entry in one transaction.

    Returns False, writing nothing, if no such item exists. On a sqlite
    error neither write is kept.
    """
    query, params = _update_query(item_id, fields)
    try:
        conn = get_connection(db_path)
        try:
            cursor = conn.execute(query, params)
            if cursor.rowcount == 0:
                conn.rollback()
                return False
            _insert_review(conn, item_id, score, fields, now)
            conn.commit()
        except sqlite3.Error:
            conn.rollback()
            raise
        finally:
            conn.close()
    except sqlite3.Error as e:
        raise PersistenceWriteFailure("item store", str(e)) from e
    return True

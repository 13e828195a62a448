"""Database initialization and connection management."""
import sqlite3
from pathlib import Path

DEFAULT_DB_PATH = str(Path.home() / ".vocab_srs" / "srs.db")

SCHEMA = """
CREATE TABLE IF NOT EXISTS vocabulary_items (
    id TEXT PRIMARY KEY,
    text TEXT NOT NULL,
    item_type TEXT NOT NULL DEFAULT 'word' CHECK (item_type IN ('word', 'phrase')),
    definition TEXT NOT NULL DEFAULT '',
    example TEXT,
    learning_status TEXT NOT NULL DEFAULT 'new'
        CHECK (learning_status IN ('new', 'learning', 'review', 'mature')),
    ease_factor REAL NOT NULL DEFAULT 2.5,
    interval_days INTEGER NOT NULL DEFAULT 1,
    repetitions INTEGER NOT NULL DEFAULT 0,
    next_review_date TEXT NOT NULL,
    last_practiced_at TEXT,
    times_practiced INTEGER NOT NULL DEFAULT 0,
    times_correct INTEGER NOT NULL DEFAULT 0,
    times_incorrect INTEGER NOT NULL DEFAULT 0,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL,
    UNIQUE(text, item_type)
);

CREATE INDEX IF NOT EXISTS idx_vocabulary_items_status
    ON vocabulary_items(learning_status);

CREATE INDEX IF NOT EXISTS idx_vocabulary_items_next_review
    ON vocabulary_items(next_review_date);

CREATE TABLE IF NOT EXISTS vocabulary_reviews (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    item_id TEXT NOT NULL REFERENCES vocabulary_items(id) ON DELETE CASCADE,
    rating INTEGER NOT NULL,
    is_correct INTEGER NOT NULL,
    new_ease_factor REAL,
    new_interval_days INTEGER,
    new_next_review_date TEXT,
    reviewed_at TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_vocabulary_reviews_reviewed_at
    ON vocabulary_reviews(reviewed_at);

CREATE TABLE IF NOT EXISTS srs_sessions (
    session_id TEXT PRIMARY KEY,
    session_data TEXT NOT NULL,
    saved_at TEXT NOT NULL
);
"""


def get_connection(db_path: str = DEFAULT_DB_PATH) -> sqlite3.Connection:
    """Return a SQLite connection with row factory and foreign keys enabled."""
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


def init_db(db_path: str = DEFAULT_DB_PATH) -> None:
    """Initialize the database, creating all tables if they don't exist."""
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    conn = get_connection(db_path)
    conn.executescript(SCHEMA)
    conn.commit()
    conn.close()

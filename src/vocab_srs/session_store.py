"""Two-tier persistence for in-progress review sessions.

The local tier is a table in the deck's SQLite database and is written
synchronously. The remote tier is an HTTP JSON store used for picking a
session up on another device; it is written from a background thread
after every local write and its failures are only logged.
"""
import copy
import json
import logging
import sqlite3
import time
from concurrent.futures import Future, ThreadPoolExecutor
from datetime import datetime, timedelta
from typing import Callable, Optional
from urllib.parse import quote

import httpx

from vocab_srs.db import get_connection
from vocab_srs.errors import PersistenceWriteFailure
from vocab_srs.models import ReviewSession, parse_timestamp, to_iso, utcnow

logger = logging.getLogger(__name__)

DEFAULT_TTL_HOURS = 24.0


class LocalSessionStore:
    """Session cache in the `srs_sessions` table, with hard expiry."""

    def __init__(
        self,
        db_path: str,
        ttl_hours: float = DEFAULT_TTL_HOURS,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.db_path = db_path
        self.ttl = timedelta(hours=ttl_hours)
        self.clock = clock

    def is_expired(self, saved_at: datetime) -> bool:
        return self.clock() - saved_at > self.ttl

    def load(self, session_id: str) -> Optional[ReviewSession]:
        conn = get_connection(self.db_path)
        row = conn.execute(
            "SELECT session_data, saved_at FROM srs_sessions WHERE session_id = ?",
            (session_id,),
        ).fetchone()
        conn.close()
        if not row:
            return None
        if self.is_expired(parse_timestamp(row["saved_at"])):
            logger.info("Local session %r expired (saved %s)", session_id, row["saved_at"])
            return None
        try:
            return ReviewSession.from_dict(json.loads(row["session_data"]))
        except (ValueError, KeyError, TypeError) as e:
            logger.warning("Ignoring unreadable local session %r: %s", session_id, e)
            return None

    def save(self, session_id: str, session: ReviewSession, saved_at: Optional[datetime] = None) -> None:
        saved_at = saved_at or self.clock()
        try:
            conn = get_connection(self.db_path)
            try:
                conn.execute(
                    """INSERT INTO srs_sessions (session_id, session_data, saved_at) VALUES (?, ?, ?)
                    ON CONFLICT(session_id) DO UPDATE SET session_data=excluded.session_data,
                    saved_at=excluded.saved_at""",
                    (session_id, json.dumps(session.to_dict()), to_iso(saved_at)),
                )
                conn.commit()
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise PersistenceWriteFailure("local session", str(e)) from e

    def clear(self, session_id: str) -> None:
        try:
            conn = get_connection(self.db_path)
            try:
                conn.execute("DELETE FROM srs_sessions WHERE session_id = ?", (session_id,))
                conn.commit()
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise PersistenceWriteFailure("local session", str(e)) from e


class RemoteSessionStore:
    """HTTP session store: GET/PUT/DELETE {base_url}/sessions/{session_id}.

    Payloads are JSON objects of the form {"session": {...}, "saved_at": "..."}.
    """

    def __init__(self, base_url: str = "", timeout: float = 5.0, client: Optional[httpx.Client] = None):
        self._client = client or httpx.Client(base_url=base_url, timeout=timeout)

    @staticmethod
    def _path(session_id: str) -> str:
        return f"/sessions/{quote(session_id, safe='')}"

    def load(self, session_id: str) -> Optional[tuple[ReviewSession, datetime]]:
        resp = self._client.get(self._path(session_id))
        if resp.status_code == 404:
            return None
        resp.raise_for_status()
        data = resp.json()
        saved_at = parse_timestamp(data.get("saved_at"))
        if saved_at is None:
            raise ValueError(f"Remote session {session_id!r} has no saved_at")
        return ReviewSession.from_dict(data["session"]), saved_at

    def save(self, session_id: str, session: ReviewSession, saved_at: datetime) -> None:
        resp = self._client.put(
            self._path(session_id),
            json={"session": session.to_dict(), "saved_at": to_iso(saved_at)},
        )
        resp.raise_for_status()

    def clear(self, session_id: str) -> None:
        resp = self._client.delete(self._path(session_id))
        if resp.status_code != 404:
            resp.raise_for_status()

    def close(self) -> None:
        self._client.close()


class SessionStore:
    """Local-first session persistence with fire-and-forget remote sync.

    Remote writes run one at a time on a background worker so they reach
    the server in the order they were made. `save` and `clear` return the
    worker's Future (resolving to True on success, False once retries are
    exhausted), or None when no remote tier is configured.
    """

    def __init__(
        self,
        local: LocalSessionStore,
        remote: Optional[RemoteSessionStore] = None,
        retries: int = 3,
        retry_delay: float = 0.5,
    ):
        self.local = local
        self.remote = remote
        self.retries = max(1, retries)
        self.retry_delay = retry_delay
        self._executor = (
            ThreadPoolExecutor(max_workers=1, thread_name_prefix="srs-remote-sync")
            if remote is not None
            else None
        )

    @classmethod
    def from_settings(cls, settings) -> "SessionStore":
        local = LocalSessionStore(settings.db_path, ttl_hours=settings.session_ttl_hours)
        remote = None
        if settings.remote_url:
            remote = RemoteSessionStore(settings.remote_url, timeout=settings.remote_timeout)
        return cls(
            local,
            remote,
            retries=settings.remote_retries,
            retry_delay=settings.remote_retry_delay,
        )

    def _run_remote(self, action: str, session_id: str, operation: Callable, *args) -> bool:
        for attempt in range(1, self.retries + 1):
            try:
                operation(session_id, *args)
                return True
            except httpx.HTTPError as e:
                logger.warning(
                    "Remote session %s for %r failed (attempt %d/%d): %s",
                    action, session_id, attempt, self.retries, e,
                )
                if attempt < self.retries and self.retry_delay:
                    time.sleep(self.retry_delay * attempt)
        logger.error(
            "Giving up on remote session %s for %r after %d attempts",
            action, session_id, self.retries,
        )
        return False

    def _dispatch(self, action: str, session_id: str, operation: Callable, *args) -> Optional[Future]:
        if self._executor is None:
            return None
        return self._executor.submit(self._run_remote, action, session_id, operation, *args)

    def save(self, session_id: str, session: ReviewSession) -> Optional[Future]:
        """Write locally, then queue the remote write.

        A local failure raises PersistenceWriteFailure; the remote write is
        queued either way.
        """
        saved_at = self.local.clock()
        snapshot = copy.deepcopy(session)
        try:
            self.local.save(session_id, session, saved_at)
        finally:
            future = self._dispatch(
                "save", session_id, self.remote.save if self.remote else None, snapshot, saved_at
            )
        return future

    def load(self, session_id: str) -> Optional[ReviewSession]:
        """Unexpired local session, else the remote copy (cached locally), else None."""
        session = self.local.load(session_id)
        if session is not None or self.remote is None:
            return session

        try:
            found = self.remote.load(session_id)
        except (httpx.HTTPError, ValueError, KeyError, TypeError, AttributeError) as e:
            logger.warning("Could not load remote session %r: %s", session_id, e)
            return None
        if found is None:
            return None

        session, saved_at = found
        if self.local.is_expired(saved_at):
            logger.info("Remote session %r expired (saved %s)", session_id, to_iso(saved_at))
            self._dispatch("clear", session_id, self.remote.clear)
            return None

        try:
            self.local.save(session_id, session, saved_at)
        except PersistenceWriteFailure as e:
            logger.warning("Could not cache remote session %r locally: %s", session_id, e)
        return session

    def clear(self, session_id: str) -> Optional[Future]:
        try:
            self.local.clear(session_id)
        finally:
            future = self._dispatch("clear", session_id, self.remote.clear if self.remote else None)
        return future

    def close(self) -> None:
        """Wait for queued remote writes, then release the HTTP client."""
        if self._executor is not None:
            self._executor.shutdown(wait=True)
        if self.remote is not None:
            self.remote.close()

"""Session store adapters.

Opaque key/value storage keyed by session id, with a TTL refreshed on every
write. Values are JSON-serialised. Two implementations share one contract:

- InMemorySessionStore: single-process deployments and tests.
- SQLiteSessionStore: survives restarts, shares the application database.
"""

from __future__ import annotations

import json
import sqlite3
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from threading import Lock
from typing import Any, Protocol

from letterbox.adapters.auth.crypto import generate_session_id
from letterbox.adapters.clock import SystemClock


class TimePort(Protocol):
    def now_utc(self) -> datetime: ...


@dataclass
class _SessionRecord:
    data: dict[str, str] = field(default_factory=dict)
    expires_at: datetime | None = None


class InMemorySessionStore:
    """In-memory session storage guarded by a lock for per-key atomicity."""

    def __init__(self, ttl_minutes: int = 60 * 24, clock: TimePort | None = None) -> None:
        self.ttl = timedelta(minutes=ttl_minutes)
        self._clock = clock or SystemClock()
        self._sessions: dict[str, _SessionRecord] = {}
        self._lock = Lock()

    def _live(self, session_id: str) -> _SessionRecord | None:
        record = self._sessions.get(session_id)
        if record is None:
            return None
        if record.expires_at is not None and record.expires_at <= self._clock.now_utc():
            del self._sessions[session_id]
            return None
        return record

    def create(self) -> str:
        session_id = generate_session_id()
        with self._lock:
            self._sessions[session_id] = _SessionRecord(
                expires_at=self._clock.now_utc() + self.ttl
            )
        return session_id

    def exists(self, session_id: str) -> bool:
        with self._lock:
            return self._live(session_id) is not None

    def get(self, session_id: str, key: str) -> Any | None:
        with self._lock:
            record = self._live(session_id)
            if record is None or key not in record.data:
                return None
            return json.loads(record.data[key])

    def set(self, session_id: str, key: str, value: Any) -> None:
        with self._lock:
            record = self._live(session_id)
            if record is None:
                record = _SessionRecord()
                self._sessions[session_id] = record
            record.data[key] = json.dumps(value)
            record.expires_at = self._clock.now_utc() + self.ttl

    def renew(self, session_id: str | None) -> str:
        """Move the contents of ``session_id`` under a fresh id; the old id dies."""
        new_id = generate_session_id()
        with self._lock:
            old = self._live(session_id) if session_id else None
            if session_id:
                self._sessions.pop(session_id, None)
            self._sessions[new_id] = _SessionRecord(
                data=dict(old.data) if old else {},
                expires_at=self._clock.now_utc() + self.ttl,
            )
        return new_id

    def destroy(self, session_id: str) -> None:
        with self._lock:
            self._sessions.pop(session_id, None)

    def clear(self) -> None:
        """Clear all sessions - useful for testing."""
        with self._lock:
            self._sessions.clear()


class SQLiteSessionStore:
    """Session storage in the ``sessions`` table (see migrations)."""

    def __init__(
        self,
        db_path: str,
        ttl_minutes: int = 60 * 24,
        clock: TimePort | None = None,
    ) -> None:
        self.db_path = db_path
        self.ttl = timedelta(minutes=ttl_minutes)
        self._clock = clock or SystemClock()

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _load(self, conn: sqlite3.Connection, session_id: str) -> dict[str, Any] | None:
        row = conn.execute(
            "SELECT data_json, expires_at FROM sessions WHERE session_id = ?",
            (session_id,),
        ).fetchone()
        if row is None:
            return None
        if datetime.fromisoformat(row["expires_at"]) <= self._clock.now_utc():
            conn.execute("DELETE FROM sessions WHERE session_id = ?", (session_id,))
            conn.commit()
            return None
        data: dict[str, Any] = json.loads(row["data_json"])
        return data

    def _write(self, conn: sqlite3.Connection, session_id: str, data: dict[str, Any]) -> None:
        expires_at = self._clock.now_utc() + self.ttl
        conn.execute(
            """
            INSERT INTO sessions (session_id, data_json, expires_at)
            VALUES (?, ?, ?)
            ON CONFLICT(session_id) DO UPDATE SET
                data_json=excluded.data_json,
                expires_at=excluded.expires_at
            """,
            (session_id, json.dumps(data), expires_at.isoformat()),
        )

    def create(self) -> str:
        session_id = generate_session_id()
        conn = self._get_conn()
        try:
            self._write(conn, session_id, {})
            conn.commit()
        finally:
            conn.close()
        return session_id

    def exists(self, session_id: str) -> bool:
        conn = self._get_conn()
        try:
            return self._load(conn, session_id) is not None
        finally:
            conn.close()

    def get(self, session_id: str, key: str) -> Any | None:
        conn = self._get_conn()
        try:
            data = self._load(conn, session_id)
            return data.get(key) if data else None
        finally:
            conn.close()

    def set(self, session_id: str, key: str, value: Any) -> None:
        conn = self._get_conn()
        try:
            data = self._load(conn, session_id) or {}
            data[key] = value
            self._write(conn, session_id, data)
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def renew(self, session_id: str | None) -> str:
        new_id = generate_session_id()
        conn = self._get_conn()
        try:
            data = (self._load(conn, session_id) if session_id else None) or {}
            if session_id:
                conn.execute("DELETE FROM sessions WHERE session_id = ?", (session_id,))
            self._write(conn, new_id, data)
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()
        return new_id

    def destroy(self, session_id: str) -> None:
        conn = self._get_conn()
        try:
            conn.execute("DELETE FROM sessions WHERE session_id = ?", (session_id,))
            conn.commit()
        finally:
            conn.close()

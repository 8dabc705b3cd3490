"""
SQLite repositories.

Each call opens its own connection with foreign keys enforced. The one
multi-statement write (subscriber + confirmation token) uses an explicit
transaction handle returned by ``begin_transaction``; nothing written through
that handle is visible until ``commit``. A handle that is dropped without
commit persists nothing.
"""

from __future__ import annotations

import sqlite3
from datetime import datetime
from typing import Any
from uuid import UUID

from letterbox.domain.entities import Subscriber, SubscriberStatus, User

# -----------------------------------------------------------------------------
# Helper functions
# -----------------------------------------------------------------------------


def dict_factory(cursor: sqlite3.Cursor, row: tuple[Any, ...]) -> dict[str, Any]:
    """Convert SQLite row to dictionary."""
    return {col[0]: row[idx] for idx, col in enumerate(cursor.description)}


class SQLiteRepoBase:
    """Base class for SQLite repositories."""

    def __init__(self, db_path: str, timeout: float = 5.0):
        self.db_path = db_path
        self.timeout = timeout  # seconds to wait on a locked database

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path, timeout=self.timeout)
        conn.row_factory = dict_factory
        conn.execute("PRAGMA foreign_keys = ON;")
        return conn


# -----------------------------------------------------------------------------
# Subscribers and confirmation tokens
# -----------------------------------------------------------------------------


class SQLiteSubscriberRepo(SQLiteRepoBase):
    """SQLite implementation of SubscriberRepoPort."""

    def begin_transaction(self) -> sqlite3.Connection:
        # Autocommit mode so BEGIN/COMMIT are ours, not the driver's.
        conn = sqlite3.connect(self.db_path, timeout=self.timeout, isolation_level=None)
        conn.row_factory = dict_factory
        try:
            conn.execute("PRAGMA foreign_keys = ON;")
            conn.execute("BEGIN IMMEDIATE")
        except sqlite3.Error:
            conn.close()
            raise
        return conn

    def insert_subscriber(self, tx: sqlite3.Connection, subscriber: Subscriber) -> UUID:
        tx.execute(
            """
            INSERT INTO subscriptions (id, email, name, status, subscribed_at)
            VALUES (?, ?, ?, ?, ?)
            """,
            (
                str(subscriber.id),
                subscriber.email,
                subscriber.name,
                subscriber.status.value,
                subscriber.subscribed_at.isoformat(),
            ),
        )
        return subscriber.id

    def insert_token(self, tx: sqlite3.Connection, token: str, subscriber_id: UUID) -> None:
        tx.execute(
            """
            INSERT INTO subscription_tokens (subscription_token, subscriber_id)
            VALUES (?, ?)
            """,
            (token, str(subscriber_id)),
        )

    def commit(self, tx: sqlite3.Connection) -> None:
        # A failed COMMIT leaves the transaction open; the caller rolls back.
        tx.execute("COMMIT")
        tx.close()

    def rollback(self, tx: sqlite3.Connection) -> None:
        try:
            if tx.in_transaction:
                tx.execute("ROLLBACK")
        finally:
            tx.close()

    def find_subscriber_id_by_token(self, token: str) -> UUID | None:
        conn = self._get_conn()
        try:
            row = conn.execute(
                "SELECT subscriber_id FROM subscription_tokens WHERE subscription_token = ?",
                (token,),
            ).fetchone()
            return UUID(row["subscriber_id"]) if row else None
        finally:
            conn.close()

    def mark_confirmed(self, subscriber_id: UUID) -> None:
        conn = self._get_conn()
        try:
            row = conn.execute(
                "SELECT status FROM subscriptions WHERE id = ?", (str(subscriber_id),)
            ).fetchone()
            if row is None:
                return
            status = SubscriberStatus(row["status"]).confirm()
            conn.execute(
                "UPDATE subscriptions SET status = ? WHERE id = ?",
                (status.value, str(subscriber_id)),
            )
            conn.commit()
        finally:
            conn.close()

    def get_by_id(self, subscriber_id: UUID) -> Subscriber | None:
        conn = self._get_conn()
        try:
            row = conn.execute(
                "SELECT * FROM subscriptions WHERE id = ?", (str(subscriber_id),)
            ).fetchone()
            return self._map_row(row) if row else None
        finally:
            conn.close()

    def list_confirmed_subscribers(self) -> list[str]:
        conn = self._get_conn()
        try:
            rows = conn.execute(
                "SELECT email FROM subscriptions WHERE status = ? ORDER BY subscribed_at",
                (SubscriberStatus.CONFIRMED.value,),
            ).fetchall()
            return [r["email"] for r in rows]
        finally:
            conn.close()

    def list_all(self) -> list[Subscriber]:
        conn = self._get_conn()
        try:
            rows = conn.execute("SELECT * FROM subscriptions ORDER BY subscribed_at").fetchall()
            return [self._map_row(r) for r in rows]
        finally:
            conn.close()

    def _map_row(self, row: dict[str, Any]) -> Subscriber:
        return Subscriber(
            id=UUID(row["id"]),
            email=row["email"],
            name=row["name"],
            status=SubscriberStatus(row["status"]),
            subscribed_at=datetime.fromisoformat(row["subscribed_at"]),
        )


# -----------------------------------------------------------------------------
# Operator accounts
# -----------------------------------------------------------------------------


class SQLiteUserRepo(SQLiteRepoBase):
    """SQLite implementation of UserRepoPort."""

    def get_by_username(self, username: str) -> User | None:
        conn = self._get_conn()
        try:
            row = conn.execute(
                "SELECT * FROM users WHERE username = ?", (username,)
            ).fetchone()
            return self._map_row(row) if row else None
        finally:
            conn.close()

    def get_by_id(self, user_id: UUID) -> User | None:
        conn = self._get_conn()
        try:
            row = conn.execute(
                "SELECT * FROM users WHERE user_id = ?", (str(user_id),)
            ).fetchone()
            return self._map_row(row) if row else None
        finally:
            conn.close()

    def save(self, user: User) -> User:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO users (user_id, username, password_hash)
                VALUES (?, ?, ?)
                ON CONFLICT(user_id) DO UPDATE SET
                    password_hash=excluded.password_hash
                """,
                (str(user.user_id), user.username, user.password_hash),
            )
            conn.commit()
            return user
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def update_password_hash(self, user_id: UUID, password_hash: str) -> None:
        conn = self._get_conn()
        try:
            conn.execute(
                "UPDATE users SET password_hash = ? WHERE user_id = ?",
                (password_hash, str(user_id)),
            )
            conn.commit()
        finally:
            conn.close()

    def count(self) -> int:
        conn = self._get_conn()
        try:
            row = conn.execute("SELECT COUNT(*) AS n FROM users").fetchone()
            return int(row["n"])
        finally:
            conn.close()

    def _map_row(self, row: dict[str, Any]) -> User:
        return User(
            user_id=UUID(row["user_id"]),
            username=row["username"],
            password_hash=row["password_hash"],
        )

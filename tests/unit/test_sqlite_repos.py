"""
SQLite adapter tests: migrations, the subscriber transaction, user repo.
"""

import sqlite3
from uuid import uuid4

import pytest

from letterbox.adapters.dev_email import DevEmailAdapter
from letterbox.adapters.sqlite.migrator import SQLiteMigrator
from letterbox.adapters.sqlite.repos import SQLiteSubscriberRepo, SQLiteUserRepo
from letterbox.components.subscriptions import SubscriptionService
from letterbox.core.errors import UnexpectedError
from letterbox.domain.entities import Subscriber, SubscriberStatus, User


def count_rows(db_path: str, table: str) -> int:
    conn = sqlite3.connect(db_path)
    try:
        return int(conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0])
    finally:
        conn.close()


def new_subscriber(email: str = "ursula_le_guin@gmail.com") -> Subscriber:
    return Subscriber(email=email, name="le guin")


class TestMigrator:
    def test_applies_all_then_nothing(self, db_path: str) -> None:
        migrator = SQLiteMigrator(db_path)

        first = migrator.run_migrations()
        second = migrator.run_migrations()

        assert first == sorted(first)
        assert "0001_create_subscriptions.sql" in first
        assert second == []

    def test_creates_tables(self, migrated_db: str) -> None:
        conn = sqlite3.connect(migrated_db)
        tables = {
            r[0] for r in conn.execute("SELECT name FROM sqlite_master WHERE type='table'")
        }
        conn.close()
        assert {"subscriptions", "subscription_tokens", "users", "sessions"} <= tables

    def test_broken_migration_raises(self, tmp_path, db_path: str) -> None:
        migrations = tmp_path / "migrations"
        migrations.mkdir()
        (migrations / "0001_broken.sql").write_text("CREATE TABLE oops (;\n-- Down\nDROP TABLE oops;")

        with pytest.raises(RuntimeError, match="0001_broken.sql"):
            SQLiteMigrator(db_path, migrations).run_migrations()


class TestSubscriberTransaction:
    @pytest.fixture
    def repo(self, migrated_db: str) -> SQLiteSubscriberRepo:
        return SQLiteSubscriberRepo(migrated_db)

    def test_commit_persists_both_rows(self, repo: SQLiteSubscriberRepo, migrated_db: str) -> None:
        sub = new_subscriber()
        tx = repo.begin_transaction()
        repo.insert_subscriber(tx, sub)
        repo.insert_token(tx, "token123", sub.id)
        repo.commit(tx)

        assert repo.find_subscriber_id_by_token("token123") == sub.id
        stored = repo.get_by_id(sub.id)
        assert stored is not None
        assert stored.status == SubscriberStatus.PENDING_CONFIRMATION
        assert stored.email == "ursula_le_guin@gmail.com"

    def test_uncommitted_writes_invisible(
        self, repo: SQLiteSubscriberRepo, migrated_db: str
    ) -> None:
        sub = new_subscriber()
        tx = repo.begin_transaction()
        repo.insert_subscriber(tx, sub)

        assert repo.get_by_id(sub.id) is None

        repo.rollback(tx)
        assert count_rows(migrated_db, "subscriptions") == 0

    def test_abandoned_handle_persists_nothing(
        self, repo: SQLiteSubscriberRepo, migrated_db: str
    ) -> None:
        sub = new_subscriber()
        tx = repo.begin_transaction()
        repo.insert_subscriber(tx, sub)
        repo.insert_token(tx, "token123", sub.id)
        tx.close()

        assert count_rows(migrated_db, "subscriptions") == 0
        assert count_rows(migrated_db, "subscription_tokens") == 0

    def test_token_requires_existing_subscriber(self, repo: SQLiteSubscriberRepo) -> None:
        tx = repo.begin_transaction()
        with pytest.raises(sqlite3.IntegrityError):
            repo.insert_token(tx, "orphan", uuid4())
        repo.rollback(tx)

    def test_duplicate_token_rejected(self, repo: SQLiteSubscriberRepo) -> None:
        first, second = new_subscriber(), new_subscriber()
        tx = repo.begin_transaction()
        repo.insert_subscriber(tx, first)
        repo.insert_token(tx, "same", first.id)
        repo.commit(tx)

        tx = repo.begin_transaction()
        repo.insert_subscriber(tx, second)
        with pytest.raises(sqlite3.IntegrityError):
            repo.insert_token(tx, "same", second.id)
        repo.rollback(tx)

        assert repo.get_by_id(second.id) is None

    def test_failed_commit_can_be_rolled_back(
        self, repo: SQLiteSubscriberRepo, migrated_db: str
    ) -> None:
        tx = repo.begin_transaction()
        # Foreign key is checked at COMMIT, which fails and keeps the transaction open.
        tx.execute("PRAGMA defer_foreign_keys = ON")
        repo.insert_token(tx, "orphan", uuid4())

        with pytest.raises(sqlite3.IntegrityError):
            repo.commit(tx)
        repo.rollback(tx)

        assert count_rows(migrated_db, "subscription_tokens") == 0

    def test_mark_confirmed_is_idempotent(self, repo: SQLiteSubscriberRepo) -> None:
        sub = new_subscriber()
        tx = repo.begin_transaction()
        repo.insert_subscriber(tx, sub)
        repo.commit(tx)

        repo.mark_confirmed(sub.id)
        repo.mark_confirmed(sub.id)

        stored = repo.get_by_id(sub.id)
        assert stored is not None
        assert stored.status == SubscriberStatus.CONFIRMED

    def test_mark_confirmed_unknown_id_is_a_no_op(self, repo: SQLiteSubscriberRepo) -> None:
        repo.mark_confirmed(uuid4())
        assert repo.list_all() == []

    def test_list_confirmed_only(self, repo: SQLiteSubscriberRepo) -> None:
        pending, confirmed = new_subscriber("p@example.com"), new_subscriber("c@example.com")
        tx = repo.begin_transaction()
        repo.insert_subscriber(tx, pending)
        repo.insert_subscriber(tx, confirmed)
        repo.commit(tx)
        repo.mark_confirmed(confirmed.id)

        assert repo.list_confirmed_subscribers() == ["c@example.com"]
        assert len(repo.list_all()) == 2

    def test_unknown_token_misses(self, repo: SQLiteSubscriberRepo) -> None:
        assert repo.find_subscriber_id_by_token("nope") is None


class TestUserRepo:
    @pytest.fixture
    def repo(self, migrated_db: str) -> SQLiteUserRepo:
        return SQLiteUserRepo(migrated_db)

    def test_save_and_get(self, repo: SQLiteUserRepo) -> None:
        user = repo.save(User(username="admin", password_hash="$argon2id$fake"))

        assert repo.get_by_username("admin") == user
        assert repo.get_by_id(user.user_id) == user
        assert repo.count() == 1

    def test_username_unique(self, repo: SQLiteUserRepo) -> None:
        repo.save(User(username="admin", password_hash="h1"))
        with pytest.raises(sqlite3.IntegrityError):
            repo.save(User(username="admin", password_hash="h2"))

    def test_update_password_hash(self, repo: SQLiteUserRepo) -> None:
        user = repo.save(User(username="admin", password_hash="old"))

        repo.update_password_hash(user.user_id, "new")

        stored = repo.get_by_id(user.user_id)
        assert stored is not None
        assert stored.password_hash == "new"

    def test_missing_user(self, repo: SQLiteUserRepo) -> None:
        assert repo.get_by_username("ghost") is None
        assert repo.get_by_id(uuid4()) is None
        assert repo.count() == 0


class TestLockedDatabase:
    """Lock contention must surface as UnexpectedError with nothing stored."""

    @pytest.fixture
    def reader(self, migrated_db: str):
        # Open read transaction: holds a SHARED lock, so COMMIT cannot get EXCLUSIVE.
        conn = sqlite3.connect(migrated_db, isolation_level=None)
        conn.execute("BEGIN")
        conn.execute("SELECT COUNT(*) FROM subscriptions").fetchone()
        yield conn
        conn.execute("ROLLBACK")
        conn.close()

    @pytest.fixture
    def writer(self, migrated_db: str):
        conn = sqlite3.connect(migrated_db, isolation_level=None)
        conn.execute("BEGIN IMMEDIATE")
        yield conn
        conn.execute("ROLLBACK")
        conn.close()

    def subscribe(self, migrated_db: str, sender: DevEmailAdapter) -> None:
        repo = SQLiteSubscriberRepo(migrated_db, timeout=0.1)
        service = SubscriptionService(repo, sender, base_url="http://127.0.0.1")
        service.subscribe("ursula_le_guin@gmail.com", "le guin")

    def test_busy_commit_is_unexpected(self, migrated_db: str, reader) -> None:
        sender = DevEmailAdapter()

        with pytest.raises(UnexpectedError) as exc_info:
            self.subscribe(migrated_db, sender)

        assert exc_info.value.message == "Failed to store the new subscriber."
        assert isinstance(exc_info.value.cause, sqlite3.OperationalError)
        assert sender.email_count == 0
        assert count_rows(migrated_db, "subscriptions") == 0

    def test_busy_begin_is_unexpected(self, migrated_db: str, writer) -> None:
        sender = DevEmailAdapter()

        with pytest.raises(UnexpectedError) as exc_info:
            self.subscribe(migrated_db, sender)

        assert isinstance(exc_info.value.cause, sqlite3.OperationalError)
        assert sender.email_count == 0

    def test_busy_begin_closes_its_connection(
        self, migrated_db: str, writer, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        opened: list[sqlite3.Connection] = []
        real_connect = sqlite3.connect

        def recording_connect(*args, **kwargs):
            conn = real_connect(*args, **kwargs)
            opened.append(conn)
            return conn

        monkeypatch.setattr(sqlite3, "connect", recording_connect)

        with pytest.raises(sqlite3.OperationalError):
            SQLiteSubscriberRepo(migrated_db, timeout=0.05).begin_transaction()

        assert len(opened) == 1
        with pytest.raises(sqlite3.ProgrammingError):
            opened[0].execute("SELECT 1")

import pytest
from pydantic import SecretStr

from letterbox.adapters.auth.crypto import Argon2CredentialVerifier
from letterbox.adapters.sqlite.repos import SQLiteUserRepo
from letterbox.app_shell.config import BootstrapSettings
from letterbox.services.bootstrap import bootstrap_operator, create_operator


@pytest.fixture
def verifier() -> Argon2CredentialVerifier:
    return Argon2CredentialVerifier(time_cost=1, memory_cost=1024, parallelism=1)


@pytest.fixture
def user_repo(migrated_db: str) -> SQLiteUserRepo:
    return SQLiteUserRepo(migrated_db)


def test_bootstrap_creates_operator_on_empty_db(user_repo, verifier) -> None:
    """Should create user if DB is empty and credentials provided."""
    settings = BootstrapSettings(username="admin", password=SecretStr("a long password"))

    user = bootstrap_operator(user_repo, verifier, settings)

    assert user is not None
    assert user.username == "admin"
    stored = user_repo.get_by_username("admin")
    assert stored is not None
    assert verifier.verify_password("a long password", stored.password_hash)


def test_bootstrap_no_credentials(user_repo, verifier) -> None:
    """Should skip if credentials missing."""
    assert bootstrap_operator(user_repo, verifier, BootstrapSettings()) is None
    assert user_repo.count() == 0


def test_bootstrap_users_exist(user_repo, verifier) -> None:
    """Should skip if an operator already exists."""
    create_operator(user_repo, verifier, "existing", "another long password")
    settings = BootstrapSettings(username="admin", password=SecretStr("a long password"))

    assert bootstrap_operator(user_repo, verifier, settings) is None
    assert user_repo.get_by_username("admin") is None


def test_create_operator_rejects_duplicates(user_repo, verifier) -> None:
    create_operator(user_repo, verifier, "admin", "a long password")
    with pytest.raises(ValueError, match="already exists"):
        create_operator(user_repo, verifier, "admin", "a long password")


def test_create_operator_rejects_blank_username(user_repo, verifier) -> None:
    with pytest.raises(ValueError):
        create_operator(user_repo, verifier, "   ", "a long password")


@pytest.mark.parametrize("password", ["too short", "x" * 129], ids=["short", "long"])
def test_bootstrap_rejects_password_outside_bounds(user_repo, verifier, password: str) -> None:
    settings = BootstrapSettings(username="admin", password=SecretStr(password))

    with pytest.raises(ValueError, match="between 12 and 128"):
        bootstrap_operator(user_repo, verifier, settings)

    assert user_repo.count() == 0


def test_create_operator_accepts_bounds_inclusive(user_repo, verifier) -> None:
    create_operator(user_repo, verifier, "shortest", "x" * 12)
    create_operator(user_repo, verifier, "longest", "x" * 128)

    assert user_repo.count() == 2

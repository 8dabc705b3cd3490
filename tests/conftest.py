from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from httpx import Response

from letterbox.adapters.clock import FrozenClock
from letterbox.adapters.dev_email import DevEmailAdapter
from letterbox.adapters.sqlite.migrator import SQLiteMigrator
from letterbox.api.container import AppContainer
from letterbox.api.main import create_app
from letterbox.app_shell.config import Settings

ADMIN_USERNAME = "admin"
ADMIN_PASSWORD = "everythinghastostartsomewhere"


def settings_data(db_path: str, **overrides: Any) -> dict[str, Any]:
    data: dict[str, Any] = {
        "application": {
            "base_url": "http://testserver",
            "hmac_secret": "test-hmac-secret",
        },
        "database": {"path": db_path},
        "email_client": {
            "base_url": "http://email.test",
            "sender_email": "newsletter@example.com",
            "authorization_token": "test-token",
            "enabled": False,
        },
        # Cheap argon2 parameters keep the suite fast
        "password_hashing": {"time_cost": 1, "memory_cost": 1024, "parallelism": 1},
        "bootstrap": {"username": ADMIN_USERNAME, "password": ADMIN_PASSWORD},
        "log_level": "DEBUG",
    }
    data.update(overrides)
    return data


@pytest.fixture
def db_path(tmp_path: Path) -> str:
    return str(tmp_path / "data" / "letterbox.db")


@pytest.fixture
def migrated_db(db_path: str) -> str:
    SQLiteMigrator(db_path).run_migrations()
    return db_path


@pytest.fixture
def settings(db_path: str) -> Settings:
    return Settings.model_validate(settings_data(db_path))


@pytest.fixture
def email_sender() -> DevEmailAdapter:
    return DevEmailAdapter()


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock()


@pytest.fixture
def app(settings: Settings, email_sender: DevEmailAdapter, clock: FrozenClock) -> FastAPI:
    return create_app(settings, email_sender=email_sender, clock=clock)


@pytest.fixture
def container(app: FastAPI) -> AppContainer:
    container: AppContainer = app.state.container
    return container


@pytest.fixture
def client(app: FastAPI) -> Iterator[TestClient]:
    """TestClient with lifespan (migrations + bootstrap) and manual redirects."""
    with TestClient(app, follow_redirects=False) as c:
        yield c


@pytest.fixture
def login(client: TestClient) -> Callable[..., Response]:
    """POST /login with the bootstrap credentials unless others are given."""

    def _login(username: str = ADMIN_USERNAME, password: str = ADMIN_PASSWORD) -> Response:
        return client.post("/login", data={"username": username, "password": password})

    return _login


@pytest.fixture
def admin_client(client: TestClient, login: Callable[..., Response]) -> TestClient:
    response = login()
    assert response.status_code == 303
    assert response.headers["location"] == "/admin/dashboard"
    return client

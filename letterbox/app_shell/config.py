"""
Layered configuration.

Load order, later layers winning:
1. configuration/base.yaml
2. configuration/{APP_ENVIRONMENT}.yaml (local or production)
3. APP_<SECTION>__<KEY> environment variables
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from enum import Enum
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, SecretStr, ValidationError

ENV_PREFIX = "APP_"
ENV_SEPARATOR = "__"
DEFAULT_CONFIG_DIR = Path("configuration")
RESERVED_ENV = frozenset({"APP_ENVIRONMENT", "APP_CONFIG_DIR"})


class Environment(str, Enum):
    LOCAL = "local"
    PRODUCTION = "production"

    @classmethod
    def parse(cls, raw: str) -> Environment:
        try:
            return cls(raw.lower())
        except ValueError:
            raise ValueError(
                f"{raw} is not a supported environment. Use either `local` or `production`."
            ) from None


class ApplicationSettings(BaseModel):
    host: str = "127.0.0.1"
    port: int = 8000
    base_url: str = "http://127.0.0.1:8000"
    hmac_secret: SecretStr


class DatabaseSettings(BaseModel):
    path: str = "letterbox.db"


class EmailClientSettings(BaseModel):
    base_url: str
    sender_email: str
    authorization_token: SecretStr
    timeout_milliseconds: int = 10_000
    enabled: bool = True  # False: log emails through the dev adapter instead


class SessionSettings(BaseModel):
    ttl_minutes: int = 60 * 24
    cookie_secure: bool = False
    backend: Literal["memory", "sqlite"] = "memory"


class PasswordHashingSettings(BaseModel):
    time_cost: int = 2
    memory_cost: int = 15000
    parallelism: int = 1


class BootstrapSettings(BaseModel):
    username: str | None = None
    password: SecretStr | None = None


class Settings(BaseModel):
    application: ApplicationSettings
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    email_client: EmailClientSettings
    session: SessionSettings = Field(default_factory=SessionSettings)
    password_hashing: PasswordHashingSettings = Field(default_factory=PasswordHashingSettings)
    bootstrap: BootstrapSettings = Field(default_factory=BootstrapSettings)
    log_level: str = "INFO"


# --- Loading ---


def deep_merge(base: dict[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, Mapping) and isinstance(merged.get(key), dict):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _read_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found at: {path}")
    try:
        data = yaml.safe_load(path.read_text())
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML syntax in {path.name}: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"{path.name} must contain a mapping at the top level")
    return data


def env_overrides(environ: Mapping[str, str]) -> dict[str, Any]:
    """Turn APP_SECTION__KEY=value pairs into a nested dict."""
    overrides: dict[str, Any] = {}
    for name, value in environ.items():
        if not name.startswith(ENV_PREFIX) or name in RESERVED_ENV:
            continue
        path = [p.lower() for p in name[len(ENV_PREFIX):].split(ENV_SEPARATOR) if p]
        if not path:
            continue
        node = overrides
        for part in path[:-1]:
            node = node.setdefault(part, {})
            if not isinstance(node, dict):
                break
        else:
            node[path[-1]] = value
    return overrides


def load_settings(
    config_dir: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> Settings:
    """
    Load and validate settings.
    Raises FileNotFoundError if a layer file is missing.
    Raises ValueError on bad YAML, unknown environment, or schema errors.
    """
    environ = os.environ if environ is None else environ
    config_dir = config_dir or Path(environ.get("APP_CONFIG_DIR", DEFAULT_CONFIG_DIR))
    environment = Environment.parse(environ.get("APP_ENVIRONMENT", Environment.LOCAL.value))

    data = _read_yaml(config_dir / "base.yaml")
    data = deep_merge(data, _read_yaml(config_dir / f"{environment.value}.yaml"))
    data = deep_merge(data, env_overrides(environ))

    try:
        return Settings.model_validate(data)
    except ValidationError as e:
        raise ValueError(f"Configuration validation failed:\n{e}") from e

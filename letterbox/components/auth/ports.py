from typing import Any, Protocol
from uuid import UUID

from letterbox.domain.entities import User


class UserRepoPort(Protocol):
    def get_by_username(self, username: str) -> User | None: ...
    def get_by_id(self, user_id: UUID) -> User | None: ...
    def save(self, user: User) -> User: ...
    def update_password_hash(self, user_id: UUID, password_hash: str) -> None: ...
    def count(self) -> int: ...


class CredentialVerifierPort(Protocol):
    dummy_hash: str

    def hash_password(self, password: str) -> str: ...
    def verify_password(self, password: str, hash_str: str) -> bool: ...
    def needs_rehash(self, hash_str: str) -> bool: ...


class SessionStorePort(Protocol):
    """Generic key/value session backend."""

    def create(self) -> str: ...
    def exists(self, session_id: str) -> bool: ...
    def get(self, session_id: str, key: str) -> Any | None: ...
    def set(self, session_id: str, key: str, value: Any) -> None: ...
    def renew(self, session_id: str | None) -> str: ...
    def destroy(self, session_id: str) -> None: ...

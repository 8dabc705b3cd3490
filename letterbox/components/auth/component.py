"""
AuthService component.

Password login with session renewal, logout, and password change for
operator accounts.

Key behaviors:
- Unknown usernames still pay for one argon2 verification (dummy hash)
- Both failure paths raise the same InvalidCredentials
- The session id is renewed before the user id is written into it
- Hashes made with outdated parameters are upgraded on successful login,
  before the session is touched; a failed upgrade leaves the caller anonymous
"""

from __future__ import annotations

import logging
from uuid import UUID

from letterbox.components.auth.models import (
    MAX_PASSWORD_LENGTH,
    MIN_PASSWORD_LENGTH,
    PASSWORD_INCORRECT,
    PASSWORD_LENGTH,
    PASSWORD_MISMATCH,
)
from letterbox.components.auth.ports import CredentialVerifierPort, UserRepoPort
from letterbox.components.auth.session import TypedSession
from letterbox.core.errors import InvalidCredentials, UnexpectedError, ValidationError
from letterbox.domain.entities import User

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self, user_repo: UserRepoPort, verifier: CredentialVerifierPort) -> None:
        self.user_repo = user_repo
        self.verifier = verifier

    def login(self, username: str, password: str, session: TypedSession) -> UUID:
        user = self._find_user(username)

        if user is None:
            self.verifier.verify_password(password, self.verifier.dummy_hash)
            logger.warning("Failed login for username %r", username)
            raise InvalidCredentials()

        if not self.verifier.verify_password(password, user.password_hash):
            logger.warning("Failed login for username %r", username)
            raise InvalidCredentials()

        if self.verifier.needs_rehash(user.password_hash):
            self._store_hash(user.user_id, self.verifier.hash_password(password))

        session.renew()
        session.insert_user_id(user.user_id)

        logger.info("User %s logged in (user_id=%s)", user.username, user.user_id)
        return user.user_id

    def log_out(self, session: TypedSession) -> None:
        session.log_out()

    def change_password(
        self,
        user_id: UUID,
        current_password: str,
        new_password: str,
        new_password_confirmation: str,
    ) -> None:
        if new_password != new_password_confirmation:
            raise ValidationError(PASSWORD_MISMATCH, field="new_password_confirmation")
        if not MIN_PASSWORD_LENGTH <= len(new_password) <= MAX_PASSWORD_LENGTH:
            raise ValidationError(PASSWORD_LENGTH, field="new_password")

        user = self._require_user(user_id)
        if not self.verifier.verify_password(current_password, user.password_hash):
            raise ValidationError(PASSWORD_INCORRECT, field="current_password")

        self._store_hash(user.user_id, self.verifier.hash_password(new_password))
        logger.info("Password changed for user_id=%s", user.user_id)

    def get_username(self, user_id: UUID) -> str:
        return self._require_user(user_id).username

    # --- Internals ---

    def _find_user(self, username: str) -> User | None:
        try:
            return self.user_repo.get_by_username(username)
        except Exception as e:
            raise UnexpectedError("Failed to retrieve stored credentials.") from e

    def _require_user(self, user_id: UUID) -> User:
        try:
            user = self.user_repo.get_by_id(user_id)
        except Exception as e:
            raise UnexpectedError("Failed to retrieve the user.") from e
        if user is None:
            raise UnexpectedError(f"No user with id {user_id}.")
        return user

    def _store_hash(self, user_id: UUID, password_hash: str) -> None:
        try:
            self.user_repo.update_password_hash(user_id, password_hash)
        except Exception as e:
            raise UnexpectedError("Failed to change the user's password.") from e

"""
Typed session.

Request-scoped view over the generic session store that exposes only what
the login flow needs. ``session_id`` is None until the first write, and the
HTTP layer compares it with ``loaded_id`` to decide whether the cookie must
be set or deleted.
"""

from __future__ import annotations

from uuid import UUID

from letterbox.components.auth.ports import SessionStorePort
from letterbox.core.errors import UnexpectedError

USER_ID_KEY = "user_id"


class TypedSession:
    def __init__(self, store: SessionStorePort, session_id: str | None = None) -> None:
        self.store = store
        self.loaded_id = session_id
        self.session_id = session_id

    @classmethod
    def load(cls, store: SessionStorePort, cookie_value: str | None) -> TypedSession:
        """Bind to the cookie's session, ignoring unknown or expired ids."""
        if not cookie_value:
            return cls(store)
        try:
            live = store.exists(cookie_value)
        except Exception as e:
            raise UnexpectedError("Failed to load the session.") from e
        return cls(store, cookie_value if live else None)

    def get_user_id(self) -> UUID | None:
        if self.session_id is None:
            return None
        try:
            raw = self.store.get(self.session_id, USER_ID_KEY)
        except Exception as e:
            raise UnexpectedError("Failed to read the session.") from e
        if raw is None:
            return None
        try:
            return UUID(str(raw))
        except ValueError as e:
            raise UnexpectedError("Session holds a malformed user id.") from e

    def insert_user_id(self, user_id: UUID) -> None:
        try:
            if self.session_id is None:
                self.session_id = self.store.create()
            self.store.set(self.session_id, USER_ID_KEY, str(user_id))
        except Exception as e:
            raise UnexpectedError("Failed to write the session.") from e

    def renew(self) -> None:
        """Move the session under a fresh id. The old id stops working."""
        try:
            self.session_id = self.store.renew(self.session_id)
        except Exception as e:
            raise UnexpectedError("Failed to renew the session.") from e

    def log_out(self) -> None:
        if self.session_id is None:
            return
        try:
            self.store.destroy(self.session_id)
        except Exception as e:
            raise UnexpectedError("Failed to destroy the session.") from e
        self.session_id = None

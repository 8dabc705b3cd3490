"""
Subscription component ports.

Protocol interfaces for the subscriber repository. The confirmation and
newsletter components depend on the same repository.
"""

from __future__ import annotations

from typing import Any, Protocol
from uuid import UUID

from letterbox.domain.entities import Subscriber


class SubscriberRepoPort(Protocol):
    """
    Subscriber repository interface.

    ``begin_transaction`` returns an opaque handle. Writes made through the
    handle become visible together on ``commit`` or not at all.
    """

    def begin_transaction(self) -> Any:
        ...

    def insert_subscriber(self, tx: Any, subscriber: Subscriber) -> UUID:
        ...

    def insert_token(self, tx: Any, token: str, subscriber_id: UUID) -> None:
        ...

    def commit(self, tx: Any) -> None:
        ...

    def rollback(self, tx: Any) -> None:
        ...

    def find_subscriber_id_by_token(self, token: str) -> UUID | None:
        """Get the subscriber a confirmation token was issued for."""
        ...

    def mark_confirmed(self, subscriber_id: UUID) -> None:
        """Set status to confirmed. Unconditional, so repeating it is harmless."""
        ...

    def get_by_id(self, subscriber_id: UUID) -> Subscriber | None:
        ...

    def list_confirmed_subscribers(self) -> list[str]:
        """Stored emails of confirmed subscribers, unvalidated."""
        ...

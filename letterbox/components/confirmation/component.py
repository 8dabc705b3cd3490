"""
ConfirmationService component.

Turns a confirmation token into a ``pending_confirmation -> confirmed``
transition. The token is never consumed, so following the link twice is
harmless, and a token that was never issued (empty, malformed, forged)
simply misses the lookup.
"""

from __future__ import annotations

import logging
from uuid import UUID

from letterbox.components.confirmation.models import ConfirmOutput
from letterbox.components.subscriptions.ports import SubscriberRepoPort
from letterbox.core.errors import UnexpectedError, Unauthorized

logger = logging.getLogger(__name__)


class ConfirmationService:
    def __init__(self, repo: SubscriberRepoPort) -> None:
        self.repo = repo

    def confirm(self, token: str) -> ConfirmOutput:
        subscriber_id = self._lookup(token)
        if subscriber_id is None:
            raise Unauthorized("Unknown subscription token")

        try:
            self.repo.mark_confirmed(subscriber_id)
        except Exception as e:
            raise UnexpectedError("Failed to update the subscriber status.") from e

        logger.info("Subscriber %s confirmed", subscriber_id)
        return ConfirmOutput(subscriber_id=subscriber_id)

    def _lookup(self, token: str) -> UUID | None:
        if not token:
            return None
        try:
            return self.repo.find_subscriber_id_by_token(token)
        except Exception as e:
            raise UnexpectedError(
                "Failed to retrieve the subscriber id associated with the provided token."
            ) from e

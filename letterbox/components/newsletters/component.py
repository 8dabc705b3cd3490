"""
NewsletterService component.

Delivers an issue to every confirmed subscriber. Stored addresses are
validated again before sending, since the validation rules may have
tightened after they were stored; invalid ones are skipped with a warning.
"""

from __future__ import annotations

import logging

from letterbox.components.newsletters.models import NewsletterIssue, PublishOutput
from letterbox.components.newsletters.ports import ConfirmedSubscribersPort
from letterbox.components.subscriptions.models import SubscriberEmail
from letterbox.core.errors import UnexpectedError, ValidationError
from letterbox.core.ports.email import EmailDeliveryError, EmailSenderPort

logger = logging.getLogger(__name__)


class NewsletterService:
    def __init__(self, repo: ConfirmedSubscribersPort, email_sender: EmailSenderPort) -> None:
        self.repo = repo
        self.email_sender = email_sender

    def publish(self, issue: NewsletterIssue) -> PublishOutput:
        issue.validate()

        try:
            stored_emails = self.repo.list_confirmed_subscribers()
        except Exception as e:
            raise UnexpectedError("Failed to retrieve confirmed subscribers.") from e

        delivered = 0
        skipped = 0
        for stored in stored_emails:
            try:
                email = SubscriberEmail.parse(stored)
            except ValidationError as e:
                logger.warning("Skipping a confirmed subscriber with invalid email: %s", e.message)
                skipped += 1
                continue

            self._deliver(email.value, issue)
            delivered += 1

        logger.info("Published %r to %d subscribers (%d skipped)", issue.title, delivered, skipped)
        return PublishOutput(delivered=delivered, skipped=skipped)

    def _deliver(self, recipient: str, issue: NewsletterIssue) -> None:
        message = f"Failed to send newsletter issue to {recipient}"
        try:
            result = self.email_sender.send_email(
                recipient, issue.title, issue.html_content, issue.text_content
            )
        except Exception as e:
            raise UnexpectedError(message) from e
        try:
            result.raise_for_failure()
        except EmailDeliveryError as e:
            raise UnexpectedError(message) from e

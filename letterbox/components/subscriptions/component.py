"""
SubscriptionService component.

Admits a new subscriber: validate the form, store subscriber and token in
one transaction, then send the confirmation email.

Key behaviors:
- Validation failures raise ValidationError before anything is stored
- Subscriber row and token row commit together or not at all
- The email goes out only after commit; a failed send does not undo the rows
"""

from __future__ import annotations

import html
import logging

from letterbox.adapters.auth.crypto import generate_subscription_token
from letterbox.components.subscriptions.models import (
    NewSubscriber,
    SubscribeOutput,
    SubscriberEmail,
    SubscriberName,
)
from letterbox.components.subscriptions.ports import SubscriberRepoPort
from letterbox.core.errors import UnexpectedError
from letterbox.core.ports.email import EmailDeliveryError, EmailSenderPort
from letterbox.domain.entities import Subscriber, SubscriberStatus

logger = logging.getLogger(__name__)

CONFIRMATION_SUBJECT = "Welcome!"


# --- Pure Functions ---


def parse_new_subscriber(email: str, name: str) -> NewSubscriber:
    """Validate raw form fields. Email is checked first."""
    return NewSubscriber(
        email=SubscriberEmail.parse(email),
        name=SubscriberName.parse(name),
    )


def build_confirmation_link(base_url: str, token: str) -> str:
    return f"{base_url.rstrip('/')}/subscriptions/confirm?subscription_token={token}"


def render_confirmation_email(link: str) -> tuple[str, str]:
    """Return (html_body, text_body), each embedding the link exactly once."""
    body_html = (
        "Welcome to our newsletter!<br />"
        f'Click <a href="{html.escape(link)}">here</a> to confirm your subscription.'
    )
    body_text = f"Welcome to our newsletter!\nVisit {link} to confirm your subscription."
    return body_html, body_text


# --- Service ---


class SubscriptionService:
    def __init__(
        self,
        repo: SubscriberRepoPort,
        email_sender: EmailSenderPort,
        base_url: str,
    ) -> None:
        self.repo = repo
        self.email_sender = email_sender
        self.base_url = base_url

    def subscribe(self, email: str, name: str) -> SubscribeOutput:
        new_subscriber = parse_new_subscriber(email, name)

        subscriber = Subscriber(
            email=new_subscriber.email.value,
            name=new_subscriber.name.value,
            status=SubscriberStatus.PENDING_CONFIRMATION,
        )
        token = self._store(subscriber)
        logger.info("Stored new subscriber %s", subscriber.id)

        link = build_confirmation_link(self.base_url, token)
        self._send_confirmation(subscriber.email, link)
        logger.info("Confirmation email dispatched for subscriber %s", subscriber.id)

        return SubscribeOutput(subscriber_id=subscriber.id, confirmation_link=link)

    def _store(self, subscriber: Subscriber) -> str:
        try:
            tx = self.repo.begin_transaction()
        except Exception as e:
            raise UnexpectedError("Failed to acquire a database connection.") from e

        try:
            subscriber_id = self.repo.insert_subscriber(tx, subscriber)
            token = generate_subscription_token()
            self.repo.insert_token(tx, token, subscriber_id)
            self.repo.commit(tx)
        except Exception as e:
            try:
                self.repo.rollback(tx)
            except Exception:
                logger.exception("Rollback after a failed subscriber write failed")
            raise UnexpectedError("Failed to store the new subscriber.") from e
        return token

    def _send_confirmation(self, recipient: str, link: str) -> None:
        body_html, body_text = render_confirmation_email(link)
        try:
            result = self.email_sender.send_email(
                recipient, CONFIRMATION_SUBJECT, body_html, body_text
            )
        except Exception as e:
            raise UnexpectedError("Failed to send a confirmation email.") from e

        try:
            result.raise_for_failure()
        except EmailDeliveryError as e:
            raise UnexpectedError("Failed to send a confirmation email.") from e

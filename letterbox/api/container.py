"""
Application container.

Every collaborator is built here from Settings and held on ``app.state``
for the lifetime of the app.
"""

from __future__ import annotations

from dataclasses import dataclass

from letterbox.adapters.auth.crypto import Argon2CredentialVerifier
from letterbox.adapters.auth.session_store import (
    InMemorySessionStore,
    SQLiteSessionStore,
    TimePort,
)
from letterbox.adapters.clock import SystemClock
from letterbox.adapters.dev_email import DevEmailAdapter
from letterbox.adapters.email_client import PostmarkEmailClient
from letterbox.adapters.sqlite.repos import SQLiteSubscriberRepo, SQLiteUserRepo
from letterbox.api.flash import FlashCodec
from letterbox.app_shell.config import Settings
from letterbox.components.auth import AuthService, SessionStorePort
from letterbox.components.confirmation import ConfirmationService
from letterbox.components.newsletters import NewsletterService
from letterbox.components.subscriptions import SubscriptionService
from letterbox.core.ports.email import EmailSenderPort


def build_email_sender(settings: Settings) -> EmailSenderPort:
    cfg = settings.email_client
    if not cfg.enabled:
        return DevEmailAdapter()
    return PostmarkEmailClient(
        base_url=cfg.base_url,
        sender=cfg.sender_email,
        authorization_token=cfg.authorization_token.get_secret_value(),
        timeout_milliseconds=cfg.timeout_milliseconds,
    )


def build_session_store(settings: Settings, clock: TimePort) -> SessionStorePort:
    if settings.session.backend == "sqlite":
        return SQLiteSessionStore(
            settings.database.path, ttl_minutes=settings.session.ttl_minutes, clock=clock
        )
    return InMemorySessionStore(ttl_minutes=settings.session.ttl_minutes, clock=clock)


@dataclass
class AppContainer:
    settings: Settings
    subscriber_repo: SQLiteSubscriberRepo
    user_repo: SQLiteUserRepo
    session_store: SessionStorePort
    verifier: Argon2CredentialVerifier
    email_sender: EmailSenderPort
    flash: FlashCodec
    subscriptions: SubscriptionService
    confirmation: ConfirmationService
    auth: AuthService
    newsletters: NewsletterService

    @classmethod
    def create(
        cls,
        settings: Settings,
        email_sender: EmailSenderPort | None = None,
        clock: TimePort | None = None,
    ) -> AppContainer:
        clock = clock or SystemClock()
        db_path = settings.database.path

        subscriber_repo = SQLiteSubscriberRepo(db_path)
        user_repo = SQLiteUserRepo(db_path)
        hashing = settings.password_hashing
        verifier = Argon2CredentialVerifier(
            time_cost=hashing.time_cost,
            memory_cost=hashing.memory_cost,
            parallelism=hashing.parallelism,
        )
        sender = email_sender or build_email_sender(settings)

        return cls(
            settings=settings,
            subscriber_repo=subscriber_repo,
            user_repo=user_repo,
            session_store=build_session_store(settings, clock),
            verifier=verifier,
            email_sender=sender,
            flash=FlashCodec(
                settings.application.hmac_secret.get_secret_value(),
                secure_cookie=settings.session.cookie_secure,
            ),
            subscriptions=SubscriptionService(
                subscriber_repo, sender, settings.application.base_url
            ),
            confirmation=ConfirmationService(subscriber_repo),
            auth=AuthService(user_repo, verifier),
            newsletters=NewsletterService(subscriber_repo, sender),
        )

"""
Subscriptions component.

Form validation and transactional admission of new subscribers.
"""

from letterbox.components.subscriptions.component import (
    CONFIRMATION_SUBJECT,
    SubscriptionService,
    build_confirmation_link,
    parse_new_subscriber,
    render_confirmation_email,
)
from letterbox.components.subscriptions.models import (
    EMAIL_REGEX,
    NewSubscriber,
    SubscribeOutput,
    SubscriberEmail,
    SubscriberName,
)
from letterbox.components.subscriptions.ports import SubscriberRepoPort

__all__ = [
    # Service
    "SubscriptionService",
    # Pure functions
    "parse_new_subscriber",
    "build_confirmation_link",
    "render_confirmation_email",
    # Constants
    "CONFIRMATION_SUBJECT",
    "EMAIL_REGEX",
    # Models
    "NewSubscriber",
    "SubscriberEmail",
    "SubscriberName",
    "SubscribeOutput",
    # Ports
    "SubscriberRepoPort",
]

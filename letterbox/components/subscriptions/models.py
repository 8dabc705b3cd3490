"""
Subscription component models.

Parsed, trusted forms of the subscription form fields. A value of these
types has already passed validation; construct them through ``parse``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from uuid import UUID

from letterbox.core.errors import ValidationError

# RFC 5322 simplified
EMAIL_REGEX = re.compile(
    r"^[a-zA-Z0-9.!#$%&'*+/=?^_`{|}~-]+@"
    r"[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?"
    r"(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)+$"
)

MAX_EMAIL_LENGTH = 254
MAX_NAME_LENGTH = 256
FORBIDDEN_NAME_CHARACTERS = frozenset('/()"<>\\{}')


@dataclass(frozen=True)
class SubscriberEmail:
    value: str

    @classmethod
    def parse(cls, raw: str) -> SubscriberEmail:
        normalized = raw.strip().lower() if raw else ""

        if not normalized:
            raise ValidationError("Email address is required", field="email")
        if len(normalized) > MAX_EMAIL_LENGTH:
            raise ValidationError("Email address is too long", field="email")
        if not EMAIL_REGEX.match(normalized):
            raise ValidationError(f"{raw} is not a valid subscriber email.", field="email")

        return cls(normalized)

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class SubscriberName:
    value: str

    @classmethod
    def parse(cls, raw: str) -> SubscriberName:
        trimmed = raw.strip() if raw else ""

        if not trimmed:
            raise ValidationError("Name is required", field="name")
        if len(trimmed) > MAX_NAME_LENGTH:
            raise ValidationError("Name is too long", field="name")
        if any(c in FORBIDDEN_NAME_CHARACTERS or not c.isprintable() for c in trimmed):
            raise ValidationError(f"{raw} is not a valid subscriber name.", field="name")

        return cls(trimmed)

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class NewSubscriber:
    email: SubscriberEmail
    name: SubscriberName


@dataclass(frozen=True)
class SubscribeOutput:
    """Result of a successful subscription."""

    subscriber_id: UUID
    confirmation_link: str

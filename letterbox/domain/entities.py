from datetime import UTC, datetime
from enum import Enum
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


def utcnow() -> datetime:
    return datetime.now(UTC)


# --- Subscribers ---


class SubscriberStatus(str, Enum):
    """
    Subscriber status.

    pending_confirmation → confirmed, once. Never reverts.
    """

    PENDING_CONFIRMATION = "pending_confirmation"
    CONFIRMED = "confirmed"

    def confirm(self) -> "SubscriberStatus":
        # Total over both states: confirming a confirmed subscriber is a no-op.
        return SubscriberStatus.CONFIRMED


class Subscriber(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    email: str
    name: str
    status: SubscriberStatus = SubscriberStatus.PENDING_CONFIRMATION
    subscribed_at: datetime = Field(default_factory=utcnow)


# --- Operators ---


class User(BaseModel):
    user_id: UUID = Field(default_factory=uuid4)
    username: str
    password_hash: str

"""
Outbound email port.

The subscription service sends confirmation emails through it and the
newsletter service sends issues through it. Two adapters implement it:
DevEmailAdapter (keeps messages in memory and logs them) and
PostmarkEmailClient (one HTTP call per message, bounded timeout).

Adapters report transport problems as a FAILED DeliveryReport; callers turn
that into an exception with ``report.raise_for_failure()``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Protocol


class DeliveryStatus(Enum):
    SENT = "sent"
    LOGGED = "logged"  # dev adapter: recorded, never left the process
    FAILED = "failed"


class EmailDeliveryError(RuntimeError):
    """A single message could not be handed to the provider."""

    def __init__(self, recipient: str, reason: str) -> None:
        self.recipient = recipient
        self.reason = reason
        super().__init__(f"delivery to {recipient} failed: {reason}")


@dataclass(frozen=True)
class DeliveryReport:
    recipient: str
    status: DeliveryStatus
    message_id: str | None = None
    reason: str | None = None
    at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def ok(self) -> bool:
        return self.status is not DeliveryStatus.FAILED

    @classmethod
    def sent(cls, recipient: str, message_id: str | None) -> DeliveryReport:
        return cls(recipient, DeliveryStatus.SENT, message_id=message_id)

    @classmethod
    def logged(cls, recipient: str, message_id: str) -> DeliveryReport:
        return cls(recipient, DeliveryStatus.LOGGED, message_id=message_id)

    @classmethod
    def failed(cls, recipient: str, reason: str) -> DeliveryReport:
        return cls(recipient, DeliveryStatus.FAILED, reason=reason)

    def raise_for_failure(self) -> None:
        if not self.ok:
            raise EmailDeliveryError(self.recipient, self.reason or "unknown reason")


class EmailSenderPort(Protocol):
    def send_email(
        self,
        recipient: str,
        subject: str,
        body_html: str,
        body_text: str,
    ) -> DeliveryReport:
        """
        Make one delivery attempt; no retries.

        Transport failures come back as a FAILED report rather than raising.
        """
        ...

    def close(self) -> None: ...

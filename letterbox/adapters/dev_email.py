"""
Dev Email Adapter.

Logs emails instead of sending and keeps them in memory so tests can pull
confirmation links back out. Used for local development and tests; the
HTTP client in letterbox.adapters.email_client is the production sender.

Key behaviors:
- Logs email details through the module logger
- Returns LOGGED status (not SENT)
- Can be switched into failure mode to simulate a provider outage
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import uuid4

from letterbox.core.ports.email import DeliveryReport

logger = logging.getLogger(__name__)

LINK_REGEX = re.compile(r"https?://[^\s\"'<>]+")


@dataclass
class SentEmail:
    """Record of a logged email for test assertions."""

    id: str
    recipient: str
    subject: str
    body_html: str
    body_text: str
    logged_at: datetime

    def links(self) -> list[str]:
        """Distinct links found in the plain text body."""
        return list(dict.fromkeys(LINK_REGEX.findall(self.body_text)))

    def html_links(self) -> list[str]:
        return list(dict.fromkeys(LINK_REGEX.findall(self.body_html)))


@dataclass
class DevEmailAdapter:
    """Dev email adapter that logs instead of sending. Implements EmailSenderPort."""

    sent_emails: list[SentEmail] = field(default_factory=list)

    log_level: int = logging.INFO
    log_body: bool = True
    body_preview_length: int = 100
    fail_with: str | None = None  # When set, every send reports FAILED

    def send_email(
        self,
        recipient: str,
        subject: str,
        body_html: str,
        body_text: str,
    ) -> DeliveryReport:
        if self.fail_with is not None:
            logger.log(self.log_level, "EMAIL (dev): simulated failure for To=%s", recipient)
            return DeliveryReport.failed(recipient, self.fail_with)

        message_id = f"dev-{uuid4().hex[:12]}"

        self.sent_emails.append(
            SentEmail(
                id=message_id,
                recipient=recipient,
                subject=subject,
                body_html=body_html,
                body_text=body_text,
                logged_at=datetime.now(UTC),
            )
        )
        self._log_email(recipient, subject, body_text, message_id)

        return DeliveryReport.logged(recipient, message_id)

    def close(self) -> None:
        """Nothing to release."""

    def _log_email(self, recipient: str, subject: str, body: str, message_id: str) -> None:
        parts = [f"EMAIL (dev): To={recipient}", f"Subject={subject}"]

        if self.log_body and body:
            preview = body[: self.body_preview_length]
            if len(body) > self.body_preview_length:
                preview += "..."
            parts.append(f"Body={preview}")

        parts.append(f"MessageID={message_id}")
        logger.log(self.log_level, ", ".join(parts))

    # --- Test Helper Methods ---

    def get_last_email(self) -> SentEmail | None:
        """Get the most recently logged email."""
        return self.sent_emails[-1] if self.sent_emails else None

    def get_emails_to(self, recipient: str) -> list[SentEmail]:
        """Get all emails logged to a specific recipient."""
        return [e for e in self.sent_emails if e.recipient == recipient]

    def clear(self) -> None:
        """Clear all stored emails (for test isolation)."""
        self.sent_emails.clear()

    @property
    def email_count(self) -> int:
        return len(self.sent_emails)

"""
HTTP email client (Postmark-compatible API).

POST {base_url}/email with a JSON body (From, To, Subject, HtmlBody,
TextBody) and the server token in ``X-Postmark-Server-Token``. One attempt
per email with a bounded timeout; transport errors and non-2xx responses
come back as a FAILED DeliveryReport.
"""

from __future__ import annotations

import logging

import httpx

from letterbox.core.ports.email import DeliveryReport

logger = logging.getLogger(__name__)


class PostmarkEmailClient:
    def __init__(
        self,
        base_url: str,
        sender: str,
        authorization_token: str,
        timeout_milliseconds: int = 10_000,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.sender = sender
        self._authorization_token = authorization_token
        self._client = httpx.Client(
            base_url=base_url.rstrip("/"),
            timeout=httpx.Timeout(timeout_milliseconds / 1000),
            transport=transport,
        )

    def send_email(
        self,
        recipient: str,
        subject: str,
        body_html: str,
        body_text: str,
    ) -> DeliveryReport:
        payload = {
            "From": self.sender,
            "To": recipient,
            "Subject": subject,
            "HtmlBody": body_html,
            "TextBody": body_text,
        }
        try:
            response = self._client.post(
                "/email",
                json=payload,
                headers={"X-Postmark-Server-Token": self._authorization_token},
            )
            response.raise_for_status()
        except httpx.TimeoutException as e:
            logger.warning("Email API timed out sending to %s", recipient)
            return DeliveryReport.failed(recipient, f"timeout: {e}")
        except httpx.HTTPStatusError as e:
            logger.warning(
                "Email API rejected message to %s with status %s",
                recipient,
                e.response.status_code,
            )
            return DeliveryReport.failed(recipient, f"status {e.response.status_code}")
        except httpx.HTTPError as e:
            logger.warning("Email API request to %s failed: %s", recipient, e)
            return DeliveryReport.failed(recipient, str(e))

        message_id: str | None = None
        try:
            message_id = response.json().get("MessageID")
        except ValueError:
            pass
        return DeliveryReport.sent(recipient, message_id)

    def close(self) -> None:
        self._client.close()

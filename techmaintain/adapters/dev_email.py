"""
Dev Email Adapter.

Logs emails instead of sending them.
Used for local development, tests and when no SMTP host is configured.

Key behaviors:
- Logs email details through the module logger
- Returns SKIPPED status (not SENT), which the outbox treats as delivered
- Stores emails in memory for test assertions
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import uuid4

from techmaintain.core.ports.email import EmailResult, EmailStatus

logger = logging.getLogger(__name__)


@dataclass
class LoggedEmail:
    """Record of a logged email for test assertions."""

    id: str
    recipient: str
    subject: str
    body_html: str
    body_text: str
    logged_at: datetime


@dataclass
class DevEmailAdapter:
    """
    Email adapter that logs instead of sending.

    Implements the EmailPort protocol.
    """

    sent_emails: list[LoggedEmail] = field(default_factory=list)

    log_level: int = logging.INFO
    log_body: bool = True
    body_preview_length: int = 100

    def send_email(
        self,
        recipient: str,
        subject: str,
        body_html: str,
        body_text: str | None = None,
    ) -> EmailResult:
        """Log an email instead of sending it."""
        message_id = f"dev-{uuid4().hex[:12]}"

        self.sent_emails.append(
            LoggedEmail(
                id=message_id,
                recipient=recipient,
                subject=subject,
                body_html=body_html,
                body_text=body_text or "",
                logged_at=datetime.now(UTC),
            )
        )
        self._log_email(recipient, subject, body_html, message_id)

        return EmailResult(
            status=EmailStatus.SKIPPED,
            message_id=message_id,
            recipient=recipient,
            error="Dev mode - email logged, not sent",
        )

    def _log_email(self, recipient: str, subject: str, body_html: str, message_id: str) -> None:
        parts = [f"EMAIL (dev): To={recipient}", f"Subject={subject}"]

        if self.log_body and body_html:
            preview = body_html[: self.body_preview_length]
            if len(body_html) > self.body_preview_length:
                preview += "..."
            parts.append(f"Body={preview}")

        parts.append(f"MessageID={message_id}")
        logger.log(self.log_level, ", ".join(parts))

    # --- Test Helper Methods ---

    def get_last_email(self) -> LoggedEmail | None:
        """Get the most recently logged email."""
        return self.sent_emails[-1] if self.sent_emails else None

    def get_emails_to(self, recipient: str) -> list[LoggedEmail]:
        """Get all emails logged to a specific recipient."""
        return [e for e in self.sent_emails if e.recipient == recipient]

    def clear(self) -> None:
        self.sent_emails.clear()

    @property
    def email_count(self) -> int:
        return len(self.sent_emails)


def create_dev_email_adapter(
    log_level: int = logging.INFO,
    log_body: bool = True,
) -> DevEmailAdapter:
    """Create a dev email adapter."""
    return DevEmailAdapter(log_level=log_level, log_body=log_body)

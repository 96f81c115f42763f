"""
SMTP Email Adapter.

Sends queued notification emails through an SMTP relay.

Key behaviors:
- One connection per email; the outbox drains small batches
- Implicit TLS when ``secure`` is set, otherwise STARTTLS if offered
- Never raises; transport errors come back as a FAILED result
"""

from __future__ import annotations

import logging
import smtplib
from dataclasses import dataclass
from email.message import EmailMessage
from email.utils import make_msgid

from techmaintain.core.ports.email import EmailResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SMTPConfig:
    host: str
    port: int = 587
    user: str | None = None
    password: str | None = None
    secure: bool = False
    sender: str = "noreply@example.com"
    timeout: float = 30.0


class SMTPEmailAdapter:
    """
    SMTP email adapter.

    Implements the EmailPort protocol.
    """

    def __init__(self, config: SMTPConfig) -> None:
        self._config = config

    def _connect(self) -> smtplib.SMTP:
        cfg = self._config
        if cfg.secure:
            return smtplib.SMTP_SSL(cfg.host, cfg.port, timeout=cfg.timeout)
        conn = smtplib.SMTP(cfg.host, cfg.port, timeout=cfg.timeout)
        conn.ehlo()
        if conn.has_extn("starttls"):
            conn.starttls()
            conn.ehlo()
        return conn

    def build_message(
        self,
        recipient: str,
        subject: str,
        body_html: str,
        body_text: str | None = None,
    ) -> EmailMessage:
        msg = EmailMessage()
        msg["From"] = self._config.sender
        msg["To"] = recipient
        msg["Subject"] = subject
        msg["Message-ID"] = make_msgid()
        msg.set_content(body_text or "This message requires an HTML capable mail client.")
        msg.add_alternative(body_html, subtype="html")
        return msg

    def send_email(
        self,
        recipient: str,
        subject: str,
        body_html: str,
        body_text: str | None = None,
    ) -> EmailResult:
        """Send one email over SMTP."""
        msg = self.build_message(recipient, subject, body_html, body_text)
        try:
            with self._connect() as conn:
                if self._config.user:
                    conn.login(self._config.user, self._config.password or "")
                conn.send_message(msg)
        except (smtplib.SMTPException, OSError) as e:
            logger.warning("SMTP send to %s failed: %s", recipient, e)
            return EmailResult.failed(recipient, str(e))

        logger.info("Email sent to %s: %s", recipient, subject)
        return EmailResult.success(recipient, message_id=msg["Message-ID"])

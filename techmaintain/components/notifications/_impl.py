"""
Notifications - email outbox, request notifications and overdue digest.

Functional core plus thin orchestration over the queue repository.

Key behaviors:
- Emails are never sent inline; they are queued and drained by the worker
- A send failure increments the attempt counter and records the error
- After max_attempts failures an email is no longer picked up
- Self-assignment and self-authored requests do not notify the actor
- Retrying emails resets their attempts so the worker picks them up again
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from uuid import UUID

from techmaintain.domain.entities import (
    MaintenanceRequest,
    MaintenanceTemplate,
    QueuedEmail,
    User,
)

from .ports import (
    ClockPort,
    EmailPort,
    EmailQueueRepoPort,
    OpenRequestRepoPort,
    UserRepoPort,
)
from .templates import (
    render_assignment_email,
    render_new_request_email,
    render_overdue_digest,
)

logger = logging.getLogger(__name__)

CLOSED_STATES = ("solved", "cancelled")
DIGEST_ROLES = ("admin", "maintenance")

# --- Configuration ---


@dataclass(frozen=True)
class NotificationConfig:
    """Notification configuration from rules."""

    batch_size: int = 10
    max_attempts: int = 3
    fallback_recipient: str = "maintenance@example.com"


DEFAULT_CONFIG = NotificationConfig()


# --- Results ---


@dataclass
class QueueProcessResult:
    """Outcome of draining the email queue once."""

    sent: int = 0
    failed: int = 0
    errors: list[str] = field(default_factory=list)

    @property
    def total_processed(self) -> int:
        return self.sent + self.failed


# --- Email Outbox ---


class EmailOutbox:
    """
    Email outbox.

    Persists outgoing emails and drains them through an EmailPort.
    """

    def __init__(
        self,
        repo: EmailQueueRepoPort,
        sender: EmailPort | None = None,
        clock: ClockPort | None = None,
        config: NotificationConfig | None = None,
    ) -> None:
        """Initialize outbox."""
        self._repo = repo
        self._sender = sender
        self._clock = clock
        self._config = config or DEFAULT_CONFIG

    def _now(self) -> datetime:
        if self._clock:
            return self._clock.now()
        return datetime.now()

    def enqueue(self, to_address: str, subject: str, body: str) -> QueuedEmail:
        """Queue an email for delivery."""
        email = QueuedEmail(
            to_address=to_address,
            subject=subject,
            body=body,
            created_at=self._now(),
        )
        return self._repo.save(email)

    def process_queue(self) -> QueueProcessResult:
        """
        Send up to batch_size pending emails.

        Returns:
            QueueProcessResult with sent/failed counts
        """
        if self._sender is None:
            raise ValueError("EmailPort is required to process the queue")

        result = QueueProcessResult()
        pending = self._repo.list_pending(self._config.max_attempts, self._config.batch_size)
        if not pending:
            return result

        logger.info("Found %d emails to send", len(pending))
        for email in pending:
            logger.info("Sending to %s: %s", email.to_address, email.subject)
            send_result = self._sender.send_email(
                recipient=email.to_address,
                subject=email.subject,
                body_html=email.body,
            )

            if send_result.delivered:
                self._repo.save(email.model_copy(update={"sent_at": self._now(), "error": None}))
                result.sent += 1
                continue

            error = send_result.error or "Unknown error"
            logger.error("Failed to send email %s: %s", email.id, error)
            self._repo.save(
                email.model_copy(update={"attempts": email.attempts + 1, "error": error})
            )
            result.failed += 1
            result.errors.append(error)

        return result

    def list_recent(self, limit: int = 100) -> list[QueuedEmail]:
        """Most recent emails of any status, newest first."""
        return self._repo.list_recent(limit)

    def retry(self, email_ids: list[UUID]) -> int:
        """
        Put emails back in the queue.

        Resets attempts, error and sent_at on every email found. Unknown IDs
        are skipped.

        Returns:
            Number of emails requeued
        """
        count = 0
        for email_id in dict.fromkeys(email_ids):
            email = self._repo.get_by_id(email_id)
            if email is None:
                continue
            self._repo.save(
                email.model_copy(update={"attempts": 0, "error": None, "sent_at": None})
            )
            count += 1
        logger.info("Requeued %d of %d emails", count, len(email_ids))
        return count


# --- Request Notifications ---


class RequestNotifier:
    """
    Queues notification emails for request lifecycle events.

    Implements the runner's GenerationNotifierPort.
    """

    def __init__(
        self,
        outbox: EmailOutbox,
        users: UserRepoPort,
        config: NotificationConfig | None = None,
    ) -> None:
        """Initialize notifier."""
        self._outbox = outbox
        self._users = users
        self._config = config or DEFAULT_CONFIG

    def _email_of(self, user_id: str | None) -> str | None:
        if not user_id:
            return None
        user = self._users.get_by_id(user_id)
        if user is None or not user.email:
            return None
        return user.email

    def request_generated(
        self,
        template: MaintenanceTemplate,
        request: MaintenanceRequest,
    ) -> None:
        """Notify the solver (or the fallback address) about a generated request."""
        recipient = self._email_of(request.solver_id) or self._config.fallback_recipient
        body = render_new_request_email(
            request.priority,
            f"(Scheduled maintenance) {template.description}",
        )
        self._outbox.enqueue(recipient, f"New maintenance: {template.title}", body)

    def request_created(self, request: MaintenanceRequest, actor_id: str) -> list[str]:
        """
        Notify about a manually created request.

        Assigned requests notify the solver unless they created it themselves;
        unassigned requests notify every active maintenance user except the actor.

        Returns:
            Recipient addresses that were queued.
        """
        recipients: list[str] = []
        if request.solver_id:
            if request.solver_id != actor_id:
                email = self._email_of(request.solver_id)
                if email:
                    recipients.append(email)
        else:
            for user in self._users.list_all():
                if user.role != "maintenance" or user.is_blocked:
                    continue
                if user.id == actor_id or not user.email:
                    continue
                if user.email not in recipients:
                    recipients.append(user.email)

        subject = f"New request: {request.title or request.priority}"
        body = render_new_request_email(request.priority, request.description)
        for address in recipients:
            self._outbox.enqueue(address, subject, body)
        return recipients

    def request_assigned(self, request: MaintenanceRequest, actor_id: str) -> str | None:
        """Notify a newly assigned solver unless they assigned themselves."""
        if not request.solver_id or request.solver_id == actor_id:
            return None
        email = self._email_of(request.solver_id)
        if email is None:
            return None
        self._outbox.enqueue(email, "Request assigned", render_assignment_email(request))
        return email


# --- Overdue Digest ---


def find_overdue(requests: list[MaintenanceRequest], today: date) -> list[MaintenanceRequest]:
    """Open requests whose planned resolution date is before today."""
    overdue = [
        r
        for r in requests
        if r.state not in CLOSED_STATES
        and r.planned_resolution_date is not None
        and r.planned_resolution_date < today
    ]
    overdue.sort(key=lambda r: r.planned_resolution_date or today)
    return overdue


def queue_overdue_digests(
    requests: OpenRequestRepoPort,
    users: UserRepoPort,
    outbox: EmailOutbox,
    today: date,
) -> int:
    """
    Queue one overdue digest per admin/maintenance user.

    Each user receives the overdue requests assigned to them plus every
    unassigned overdue request.

    Returns:
        Number of digests queued.
    """
    logger.info("Starting daily overdue check for %s", today.isoformat())
    overdue = find_overdue(requests.list_all(), today)
    if not overdue:
        logger.info("No overdue requests found")
        return 0

    unassigned = [r for r in overdue if not r.solver_id]
    queued = 0
    for user in users.list_all():
        if not _receives_digest(user):
            continue
        mine = [r for r in overdue if r.solver_id == user.id]
        if not mine and not unassigned:
            continue
        outbox.enqueue(
            user.email,
            f"Overdue requests ({len(mine) + len(unassigned)})",
            render_overdue_digest(mine, unassigned),
        )
        queued += 1

    logger.info("Queued %d overdue digests for %d requests", queued, len(overdue))
    return queued


def _receives_digest(user: User) -> bool:
    return user.role in DIGEST_ROLES and not user.is_blocked and bool(user.email)

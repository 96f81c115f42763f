"""
Notifications component port definitions.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol
from uuid import UUID

from techmaintain.core.ports.email import EmailPort
from techmaintain.domain.entities import MaintenanceRequest, QueuedEmail, User

__all__ = [
    "ClockPort",
    "EmailPort",
    "EmailQueueRepoPort",
    "OpenRequestRepoPort",
    "UserRepoPort",
]


class EmailQueueRepoPort(Protocol):
    """Repository interface for the email queue."""

    def save(self, email: QueuedEmail) -> QueuedEmail:
        """Save or update queued email."""
        ...

    def get_by_id(self, email_id: UUID) -> QueuedEmail | None:
        """Get queued email by ID."""
        ...

    def list_pending(self, max_attempts: int, limit: int = 10) -> list[QueuedEmail]:
        """List unsent emails with fewer than max_attempts attempts, oldest first."""
        ...

    def list_recent(self, limit: int = 100) -> list[QueuedEmail]:
        """List emails of any status, newest first."""
        ...


class UserRepoPort(Protocol):
    """Repository interface for user lookup."""

    def get_by_id(self, user_id: str) -> User | None:
        """Get user by ID."""
        ...

    def list_all(self) -> list[User]:
        """List all users."""
        ...


class OpenRequestRepoPort(Protocol):
    """Request lookup needed for the overdue digest."""

    def list_all(self) -> list[MaintenanceRequest]:
        """List all requests."""
        ...


class ClockPort(Protocol):
    """Clock interface."""

    def now(self) -> datetime:
        """Return current local time."""
        ...

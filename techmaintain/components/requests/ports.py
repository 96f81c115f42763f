"""
Requests component - Port interfaces.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol
from uuid import UUID

from techmaintain.domain.entities import MaintenanceRequest, RequestState, User


class RequestRepoPort(Protocol):
    """Repository interface for maintenance requests."""

    def get_by_id(self, request_id: UUID) -> MaintenanceRequest | None:
        """Get request by ID."""
        ...

    def save(self, request: MaintenanceRequest) -> MaintenanceRequest:
        """Save or update request."""
        ...

    def list_filtered(
        self,
        maintenance_id: UUID | None = None,
        state: RequestState | None = None,
    ) -> list[MaintenanceRequest]:
        """List requests, newest first."""
        ...


class RequestNotifierPort(Protocol):
    """Notification hooks for request lifecycle events."""

    def request_created(self, request: MaintenanceRequest, actor_id: str) -> list[str]:
        """Queue notifications for a new request."""
        ...

    def request_assigned(self, request: MaintenanceRequest, actor_id: str) -> str | None:
        """Queue notification for an assignment."""
        ...


class UserLookupPort(Protocol):
    """Read access to users, for approval rights."""

    def get_by_id(self, user_id: str) -> User | None:
        """Get user by ID."""
        ...


class ClockPort(Protocol):
    """Clock interface."""

    def now(self) -> datetime:
        """Return current local time."""
        ...

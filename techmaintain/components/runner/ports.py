"""
Runner component port definitions.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Protocol
from uuid import UUID

from techmaintain.domain.entities import MaintenanceLog, MaintenanceRequest, MaintenanceTemplate


class TemplateRepoPort(Protocol):
    """Repository interface for maintenance templates."""

    def get_by_id(self, template_id: UUID) -> MaintenanceTemplate | None:
        """Get template by ID."""
        ...

    def save(self, template: MaintenanceTemplate) -> MaintenanceTemplate:
        """Save or update template (last write wins)."""
        ...

    def list_active(self) -> list[MaintenanceTemplate]:
        """List templates with is_active set."""
        ...


class RequestRepoPort(Protocol):
    """Repository interface for maintenance requests."""

    def save(self, request: MaintenanceRequest) -> MaintenanceRequest:
        """Save or update request."""
        ...

    def find_by_maintenance_and_date(
        self,
        maintenance_id: UUID,
        planned_date: date,
    ) -> MaintenanceRequest | None:
        """Find a request generated from a template for a planned date."""
        ...


class MaintenanceLogRepoPort(Protocol):
    """Repository interface for generation log entries."""

    def save(self, log: MaintenanceLog) -> MaintenanceLog:
        """Save or update log entry."""
        ...


class GenerationNotifierPort(Protocol):
    """Notification hook for generated requests."""

    def request_generated(
        self,
        template: MaintenanceTemplate,
        request: MaintenanceRequest,
    ) -> None:
        """Queue notifications for a freshly generated request."""
        ...


class ClockPort(Protocol):
    """Clock interface for deterministic 'today'."""

    def now(self) -> datetime:
        """Return current local time."""
        ...


class RulesPort(Protocol):
    """Port for runner rules configuration."""

    def get_generated_priority(self) -> str:
        """Priority assigned to generated requests."""
        ...

    def get_weekday_search_limit(self) -> int:
        """Weekday search bound in days."""
        ...

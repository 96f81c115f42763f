"""
Templates component - Port interfaces.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol
from uuid import UUID

from techmaintain.domain.entities import MaintenanceTemplate


class TemplateRepoPort(Protocol):
    """Repository interface for maintenance templates."""

    def get_by_id(self, template_id: UUID) -> MaintenanceTemplate | None:
        """Get template by ID."""
        ...

    def save(self, template: MaintenanceTemplate) -> MaintenanceTemplate:
        """Save or update template."""
        ...

    def delete(self, template_id: UUID) -> None:
        """Delete template."""
        ...

    def list_all(self) -> list[MaintenanceTemplate]:
        """List all templates."""
        ...

    def list_active(self) -> list[MaintenanceTemplate]:
        """List active templates."""
        ...


class RequestCountPort(Protocol):
    """Count of requests generated from a template."""

    def count_by_maintenance(self, maintenance_id: UUID) -> int:
        """Number of requests linked to a template."""
        ...


class ClockPort(Protocol):
    """Clock interface."""

    def now(self) -> datetime:
        """Return current local time."""
        ...

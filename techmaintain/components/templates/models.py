"""
Templates component models.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from techmaintain.domain.entities import MaintenanceTemplate


@dataclass(frozen=True)
class TemplateValidationError:
    """Template validation error."""

    code: str
    message: str
    field: str | None = None


@dataclass(frozen=True)
class TemplateView:
    """A template with its derived read-only fields."""

    template: MaintenanceTemplate
    next_run_date: date | None
    request_count: int = 0

"""
Runner component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from uuid import UUID

from techmaintain.domain.entities import MaintenanceRequest, MaintenanceTemplate

from ._impl import GenerationResult

# --- Validation Error ---


@dataclass(frozen=True)
class RunnerValidationError:
    """Runner validation error."""

    code: str
    message: str
    template_id: UUID | None = None


# --- Input Models ---


@dataclass(frozen=True)
class RunNowInput:
    """Input for generating a request from a template immediately."""

    template_id: UUID
    today: date | None = None


@dataclass(frozen=True)
class GenerateDueInput:
    """Input for the scheduled generation pass."""

    today: date | None = None


# --- Output Models ---


@dataclass(frozen=True)
class RunNowOutput:
    """Output for run now operation."""

    request: MaintenanceRequest | None
    template: MaintenanceTemplate | None
    errors: list[RunnerValidationError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class GenerationOutput:
    """Output for scheduled generation."""

    run_date: date
    results: tuple[GenerationResult, ...]
    generated: int = 0
    skipped: int = 0
    failed: int = 0

"""
Recurrence component input/output models.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date, datetime

from ._impl import UpcomingRun
from .ports import RecurringTemplate

# --- Input Models ---


@dataclass(frozen=True)
class NextRunInput:
    """Input for computing one template's next run date."""

    template: RecurringTemplate
    now: date | datetime | None = None


@dataclass(frozen=True)
class UpcomingInput:
    """Input for listing upcoming runs across templates."""

    templates: Sequence[RecurringTemplate]
    now: date | datetime | None = None
    limit: int | None = None


# --- Output Models ---


@dataclass(frozen=True)
class NextRunOutput:
    """Output for next run computation."""

    next_run_date: date | None
    is_active: bool


@dataclass(frozen=True)
class UpcomingOutput:
    """Output for upcoming runs listing."""

    runs: list[UpcomingRun] = field(default_factory=list)
    total: int = 0

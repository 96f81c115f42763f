"""
Recurrence component port definitions.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date, datetime
from typing import Any, Protocol


class RecurringTemplate(Protocol):
    """Anything carrying the fields the calculator reads."""

    interval_days: int
    allowed_days: Sequence[int]
    is_active: bool

    @property
    def last_generated_date(self) -> date | datetime | str | None: ...

    @property
    def created_at(self) -> date | datetime | str | Any: ...


class ClockPort(Protocol):
    """Clock interface for deterministic 'now'."""

    def now(self) -> datetime:
        """Return current local time."""
        ...


class RulesPort(Protocol):
    """Port for recurrence rules configuration."""

    def get_weekday_search_limit(self) -> int:
        """Get the weekday search bound in days."""
        ...

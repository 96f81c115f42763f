"""
Recurrence component - Next maintenance date calculation.
"""

from ._impl import (
    DEFAULT_CONFIG,
    RecurrenceConfig,
    UpcomingRun,
    earliest_possible_run,
    is_due,
    next_allowed_weekday,
    next_run_date,
    resolve_base_date,
    upcoming_runs,
)
from .component import run, run_next_run, run_upcoming
from .models import NextRunInput, NextRunOutput, UpcomingInput, UpcomingOutput
from .ports import ClockPort, RecurringTemplate, RulesPort

__all__ = [
    # Entry points
    "run",
    "run_next_run",
    "run_upcoming",
    # Input models
    "NextRunInput",
    "UpcomingInput",
    # Output models
    "NextRunOutput",
    "UpcomingOutput",
    "UpcomingRun",
    # Ports
    "ClockPort",
    "RecurringTemplate",
    "RulesPort",
    # Functional core
    "DEFAULT_CONFIG",
    "RecurrenceConfig",
    "earliest_possible_run",
    "is_due",
    "next_allowed_weekday",
    "next_run_date",
    "resolve_base_date",
    "upcoming_runs",
]

"""
Recurrence component - Next maintenance date calculation.

Invariants:
- Inactive templates never produce a run date
- A run date is never earlier than tomorrow
- Returned dates fall on an allowed weekday when any are configured
- The result is a pure function of the template and 'now'
"""

from __future__ import annotations

from datetime import date, datetime

from ._impl import RecurrenceConfig, next_run_date, upcoming_runs
from .models import NextRunInput, NextRunOutput, UpcomingInput, UpcomingOutput
from .ports import ClockPort, RulesPort


def _build_config(rules: RulesPort | None) -> RecurrenceConfig:
    """Build recurrence config from rules port."""
    if rules is None:
        return RecurrenceConfig()
    return RecurrenceConfig(weekday_search_limit=rules.get_weekday_search_limit())


def _resolve_now(now: date | datetime | None, clock: ClockPort | None) -> date | datetime:
    if now is not None:
        return now
    if clock is not None:
        return clock.now()
    return datetime.now()


# --- Component Entry Points ---


def run_next_run(
    inp: NextRunInput,
    *,
    clock: ClockPort | None = None,
    rules: RulesPort | None = None,
) -> NextRunOutput:
    """
    Compute the next run date of a single template.

    Args:
        inp: Input containing the template and optional 'now'.
        clock: Optional clock used when 'now' is not given.
        rules: Optional rules port for configuration.

    Returns:
        NextRunOutput with the date (None when inactive).
    """
    config = _build_config(rules)
    now = _resolve_now(inp.now, clock)
    return NextRunOutput(
        next_run_date=next_run_date(inp.template, now, config),
        is_active=bool(inp.template.is_active),
    )


def run_upcoming(
    inp: UpcomingInput,
    *,
    clock: ClockPort | None = None,
    rules: RulesPort | None = None,
) -> UpcomingOutput:
    """List active templates ordered by next run date."""
    config = _build_config(rules)
    now = _resolve_now(inp.now, clock)
    runs = upcoming_runs(inp.templates, now, inp.limit, config)
    return UpcomingOutput(runs=runs, total=len(runs))


def run(
    inp: NextRunInput | UpcomingInput,
    *,
    clock: ClockPort | None = None,
    rules: RulesPort | None = None,
) -> NextRunOutput | UpcomingOutput:
    """
    Main entry point for the recurrence component.

    Dispatches to appropriate handler based on input type.
    """
    if isinstance(inp, NextRunInput):
        return run_next_run(inp, clock=clock, rules=rules)
    elif isinstance(inp, UpcomingInput):
        return run_upcoming(inp, clock=clock, rules=rules)
    else:
        raise ValueError(f"Unknown input type: {type(inp)}")

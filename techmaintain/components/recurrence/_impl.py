"""
RecurrenceCalculator - next run date for maintenance templates.

Functional Core - pure date arithmetic, no I/O.

Key behaviors:
- Inactive templates have no next run
- Base date is the last generation date, else the creation date, else today
- The earliest possible run is tomorrow
- Missed cycles are not backfilled; the target jumps to tomorrow (catch-up)
- Allowed weekdays (0 = Sunday) push the target forward day by day, bounded
  by a search limit
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime, timedelta

from techmaintain.domain.dates import ONE_DAY, js_weekday, local_midnight, to_calendar_date

from .ports import RecurringTemplate

# --- Configuration ---


@dataclass(frozen=True)
class RecurrenceConfig:
    """Recurrence configuration from rules."""

    weekday_search_limit: int = 366


DEFAULT_CONFIG = RecurrenceConfig()


# --- Upcoming Run ---


@dataclass(frozen=True)
class UpcomingRun:
    """A template paired with its computed next run date."""

    template: RecurringTemplate
    next_run_date: date


# --- Calculator ---


def resolve_base_date(template: RecurringTemplate, today: date) -> date:
    """Last generation date, else creation date, else today."""
    return (
        to_calendar_date(template.last_generated_date)
        or to_calendar_date(template.created_at)
        or today
    )


def earliest_possible_run(now: date | datetime) -> date:
    """Tomorrow, relative to ``now``."""
    return local_midnight(now) + ONE_DAY


def next_allowed_weekday(
    start: date,
    allowed_days: Iterable[int],
    search_limit: int = DEFAULT_CONFIG.weekday_search_limit,
) -> date:
    """
    First date on or after ``start`` whose weekday is allowed.

    The search is bounded; when nothing matches within ``search_limit`` days
    the last candidate is returned.
    """
    allowed = set(allowed_days)
    candidate = start
    for _ in range(search_limit):
        if js_weekday(candidate) in allowed:
            return candidate
        candidate += ONE_DAY
    return candidate


def next_run_date(
    template: RecurringTemplate,
    now: date | datetime,
    config: RecurrenceConfig = DEFAULT_CONFIG,
) -> date | None:
    """
    Compute the next calendar date on which ``template`` should fire.

    Args:
        template: Template-like object (interval, allowed days, dates, active flag)
        now: Current date or datetime (injected for determinism)
        config: Recurrence configuration

    Returns:
        The next run date, or None for inactive templates.
    """
    if not template.is_active:
        return None

    today = local_midnight(now)
    base = resolve_base_date(template, today)
    earliest = earliest_possible_run(today)

    try:
        target = base + timedelta(days=template.interval_days)
    except OverflowError:
        target = date.max

    if target < earliest:
        target = earliest

    allowed = list(template.allowed_days or ())
    if not allowed:
        return target

    try:
        return next_allowed_weekday(target, allowed, config.weekday_search_limit)
    except OverflowError:
        return target


def is_due(
    template: RecurringTemplate,
    today: date | datetime,
    config: RecurrenceConfig = DEFAULT_CONFIG,
) -> bool:
    """
    Whether the scheduled worker should generate ``template`` on ``today``.

    A template is due when the next run date as seen yesterday is today, so
    the scheduled path fires exactly on the date the dashboard displayed.
    """
    day = local_midnight(today)
    return next_run_date(template, day - ONE_DAY, config) == day


def upcoming_runs(
    templates: Iterable[RecurringTemplate],
    now: date | datetime,
    limit: int | None = None,
    config: RecurrenceConfig = DEFAULT_CONFIG,
) -> list[UpcomingRun]:
    """Active templates with their next run date, soonest first."""
    runs: list[UpcomingRun] = []
    for template in templates:
        run_date = next_run_date(template, now, config)
        if run_date is not None:
            runs.append(UpcomingRun(template=template, next_run_date=run_date))

    runs.sort(key=lambda r: (r.next_run_date, getattr(r.template, "title", "")))
    if limit is not None:
        return runs[:limit]
    return runs

"""
TemplateRunner - turns maintenance templates into concrete requests.

Handles the manual "run now" action and the scheduled generation pass.

Key behaviors:
- The request is persisted before the template is stamped, so a crash in
  between leaves "request exists, template not advanced" (a re-run
  duplicates rather than loses the request)
- Store errors from run_now propagate unchanged; no retries
- Scheduled generation fires a template only when it is due today and is
  idempotent per (template, day)
- Every scheduled attempt is recorded in the maintenance log
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Literal
from uuid import UUID

from techmaintain.components.recurrence import RecurrenceConfig, is_due
from techmaintain.domain.dates import local_midnight
from techmaintain.domain.entities import (
    SYSTEM_AUTHOR_ID,
    MaintenanceLog,
    MaintenanceRequest,
    MaintenanceTemplate,
    RequestHistoryEntry,
    RequestPriority,
)

from .ports import (
    ClockPort,
    GenerationNotifierPort,
    MaintenanceLogRepoPort,
    RequestRepoPort,
    TemplateRepoPort,
)

logger = logging.getLogger(__name__)

# --- Configuration ---


@dataclass(frozen=True)
class RunnerConfig:
    """Runner configuration from rules."""

    author_id: str = SYSTEM_AUTHOR_ID
    priority: RequestPriority = "priority"
    recurrence: RecurrenceConfig = field(default_factory=RecurrenceConfig)


DEFAULT_CONFIG = RunnerConfig()


# --- Errors ---


@dataclass
class RunnerError:
    """Runner operation error."""

    code: str
    message: str
    template_id: UUID | None = None


# --- Generation Result ---

GenerationStatus = Literal["generated", "skipped", "failed"]


@dataclass
class GenerationResult:
    """Outcome of one template in a scheduled generation pass."""

    template_id: UUID
    status: GenerationStatus
    message: str
    request_id: UUID | None = None
    log_id: UUID | None = None


@dataclass
class GenerationSummary:
    """Outcome of a scheduled generation pass."""

    run_date: date
    results: list[GenerationResult] = field(default_factory=list)

    @property
    def generated(self) -> int:
        return sum(1 for r in self.results if r.status == "generated")

    @property
    def skipped(self) -> int:
        return sum(1 for r in self.results if r.status == "skipped")

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if r.status == "failed")


# --- Request Construction ---


def build_request(
    template: MaintenanceTemplate,
    today: date,
    config: RunnerConfig = DEFAULT_CONFIG,
) -> MaintenanceRequest:
    """
    Build the request a template produces on ``today``.

    The first responsible person becomes the solver; the deadline is the
    run date itself.
    """
    solver_id = template.responsible_person_ids[0] if template.responsible_person_ids else None
    return MaintenanceRequest(
        tech_id=template.tech_id,
        maintenance_id=template.id,
        title=template.title,
        description=template.description,
        author_id=config.author_id,
        solver_id=solver_id,
        priority=config.priority,
        state="assigned" if solver_id else "new",
        planned_resolution_date=today,
        history=[
            RequestHistoryEntry(
                user_id=config.author_id,
                action="created",
                note=f"Generated from maintenance template '{template.title}'",
            )
        ],
    )


def run_now(
    template: MaintenanceTemplate,
    requests: RequestRepoPort,
    templates: TemplateRepoPort,
    today: date,
    config: RunnerConfig = DEFAULT_CONFIG,
) -> tuple[MaintenanceRequest, MaintenanceTemplate]:
    """
    Generate one request from ``template`` and stamp the template.

    Returns:
        Tuple of (created request, updated template).
    """
    request = requests.save(build_request(template, today, config))
    updated = templates.save(template.model_copy(update={"last_generated_date": today}))
    return request, updated


# --- TemplateRunner ---


class TemplateRunner:
    """
    Template runner.

    Orchestrates request generation from maintenance templates.
    """

    def __init__(
        self,
        templates: TemplateRepoPort,
        requests: RequestRepoPort,
        logs: MaintenanceLogRepoPort | None = None,
        notifier: GenerationNotifierPort | None = None,
        clock: ClockPort | None = None,
        config: RunnerConfig | None = None,
    ) -> None:
        """Initialize runner."""
        self._templates = templates
        self._requests = requests
        self._logs = logs
        self._notifier = notifier
        self._clock = clock
        self._config = config or DEFAULT_CONFIG

    def _now(self) -> datetime:
        if self._clock:
            return self._clock.now()
        return datetime.now()

    def _today(self) -> date:
        return local_midnight(self._now())

    # --- Manual Run ---

    def run_now(
        self,
        template: MaintenanceTemplate,
        today: date | None = None,
    ) -> tuple[MaintenanceRequest, MaintenanceTemplate]:
        """Generate a request immediately ("run now")."""
        day = today or self._today()
        request, updated = run_now(template, self._requests, self._templates, day, self._config)
        logger.info(
            "Generated request %s from template %s for %s",
            request.id,
            template.id,
            day.isoformat(),
        )
        return request, updated

    def run_template_now(
        self,
        template_id: UUID,
        today: date | None = None,
    ) -> tuple[MaintenanceRequest | None, MaintenanceTemplate | None, list[RunnerError]]:
        """
        Resolve a template by ID and run it now.

        Returns:
            Tuple of (request, template, errors). Request is None if errors.
        """
        template = self._templates.get_by_id(template_id)
        if template is None:
            return None, None, [
                RunnerError(
                    code="template_not_found",
                    message=f"Template {template_id} not found",
                    template_id=template_id,
                )
            ]

        if not template.is_active:
            return None, template, [
                RunnerError(
                    code="template_inactive",
                    message="Inactive templates cannot be run",
                    template_id=template_id,
                )
            ]

        request, updated = self.run_now(template, today)
        return request, updated, []

    # --- Scheduled Generation ---

    def generate_due(self, today: date | None = None) -> GenerationSummary:
        """
        Generate requests for every active template due on ``today``.

        Errors are recorded per template; the pass always continues.
        """
        day = today or self._today()
        summary = GenerationSummary(run_date=day)

        for template in self._templates.list_active():
            if not is_due(template, day, self._config.recurrence):
                continue
            summary.results.append(self._generate_one(template, day))

        if summary.results:
            logger.info(
                "Maintenance generation for %s: %d generated, %d skipped, %d failed",
                day.isoformat(),
                summary.generated,
                summary.skipped,
                summary.failed,
            )
        return summary

    def _generate_one(self, template: MaintenanceTemplate, day: date) -> GenerationResult:
        existing = self._requests.find_by_maintenance_and_date(template.id, day)
        if existing is not None:
            # Stamp was lost after the request was stored; move the window forward.
            if template.last_generated_date is None or template.last_generated_date < day:
                self._templates.save(template.model_copy(update={"last_generated_date": day}))
            return GenerationResult(
                template_id=template.id,
                status="skipped",
                message="Request already exists for this date",
                request_id=existing.id,
            )

        logger.info("Processing template %s for %s", template.title, day.isoformat())
        log = MaintenanceLog(
            maintenance_id=template.id,
            planned_date=day,
            template_snapshot=template.model_dump(mode="json"),
        )
        self._save_log(log)

        try:
            request, updated = self.run_now(template, day)
        except Exception as e:
            logger.exception("Failed to create request for template %s", template.id)
            self._save_log(
                log.model_copy(
                    update={
                        "status": "error",
                        "executed_at": self._now(),
                        "error_message": str(e),
                    }
                )
            )
            return GenerationResult(
                template_id=template.id,
                status="failed",
                message=str(e),
                log_id=log.id,
            )

        self._save_log(
            log.model_copy(
                update={
                    "status": "success",
                    "executed_at": self._now(),
                    "request_id": request.id,
                }
            )
        )

        if self._notifier:
            try:
                self._notifier.request_generated(updated, request)
            except Exception:
                logger.exception("Failed to queue notification for request %s", request.id)

        return GenerationResult(
            template_id=template.id,
            status="generated",
            message=f"Generated request for {day.isoformat()}",
            request_id=request.id,
            log_id=log.id,
        )

    def _save_log(self, log: MaintenanceLog) -> None:
        if self._logs:
            self._logs.save(log)

"""
TemplateService - Maintenance template management.

Handles template creation, updates, validation and derived views
(next run date, generated request count).

Functional Core - pure business logic.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, get_args
from uuid import UUID, uuid4

from techmaintain.components.recurrence import RecurrenceConfig, next_run_date
from techmaintain.components.runner import TemplateRunner
from techmaintain.domain.entities import MaintenanceRequest, MaintenanceTemplate, MaintenanceType

from .models import TemplateValidationError, TemplateView
from .ports import ClockPort, RequestCountPort, TemplateRepoPort

MAX_TITLE_LENGTH = 255
MAINTENANCE_TYPES = get_args(MaintenanceType)

# Fields that may be changed through update(); last_generated_date is owned by runs.
UPDATABLE_FIELDS = (
    "tech_id",
    "title",
    "description",
    "interval_days",
    "allowed_days",
    "is_active",
    "type",
    "supplier_id",
    "responsible_person_ids",
)

# --- Validation Functions ---


def validate_template_data(
    tech_id: str | None = None,
    title: str | None = None,
    interval_days: int | None = None,
    allowed_days: list[int] | None = None,
    type: str | None = None,
) -> list[TemplateValidationError]:
    """Validate template data. None means 'not provided'."""
    errors: list[TemplateValidationError] = []

    if tech_id is not None and not tech_id.strip():
        errors.append(
            TemplateValidationError(
                code="tech_required",
                message="Technology is required",
                field="tech_id",
            )
        )

    if title is not None:
        if not title.strip():
            errors.append(
                TemplateValidationError(
                    code="title_required",
                    message="Title is required",
                    field="title",
                )
            )
        elif len(title) > MAX_TITLE_LENGTH:
            errors.append(
                TemplateValidationError(
                    code="title_too_long",
                    message=f"Title must be {MAX_TITLE_LENGTH} characters or less",
                    field="title",
                )
            )

    if interval_days is not None and interval_days < 1:
        errors.append(
            TemplateValidationError(
                code="interval_invalid",
                message="Interval must be at least 1 day",
                field="interval_days",
            )
        )

    if allowed_days is not None and any(d < 0 or d > 6 for d in allowed_days):
        errors.append(
            TemplateValidationError(
                code="allowed_days_invalid",
                message="Allowed days must be between 0 (Sunday) and 6 (Saturday)",
                field="allowed_days",
            )
        )

    if type is not None and type not in MAINTENANCE_TYPES:
        errors.append(
            TemplateValidationError(
                code="type_invalid",
                message=f"Type must be one of: {', '.join(MAINTENANCE_TYPES)}",
                field="type",
            )
        )

    return errors


# --- Template Service ---


class TemplateService:
    """
    Template service.

    Manages recurring maintenance templates.
    """

    def __init__(
        self,
        repo: TemplateRepoPort,
        requests: RequestCountPort | None = None,
        runner: TemplateRunner | None = None,
        clock: ClockPort | None = None,
        recurrence: RecurrenceConfig | None = None,
    ) -> None:
        """Initialize service."""
        self._repo = repo
        self._requests = requests
        self._runner = runner
        self._clock = clock
        self._recurrence = recurrence or RecurrenceConfig()

    def _now(self) -> datetime:
        if self._clock:
            return self._clock.now()
        return datetime.now()

    # --- Queries ---

    def get_by_id(self, template_id: UUID) -> MaintenanceTemplate | None:
        """Get template by ID."""
        return self._repo.get_by_id(template_id)

    def get_all(self) -> list[MaintenanceTemplate]:
        """Get all templates ordered by title."""
        return sorted(self._repo.list_all(), key=lambda t: t.title.lower())

    def describe(self, template: MaintenanceTemplate) -> TemplateView:
        """Attach the computed next run date and request count."""
        count = self._requests.count_by_maintenance(template.id) if self._requests else 0
        return TemplateView(
            template=template,
            next_run_date=next_run_date(template, self._now(), self._recurrence),
            request_count=count,
        )

    def next_run(self, template_id: UUID) -> tuple[date | None, list[TemplateValidationError]]:
        """Next run date of a stored template."""
        template = self._repo.get_by_id(template_id)
        if template is None:
            return None, [_not_found(template_id)]
        return next_run_date(template, self._now(), self._recurrence), []

    # --- Commands ---

    def create(
        self,
        tech_id: str,
        title: str,
        description: str = "",
        interval_days: int = 30,
        allowed_days: list[int] | None = None,
        is_active: bool = True,
        type: MaintenanceType = "planned",
        supplier_id: str | None = None,
        responsible_person_ids: list[str] | None = None,
    ) -> tuple[MaintenanceTemplate | None, list[TemplateValidationError]]:
        """
        Create a new template.

        Returns:
            Tuple of (template, errors). Template is None if validation fails.
        """
        allowed = sorted(set(allowed_days or []))
        errors = validate_template_data(
            tech_id=tech_id,
            title=title,
            interval_days=interval_days,
            allowed_days=allowed,
            type=type,
        )
        if errors:
            return None, errors

        template = MaintenanceTemplate(
            id=uuid4(),
            tech_id=tech_id.strip(),
            title=title.strip(),
            description=description,
            interval_days=interval_days,
            allowed_days=allowed,
            is_active=is_active,
            type=type,
            supplier_id=supplier_id or None,
            responsible_person_ids=list(responsible_person_ids or []),
            created_at=self._now().date(),
        )
        return self._repo.save(template), []

    def update(
        self,
        template_id: UUID,
        updates: dict[str, Any],
    ) -> tuple[MaintenanceTemplate | None, list[TemplateValidationError]]:
        """
        Update an existing template.

        Returns:
            Tuple of (template, errors). Template is None if not found or invalid.
        """
        template = self._repo.get_by_id(template_id)
        if template is None:
            return None, [_not_found(template_id)]

        changes = {k: v for k, v in updates.items() if k in UPDATABLE_FIELDS}
        if "allowed_days" in changes:
            changes["allowed_days"] = sorted(set(changes["allowed_days"] or []))

        errors = validate_template_data(
            tech_id=changes.get("tech_id"),
            title=changes.get("title"),
            interval_days=changes.get("interval_days"),
            allowed_days=changes.get("allowed_days"),
            type=changes.get("type"),
        )
        if errors:
            return None, errors

        if "title" in changes:
            changes["title"] = changes["title"].strip()
        if "tech_id" in changes:
            changes["tech_id"] = changes["tech_id"].strip()

        return self._repo.save(template.model_copy(update=changes)), []

    def delete(self, template_id: UUID) -> tuple[bool, list[TemplateValidationError]]:
        """Delete a template."""
        if self._repo.get_by_id(template_id) is None:
            return False, [_not_found(template_id)]
        self._repo.delete(template_id)
        return True, []

    def run_now(
        self,
        template_id: UUID,
    ) -> tuple[MaintenanceRequest | None, MaintenanceTemplate | None, list[TemplateValidationError]]:
        """
        Generate a request from a template immediately.

        Store errors propagate to the caller.
        """
        if self._runner is None:
            raise ValueError("TemplateRunner is required for run now")

        request, template, errors = self._runner.run_template_now(template_id)
        return request, template, [
            TemplateValidationError(code=e.code, message=e.message) for e in errors
        ]


def _not_found(template_id: UUID) -> TemplateValidationError:
    return TemplateValidationError(
        code="template_not_found",
        message=f"Template with ID {template_id} not found",
    )

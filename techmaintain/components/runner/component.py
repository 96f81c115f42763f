"""
Runner component - Request generation from maintenance templates.

Invariants:
- The generated request is stored before the template is stamped
- A run stamps last_generated_date with the run date
- Scheduled generation creates at most one request per template and day
- Store errors from a manual run reach the caller unchanged
"""

from __future__ import annotations

from techmaintain.components.recurrence import RecurrenceConfig

from ._impl import RunnerConfig, RunnerError, TemplateRunner
from .models import (
    GenerateDueInput,
    GenerationOutput,
    RunNowInput,
    RunNowOutput,
    RunnerValidationError,
)
from .ports import (
    ClockPort,
    GenerationNotifierPort,
    MaintenanceLogRepoPort,
    RequestRepoPort,
    RulesPort,
    TemplateRepoPort,
)


def _build_config(rules: RulesPort | None) -> RunnerConfig:
    """Build runner config from rules port."""
    if rules is None:
        return RunnerConfig()
    return RunnerConfig(
        priority=rules.get_generated_priority(),  # type: ignore[arg-type]
        recurrence=RecurrenceConfig(weekday_search_limit=rules.get_weekday_search_limit()),
    )


def _convert_errors(errors: list[RunnerError]) -> list[RunnerValidationError]:
    return [
        RunnerValidationError(code=e.code, message=e.message, template_id=e.template_id)
        for e in errors
    ]


# --- Component Entry Points ---


def run_run_now(
    inp: RunNowInput,
    *,
    templates: TemplateRepoPort,
    requests: RequestRepoPort,
    clock: ClockPort | None = None,
    rules: RulesPort | None = None,
) -> RunNowOutput:
    """
    Generate a request from a template immediately.

    Args:
        inp: Input containing template_id and optional run date.
        templates: Template repository port.
        requests: Request repository port.
        clock: Optional clock for 'today'.
        rules: Optional rules port for configuration.

    Returns:
        RunNowOutput with request and stamped template, or errors.
    """
    runner = TemplateRunner(
        templates=templates,
        requests=requests,
        clock=clock,
        config=_build_config(rules),
    )
    request, template, errors = runner.run_template_now(inp.template_id, inp.today)
    return RunNowOutput(
        request=request,
        template=template,
        errors=_convert_errors(errors),
        success=not errors,
    )


def run_generate_due(
    inp: GenerateDueInput,
    *,
    templates: TemplateRepoPort,
    requests: RequestRepoPort,
    logs: MaintenanceLogRepoPort | None = None,
    notifier: GenerationNotifierPort | None = None,
    clock: ClockPort | None = None,
    rules: RulesPort | None = None,
) -> GenerationOutput:
    """Run the scheduled generation pass."""
    runner = TemplateRunner(
        templates=templates,
        requests=requests,
        logs=logs,
        notifier=notifier,
        clock=clock,
        config=_build_config(rules),
    )
    summary = runner.generate_due(inp.today)
    return GenerationOutput(
        run_date=summary.run_date,
        results=tuple(summary.results),
        generated=summary.generated,
        skipped=summary.skipped,
        failed=summary.failed,
    )

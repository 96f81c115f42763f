"""
Runner component - Request generation from maintenance templates.
"""

from ._impl import (
    GenerationResult,
    GenerationSummary,
    RunnerConfig,
    RunnerError,
    TemplateRunner,
    build_request,
    run_now,
)
from .component import run_generate_due, run_run_now
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

__all__ = [
    # Entry points
    "run_generate_due",
    "run_run_now",
    # Input models
    "GenerateDueInput",
    "RunNowInput",
    # Output models
    "GenerationOutput",
    "GenerationResult",
    "GenerationSummary",
    "RunNowOutput",
    "RunnerValidationError",
    # Ports
    "ClockPort",
    "GenerationNotifierPort",
    "MaintenanceLogRepoPort",
    "RequestRepoPort",
    "RulesPort",
    "TemplateRepoPort",
    # Service
    "RunnerConfig",
    "RunnerError",
    "TemplateRunner",
    "build_request",
    "run_now",
]

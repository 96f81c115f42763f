"""Dashboard routes."""

from fastapi import APIRouter, Depends, Query

from techmaintain.adapters.clock import SystemClock
from techmaintain.api.deps import get_clock, get_services
from techmaintain.api.schemas import UpcomingItem, UpcomingResponse
from techmaintain.app_shell.container import Services
from techmaintain.components.recurrence import UpcomingInput, run_upcoming

router = APIRouter()


@router.get("/upcoming", response_model=UpcomingResponse)
def upcoming_maintenance(
    limit: int = Query(default=10, ge=1, le=100),
    services: Services = Depends(get_services),
    clock: SystemClock = Depends(get_clock),
) -> UpcomingResponse:
    """Active templates ordered by their next run date."""
    output = run_upcoming(
        UpcomingInput(templates=services.store.templates.list_active(), limit=limit),
        clock=clock,
        rules=services.rules,
    )
    return UpcomingResponse(
        items=[
            UpcomingItem(
                template_id=run.template.id,
                title=run.template.title,
                tech_id=run.template.tech_id,
                next_run_date=run.next_run_date,
                interval_days=run.template.interval_days,
            )
            for run in output.runs
        ],
        total=output.total,
    )

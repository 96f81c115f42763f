"""Routes for maintenance requests."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException

from techmaintain.api.deps import get_actor_id, get_request_service, get_rules
from techmaintain.api.errors import raise_for_errors
from techmaintain.api.schemas import (
    ApprovalRequest,
    AssignRequest,
    CancelRequest,
    RequestCreateRequest,
    RequestResponse,
    SolveRequest,
)
from techmaintain.components.requests import RequestService
from techmaintain.domain.entities import RequestState
from techmaintain.rules.models import Rules

router = APIRouter()

NOT_FOUND = "Request not found"


@router.get("", response_model=list[RequestResponse])
def list_requests(
    maintenance_id: UUID | None = None,
    state: RequestState | None = None,
    service: RequestService = Depends(get_request_service),
) -> list[RequestResponse]:
    """List requests, newest first, optionally filtered by template or state."""
    return [
        RequestResponse.from_request(r)
        for r in service.list(maintenance_id=maintenance_id, state=state)
    ]


@router.post("", response_model=RequestResponse, status_code=201)
def create_request(
    body: RequestCreateRequest,
    service: RequestService = Depends(get_request_service),
    rules: Rules = Depends(get_rules),
    actor_id: str = Depends(get_actor_id),
) -> RequestResponse:
    request, errors = service.create(
        tech_id=body.tech_id,
        author_id=actor_id,
        description=body.description,
        title=body.title,
        priority=body.priority or rules.requests.default_priority,
        solver_id=body.solver_id,
        planned_resolution_date=body.planned_resolution_date,
        location_id=body.location_id,
        estimated_cost=body.estimated_cost,
        estimated_time=body.estimated_time,
    )
    raise_for_errors(errors)
    assert request is not None
    return RequestResponse.from_request(request)


@router.get("/{request_id}", response_model=RequestResponse)
def get_request(
    request_id: UUID,
    service: RequestService = Depends(get_request_service),
) -> RequestResponse:
    request = service.get_by_id(request_id)
    if request is None:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return RequestResponse.from_request(request)


@router.post("/{request_id}/assign", response_model=RequestResponse)
def assign_request(
    request_id: UUID,
    body: AssignRequest,
    service: RequestService = Depends(get_request_service),
    actor_id: str = Depends(get_actor_id),
) -> RequestResponse:
    request, errors = service.assign(request_id, body.solver_id, actor_id)
    raise_for_errors(errors, NOT_FOUND)
    assert request is not None
    return RequestResponse.from_request(request)


@router.post("/{request_id}/unassign", response_model=RequestResponse)
def unassign_request(
    request_id: UUID,
    service: RequestService = Depends(get_request_service),
    actor_id: str = Depends(get_actor_id),
) -> RequestResponse:
    request, errors = service.unassign(request_id, actor_id)
    raise_for_errors(errors, NOT_FOUND)
    assert request is not None
    return RequestResponse.from_request(request)


@router.post("/{request_id}/approval", response_model=RequestResponse)
def set_request_approval(
    request_id: UUID,
    body: ApprovalRequest,
    service: RequestService = Depends(get_request_service),
    actor_id: str = Depends(get_actor_id),
) -> RequestResponse:
    """Approve a request or revoke its approval as the acting user."""
    request, errors = service.set_approval(request_id, body.approved, actor_id)
    raise_for_errors(errors, NOT_FOUND)
    assert request is not None
    return RequestResponse.from_request(request)


@router.post("/{request_id}/solve", response_model=RequestResponse)
def solve_request(
    request_id: UUID,
    body: SolveRequest | None = None,
    service: RequestService = Depends(get_request_service),
    actor_id: str = Depends(get_actor_id),
) -> RequestResponse:
    request, errors = service.solve(request_id, actor_id, note=body.note if body else "")
    raise_for_errors(errors, NOT_FOUND)
    assert request is not None
    return RequestResponse.from_request(request)


@router.post("/{request_id}/cancel", response_model=RequestResponse)
def cancel_request(
    request_id: UUID,
    body: CancelRequest,
    service: RequestService = Depends(get_request_service),
    actor_id: str = Depends(get_actor_id),
) -> RequestResponse:
    request, errors = service.cancel(request_id, actor_id, body.reason)
    raise_for_errors(errors, NOT_FOUND)
    assert request is not None
    return RequestResponse.from_request(request)


@router.post("/{request_id}/reopen", response_model=RequestResponse)
def reopen_request(
    request_id: UUID,
    service: RequestService = Depends(get_request_service),
    actor_id: str = Depends(get_actor_id),
) -> RequestResponse:
    request, errors = service.reopen(request_id, actor_id)
    raise_for_errors(errors, NOT_FOUND)
    assert request is not None
    return RequestResponse.from_request(request)

"""Routes for recurring maintenance templates."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException

from techmaintain.api.deps import get_rules, get_template_service
from techmaintain.api.errors import raise_for_errors
from techmaintain.api.schemas import (
    NextRunResponse,
    RequestResponse,
    RunNowResponse,
    TemplateCreateRequest,
    TemplateResponse,
    TemplateUpdateRequest,
)
from techmaintain.components.templates import TemplateService
from techmaintain.rules.models import Rules

router = APIRouter()

NOT_FOUND = "Maintenance template not found"


def _to_response(service: TemplateService, template_id: UUID) -> TemplateResponse:
    template = service.get_by_id(template_id)
    if template is None:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    view = service.describe(template)
    return TemplateResponse.from_template(view.template, view.next_run_date, view.request_count)


@router.get("", response_model=list[TemplateResponse])
def list_templates(
    service: TemplateService = Depends(get_template_service),
) -> list[TemplateResponse]:
    """List templates with their next run date and generated request count."""
    views = [service.describe(t) for t in service.get_all()]
    return [
        TemplateResponse.from_template(v.template, v.next_run_date, v.request_count)
        for v in views
    ]


@router.post("", response_model=TemplateResponse, status_code=201)
def create_template(
    body: TemplateCreateRequest,
    service: TemplateService = Depends(get_template_service),
    rules: Rules = Depends(get_rules),
) -> TemplateResponse:
    interval = body.interval_days
    if interval is None:
        interval = rules.scheduling.default_interval_days

    template, errors = service.create(
        tech_id=body.tech_id,
        title=body.title,
        description=body.description,
        interval_days=interval,
        allowed_days=body.allowed_days,
        is_active=body.is_active,
        type=body.type,
        supplier_id=body.supplier_id,
        responsible_person_ids=body.responsible_person_ids,
    )
    raise_for_errors(errors)
    assert template is not None
    return _to_response(service, template.id)


@router.get("/{template_id}", response_model=TemplateResponse)
def get_template(
    template_id: UUID,
    service: TemplateService = Depends(get_template_service),
) -> TemplateResponse:
    return _to_response(service, template_id)


@router.put("/{template_id}", response_model=TemplateResponse)
def update_template(
    template_id: UUID,
    body: TemplateUpdateRequest,
    service: TemplateService = Depends(get_template_service),
) -> TemplateResponse:
    # Only fields present in the payload are changed; supplier_id may be cleared
    updates = {
        k: v
        for k, v in body.model_dump(exclude_unset=True).items()
        if v is not None or k == "supplier_id"
    }
    template, errors = service.update(template_id, updates)
    raise_for_errors(errors, NOT_FOUND)
    assert template is not None
    return _to_response(service, template.id)


@router.delete("/{template_id}", status_code=204)
def delete_template(
    template_id: UUID,
    service: TemplateService = Depends(get_template_service),
) -> None:
    _, errors = service.delete(template_id)
    raise_for_errors(errors, NOT_FOUND)


@router.get("/{template_id}/next-run", response_model=NextRunResponse)
def get_next_run(
    template_id: UUID,
    service: TemplateService = Depends(get_template_service),
) -> NextRunResponse:
    next_date, errors = service.next_run(template_id)
    raise_for_errors(errors, NOT_FOUND)
    return NextRunResponse(template_id=template_id, next_run_date=next_date)


@router.post("/{template_id}/run", response_model=RunNowResponse, status_code=201)
def run_template_now(
    template_id: UUID,
    service: TemplateService = Depends(get_template_service),
) -> RunNowResponse:
    """Generate a request from the template immediately."""
    request, template, errors = service.run_now(template_id)
    raise_for_errors(errors, NOT_FOUND)
    assert request is not None and template is not None
    return RunNowResponse(
        request=RequestResponse.from_request(request),
        template=_to_response(service, template.id),
    )

from datetime import date, datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field

from techmaintain.domain.entities import (
    MaintenanceRequest,
    MaintenanceTemplate,
    MaintenanceType,
    QueuedEmail,
    RequestPriority,
    RequestState,
)


# --- Maintenance Templates ---
class TemplateCreateRequest(BaseModel):
    tech_id: str
    title: str
    description: str = ""
    interval_days: int | None = None  # rules default when omitted
    allowed_days: list[int] = []
    is_active: bool = True
    type: MaintenanceType = "planned"
    supplier_id: str | None = None
    responsible_person_ids: list[str] = []


class TemplateUpdateRequest(BaseModel):
    tech_id: str | None = None
    title: str | None = None
    description: str | None = None
    interval_days: int | None = None
    allowed_days: list[int] | None = None
    is_active: bool | None = None
    type: MaintenanceType | None = None
    supplier_id: str | None = None
    responsible_person_ids: list[str] | None = None


class TemplateResponse(BaseModel):
    id: UUID
    tech_id: str
    title: str
    description: str
    interval_days: int
    allowed_days: list[int]
    is_active: bool
    type: MaintenanceType
    supplier_id: str | None
    responsible_person_ids: list[str]
    last_generated_date: date | None
    created_at: date | None
    next_run_date: date | None = None
    request_count: int = 0

    @classmethod
    def from_template(
        cls,
        template: MaintenanceTemplate,
        next_run_date: date | None = None,
        request_count: int = 0,
    ) -> "TemplateResponse":
        return cls(
            **template.model_dump(),
            next_run_date=next_run_date,
            request_count=request_count,
        )


class NextRunResponse(BaseModel):
    template_id: UUID
    next_run_date: date | None


# --- Requests ---
class RequestCreateRequest(BaseModel):
    tech_id: str
    description: str
    title: str = ""
    priority: RequestPriority | None = None  # rules default when omitted
    solver_id: str | None = None
    planned_resolution_date: date | None = None
    location_id: str | None = None
    estimated_cost: float = Field(default=0, ge=0)
    estimated_time: float = Field(default=0, ge=0)


class AssignRequest(BaseModel):
    solver_id: str


class SolveRequest(BaseModel):
    note: str = ""


class CancelRequest(BaseModel):
    reason: str


class ApprovalRequest(BaseModel):
    approved: bool


class HistoryEntryModel(BaseModel):
    timestamp: datetime
    user_id: str
    action: str
    note: str = ""


class RequestResponse(BaseModel):
    id: UUID
    tech_id: str
    maintenance_id: UUID | None
    title: str
    description: str
    author_id: str
    solver_id: str | None
    priority: RequestPriority
    state: RequestState
    planned_resolution_date: date | None
    cancellation_reason: str | None
    location_id: str | None = None
    estimated_cost: float = 0
    estimated_time: float = 0
    is_approved: bool = False
    created_at: datetime
    history: list[HistoryEntryModel] = Field(default_factory=list)

    @classmethod
    def from_request(cls, request: MaintenanceRequest) -> "RequestResponse":
        data: dict[str, Any] = request.model_dump()
        return cls(**data)


class RunNowResponse(BaseModel):
    request: RequestResponse
    template: TemplateResponse


# --- Email Queue ---
class QueuedEmailResponse(BaseModel):
    id: UUID
    to_address: str
    subject: str
    attempts: int
    sent_at: datetime | None
    error: str | None
    created_at: datetime

    @classmethod
    def from_email(cls, email: QueuedEmail) -> "QueuedEmailResponse":
        return cls(**email.model_dump(exclude={"body"}))


class RetryEmailsRequest(BaseModel):
    ids: list[UUID] = Field(min_length=1)


class RetryEmailsResponse(BaseModel):
    count: int


# --- Dashboard ---
class UpcomingItem(BaseModel):
    template_id: UUID
    title: str
    tech_id: str
    next_run_date: date
    interval_days: int


class UpcomingResponse(BaseModel):
    items: list[UpcomingItem]
    total: int

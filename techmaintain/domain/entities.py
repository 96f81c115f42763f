from datetime import date, datetime
from typing import Any, Literal
from uuid import UUID, uuid4

from pydantic import BaseModel, Field, field_validator

from techmaintain.domain.dates import to_calendar_date

# --- Enums / Literals ---
RoleType = Literal["admin", "maintenance", "operator"]
MaintenanceType = Literal["planned", "operational"]
RequestState = Literal["new", "assigned", "solved", "cancelled"]
RequestPriority = Literal["basic", "priority", "urgent"]
MaintenanceLogStatus = Literal["pending", "success", "error"]

SYSTEM_AUTHOR_ID = "system"

# --- Users ---


class User(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid4()))
    name: str
    email: str = ""
    phone: str = ""
    role: RoleType = "operator"
    is_blocked: bool = False
    approval_limits: dict[str, float] = Field(default_factory=dict)  # location id -> max cost
    created_at: datetime = Field(default_factory=datetime.now)


# --- Maintenance Templates ---


class MaintenanceTemplate(BaseModel):
    """
    Recurring maintenance definition.

    Dates are plain calendar dates. Loosely typed input (ISO strings or
    datetimes) is normalized on construction so the rest of the code only
    ever sees ``datetime.date``.
    """

    id: UUID = Field(default_factory=uuid4)
    tech_id: str
    title: str
    description: str = ""
    interval_days: int = 30
    allowed_days: list[int] = Field(default_factory=list)  # 0 = Sunday
    is_active: bool = True
    type: MaintenanceType = "planned"
    supplier_id: str | None = None
    responsible_person_ids: list[str] = Field(default_factory=list)
    last_generated_date: date | None = None
    created_at: date | None = None

    @field_validator("last_generated_date", mode="before")
    @classmethod
    def _normalize_last_generated(cls, value: Any) -> date | None:
        if value is None or value == "":
            return None
        return to_calendar_date(value)

    @field_validator("created_at", mode="before")
    @classmethod
    def _normalize_created(cls, value: Any) -> date | None:
        return to_calendar_date(value)


# --- Requests ---


class RequestHistoryEntry(BaseModel):
    timestamp: datetime = Field(default_factory=datetime.now)
    user_id: str
    action: str
    note: str = ""


class MaintenanceRequest(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    tech_id: str
    maintenance_id: UUID | None = None
    title: str = ""
    description: str = ""
    author_id: str
    solver_id: str | None = None
    priority: RequestPriority = "basic"
    state: RequestState = "new"
    planned_resolution_date: date | None = None
    cancellation_reason: str | None = None
    location_id: str | None = None
    estimated_cost: float = 0
    estimated_time: float = 0  # hours
    is_approved: bool = False
    created_at: datetime = Field(default_factory=datetime.now)
    history: list[RequestHistoryEntry] = Field(default_factory=list)

    @field_validator("planned_resolution_date", mode="before")
    @classmethod
    def _normalize_planned(cls, value: Any) -> date | None:
        if value is None or value == "":
            return None
        return to_calendar_date(value)


# --- Generation Log ---


class MaintenanceLog(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    maintenance_id: UUID
    status: MaintenanceLogStatus = "pending"
    planned_date: date
    created_at: datetime = Field(default_factory=datetime.now)
    executed_at: datetime | None = None
    error_message: str | None = None
    request_id: UUID | None = None
    template_snapshot: dict[str, Any] = Field(default_factory=dict)


# --- Email Queue ---


class QueuedEmail(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    to_address: str
    subject: str
    body: str
    attempts: int = 0
    sent_at: datetime | None = None
    error: str | None = None
    created_at: datetime = Field(default_factory=datetime.now)

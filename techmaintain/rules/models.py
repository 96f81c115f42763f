from typing import Literal

from pydantic import BaseModel, Field, field_validator


class SchedulingRules(BaseModel):
    weekday_search_limit: int = Field(default=366, ge=7)
    default_interval_days: int = Field(default=30, ge=1)
    generated_priority: Literal["basic", "priority", "urgent"] = "priority"
    system_author_id: str = "system"

class WorkerRules(BaseModel):
    poll_interval_seconds: float = Field(default=60.0, gt=0)
    overdue_check_time: str = "00:01"  # HH:MM, local time

    @field_validator("overdue_check_time")
    @classmethod
    def _check_time(cls, value: str) -> str:
        hours, _, minutes = value.partition(":")
        if not (hours.isdigit() and minutes.isdigit()):
            raise ValueError("overdue_check_time must be HH:MM")
        if not (0 <= int(hours) < 24 and 0 <= int(minutes) < 60):
            raise ValueError("overdue_check_time out of range")
        return value

    @property
    def overdue_hour_minute(self) -> tuple[int, int]:
        hours, _, minutes = self.overdue_check_time.partition(":")
        return int(hours), int(minutes)

class NotificationRules(BaseModel):
    batch_size: int = Field(default=10, ge=1)
    max_attempts: int = Field(default=3, ge=1)
    fallback_recipient: str = "maintenance@example.com"

class RequestRules(BaseModel):
    default_priority: Literal["basic", "priority", "urgent"] = "basic"

class Rules(BaseModel):
    scheduling: SchedulingRules = Field(default_factory=SchedulingRules)
    worker: WorkerRules = Field(default_factory=WorkerRules)
    notifications: NotificationRules = Field(default_factory=NotificationRules)
    requests: RequestRules = Field(default_factory=RequestRules)

    # RulesPort accessors used by the components
    def get_weekday_search_limit(self) -> int:
        return self.scheduling.weekday_search_limit

    def get_generated_priority(self) -> str:
        return self.scheduling.generated_priority

# schemas/completion.py
from datetime import date, datetime
from typing import Optional
from uuid import UUID
from pydantic import BaseModel, ConfigDict, Field, model_validator

from chorecycle.models.completion import CompletionStatus
from chorecycle.services.time_accounting import TimerAction


class CompletionUpsert(BaseModel):
    """Raw upsert of a completion for (activity, user, date)."""
    activity_id: UUID
    user_id: Optional[UUID] = Field(default=None, description="Defaults to the caller")
    date: date
    status: CompletionStatus
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    elapsed_ms: Optional[int] = Field(default=None, ge=0)
    label: Optional[str] = Field(default=None, max_length=100)
    deferred_to: Optional[date] = None

    @model_validator(mode="after")
    def validate_timer_fields(self):
        if self.status == CompletionStatus.started and self.started_at is None:
            raise ValueError("started_at is required when status is 'started'")
        if self.status != CompletionStatus.started and self.started_at is not None:
            raise ValueError("started_at may only be set while status is 'started'")
        if self.status == CompletionStatus.deferred:
            if self.deferred_to is None:
                raise ValueError("deferred_to is required when status is 'deferred'")
            if self.deferred_to <= self.date:
                raise ValueError("deferred_to must be after date")
        return self


class CompletionTransition(BaseModel):
    """Timer action computed server-side from the clock."""
    activity_id: UUID
    user_id: Optional[UUID] = Field(default=None, description="Defaults to the caller")
    date: date
    action: TimerAction
    duration_minutes: Optional[float] = Field(default=None, ge=0)
    deferred_to: Optional[date] = None


class CompletionRead(BaseModel):
    id: UUID
    activity_id: UUID
    user_id: UUID
    date: date
    status: CompletionStatus
    label: Optional[str] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    elapsed_ms: Optional[int] = None
    deferred_to: Optional[date] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

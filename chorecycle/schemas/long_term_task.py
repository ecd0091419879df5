# schemas/long_term_task.py
from datetime import date, datetime
from typing import List, Optional
from uuid import UUID
from pydantic import BaseModel, ConfigDict, Field

from chorecycle.models.activity import ActivityCategory
from chorecycle.models.long_term_task import LongTermTaskStatus


class LongTermTaskCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    category: ActivityCategory = ActivityCategory.home
    due_date: Optional[date] = None
    default_estimate_minutes: Optional[int] = Field(default=None, ge=0)
    user_id: Optional[UUID] = Field(default=None, description="Defaults to the caller")


class LongTermTaskUpdate(BaseModel):
    """Partial update. Status changes go through start/stop/complete."""
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    category: Optional[ActivityCategory] = None
    due_date: Optional[date] = None
    default_estimate_minutes: Optional[int] = Field(default=None, ge=0)


class LongTermTaskSessionRead(BaseModel):
    id: UUID
    started_at: datetime
    ended_at: Optional[datetime] = None
    duration_minutes: Optional[int] = None

    model_config = ConfigDict(from_attributes=True)


class LongTermTaskRead(BaseModel):
    id: UUID
    user_id: UUID
    title: str
    category: str
    due_date: Optional[date] = None
    default_estimate_minutes: Optional[int] = None
    status: LongTermTaskStatus
    current_session_started_at: Optional[datetime] = None
    elapsed_ms: int
    total_time_spent_minutes: int
    completed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class LongTermTaskDetail(LongTermTaskRead):
    sessions: List[LongTermTaskSessionRead] = []

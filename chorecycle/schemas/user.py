# schemas/user.py
from datetime import date, datetime
from typing import Optional
from uuid import UUID
from pydantic import BaseModel, ConfigDict, Field

from chorecycle.services.cycle import MAX_CYCLE_WEEKS


class UserRead(BaseModel):
    """Public profile fields plus personal cycle config."""
    id: UUID
    email: str
    display_name: str
    cycle_weeks: int
    cycle_start_date: date
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class UserCycleUpdate(BaseModel):
    """Partial update of the personal cycle."""
    cycle_weeks: Optional[int] = Field(default=None, ge=1, le=MAX_CYCLE_WEEKS)
    cycle_start_date: Optional[date] = None

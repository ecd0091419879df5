# schemas/schedule.py
from typing import Optional
from uuid import UUID
from pydantic import BaseModel, ConfigDict, Field

from chorecycle.services.cycle import MAX_CYCLE_WEEKS

from chorecycle.schemas.activity import ActivityRead


class ScheduleSlot(BaseModel):
    activity_id: UUID
    week_of_cycle: int = Field(..., ge=1, le=MAX_CYCLE_WEEKS)
    day_of_week: int = Field(..., ge=0, le=6)


class ScheduleSetRequest(ScheduleSlot):
    """
    Explicitly set who does a slot.

    - user_id omitted: clear the slot
    - user_id null: everyone in the owning family
    - user_id set: that user
    """
    user_id: Optional[UUID] = None


class ScheduleToggleRequest(ScheduleSlot):
    user_id: Optional[UUID] = None


class ScheduleEntryRead(BaseModel):
    id: UUID
    activity_id: UUID
    user_id: Optional[UUID] = None
    week_of_cycle: int
    day_of_week: int
    activity: Optional[ActivityRead] = None

    model_config = ConfigDict(from_attributes=True)


class ScheduleSetResponse(BaseModel):
    cleared: bool = False
    schedule: Optional[ScheduleEntryRead] = None


class ScheduleToggleResponse(BaseModel):
    toggled: bool
    schedule: Optional[ScheduleEntryRead] = None

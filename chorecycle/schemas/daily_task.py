# schemas/daily_task.py
from datetime import date
from typing import List, Optional
from pydantic import BaseModel, ConfigDict

from chorecycle.schemas.activity import ActivityRead
from chorecycle.schemas.completion import CompletionRead
from chorecycle.schemas.user import UserRead


class DailyTask(BaseModel):
    """One row of a user's day. Computed per request, never stored."""
    activity: ActivityRead
    user: UserRead
    completion: Optional[CompletionRead] = None
    is_deferred: bool = False
    is_ad_hoc: bool = False
    is_family_wide: bool = False

    model_config = ConfigDict(from_attributes=True)


class DailyTasksResponse(BaseModel):
    date: date
    week_of_cycle: int
    day_of_week: int
    tasks: List[DailyTask]

# chorecycle/schemas/__init__.py

from .common import SuccessResponse
from .user import UserRead, UserCycleUpdate
from .family import (
    FamilyRead,
    FamilyMemberRead,
    FamilyWithMembers,
    FamilyListResponse,
    FamilyUpdate,
)
from .activity import ActivityCreate, ActivityUpdate, ActivityRead
from .schedule import (
    ScheduleSetRequest,
    ScheduleToggleRequest,
    ScheduleEntryRead,
    ScheduleSetResponse,
    ScheduleToggleResponse,
)
from .completion import CompletionUpsert, CompletionTransition, CompletionRead
from .daily_task import DailyTask, DailyTasksResponse
from .stats import CategoryHours, UserHours, HoursResponse, LeaderboardEntry, LeaderboardResponse
from .long_term_task import (
    LongTermTaskCreate,
    LongTermTaskUpdate,
    LongTermTaskRead,
    LongTermTaskSessionRead,
    LongTermTaskDetail,
)


__all__ = [
    "SuccessResponse",
    # Users & families
    "UserRead", "UserCycleUpdate",
    "FamilyRead", "FamilyMemberRead", "FamilyWithMembers", "FamilyListResponse", "FamilyUpdate",
    # Activities & schedule
    "ActivityCreate", "ActivityUpdate", "ActivityRead",
    "ScheduleSetRequest", "ScheduleToggleRequest", "ScheduleEntryRead",
    "ScheduleSetResponse", "ScheduleToggleResponse",
    # Completions & daily view
    "CompletionUpsert", "CompletionTransition", "CompletionRead",
    "DailyTask", "DailyTasksResponse",
    # Long-term tasks
    "LongTermTaskCreate", "LongTermTaskUpdate", "LongTermTaskRead",
    "LongTermTaskSessionRead", "LongTermTaskDetail",
    # Stats
    "CategoryHours", "UserHours", "HoursResponse", "LeaderboardEntry", "LeaderboardResponse",
]

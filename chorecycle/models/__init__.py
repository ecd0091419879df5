# chorecycle/models/__init__.py

from chorecycle.core.config import Base

# Import all models here so metadata.create_all sees every table
from .user import User
from .family import Family, FamilyMember
from .activity import Activity, ActivityCategory
from .schedule import ScheduleEntry, AssignedUser, EVERYONE, Assignee
from .completion import Completion, CompletionStatus
from .long_term_task import LongTermTask, LongTermTaskSession, LongTermTaskStatus

__all__ = [
    "Base",
    "User",
    "Family",
    "FamilyMember",
    "Activity",
    "ActivityCategory",
    "ScheduleEntry",
    "AssignedUser",
    "EVERYONE",
    "Assignee",
    "Completion",
    "CompletionStatus",
    "LongTermTask",
    "LongTermTaskSession",
    "LongTermTaskStatus",
]

# models/schedule.py

import uuid
from dataclasses import dataclass
from typing import Union
from uuid import UUID
from sqlalchemy import Column, Integer, ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship
from chorecycle.core.config import Base


# =====================================================================
# ASSIGNEE
# =====================================================================


@dataclass(frozen=True)
class AssignedUser:
    user_id: UUID


class _Everyone:
    """Assignee of a family-wide row: every member of the owning family."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "EVERYONE"


EVERYONE = _Everyone()

Assignee = Union[AssignedUser, _Everyone]


# =====================================================================
# MODEL
# =====================================================================


class ScheduleEntry(Base):
    """Binds one activity to one (week_of_cycle, day_of_week) slot."""

    __tablename__ = "schedule"
    __table_args__ = (
        UniqueConstraint(
            "activity_id", "user_id", "week_of_cycle", "day_of_week",
            name="uq_schedule_slot",
        ),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)
    activity_id = Column(
        Uuid(as_uuid=True), ForeignKey("activities.id", ondelete="CASCADE"), nullable=False, index=True
    )
    # NULL = family-wide row, see `assignee`
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=True, index=True)
    week_of_cycle = Column(Integer, nullable=False)
    day_of_week = Column(Integer, nullable=False)  # 0=Monday, 6=Sunday

    activity = relationship("Activity", back_populates="schedule_entries")

    @property
    def assignee(self) -> Assignee:
        if self.user_id is None:
            return EVERYONE
        return AssignedUser(self.user_id)

    @assignee.setter
    def assignee(self, value: Assignee) -> None:
        self.user_id = value.user_id if isinstance(value, AssignedUser) else None

# models/long_term_task.py

import enum
import uuid
from datetime import datetime, timezone
from sqlalchemy import (
    Column, String, Integer, Date, DateTime, ForeignKey, Enum as SqlEnum, Uuid
)
from sqlalchemy.orm import relationship
from chorecycle.core.config import Base
from chorecycle.models.activity import ActivityCategory


class LongTermTaskStatus(str, enum.Enum):
    active = "active"
    completed = "completed"


class LongTermTask(Base):
    """
    A multi-day piece of work tracked with timer sessions instead of a
    daily schedule slot.
    """

    __tablename__ = "long_term_tasks"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)
    user_id = Column(
        Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    title = Column(String(200), nullable=False)
    category = Column(String(20), nullable=False, default=ActivityCategory.home.value)
    due_date = Column(Date, nullable=True)
    default_estimate_minutes = Column(Integer, nullable=True)

    status = Column(
        SqlEnum(LongTermTaskStatus), nullable=False, default=LongTermTaskStatus.active
    )

    # ---- Timer ----
    # set while a session is running
    current_session_started_at = Column(DateTime(timezone=True), nullable=True)
    elapsed_ms = Column(Integer, nullable=False, default=0)
    completed_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    sessions = relationship(
        "LongTermTaskSession",
        back_populates="task",
        cascade="all, delete-orphan",
        order_by="LongTermTaskSession.started_at",
    )

    @property
    def total_time_spent_minutes(self) -> int:
        return round((self.elapsed_ms or 0) / 60_000)


class LongTermTaskSession(Base):
    """One start/stop run of a long-term task; ended_at is NULL while open."""

    __tablename__ = "long_term_task_sessions"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)
    task_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("long_term_tasks.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    started_at = Column(DateTime(timezone=True), nullable=False)
    ended_at = Column(DateTime(timezone=True), nullable=True)
    duration_minutes = Column(Integer, nullable=True)

    task = relationship("LongTermTask", back_populates="sessions")

# models/completion.py

import enum
import uuid
from datetime import datetime, timezone
from sqlalchemy import (
    Column, String, Integer, Date, DateTime, ForeignKey, UniqueConstraint, Enum as SqlEnum, Uuid
)
from sqlalchemy.orm import relationship
from chorecycle.core.config import Base


class CompletionStatus(str, enum.Enum):
    started = "started"
    stopped = "stopped"
    done = "done"
    skipped = "skipped"
    blocked = "blocked"
    deferred = "deferred"


class Completion(Base):
    """
    A user's interaction with one activity on one calendar date.
    One row per (activity, user, date), mutated in place.
    """

    __tablename__ = "completions"
    __table_args__ = (
        UniqueConstraint("activity_id", "user_id", "date", name="uq_completion_day"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)
    activity_id = Column(
        Uuid(as_uuid=True), ForeignKey("activities.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id = Column(
        Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    date = Column(Date, nullable=False, index=True)

    status = Column(SqlEnum(CompletionStatus), nullable=False)
    label = Column(String(100), nullable=True)

    # ---- Timer ----
    started_at = Column(DateTime(timezone=True), nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    elapsed_ms = Column(Integer, nullable=True)

    deferred_to = Column(Date, nullable=True, index=True)

    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    activity = relationship("Activity")

# models/activity.py

import enum
import uuid
from datetime import datetime, timezone
from sqlalchemy import (
    Column, String, Text, Boolean, Integer, DateTime, ForeignKey, CheckConstraint, Uuid
)
from sqlalchemy.orm import relationship
from chorecycle.core.config import Base


class ActivityCategory(str, enum.Enum):
    home = "Home"
    brain = "Brain"
    body = "Body"
    downtime = "Downtime"


class Activity(Base):
    """
    A chore definition, owned either by one user (personal library)
    or by a family. Never both.
    """

    __tablename__ = "activities"
    __table_args__ = (
        CheckConstraint(
            "(user_id IS NULL) <> (family_id IS NULL)", name="ck_activity_single_owner"
        ),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)
    name = Column(String(100), nullable=False)
    category = Column(String(20), nullable=False, default=ActivityCategory.home.value)
    default_minutes = Column(Integer, nullable=False, default=30)
    description = Column(Text, nullable=True)

    # ---- Ownership ----
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=True, index=True)
    family_id = Column(Uuid(as_uuid=True), ForeignKey("families.id", ondelete="CASCADE"), nullable=True, index=True)

    is_rota = Column(Boolean, nullable=False, default=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    owner_user = relationship("User", back_populates="activities")
    owner_family = relationship("Family", back_populates="activities")
    schedule_entries = relationship(
        "ScheduleEntry", back_populates="activity", cascade="all, delete-orphan"
    )

    @property
    def owner_type(self) -> str:
        return "family" if self.family_id is not None else "personal"

# models/user.py

import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, String, Integer, Date, DateTime, Uuid
from sqlalchemy.orm import relationship
from chorecycle.core.config import Base, settings


class User(Base):
    __tablename__ = "users"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    display_name = Column(String(100), nullable=False)

    # ---- Personal cycle ----
    cycle_weeks = Column(Integer, nullable=False, default=settings.DEFAULT_CYCLE_WEEKS)
    cycle_start_date = Column(Date, nullable=False)

    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    # ---- Relationships ----
    memberships = relationship(
        "FamilyMember", back_populates="user", cascade="all, delete-orphan"
    )
    activities = relationship("Activity", back_populates="owner_user")

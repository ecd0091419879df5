# models/family.py

import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, String, Integer, Date, DateTime, ForeignKey, Uuid
from sqlalchemy.orm import relationship
from chorecycle.core.config import Base, settings


class Family(Base):
    __tablename__ = "families"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)
    name = Column(String(100), nullable=False)

    # ---- Rota cycle ----
    rota_cycle_weeks = Column(Integer, nullable=False, default=settings.DEFAULT_CYCLE_WEEKS)
    rota_start_date = Column(Date, nullable=False)

    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    members = relationship(
        "FamilyMember", back_populates="family", cascade="all, delete-orphan"
    )
    activities = relationship("Activity", back_populates="owner_family")


class FamilyMember(Base):
    __tablename__ = "family_members"

    family_id = Column(
        Uuid(as_uuid=True), ForeignKey("families.id", ondelete="CASCADE"), primary_key=True
    )
    user_id = Column(
        Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True, index=True
    )
    joined_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    family = relationship("Family", back_populates="members")
    user = relationship("User", back_populates="memberships")

# schemas/family.py
from datetime import date, datetime
from typing import List, Optional
from uuid import UUID
from pydantic import BaseModel, ConfigDict, Field, field_validator

from chorecycle.services.cycle import MAX_CYCLE_WEEKS

from chorecycle.schemas.user import UserRead


class FamilyMemberRead(BaseModel):
    user_id: UUID
    joined_at: Optional[datetime] = None
    user: UserRead

    model_config = ConfigDict(from_attributes=True)


class FamilyRead(BaseModel):
    id: UUID
    name: str
    rota_cycle_weeks: int
    rota_start_date: date
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class FamilyWithMembers(FamilyRead):
    members: List[FamilyMemberRead] = []


class FamilyListResponse(BaseModel):
    families: List[FamilyWithMembers]


class FamilyUpdate(BaseModel):
    name: Optional[str] = None
    rota_cycle_weeks: Optional[int] = Field(default=None, ge=1, le=MAX_CYCLE_WEEKS)
    rota_start_date: Optional[date] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            raise ValueError("Family name cannot be empty")
        return v.strip() if v else v

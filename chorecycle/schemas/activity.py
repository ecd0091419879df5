# schemas/activity.py
from datetime import datetime
from typing import Optional, Literal
from uuid import UUID
from pydantic import BaseModel, ConfigDict, Field, model_validator

from chorecycle.models.activity import ActivityCategory


class ActivityBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    category: ActivityCategory = ActivityCategory.home
    default_minutes: int = Field(default=30, ge=0)
    description: Optional[str] = None
    is_rota: bool = False


class ActivityCreate(ActivityBase):
    """Exactly one of user_id (personal library) or family_id (family activity)."""
    user_id: Optional[UUID] = None
    family_id: Optional[UUID] = None

    @model_validator(mode="after")
    def validate_owner(self):
        if self.user_id is None and self.family_id is None:
            raise ValueError(
                "Activity must have either user_id (personal library) or family_id (family activity)"
            )
        if self.user_id is not None and self.family_id is not None:
            raise ValueError("Activity cannot have both user_id and family_id")
        return self


class ActivityUpdate(BaseModel):
    """Partial update - only provided fields are written."""
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    category: Optional[ActivityCategory] = None
    default_minutes: Optional[int] = Field(default=None, ge=0)
    description: Optional[str] = None
    is_rota: Optional[bool] = None


class ActivityRead(BaseModel):
    id: UUID
    name: str
    category: str
    default_minutes: int
    description: Optional[str] = None
    user_id: Optional[UUID] = None
    family_id: Optional[UUID] = None
    is_rota: bool
    is_active: bool
    owner_type: Literal["personal", "family"]
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

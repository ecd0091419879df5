# api/routers/schedule.py
from typing import List, Optional
from uuid import UUID
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from chorecycle.core.config import get_db
from chorecycle.core.security import get_current_user
from chorecycle.models.user import User
from chorecycle.schemas.schedule import (
    ScheduleEntryRead,
    ScheduleSetRequest,
    ScheduleSetResponse,
    ScheduleToggleRequest,
    ScheduleToggleResponse,
)
from chorecycle.services.schedule import schedule_service

router = APIRouter(prefix="/schedule", tags=["Schedule"])


@router.get("", response_model=List[ScheduleEntryRead], summary="List schedule rows")
def list_schedule(
    user_id: Optional[UUID] = Query(None, description="Defaults to the caller"),
    family_id: Optional[UUID] = Query(None, description="Every row of a family"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return schedule_service.list_schedule(
        db, requesting_user=current_user, user_id=user_id, family_id=family_id
    )


@router.put("/set", response_model=ScheduleSetResponse, summary="Set who does a slot")
def set_schedule_slot(
    request: ScheduleSetRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Replace the assignment of (activity, week, day).

    - omit **user_id** to clear the slot
    - **user_id**: null to assign it to the whole family
    """
    entry = schedule_service.set_slot(db, request=request, requesting_user=current_user)
    return ScheduleSetResponse(
        cleared=entry is None,
        schedule=ScheduleEntryRead.model_validate(entry) if entry else None,
    )


@router.post("/toggle", response_model=ScheduleToggleResponse, summary="Toggle an assignment")
def toggle_schedule_slot(
    request: ScheduleToggleRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    entry = schedule_service.toggle_slot(db, request=request, requesting_user=current_user)
    return ScheduleToggleResponse(
        toggled=entry is not None,
        schedule=ScheduleEntryRead.model_validate(entry) if entry else None,
    )

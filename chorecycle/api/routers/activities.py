# api/routers/activities.py
from typing import List, Optional
from uuid import UUID
from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.orm import Session

from chorecycle.core.config import get_db
from chorecycle.core.security import get_current_user
from chorecycle.models.user import User
from chorecycle.schemas.activity import ActivityCreate, ActivityRead, ActivityUpdate
from chorecycle.schemas.common import SuccessResponse
from chorecycle.services.activities import activity_service

router = APIRouter(prefix="/activities", tags=["Activities"])


@router.get("", response_model=List[ActivityRead], summary="List active activities")
def list_activities(
    user_id: Optional[UUID] = Query(None, description="Personal library owner"),
    family_id: Optional[UUID] = Query(None, description="Family library"),
    family_members: bool = Query(False, description="With family_id: include every member's library"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return activity_service.list_activities(
        db,
        requesting_user=current_user,
        user_id=user_id,
        family_id=family_id,
        family_members=family_members,
    )


@router.post(
    "",
    response_model=ActivityRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create an activity",
)
def create_activity(
    activity_data: ActivityCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Add an activity to a personal library (**user_id**) or a family
    library (**family_id**). Exactly one of the two must be given.
    """
    return activity_service.create_activity(
        db, activity_data=activity_data, requesting_user=current_user
    )


@router.patch("/{activity_id}", response_model=ActivityRead, summary="Update an activity")
def update_activity(
    update_data: ActivityUpdate,
    activity_id: UUID = Path(..., description="Activity ID"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return activity_service.update_activity(
        db, activity_id=activity_id, update_data=update_data, requesting_user=current_user
    )


@router.delete("/{activity_id}", response_model=SuccessResponse, summary="Deactivate an activity")
def delete_activity(
    activity_id: UUID = Path(..., description="Activity ID"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Soft delete. Schedule rows are removed; past completions are kept."""
    activity_service.delete_activity(
        db, activity_id=activity_id, requesting_user=current_user
    )
    return SuccessResponse(message="Activity deactivated")

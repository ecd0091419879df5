# api/routers/long_term_tasks.py
from typing import List, Optional
from uuid import UUID
from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.orm import Session

from chorecycle.core.clock import Clock, get_clock
from chorecycle.core.config import get_db
from chorecycle.core.security import get_current_user
from chorecycle.models.user import User
from chorecycle.schemas.common import SuccessResponse
from chorecycle.schemas.long_term_task import (
    LongTermTaskCreate,
    LongTermTaskDetail,
    LongTermTaskRead,
    LongTermTaskUpdate,
)
from chorecycle.services.long_term_tasks import long_term_task_service

router = APIRouter(prefix="/long-term-tasks", tags=["Long-term tasks"])


# =====================================================================
# CRUD
# =====================================================================


@router.get("", response_model=List[LongTermTaskRead], summary="List long-term tasks")
def list_long_term_tasks(
    user_id: Optional[UUID] = Query(None, description="Family member to list for; defaults to you"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Active tasks first, newest first."""
    return long_term_task_service.list_tasks(db, requesting_user=current_user, user_id=user_id)


@router.post(
    "",
    response_model=LongTermTaskRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create a long-term task",
)
def create_long_term_task(
    task_data: LongTermTaskCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return long_term_task_service.create_task(
        db, task_data=task_data, requesting_user=current_user
    )


@router.get("/{task_id}", response_model=LongTermTaskDetail, summary="Get a task with its sessions")
def get_long_term_task(
    task_id: UUID = Path(..., description="Task ID"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    task = long_term_task_service.get_task(db, task_id=task_id, requesting_user=current_user)
    return LongTermTaskDetail.model_validate(task)


@router.patch("/{task_id}", response_model=LongTermTaskRead, summary="Update a long-term task")
def update_long_term_task(
    update_data: LongTermTaskUpdate,
    task_id: UUID = Path(..., description="Task ID"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return long_term_task_service.update_task(
        db, task_id=task_id, update_data=update_data, requesting_user=current_user
    )


@router.delete("/{task_id}", response_model=SuccessResponse, summary="Delete a long-term task")
def delete_long_term_task(
    task_id: UUID = Path(..., description="Task ID"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    long_term_task_service.delete_task(db, task_id=task_id, requesting_user=current_user)
    return SuccessResponse(message="Task deleted")


# =====================================================================
# TIMER
# =====================================================================


@router.post("/{task_id}/start", response_model=LongTermTaskRead, summary="Start a session")
def start_long_term_task(
    task_id: UUID = Path(..., description="Task ID"),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    current_user: User = Depends(get_current_user),
):
    """Starting a task that is already running leaves it unchanged."""
    return long_term_task_service.start(
        db, task_id=task_id, requesting_user=current_user, clock=clock
    )


@router.post("/{task_id}/stop", response_model=LongTermTaskRead, summary="Stop the running session")
def stop_long_term_task(
    task_id: UUID = Path(..., description="Task ID"),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    current_user: User = Depends(get_current_user),
):
    return long_term_task_service.stop(
        db, task_id=task_id, requesting_user=current_user, clock=clock
    )


@router.post("/{task_id}/complete", response_model=LongTermTaskRead, summary="Mark the task completed")
def complete_long_term_task(
    task_id: UUID = Path(..., description="Task ID"),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    current_user: User = Depends(get_current_user),
):
    """Closes a running session first; its time counts toward the total."""
    return long_term_task_service.complete(
        db, task_id=task_id, requesting_user=current_user, clock=clock
    )

# api/routers/daily.py
from typing import Optional
from uuid import UUID
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from chorecycle.core.config import get_db
from chorecycle.core.security import get_current_user
from chorecycle.models.user import User
from chorecycle.schemas.daily_task import DailyTasksResponse
from chorecycle.services.daily_tasks import daily_task_service

router = APIRouter(prefix="/daily-tasks", tags=["Daily Tasks"])


@router.get(
    "",
    response_model=DailyTasksResponse,
    summary="Tasks for a user on a date",
)
def get_daily_tasks(
    # Parsed by the service: missing or malformed dates are 400s
    date: Optional[str] = Query(None, description="ISO date, e.g. 2025-01-20"),
    user_id: Optional[UUID] = Query(None, description="Defaults to the caller"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    The merged task list for one user and date.

    - **date**: required, YYYY-MM-DD
    - **user_id**: another member of one of your families

    Tasks are sorted Home, Brain, Body, Downtime, then by name. Each carries
    the day's completion, or null when not yet started.
    """
    return daily_task_service.get_daily_tasks(
        db, target_date=date, requesting_user=current_user, user_id=user_id
    )

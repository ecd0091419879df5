# api/routers/stats.py
from typing import Optional
from uuid import UUID
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from chorecycle.core.clock import Clock, get_clock
from chorecycle.core.config import get_db
from chorecycle.core.security import get_current_user
from chorecycle.models.user import User
from chorecycle.schemas.stats import HoursResponse, LeaderboardResponse
from chorecycle.services.cycle import parse_iso_date
from chorecycle.services.stats import stats_service

router = APIRouter(prefix="/stats", tags=["Stats"])


@router.get("/hours", response_model=HoursResponse, summary="Hours spent per user and category")
def get_hours(
    start_date: Optional[str] = Query(None, description="ISO date, inclusive"),
    end_date: Optional[str] = Query(None, description="ISO date, inclusive"),
    family_id: Optional[UUID] = Query(None, description="Limit to one family"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Hours on done tasks, using tracked time where present and the
    activity's default minutes otherwise.
    """
    return stats_service.hours(
        db,
        requesting_user=current_user,
        start_date=parse_iso_date(start_date, field="start_date"),
        end_date=parse_iso_date(end_date, field="end_date"),
        family_id=family_id,
    )


@router.get(
    "/leaderboard",
    response_model=LeaderboardResponse,
    summary="Monthly done/scheduled ratio per user",
)
def get_leaderboard(
    month: Optional[str] = Query(None, description="YYYY-MM"),
    family_id: Optional[UUID] = Query(None, description="Limit to one family"),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    current_user: User = Depends(get_current_user),
):
    """Rank users by done tasks over scheduled tasks; days after today are not counted."""
    return stats_service.leaderboard(
        db,
        requesting_user=current_user,
        month=month,
        today=clock.today(),
        family_id=family_id,
    )

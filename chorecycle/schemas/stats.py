# schemas/stats.py
from datetime import date
from typing import List
from uuid import UUID
from pydantic import BaseModel


class CategoryHours(BaseModel):
    category: str
    hours: float
    percentage: int


class UserHours(BaseModel):
    user_id: UUID
    display_name: str
    done: int
    total_hours: float
    hours_per_day: float
    by_category: List[CategoryHours]


class HoursResponse(BaseModel):
    start_date: date
    end_date: date
    days: int
    breakdown: List[UserHours]


class LeaderboardEntry(BaseModel):
    user_id: UUID
    display_name: str
    done: int
    total: int
    ratio: float


class LeaderboardResponse(BaseModel):
    month: str
    stats: List[LeaderboardEntry]

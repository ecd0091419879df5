# services/stats.py
from collections import defaultdict
from datetime import date, timedelta
from typing import Optional, List, Dict, Tuple
from uuid import UUID
from sqlalchemy.orm import Session

from chorecycle.core.exceptions import ValidationError, translate_store_errors
from chorecycle.crud.completion import crud_completion
from chorecycle.crud.family import crud_family
from chorecycle.crud.schedule import crud_schedule
from chorecycle.models.activity import ActivityCategory
from chorecycle.models.user import User
from chorecycle.schemas.stats import (
    CategoryHours,
    HoursResponse,
    LeaderboardEntry,
    LeaderboardResponse,
    UserHours,
)
from chorecycle.services.cycle import PERSONAL_WEEK, day_of_week, parse_month, rota_cycle, week_of_cycle
from chorecycle.services.family import family_service
from chorecycle.services.time_accounting import total_minutes


class StatsService:
    """Time spent on done tasks per user and category, and the monthly leaderboard."""

    def _users_in_scope(
        self, db: Session, *, requesting_user: User, family_id: Optional[UUID]
    ) -> List[User]:
        if family_id is not None:
            family_service.get_family_for_member(
                db, family_id=family_id, requesting_user=requesting_user
            )
            return [m.user for m in crud_family.list_members(db, family_id=family_id)]

        users: Dict[UUID, User] = {requesting_user.id: requesting_user}
        for membership in crud_family.list_memberships(db, user_id=requesting_user.id):
            for member in crud_family.list_members(db, family_id=membership.family_id):
                users.setdefault(member.user_id, member.user)
        return list(users.values())

    @translate_store_errors
    def hours(
        self,
        db: Session,
        *,
        requesting_user: User,
        start_date: date,
        end_date: date,
        family_id: Optional[UUID] = None,
    ) -> HoursResponse:
        """
        Hours spent on done completions in [start_date, end_date].

        Each completion counts its tracked time, or its activity's default
        minutes when nothing was tracked.
        """
        if end_date < start_date:
            raise ValidationError("end_date must not be before start_date")

        users = self._users_in_scope(db, requesting_user=requesting_user, family_id=family_id)
        completions = crud_completion.list_done_between(
            db, user_ids=[u.id for u in users], start_date=start_date, end_date=end_date
        )

        # user -> category -> [(elapsed_ms, default_minutes)]
        durations: Dict[UUID, Dict[str, List[Tuple[Optional[int], int]]]] = defaultdict(
            lambda: defaultdict(list)
        )
        for completion in completions:
            activity = completion.activity
            durations[completion.user_id][activity.category].append(
                (completion.elapsed_ms, activity.default_minutes)
            )

        days = (end_date - start_date).days + 1
        categories = [c.value for c in ActivityCategory]

        breakdown = []
        for user in users:
            by_category = {
                category: total_minutes(items)
                for category, items in durations[user.id].items()
            }
            total = sum(by_category.values())
            breakdown.append(
                UserHours(
                    user_id=user.id,
                    display_name=user.display_name,
                    done=sum(len(items) for items in durations[user.id].values()),
                    total_hours=round(total / 60, 1),
                    hours_per_day=round(total / 60 / days, 1),
                    by_category=[
                        CategoryHours(
                            category=category,
                            hours=round(by_category.get(category, 0.0) / 60, 1),
                            percentage=(
                                round(by_category.get(category, 0.0) / total * 100) if total else 0
                            ),
                        )
                        for category in categories
                    ],
                )
            )

        return HoursResponse(
            start_date=start_date, end_date=end_date, days=days, breakdown=breakdown
        )

    @translate_store_errors
    def leaderboard(
        self,
        db: Session,
        *,
        requesting_user: User,
        month: Optional[str],
        today: date,
        family_id: Optional[UUID] = None,
    ) -> LeaderboardResponse:
        """
        Done versus scheduled tasks per user for a YYYY-MM month.

        Scheduled counts each day of the month up to today: the user's
        personal rows plus their rota rows for that day's week of cycle.
        Entries are sorted by done/total, best first.
        """
        first, last = parse_month(month)
        users = self._users_in_scope(db, requesting_user=requesting_user, family_id=family_id)
        if not users:
            return LeaderboardResponse(month=month, stats=[])

        rows_by_user: Dict[UUID, List] = defaultdict(list)
        for row in crud_schedule.list_for_users(db, user_ids=[u.id for u in users]):
            rows_by_user[row.user_id].append(row)

        end = min(last, today)
        entries = []
        for user in users:
            cycle = rota_cycle(user, crud_family.list_memberships(db, user_id=user.id))
            total = 0
            current = first
            while current <= end:
                rota_week = week_of_cycle(current, *cycle)
                weekday = day_of_week(current)
                total += sum(
                    1
                    for row in rows_by_user[user.id]
                    if row.day_of_week == weekday
                    and row.week_of_cycle == (rota_week if row.activity.is_rota else PERSONAL_WEEK)
                )
                current += timedelta(days=1)

            done = len(
                crud_completion.list_done_between(
                    db, user_ids=[user.id], start_date=first, end_date=last
                )
            )
            entries.append(
                LeaderboardEntry(
                    user_id=user.id,
                    display_name=user.display_name,
                    done=done,
                    total=total,
                    ratio=done / total if total else 0.0,
                )
            )

        entries.sort(key=lambda e: e.ratio, reverse=True)
        return LeaderboardResponse(month=month, stats=entries)


stats_service = StatsService()

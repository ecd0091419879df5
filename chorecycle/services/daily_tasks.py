# services/daily_tasks.py
"""
Daily task assembly.

A user's day is the union of three schedule sources plus completions that
were not scheduled:

1. personal rows   - assigned to the user, non-rota activity, always week 1
2. rota rows       - assigned to the user, rota activity, primary family week
3. family-wide     - unassigned rows of each family the user belongs to,
                     each family resolved with its own rota cycle
4. deferred        - completions deferred to this date, shown fresh
5. ad-hoc          - completions recorded today for unscheduled activities

Sources are consumed in that order in a single pass over one "seen
activity ids" set: the first source to claim an activity wins, so
user-specific rows take precedence over family-wide ones.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional, Union
from uuid import UUID
from sqlalchemy.orm import Session

from chorecycle.core.exceptions import translate_store_errors
from chorecycle.crud.completion import crud_completion
from chorecycle.crud.family import crud_family
from chorecycle.crud.schedule import crud_schedule
from chorecycle.models.activity import Activity, ActivityCategory
from chorecycle.models.completion import Completion, CompletionStatus
from chorecycle.models.schedule import EVERYONE, Assignee, ScheduleEntry
from chorecycle.models.user import User
from chorecycle.schemas.activity import ActivityRead
from chorecycle.schemas.completion import CompletionRead
from chorecycle.schemas.daily_task import DailyTask, DailyTasksResponse
from chorecycle.schemas.user import UserRead
from chorecycle.services.cycle import (
    PERSONAL_WEEK,
    day_of_week,
    parse_iso_date,
    rota_cycle,
    week_of_cycle,
)
from chorecycle.services.family import family_service

logger = logging.getLogger(__name__)


CATEGORY_ORDER: List[str] = [c.value for c in ActivityCategory]


# =====================================================================
# PURE MERGE
# =====================================================================


@dataclass
class TaskSources:
    """Everything fetched from the store for one (user, date)."""

    personal: List[ScheduleEntry] = field(default_factory=list)
    rota: List[ScheduleEntry] = field(default_factory=list)
    family_wide: List[ScheduleEntry] = field(default_factory=list)
    completions: List[Completion] = field(default_factory=list)
    deferred: List[Completion] = field(default_factory=list)


@dataclass
class AssembledTask:
    activity: Activity
    completion: Optional[Completion] = None
    # assignee of the schedule row that claimed the activity; None when unscheduled
    assignee: Optional[Assignee] = None
    is_deferred: bool = False
    is_ad_hoc: bool = False


def category_rank(category: Union[str, ActivityCategory]) -> int:
    """Position in Home, Brain, Body, Downtime; anything else sorts last."""
    value = category.value if isinstance(category, ActivityCategory) else category
    try:
        return CATEGORY_ORDER.index(value)
    except ValueError:
        return len(CATEGORY_ORDER)


def sort_key(task: AssembledTask):
    return (category_rank(task.activity.category), task.activity.name.casefold())


def merge_daily_tasks(sources: TaskSources) -> List[AssembledTask]:
    """
    Merge schedule rows and completions into one deduplicated, ordered list.

    Rows need `activity` and `assignee`; completions need `activity`,
    `activity_id` and `status`. Never returns two tasks for the same activity id.
    """
    completions_by_activity: Dict[UUID, Completion] = {
        c.activity_id: c for c in sources.completions
    }

    seen: set = set()
    tasks: List[AssembledTask] = []

    for row in [*sources.personal, *sources.rota, *sources.family_wide]:
        activity = row.activity
        if activity.id in seen:
            continue
        seen.add(activity.id)
        tasks.append(
            AssembledTask(
                activity=activity,
                completion=completions_by_activity.get(activity.id),
                assignee=row.assignee,
            )
        )

    # Shown fresh; a completion already recorded for today replaces it.
    for deferred in sources.deferred:
        if deferred.status != CompletionStatus.deferred:
            continue
        if deferred.activity_id in seen or deferred.activity_id in completions_by_activity:
            continue
        seen.add(deferred.activity_id)
        tasks.append(AssembledTask(activity=deferred.activity, is_deferred=True))

    for completion in sources.completions:
        if completion.status == CompletionStatus.deferred:
            continue
        if completion.activity_id in seen:
            continue
        seen.add(completion.activity_id)
        tasks.append(
            AssembledTask(activity=completion.activity, completion=completion, is_ad_hoc=True)
        )

    return sorted(tasks, key=sort_key)


# =====================================================================
# SERVICE
# =====================================================================


class DailyTaskService:
    """Resolves cycles and fetches the sources for a user's day."""

    @translate_store_errors
    def get_daily_tasks(
        self,
        db: Session,
        *,
        target_date: Union[str, date, None],
        requesting_user: User,
        user_id: Optional[UUID] = None,
    ) -> DailyTasksResponse:
        """
        Assemble the task list for a user and date.

        Args:
            db: Database session
            target_date: ISO date (validated before any store access)
            requesting_user: Authenticated caller
            user_id: Whose tasks to show (default: caller)

        Raises:
            ValidationError: If the date is missing or malformed
            NotFoundError: If user_id does not exist
            AuthorizationError: If the caller shares no family with user_id
            StoreError: If any read fails; no partial list is returned
        """
        on_date = parse_iso_date(target_date)

        user = family_service.resolve_target_user(
            db, requesting_user=requesting_user, user_id=user_id
        )
        sources, week, today = self.fetch_sources(db, user=user, on_date=on_date)
        tasks = merge_daily_tasks(sources)

        logger.debug(
            "Daily tasks for %s on %s: week %d day %d, %d tasks",
            user.id, on_date, week, today, len(tasks),
        )

        user_read = UserRead.model_validate(user)
        return DailyTasksResponse(
            date=on_date,
            week_of_cycle=week,
            day_of_week=today,
            tasks=[
                DailyTask(
                    activity=ActivityRead.model_validate(t.activity),
                    user=user_read,
                    completion=(
                        CompletionRead.model_validate(t.completion) if t.completion else None
                    ),
                    is_deferred=t.is_deferred,
                    is_ad_hoc=t.is_ad_hoc,
                    is_family_wide=t.assignee is EVERYONE,
                )
                for t in tasks
            ],
        )

    def fetch_sources(self, db: Session, *, user: User, on_date: date):
        """
        Read every source for (user, on_date).

        Returns:
            (TaskSources, primary week_of_cycle, day_of_week)
        """
        today = day_of_week(on_date)
        memberships = crud_family.list_memberships(db, user_id=user.id)

        family_weeks = [
            (
                m.family,
                week_of_cycle(on_date, m.family.rota_start_date, m.family.rota_cycle_weeks),
            )
            for m in memberships
        ]

        # The envelope reports the primary (first-joined) family's week only,
        # even for users in several families with different cycles.
        primary_week = week_of_cycle(on_date, *rota_cycle(user, memberships))

        sources = TaskSources()
        sources.personal = crud_schedule.rows_for_user(
            db, user_id=user.id, week_of_cycle=PERSONAL_WEEK, day_of_week=today, is_rota=False
        )
        sources.rota = crud_schedule.rows_for_user(
            db, user_id=user.id, week_of_cycle=primary_week, day_of_week=today, is_rota=True
        )
        for family, family_week in family_weeks:
            sources.family_wide.extend(
                crud_schedule.family_wide_rows(
                    db, family_id=family.id, week_of_cycle=family_week, day_of_week=today
                )
            )
        sources.completions = crud_completion.list_for_date(db, user_id=user.id, on_date=on_date)
        sources.deferred = crud_completion.list_deferred_to(db, user_id=user.id, on_date=on_date)

        return sources, primary_week, today


daily_task_service = DailyTaskService()

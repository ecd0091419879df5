# services/schedule.py
import logging
from typing import Optional, List
from uuid import UUID
from sqlalchemy.orm import Session

from chorecycle.core.exceptions import NotFoundError, ValidationError, translate_store_errors
from chorecycle.crud.schedule import crud_schedule
from chorecycle.crud.user import crud_user
from chorecycle.models.schedule import ScheduleEntry, AssignedUser, EVERYONE, Assignee
from chorecycle.models.user import User
from chorecycle.schemas.schedule import ScheduleSetRequest, ScheduleToggleRequest
from chorecycle.services.activities import activity_service
from chorecycle.services.family import family_service

logger = logging.getLogger(__name__)


class ScheduleService:
    """Schedule rows: who does which activity in which (week, day) slot."""

    def __init__(self):
        self.crud = crud_schedule

    def _assignee(
        self, db: Session, *, activity, user_id: Optional[UUID], requesting_user: User
    ) -> Assignee:
        if user_id is None:
            if activity.family_id is None:
                raise ValidationError("Only family activities can be assigned to everyone")
            return EVERYONE

        if crud_user.get(db, id=user_id) is None:
            raise NotFoundError(f"User {user_id} not found")
        family_service.ensure_same_family(
            db, requesting_user=requesting_user, owner_user_id=user_id
        )
        return AssignedUser(user_id)

    @translate_store_errors
    def list_schedule(
        self,
        db: Session,
        *,
        requesting_user: User,
        user_id: Optional[UUID] = None,
        family_id: Optional[UUID] = None,
    ) -> List[ScheduleEntry]:
        """A family's rows (members and everyone), or one user's rows (default: caller)."""
        if family_id is not None:
            family_service.get_family_for_member(
                db, family_id=family_id, requesting_user=requesting_user
            )
            member_ids = family_service.member_ids(db, family_id=family_id)
            return self.crud.list_for_family(db, family_id=family_id, member_ids=member_ids)

        target = family_service.resolve_target_user(
            db, requesting_user=requesting_user, user_id=user_id
        )
        return self.crud.list_for_user(db, user_id=target.id)

    @translate_store_errors
    def set_slot(
        self, db: Session, *, request: ScheduleSetRequest, requesting_user: User
    ) -> Optional[ScheduleEntry]:
        """
        Replace the assignment of an (activity, week, day) slot.

        `user_id` left out of the request clears the slot; an explicit null
        assigns it to everyone in the owning family.
        """
        activity = activity_service.get_accessible(
            db, activity_id=request.activity_id, requesting_user=requesting_user
        )

        assignee = None
        if "user_id" in request.model_fields_set:
            assignee = self._assignee(
                db, activity=activity, user_id=request.user_id, requesting_user=requesting_user
            )

        entry = self.crud.set_slot(
            db,
            activity_id=activity.id,
            week_of_cycle=request.week_of_cycle,
            day_of_week=request.day_of_week,
            assignee=assignee,
        )
        logger.info(
            "Schedule slot %s week %d day %d set to %r",
            activity.id, request.week_of_cycle, request.day_of_week, assignee,
        )
        return entry

    @translate_store_errors
    def toggle_slot(
        self, db: Session, *, request: ScheduleToggleRequest, requesting_user: User
    ) -> Optional[ScheduleEntry]:
        """Toggle one assignment on or off. Returns the created row, or None when removed."""
        activity = activity_service.get_accessible(
            db, activity_id=request.activity_id, requesting_user=requesting_user
        )
        assignee = self._assignee(
            db, activity=activity, user_id=request.user_id, requesting_user=requesting_user
        )
        return self.crud.toggle(
            db,
            activity_id=activity.id,
            week_of_cycle=request.week_of_cycle,
            day_of_week=request.day_of_week,
            assignee=assignee,
        )


schedule_service = ScheduleService()

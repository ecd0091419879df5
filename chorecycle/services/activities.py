# services/activities.py
import logging
from typing import Optional, List
from uuid import UUID
from sqlalchemy.orm import Session

from chorecycle.core.exceptions import NotFoundError, ValidationError, translate_store_errors
from chorecycle.crud.activity import crud_activity
from chorecycle.models.activity import Activity
from chorecycle.models.user import User
from chorecycle.schemas.activity import ActivityCreate, ActivityUpdate
from chorecycle.services.family import family_service

logger = logging.getLogger(__name__)


class ActivityService:
    """Personal and family activity libraries."""

    def __init__(self):
        self.crud = crud_activity

    # =====================================================================
    # PERMISSION HELPERS
    # =====================================================================

    def _check_owner_access(
        self,
        db: Session,
        *,
        requesting_user: User,
        user_id: Optional[UUID],
        family_id: Optional[UUID],
    ) -> None:
        """Personal libraries are open to family mates; family libraries to members."""
        if family_id is not None:
            family_service.get_family_for_member(
                db, family_id=family_id, requesting_user=requesting_user
            )
        elif user_id is not None:
            family_service.resolve_target_user(
                db, requesting_user=requesting_user, user_id=user_id
            )

    @translate_store_errors
    def get_accessible(self, db: Session, *, activity_id: UUID, requesting_user: User) -> Activity:
        activity = self.crud.get(db, id=activity_id)
        if activity is None:
            raise NotFoundError(f"Activity {activity_id} not found")
        self._check_owner_access(
            db,
            requesting_user=requesting_user,
            user_id=activity.user_id,
            family_id=activity.family_id,
        )
        return activity

    # =====================================================================
    # OPERATIONS
    # =====================================================================

    @translate_store_errors
    def list_activities(
        self,
        db: Session,
        *,
        requesting_user: User,
        user_id: Optional[UUID] = None,
        family_id: Optional[UUID] = None,
        family_members: bool = False,
    ) -> List[Activity]:
        """
        Active activities.

        - family_id + family_members: every member's library plus the family's
        - family_id: the family library only
        - user_id: that user's library (default: caller)
        """
        if family_id is not None:
            family_service.get_family_for_member(
                db, family_id=family_id, requesting_user=requesting_user
            )
            member_ids = (
                family_service.member_ids(db, family_id=family_id) if family_members else None
            )
            return self.crud.list_active(db, user_ids=member_ids, family_id=family_id)

        target = family_service.resolve_target_user(
            db, requesting_user=requesting_user, user_id=user_id
        )
        return self.crud.list_active(db, user_ids=[target.id])

    @translate_store_errors
    def create_activity(
        self, db: Session, *, activity_data: ActivityCreate, requesting_user: User
    ) -> Activity:
        self._check_owner_access(
            db,
            requesting_user=requesting_user,
            user_id=activity_data.user_id,
            family_id=activity_data.family_id,
        )
        activity = self.crud.create(db, obj_in=activity_data)
        logger.info("Activity %s '%s' created (%s)", activity.id, activity.name, activity.owner_type)
        return activity

    @translate_store_errors
    def update_activity(
        self,
        db: Session,
        *,
        activity_id: UUID,
        update_data: ActivityUpdate,
        requesting_user: User,
    ) -> Activity:
        activity = self.get_accessible(
            db, activity_id=activity_id, requesting_user=requesting_user
        )
        if not update_data.model_dump(exclude_unset=True, exclude_none=True):
            raise ValidationError("No valid updates provided")
        return self.crud.update(db, db_obj=activity, obj_in=update_data)

    @translate_store_errors
    def delete_activity(self, db: Session, *, activity_id: UUID, requesting_user: User) -> Activity:
        """Soft delete; completions are kept for history."""
        activity = self.get_accessible(
            db, activity_id=activity_id, requesting_user=requesting_user
        )
        activity = self.crud.deactivate(db, db_obj=activity)
        logger.info("Activity %s deactivated", activity.id)
        return activity


activity_service = ActivityService()

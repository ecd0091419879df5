# crud/activity.py
from typing import Optional, List
from uuid import UUID
from sqlalchemy import or_
from sqlalchemy.orm import Session

from chorecycle.crud.base import db_operation
from chorecycle.models.activity import Activity
from chorecycle.models.schedule import ScheduleEntry
from chorecycle.schemas.activity import ActivityCreate, ActivityUpdate


class CRUDActivity:
    """CRUD operations for Activity model."""

    # =====================================================================
    # CREATE OPERATIONS
    # =====================================================================

    @db_operation
    def create(self, db: Session, *, obj_in: ActivityCreate) -> Activity:
        """Create an activity in a personal or family library."""
        obj_data = obj_in.model_dump()
        obj_data["category"] = obj_in.category.value

        db_obj = Activity(**obj_data, is_active=True)

        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj

    # =====================================================================
    # READ OPERATIONS
    # =====================================================================

    @db_operation
    def get(self, db: Session, id: UUID) -> Optional[Activity]:
        """Get activity by ID."""
        return db.query(Activity).filter(Activity.id == id).first()

    @db_operation
    def list_active(
        self,
        db: Session,
        *,
        user_ids: Optional[List[UUID]] = None,
        family_id: Optional[UUID] = None,
    ) -> List[Activity]:
        """
        Active activities owned by any of user_ids or by family_id.

        Ordered by category then name.
        """
        owners = []
        if user_ids:
            owners.append(Activity.user_id.in_(user_ids))
        if family_id is not None:
            owners.append(Activity.family_id == family_id)

        query = db.query(Activity).filter(Activity.is_active.is_(True))
        if owners:
            query = query.filter(or_(*owners))
        return query.order_by(Activity.category, Activity.name).all()

    # =====================================================================
    # UPDATE OPERATIONS
    # =====================================================================

    @db_operation
    def update(
        self, db: Session, *, db_obj: Activity, obj_in: ActivityUpdate
    ) -> Activity:
        """Update only the provided fields."""
        update_data = obj_in.model_dump(exclude_unset=True)

        for field, value in update_data.items():
            if value is None:
                continue
            if field == "category":
                value = value.value
            setattr(db_obj, field, value)

        db.commit()
        db.refresh(db_obj)
        return db_obj

    # =====================================================================
    # DELETE OPERATIONS
    # =====================================================================

    @db_operation
    def deactivate(self, db: Session, *, db_obj: Activity) -> Activity:
        """Soft delete: drop its schedule rows and mark inactive, in one commit."""
        db.query(ScheduleEntry).filter(
            ScheduleEntry.activity_id == db_obj.id
        ).delete(synchronize_session=False)
        db_obj.is_active = False

        db.commit()
        db.refresh(db_obj)
        return db_obj


crud_activity = CRUDActivity()

# crud/schedule.py
from typing import Optional, List
from uuid import UUID
from sqlalchemy import and_, or_
from sqlalchemy.orm import Session, contains_eager

from chorecycle.crud.base import db_operation
from chorecycle.models.activity import Activity
from chorecycle.models.schedule import ScheduleEntry, Assignee, EVERYONE


class CRUDSchedule:
    """CRUD operations for ScheduleEntry model."""

    def _active_rows(self, db: Session):
        return (
            db.query(ScheduleEntry)
            .join(ScheduleEntry.activity)
            .options(contains_eager(ScheduleEntry.activity))
            .filter(Activity.is_active.is_(True))
        )

    # =====================================================================
    # DAILY RESOLUTION QUERIES
    # =====================================================================

    @db_operation
    def rows_for_user(
        self,
        db: Session,
        *,
        user_id: UUID,
        week_of_cycle: int,
        day_of_week: int,
        is_rota: bool,
    ) -> List[ScheduleEntry]:
        """Rows assigned to one user for a slot, limited to rota or non-rota activities."""
        return (
            self._active_rows(db)
            .filter(
                ScheduleEntry.user_id == user_id,
                ScheduleEntry.week_of_cycle == week_of_cycle,
                ScheduleEntry.day_of_week == day_of_week,
                Activity.is_rota.is_(is_rota),
            )
            .order_by(Activity.name)
            .all()
        )

    @db_operation
    def family_wide_rows(
        self, db: Session, *, family_id: UUID, week_of_cycle: int, day_of_week: int
    ) -> List[ScheduleEntry]:
        """Everyone-rows for a slot whose activity belongs to the family."""
        return (
            self._active_rows(db)
            .filter(
                ScheduleEntry.user_id.is_(None),
                ScheduleEntry.week_of_cycle == week_of_cycle,
                ScheduleEntry.day_of_week == day_of_week,
                Activity.family_id == family_id,
            )
            .order_by(Activity.name)
            .all()
        )

    # =====================================================================
    # LISTING
    # =====================================================================

    @db_operation
    def list_for_user(self, db: Session, *, user_id: UUID) -> List[ScheduleEntry]:
        return (
            self._active_rows(db)
            .filter(ScheduleEntry.user_id == user_id)
            .order_by(ScheduleEntry.week_of_cycle, ScheduleEntry.day_of_week)
            .all()
        )

    @db_operation
    def list_for_users(self, db: Session, *, user_ids: List[UUID]) -> List[ScheduleEntry]:
        """Rows assigned to any of the given users, activity loaded."""
        if not user_ids:
            return []
        return (
            self._active_rows(db)
            .filter(ScheduleEntry.user_id.in_(user_ids))
            .order_by(ScheduleEntry.week_of_cycle, ScheduleEntry.day_of_week)
            .all()
        )

    @db_operation
    def list_for_family(
        self, db: Session, *, family_id: UUID, member_ids: List[UUID]
    ) -> List[ScheduleEntry]:
        """Member rows and family-wide rows for activities owned by the family or its members."""
        return (
            self._active_rows(db)
            .filter(
                or_(
                    ScheduleEntry.user_id.in_(member_ids),
                    and_(ScheduleEntry.user_id.is_(None), Activity.family_id == family_id),
                ),
                or_(Activity.user_id.in_(member_ids), Activity.family_id == family_id),
            )
            .order_by(ScheduleEntry.week_of_cycle, ScheduleEntry.day_of_week)
            .all()
        )

    # =====================================================================
    # WRITES
    # =====================================================================

    @db_operation
    def set_slot(
        self,
        db: Session,
        *,
        activity_id: UUID,
        week_of_cycle: int,
        day_of_week: int,
        assignee: Optional[Assignee],
    ) -> Optional[ScheduleEntry]:
        """
        Replace every assignment of (activity, week, day) with `assignee`.

        assignee None only clears the slot. Delete and insert share one commit.
        """
        db.query(ScheduleEntry).filter(
            ScheduleEntry.activity_id == activity_id,
            ScheduleEntry.week_of_cycle == week_of_cycle,
            ScheduleEntry.day_of_week == day_of_week,
        ).delete(synchronize_session=False)

        db_obj = None
        if assignee is not None:
            db_obj = ScheduleEntry(
                activity_id=activity_id,
                week_of_cycle=week_of_cycle,
                day_of_week=day_of_week,
            )
            db_obj.assignee = assignee
            db.add(db_obj)

        db.commit()
        if db_obj is not None:
            db.refresh(db_obj)
        return db_obj

    @db_operation
    def toggle(
        self,
        db: Session,
        *,
        activity_id: UUID,
        week_of_cycle: int,
        day_of_week: int,
        assignee: Assignee,
    ) -> Optional[ScheduleEntry]:
        """Add the assignment if missing, remove it if present. Returns the new row or None."""
        query = db.query(ScheduleEntry).filter(
            ScheduleEntry.activity_id == activity_id,
            ScheduleEntry.week_of_cycle == week_of_cycle,
            ScheduleEntry.day_of_week == day_of_week,
        )
        if assignee is EVERYONE:
            query = query.filter(ScheduleEntry.user_id.is_(None))
        else:
            query = query.filter(ScheduleEntry.user_id == assignee.user_id)

        existing = query.first()
        if existing:
            db.delete(existing)
            db.commit()
            return None

        db_obj = ScheduleEntry(
            activity_id=activity_id,
            week_of_cycle=week_of_cycle,
            day_of_week=day_of_week,
        )
        db_obj.assignee = assignee
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj


crud_schedule = CRUDSchedule()

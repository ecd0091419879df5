# crud/long_term_task.py
from datetime import datetime
from typing import Optional, List, Dict, Any
from uuid import UUID
from sqlalchemy.orm import Session

from chorecycle.crud.base import db_operation
from chorecycle.models.long_term_task import LongTermTask, LongTermTaskSession, LongTermTaskStatus
from chorecycle.schemas.long_term_task import LongTermTaskCreate, LongTermTaskUpdate


class CRUDLongTermTask:
    """CRUD operations for LongTermTask and its sessions."""

    # =====================================================================
    # CREATE OPERATIONS
    # =====================================================================

    @db_operation
    def create(self, db: Session, *, obj_in: LongTermTaskCreate, user_id: UUID) -> LongTermTask:
        obj_data = obj_in.model_dump(exclude={"user_id"})
        obj_data["category"] = obj_in.category.value

        db_obj = LongTermTask(
            **obj_data,
            user_id=user_id,
            status=LongTermTaskStatus.active,
            elapsed_ms=0,
        )
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj

    # =====================================================================
    # READ OPERATIONS
    # =====================================================================

    @db_operation
    def get(self, db: Session, id: UUID) -> Optional[LongTermTask]:
        """Get long-term task by ID."""
        return db.query(LongTermTask).filter(LongTermTask.id == id).first()

    @db_operation
    def list_for_user(self, db: Session, *, user_id: UUID) -> List[LongTermTask]:
        """A user's tasks, active ones first, newest first within each status."""
        return (
            db.query(LongTermTask)
            .filter(LongTermTask.user_id == user_id)
            .order_by(LongTermTask.status, LongTermTask.created_at.desc())
            .all()
        )

    # =====================================================================
    # UPDATE OPERATIONS
    # =====================================================================

    @db_operation
    def update(
        self, db: Session, *, db_obj: LongTermTask, obj_in: LongTermTaskUpdate
    ) -> LongTermTask:
        """Update only the provided fields; an explicit null clears due_date or estimate."""
        update_data = obj_in.model_dump(exclude_unset=True)

        for field, value in update_data.items():
            if value is None and field in ("title", "category"):
                continue
            if field == "category" and value is not None:
                value = value.value
            setattr(db_obj, field, value)

        db.commit()
        db.refresh(db_obj)
        return db_obj

    @db_operation
    def save_timer(
        self,
        db: Session,
        *,
        db_obj: LongTermTask,
        values: Dict[str, Any],
        open_session_at: Optional[datetime] = None,
        close_session_at: Optional[datetime] = None,
        closed_minutes: Optional[int] = None,
    ) -> LongTermTask:
        """
        Write the task's timer fields and its session rows in one commit.

        close_session_at ends any open session; open_session_at starts a new one.
        """
        if close_session_at is not None:
            db.query(LongTermTaskSession).filter(
                LongTermTaskSession.task_id == db_obj.id,
                LongTermTaskSession.ended_at.is_(None),
            ).update(
                {"ended_at": close_session_at, "duration_minutes": closed_minutes},
                synchronize_session=False,
            )

        if open_session_at is not None:
            db.add(LongTermTaskSession(task_id=db_obj.id, started_at=open_session_at))

        for field, value in values.items():
            setattr(db_obj, field, value)

        db.commit()
        db.refresh(db_obj)
        return db_obj

    # =====================================================================
    # DELETE OPERATIONS
    # =====================================================================

    @db_operation
    def delete(self, db: Session, *, db_obj: LongTermTask) -> LongTermTask:
        db.delete(db_obj)
        db.commit()
        return db_obj


crud_long_term_task = CRUDLongTermTask()

# crud/completion.py
from datetime import date
from typing import Optional, List, Dict, Any
from uuid import UUID
from sqlalchemy.orm import Session, joinedload

from chorecycle.crud.base import db_operation
from chorecycle.models.completion import Completion, CompletionStatus


class CRUDCompletion:
    """CRUD operations for Completion model."""

    # =====================================================================
    # READ OPERATIONS
    # =====================================================================

    @db_operation
    def get(self, db: Session, id: UUID) -> Optional[Completion]:
        """Get completion by ID."""
        return db.query(Completion).filter(Completion.id == id).first()

    @db_operation
    def get_for_day(
        self, db: Session, *, activity_id: UUID, user_id: UUID, on_date: date
    ) -> Optional[Completion]:
        """The single completion for (activity, user, date), if any."""
        return (
            db.query(Completion)
            .filter(
                Completion.activity_id == activity_id,
                Completion.user_id == user_id,
                Completion.date == on_date,
            )
            .first()
        )

    @db_operation
    def get_deferred_to(
        self, db: Session, *, activity_id: UUID, user_id: UUID, on_date: date
    ) -> Optional[Completion]:
        """Oldest deferred completion of the activity pointing at on_date."""
        return (
            db.query(Completion)
            .filter(
                Completion.activity_id == activity_id,
                Completion.user_id == user_id,
                Completion.deferred_to == on_date,
                Completion.status == CompletionStatus.deferred,
            )
            .order_by(Completion.date)
            .first()
        )

    @db_operation
    def list_for_date(self, db: Session, *, user_id: UUID, on_date: date) -> List[Completion]:
        """Every completion the user has recorded on a date, activity loaded."""
        return (
            db.query(Completion)
            .options(joinedload(Completion.activity))
            .filter(Completion.user_id == user_id, Completion.date == on_date)
            .order_by(Completion.created_at)
            .all()
        )

    @db_operation
    def list_deferred_to(self, db: Session, *, user_id: UUID, on_date: date) -> List[Completion]:
        """Deferred completions due to reappear on a date, activity loaded."""
        return (
            db.query(Completion)
            .options(joinedload(Completion.activity))
            .filter(
                Completion.user_id == user_id,
                Completion.deferred_to == on_date,
                Completion.status == CompletionStatus.deferred,
            )
            .order_by(Completion.date)
            .all()
        )

    @db_operation
    def list_done_between(
        self, db: Session, *, user_ids: List[UUID], start_date: date, end_date: date
    ) -> List[Completion]:
        """Done completions of the given users in [start_date, end_date]."""
        if not user_ids:
            return []
        return (
            db.query(Completion)
            .options(joinedload(Completion.activity))
            .filter(
                Completion.user_id.in_(user_ids),
                Completion.date >= start_date,
                Completion.date <= end_date,
                Completion.status == CompletionStatus.done,
            )
            .all()
        )

    # =====================================================================
    # WRITE OPERATIONS
    # =====================================================================

    @db_operation
    def create(self, db: Session, *, values: Dict[str, Any]) -> Completion:
        db_obj = Completion(**values)
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj

    @db_operation
    def update(self, db: Session, *, db_obj: Completion, values: Dict[str, Any]) -> Completion:
        for field, value in values.items():
            setattr(db_obj, field, value)
        db.commit()
        db.refresh(db_obj)
        return db_obj

    @db_operation
    def delete(self, db: Session, *, db_obj: Completion) -> Completion:
        db.delete(db_obj)
        db.commit()
        return db_obj


crud_completion = CRUDCompletion()

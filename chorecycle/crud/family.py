# crud/family.py
from typing import Optional, List, Set
from uuid import UUID
from sqlalchemy.orm import Session, joinedload

from chorecycle.crud.base import db_operation
from chorecycle.models.family import Family, FamilyMember
from chorecycle.schemas.family import FamilyUpdate


class CRUDFamily:
    """CRUD operations for Family and FamilyMember models."""

    # =====================================================================
    # READ OPERATIONS
    # =====================================================================

    @db_operation
    def get(self, db: Session, id: UUID) -> Optional[Family]:
        """Get family by ID."""
        return db.query(Family).filter(Family.id == id).first()

    @db_operation
    def list_memberships(self, db: Session, *, user_id: UUID) -> List[FamilyMember]:
        """
        All memberships of a user with their family loaded.

        Ordered by join time, so the first entry is the primary family.
        """
        return (
            db.query(FamilyMember)
            .options(joinedload(FamilyMember.family))
            .filter(FamilyMember.user_id == user_id)
            .order_by(FamilyMember.joined_at, FamilyMember.family_id)
            .all()
        )

    @db_operation
    def list_members(self, db: Session, *, family_id: UUID) -> List[FamilyMember]:
        """All members of a family with their user loaded."""
        return (
            db.query(FamilyMember)
            .options(joinedload(FamilyMember.user))
            .filter(FamilyMember.family_id == family_id)
            .order_by(FamilyMember.joined_at, FamilyMember.user_id)
            .all()
        )

    @db_operation
    def family_ids_for_user(self, db: Session, *, user_id: UUID) -> Set[UUID]:
        rows = db.query(FamilyMember.family_id).filter(FamilyMember.user_id == user_id).all()
        return {row[0] for row in rows}

    @db_operation
    def is_member(self, db: Session, *, family_id: UUID, user_id: UUID) -> bool:
        return (
            db.query(FamilyMember)
            .filter(FamilyMember.family_id == family_id, FamilyMember.user_id == user_id)
            .first()
            is not None
        )

    def shares_family(self, db: Session, *, user_id: UUID, other_user_id: UUID) -> bool:
        """True when both users belong to at least one common family."""
        mine = self.family_ids_for_user(db, user_id=user_id)
        theirs = self.family_ids_for_user(db, user_id=other_user_id)
        return bool(mine & theirs)

    # =====================================================================
    # UPDATE OPERATIONS
    # =====================================================================

    @db_operation
    def update(self, db: Session, *, db_obj: Family, obj_in: FamilyUpdate) -> Family:
        """Update family settings."""
        update_data = obj_in.model_dump(exclude_unset=True)

        for field, value in update_data.items():
            if value is not None:
                setattr(db_obj, field, value)

        db.commit()
        db.refresh(db_obj)
        return db_obj


crud_family = CRUDFamily()

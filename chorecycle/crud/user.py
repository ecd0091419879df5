# crud/user.py
from typing import Optional
from uuid import UUID
from sqlalchemy.orm import Session

from chorecycle.crud.base import db_operation
from chorecycle.models.user import User
from chorecycle.schemas.user import UserCycleUpdate


class CRUDUser:
    """CRUD operations for User model."""

    @db_operation
    def get(self, db: Session, id: UUID) -> Optional[User]:
        """Get user by ID."""
        return db.query(User).filter(User.id == id).first()

    @db_operation
    def update_cycle(
        self, db: Session, *, db_obj: User, obj_in: UserCycleUpdate
    ) -> User:
        """Update the personal cycle config."""
        update_data = obj_in.model_dump(exclude_unset=True)

        for field, value in update_data.items():
            if value is not None:
                setattr(db_obj, field, value)

        db.commit()
        db.refresh(db_obj)
        return db_obj


crud_user = CRUDUser()

# services/family.py
import logging
from typing import Optional, List
from uuid import UUID
from sqlalchemy.orm import Session

from chorecycle.core.exceptions import (
    AuthorizationError,
    NotFoundError,
    ValidationError,
    translate_store_errors,
)
from chorecycle.crud.family import crud_family
from chorecycle.crud.user import crud_user
from chorecycle.models.family import Family
from chorecycle.models.user import User
from chorecycle.schemas.family import (
    FamilyMemberRead,
    FamilyRead,
    FamilyUpdate,
    FamilyWithMembers,
)

logger = logging.getLogger(__name__)


class FamilyService:
    """Family memberships, rota settings and cross-user access checks."""

    def __init__(self):
        self.crud = crud_family

    # =====================================================================
    # ACCESS
    # =====================================================================

    @translate_store_errors
    def resolve_target_user(
        self, db: Session, *, requesting_user: User, user_id: Optional[UUID]
    ) -> User:
        """
        Return the user an operation acts on.

        Callers may act for themselves, or for another user they share at
        least one family with.

        Raises:
            NotFoundError: If user_id does not exist
            AuthorizationError: If the users share no family
        """
        if user_id is None or user_id == requesting_user.id:
            return requesting_user

        target = crud_user.get(db, id=user_id)
        if target is None:
            raise NotFoundError(f"User {user_id} not found")

        if not self.crud.shares_family(db, user_id=requesting_user.id, other_user_id=user_id):
            raise AuthorizationError("Not authorized")
        return target

    @translate_store_errors
    def ensure_same_family(
        self, db: Session, *, requesting_user: User, owner_user_id: UUID
    ) -> None:
        """AuthorizationError unless owner_user_id is the caller or shares a family."""
        if owner_user_id == requesting_user.id:
            return
        if not self.crud.shares_family(
            db, user_id=requesting_user.id, other_user_id=owner_user_id
        ):
            raise AuthorizationError("Not authorized")

    @translate_store_errors
    def get_family_for_member(
        self, db: Session, *, family_id: UUID, requesting_user: User
    ) -> Family:
        """The family, if the caller belongs to it."""
        family = self.crud.get(db, id=family_id)
        if family is None:
            raise NotFoundError(f"Family {family_id} not found")
        if not self.crud.is_member(db, family_id=family_id, user_id=requesting_user.id):
            raise AuthorizationError("Not a member of this family")
        return family

    @translate_store_errors
    def member_ids(self, db: Session, *, family_id: UUID) -> List[UUID]:
        return [m.user_id for m in self.crud.list_members(db, family_id=family_id)]

    # =====================================================================
    # READ
    # =====================================================================

    @translate_store_errors
    def list_families(
        self, db: Session, *, requesting_user: User, user_id: Optional[UUID] = None
    ) -> List[FamilyWithMembers]:
        """Families of a user (default: caller), each with its members."""
        target = self.resolve_target_user(
            db, requesting_user=requesting_user, user_id=user_id
        )

        families = []
        for membership in self.crud.list_memberships(db, user_id=target.id):
            family = membership.family
            members = self.crud.list_members(db, family_id=family.id)
            families.append(
                FamilyWithMembers(
                    **FamilyRead.model_validate(family).model_dump(),
                    members=[FamilyMemberRead.model_validate(m) for m in members],
                )
            )
        return families

    # =====================================================================
    # UPDATE
    # =====================================================================

    @translate_store_errors
    def update_family(
        self,
        db: Session,
        *,
        family_id: UUID,
        update_data: FamilyUpdate,
        requesting_user: User,
    ) -> Family:
        """Update name or rota cycle. Members only."""
        family = self.get_family_for_member(
            db, family_id=family_id, requesting_user=requesting_user
        )

        if not update_data.model_dump(exclude_unset=True, exclude_none=True):
            raise ValidationError("No valid updates provided")

        family = self.crud.update(db, db_obj=family, obj_in=update_data)
        logger.info(
            "Family %s updated: rota %d weeks from %s",
            family.id, family.rota_cycle_weeks, family.rota_start_date,
        )
        return family


family_service = FamilyService()

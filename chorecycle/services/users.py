# services/users.py
import logging
from sqlalchemy.orm import Session

from chorecycle.core.exceptions import ValidationError, translate_store_errors
from chorecycle.crud.user import crud_user
from chorecycle.models.user import User
from chorecycle.schemas.user import UserCycleUpdate

logger = logging.getLogger(__name__)


class UserService:
    """Profile-level settings of the authenticated user."""

    @translate_store_errors
    def update_cycle(
        self, db: Session, *, update_data: UserCycleUpdate, requesting_user: User
    ) -> User:
        if not update_data.model_dump(exclude_unset=True, exclude_none=True):
            raise ValidationError("No valid updates provided")

        user = crud_user.update_cycle(db, db_obj=requesting_user, obj_in=update_data)
        logger.info(
            "User %s cycle set to %d weeks from %s",
            user.id, user.cycle_weeks, user.cycle_start_date,
        )
        return user


user_service = UserService()

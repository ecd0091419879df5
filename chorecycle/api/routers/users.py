# api/routers/users.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from chorecycle.core.config import get_db
from chorecycle.core.security import get_current_user
from chorecycle.models.user import User
from chorecycle.schemas.user import UserCycleUpdate, UserRead
from chorecycle.services.users import user_service

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("/me", response_model=UserRead, summary="Current user")
def read_me(current_user: User = Depends(get_current_user)):
    return current_user


@router.patch("/me/cycle", response_model=UserRead, summary="Update personal cycle")
def update_my_cycle(
    update_data: UserCycleUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Personal cycle used when you belong to no family."""
    return user_service.update_cycle(
        db, update_data=update_data, requesting_user=current_user
    )

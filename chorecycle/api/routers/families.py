# api/routers/families.py
from typing import Optional
from uuid import UUID
from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.orm import Session

from chorecycle.core.config import get_db
from chorecycle.core.security import get_current_user
from chorecycle.models.user import User
from chorecycle.schemas.family import FamilyListResponse, FamilyRead, FamilyUpdate
from chorecycle.services.family import family_service

router = APIRouter(prefix="/families", tags=["Families"])


@router.get("", response_model=FamilyListResponse, summary="Families with their members")
def list_families(
    user_id: Optional[UUID] = Query(None, description="Defaults to the caller"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    families = family_service.list_families(
        db, requesting_user=current_user, user_id=user_id
    )
    return FamilyListResponse(families=families)


@router.patch("/{family_id}", response_model=FamilyRead, summary="Update family settings")
def update_family(
    update_data: FamilyUpdate,
    family_id: UUID = Path(..., description="Family ID"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Rename a family or change its rota.

    - **rota_cycle_weeks**: 1 to 8
    - **rota_start_date**: first day of rota week 1
    """
    return family_service.update_family(
        db, family_id=family_id, update_data=update_data, requesting_user=current_user
    )

# api/routers/completions.py
from uuid import UUID
from fastapi import APIRouter, Depends, Path, Response, status
from sqlalchemy.orm import Session

from chorecycle.core.clock import Clock, get_clock
from chorecycle.core.config import get_db
from chorecycle.core.security import get_current_user
from chorecycle.models.user import User
from chorecycle.schemas.common import SuccessResponse
from chorecycle.schemas.completion import CompletionRead, CompletionTransition, CompletionUpsert
from chorecycle.services.completions import completion_service

router = APIRouter(prefix="/completions", tags=["Completions"])


@router.post(
    "",
    response_model=CompletionRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create or update the day's completion",
)
def post_completion(
    data: CompletionUpsert,
    response: Response,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Upsert the completion for (activity, user, date).

    Returns 201 when a row was inserted and 200 when an existing row (or a
    deferred one picked up on this date) was updated.
    """
    completion, created = completion_service.upsert_completion(
        db, data=data, requesting_user=current_user
    )
    if not created:
        response.status_code = status.HTTP_200_OK
    return completion


@router.post(
    "/transition",
    response_model=CompletionRead,
    summary="Apply a timer action",
)
def transition_completion(
    data: CompletionTransition,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    current_user: User = Depends(get_current_user),
):
    """
    Start, stop, finish, skip, block or defer a task using the server clock.

    - **duration_minutes**: optional override when finishing
    - **deferred_to**: required when deferring, later than **date**
    """
    return completion_service.transition(
        db, data=data, requesting_user=current_user, clock=clock
    )


@router.delete(
    "/{completion_id}",
    response_model=SuccessResponse,
    summary="Undo a completion",
)
def delete_completion(
    completion_id: UUID = Path(..., description="Completion ID"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Delete the completion; the task shows as not started again."""
    completion_service.delete_completion(
        db, completion_id=completion_id, requesting_user=current_user
    )
    return SuccessResponse(message="Completion deleted")

# services/long_term_tasks.py
"""
Long-term tasks: work spanning many days, timed in sessions.

The timer uses the same transitions as daily completions. A task that is
not running is `stopped` (or unstarted before its first session), a running
one is `started`, and a completed one is `done`. Every start opens a
session row; every stop or completion closes it.
"""

import logging
from datetime import datetime
from typing import List, Optional
from uuid import UUID
from sqlalchemy.orm import Session

from chorecycle.core.clock import Clock
from chorecycle.core.exceptions import NotFoundError, ValidationError, translate_store_errors
from chorecycle.crud.long_term_task import crud_long_term_task
from chorecycle.models.completion import CompletionStatus
from chorecycle.models.long_term_task import LongTermTask, LongTermTaskStatus
from chorecycle.models.user import User
from chorecycle.schemas.long_term_task import LongTermTaskCreate, LongTermTaskUpdate
from chorecycle.services.family import family_service
from chorecycle.services.time_accounting import (
    MS_PER_MINUTE,
    CompletionState,
    TimerAction,
    apply_transition,
    as_utc,
)

logger = logging.getLogger(__name__)


def timer_state(task: LongTermTask, clock: Clock) -> CompletionState:
    """The task's timer fields as a completion snapshot."""
    if task.status == LongTermTaskStatus.completed:
        status = CompletionStatus.done
    elif task.current_session_started_at is not None:
        status = CompletionStatus.started
    elif task.elapsed_ms:
        status = CompletionStatus.stopped
    else:
        status = None

    return CompletionState(
        date=clock.today(),
        status=status,
        started_at=as_utc(task.current_session_started_at),
        completed_at=as_utc(task.completed_at),
        elapsed_ms=task.elapsed_ms or 0,
    )


class LongTermTaskService:
    """Long-term task CRUD and session timing."""

    def __init__(self):
        self.crud = crud_long_term_task

    # =====================================================================
    # ACCESS
    # =====================================================================

    @translate_store_errors
    def get_task(self, db: Session, *, task_id: UUID, requesting_user: User) -> LongTermTask:
        """A task owned by the caller or by someone sharing a family with them."""
        task = self.crud.get(db, id=task_id)
        if task is None:
            raise NotFoundError("Task not found")
        family_service.ensure_same_family(
            db, requesting_user=requesting_user, owner_user_id=task.user_id
        )
        return task

    # =====================================================================
    # CRUD
    # =====================================================================

    @translate_store_errors
    def list_tasks(
        self, db: Session, *, requesting_user: User, user_id: Optional[UUID] = None
    ) -> List[LongTermTask]:
        target = family_service.resolve_target_user(
            db, requesting_user=requesting_user, user_id=user_id
        )
        return self.crud.list_for_user(db, user_id=target.id)

    @translate_store_errors
    def create_task(
        self, db: Session, *, task_data: LongTermTaskCreate, requesting_user: User
    ) -> LongTermTask:
        target = family_service.resolve_target_user(
            db, requesting_user=requesting_user, user_id=task_data.user_id
        )
        task = self.crud.create(db, obj_in=task_data, user_id=target.id)
        logger.info("Long-term task %s '%s' created for %s", task.id, task.title, target.id)
        return task

    @translate_store_errors
    def update_task(
        self,
        db: Session,
        *,
        task_id: UUID,
        update_data: LongTermTaskUpdate,
        requesting_user: User,
    ) -> LongTermTask:
        task = self.get_task(db, task_id=task_id, requesting_user=requesting_user)
        if not update_data.model_dump(exclude_unset=True):
            raise ValidationError("No valid updates provided")
        return self.crud.update(db, db_obj=task, obj_in=update_data)

    @translate_store_errors
    def delete_task(self, db: Session, *, task_id: UUID, requesting_user: User) -> None:
        """Hard delete; sessions go with the task."""
        task = self.get_task(db, task_id=task_id, requesting_user=requesting_user)
        self.crud.delete(db, db_obj=task)
        logger.info("Long-term task %s deleted", task_id)

    # =====================================================================
    # TIMER
    # =====================================================================

    @translate_store_errors
    def start(
        self, db: Session, *, task_id: UUID, requesting_user: User, clock: Clock
    ) -> LongTermTask:
        """
        Open a session.

        Starting a task whose session is already running returns it
        unchanged, so a double tap does not leave two open sessions.
        """
        task = self.get_task(db, task_id=task_id, requesting_user=requesting_user)
        state = timer_state(task, clock)
        if state.status == CompletionStatus.started:
            return task

        now = clock.now()
        new_state = apply_transition(state, TimerAction.start, now)
        task = self.crud.save_timer(
            db,
            db_obj=task,
            values={"current_session_started_at": new_state.started_at},
            open_session_at=now,
        )
        logger.info("Long-term task %s session started", task.id)
        return task

    @translate_store_errors
    def stop(
        self, db: Session, *, task_id: UUID, requesting_user: User, clock: Clock
    ) -> LongTermTask:
        """
        Close the running session and fold it into elapsed_ms.

        Raises:
            InvalidTransitionError: If no session is running
        """
        task = self.get_task(db, task_id=task_id, requesting_user=requesting_user)
        return self._finish_session(db, task=task, action=TimerAction.stop, clock=clock)

    @translate_store_errors
    def complete(
        self, db: Session, *, task_id: UUID, requesting_user: User, clock: Clock
    ) -> LongTermTask:
        """Mark completed, closing a running session first."""
        task = self.get_task(db, task_id=task_id, requesting_user=requesting_user)
        return self._finish_session(db, task=task, action=TimerAction.done, clock=clock)

    def _finish_session(
        self, db: Session, *, task: LongTermTask, action: TimerAction, clock: Clock
    ) -> LongTermTask:
        state = timer_state(task, clock)
        now: datetime = clock.now()
        new_state = apply_transition(state, action, now)

        values = {
            "current_session_started_at": None,
            "elapsed_ms": new_state.elapsed_ms,
        }
        if action == TimerAction.done:
            values.update(status=LongTermTaskStatus.completed, completed_at=now)

        session_ms = new_state.elapsed_ms - state.elapsed_ms
        running = state.status == CompletionStatus.started
        task = self.crud.save_timer(
            db,
            db_obj=task,
            values=values,
            close_session_at=now if running else None,
            closed_minutes=round(session_ms / MS_PER_MINUTE) if running else None,
        )
        logger.info(
            "Long-term task %s: %s (elapsed %d ms)", task.id, action.value, task.elapsed_ms
        )
        return task


long_term_task_service = LongTermTaskService()

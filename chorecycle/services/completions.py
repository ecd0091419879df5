# services/completions.py
import logging
from datetime import date, datetime
from typing import Any, Dict, Optional, Tuple
from uuid import UUID
from sqlalchemy.orm import Session

from chorecycle.core.clock import Clock
from chorecycle.core.exceptions import (
    DatabaseConflictError,
    NotFoundError,
    translate_store_errors,
)
from chorecycle.crud.activity import crud_activity
from chorecycle.crud.completion import crud_completion
from chorecycle.models.completion import Completion
from chorecycle.models.user import User
from chorecycle.schemas.completion import CompletionTransition, CompletionUpsert
from chorecycle.services.family import family_service
from chorecycle.services.time_accounting import (
    CompletionState,
    apply_transition,
)

logger = logging.getLogger(__name__)


class CompletionService:
    """Completion upserts, timer transitions and undo."""

    def __init__(self):
        self.crud = crud_completion

    def _get_activity(self, db: Session, activity_id: UUID):
        activity = crud_activity.get(db, id=activity_id)
        if activity is None:
            raise NotFoundError(f"Activity {activity_id} not found")
        return activity

    def _insert_day(
        self,
        db: Session,
        *,
        activity_id: UUID,
        user_id: UUID,
        on_date: date,
        values: Dict[str, Any],
    ) -> Optional[Completion]:
        """
        Insert the row for (activity, user, date).

        Returns None when a concurrent request inserted it first; the caller
        then re-reads and updates that row instead.
        """
        try:
            return self.crud.create(
                db,
                values={
                    "activity_id": activity_id,
                    "user_id": user_id,
                    "date": on_date,
                    **values,
                },
            )
        except DatabaseConflictError:
            logger.info(
                "Completion for activity %s on %s created concurrently, updating it",
                activity_id, on_date,
            )
            return None

    def _reread_day(
        self, db: Session, *, activity_id: UUID, user_id: UUID, on_date: date
    ) -> Completion:
        existing = self.crud.get_for_day(
            db, activity_id=activity_id, user_id=user_id, on_date=on_date
        )
        if existing is None:
            raise DatabaseConflictError(
                f"Completion for activity {activity_id} on {on_date} conflicts but cannot be read"
            )
        return existing

    # =====================================================================
    # RAW UPSERT
    # =====================================================================

    @translate_store_errors
    def upsert_completion(
        self, db: Session, *, data: CompletionUpsert, requesting_user: User
    ) -> Tuple[Completion, bool]:
        """
        Write the client-supplied state for (activity, user, date).

        Lookup order:
        1. a completion already dated `date` is updated in place
        2. otherwise a deferred completion pointing at `date` is moved onto
           `date` (its deferred_to cleared) and updated
        3. otherwise a new completion is inserted

        Returns:
            (completion, created)
        """
        target = family_service.resolve_target_user(
            db, requesting_user=requesting_user, user_id=data.user_id
        )
        self._get_activity(db, data.activity_id)

        values = {
            "status": data.status,
            "started_at": data.started_at,
            "completed_at": data.completed_at,
            "elapsed_ms": data.elapsed_ms,
            "label": data.label,
            "deferred_to": data.deferred_to,
        }

        existing = self.crud.get_for_day(
            db, activity_id=data.activity_id, user_id=target.id, on_date=data.date
        )
        if existing:
            completion = self.crud.update(db, db_obj=existing, values=values)
            logger.info("Completion %s set to %s", completion.id, completion.status.value)
            return completion, False

        deferred = self.crud.get_deferred_to(
            db, activity_id=data.activity_id, user_id=target.id, on_date=data.date
        )
        if deferred:
            values.update(date=data.date, deferred_to=None)
            completion = self.crud.update(db, db_obj=deferred, values=values)
            logger.info(
                "Deferred completion %s picked up on %s as %s",
                completion.id, data.date, completion.status.value,
            )
            return completion, False

        completion = self._insert_day(
            db,
            activity_id=data.activity_id,
            user_id=target.id,
            on_date=data.date,
            values=values,
        )
        if completion is None:
            existing = self._reread_day(
                db, activity_id=data.activity_id, user_id=target.id, on_date=data.date
            )
            return self.crud.update(db, db_obj=existing, values=values), False

        logger.info(
            "Completion %s created for activity %s on %s",
            completion.id, data.activity_id, data.date,
        )
        return completion, True

    # =====================================================================
    # TIMER TRANSITIONS
    # =====================================================================

    def _next_values(
        self, state: CompletionState, data: CompletionTransition, now: datetime
    ) -> Dict[str, Any]:
        new_state = apply_transition(
            state,
            data.action,
            now,
            duration_minutes=data.duration_minutes,
            deferred_to=data.deferred_to,
        )
        return {
            "status": new_state.status,
            "started_at": new_state.started_at,
            "completed_at": new_state.completed_at,
            "elapsed_ms": new_state.elapsed_ms,
            "deferred_to": new_state.deferred_to,
        }

    @translate_store_errors
    def transition(
        self,
        db: Session,
        *,
        data: CompletionTransition,
        requesting_user: User,
        clock: Clock,
    ) -> Completion:
        """
        Apply a timer action using the server clock and persist the result.

        A deferred completion pointing at `date` is picked up as a fresh task
        and moved onto `date`, the same way upsert_completion does.

        Raises:
            NotFoundError: If the activity or target user does not exist
            AuthorizationError: If the caller shares no family with the user
            InvalidTransitionError: If the action is not allowed from the current status
        """
        target = family_service.resolve_target_user(
            db, requesting_user=requesting_user, user_id=data.user_id
        )
        self._get_activity(db, data.activity_id)

        existing = self.crud.get_for_day(
            db, activity_id=data.activity_id, user_id=target.id, on_date=data.date
        )
        picked_up = None
        if existing is None:
            picked_up = self.crud.get_deferred_to(
                db, activity_id=data.activity_id, user_id=target.id, on_date=data.date
            )

        state = CompletionState.from_completion(existing, data.date)
        now = clock.now()
        values = self._next_values(state, data, now)

        if existing is not None:
            completion = self.crud.update(db, db_obj=existing, values=values)
        elif picked_up is not None:
            completion = self.crud.update(
                db, db_obj=picked_up, values={**values, "date": data.date}
            )
        else:
            completion = self._insert_day(
                db,
                activity_id=data.activity_id,
                user_id=target.id,
                on_date=data.date,
                values=values,
            )
            if completion is None:
                # Lost the insert race: apply the action on top of the winner's row.
                existing = self._reread_day(
                    db, activity_id=data.activity_id, user_id=target.id, on_date=data.date
                )
                state = CompletionState.from_completion(existing, data.date)
                values = self._next_values(state, data, now)
                completion = self.crud.update(db, db_obj=existing, values=values)

        logger.info(
            "Completion %s: %s -> %s (elapsed %d ms)",
            completion.id,
            state.status.value if state.status else "unstarted",
            completion.status.value,
            completion.elapsed_ms or 0,
        )
        return completion

    # =====================================================================
    # UNDO
    # =====================================================================

    @translate_store_errors
    def delete_completion(
        self, db: Session, *, completion_id: UUID, requesting_user: User
    ) -> None:
        """Delete a completion outright, returning its task to unstarted."""
        completion = self.crud.get(db, id=completion_id)
        if completion is None:
            raise NotFoundError("Completion not found")

        family_service.ensure_same_family(
            db, requesting_user=requesting_user, owner_user_id=completion.user_id
        )

        self.crud.delete(db, db_obj=completion)
        logger.info("Completion %s deleted", completion_id)


completion_service = CompletionService()

# services/time_accounting.py
"""
Elapsed-time bookkeeping for a task on one date.

    unstarted -> started -> {stopped <-> started} -> {done | skipped}

`blocked` and `deferred` are side states reachable from any open state.
Undo is not a transition: the completion row is deleted, which puts the
task back to unstarted with no history.

Nothing here keeps a running timer in memory. A session is always rebuilt
from the stored `started_at`, so the same inputs give the same result no
matter when or how often they are applied.
"""

import enum
from dataclasses import dataclass, replace
from datetime import date, datetime, timezone
from typing import Callable, Dict, FrozenSet, Iterable, Optional, Tuple

from chorecycle.core.exceptions import InvalidTransitionError, ValidationError
from chorecycle.models.completion import CompletionStatus


MS_PER_MINUTE = 60_000


class TimerAction(str, enum.Enum):
    start = "start"
    stop = "stop"
    done = "done"
    skip = "skip"
    block = "block"
    defer = "defer"


@dataclass(frozen=True)
class CompletionState:
    """Snapshot of a completion's timer fields; status None means unstarted."""

    date: date
    status: Optional[CompletionStatus] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    elapsed_ms: int = 0
    deferred_to: Optional[date] = None

    @classmethod
    def from_completion(cls, completion, on_date: date) -> "CompletionState":
        if completion is None:
            return cls(date=on_date)
        return cls(
            date=completion.date,
            status=completion.status,
            started_at=as_utc(completion.started_at),
            completed_at=as_utc(completion.completed_at),
            elapsed_ms=completion.elapsed_ms or 0,
            deferred_to=completion.deferred_to,
        )


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Treat naive timestamps read back from the store as UTC."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


# =====================================================================
# TRANSITIONS
# =====================================================================

TERMINAL: FrozenSet[CompletionStatus] = frozenset(
    {CompletionStatus.done, CompletionStatus.skipped}
)

_OPEN: FrozenSet[Optional[CompletionStatus]] = frozenset(
    {None} | {s for s in CompletionStatus if s not in TERMINAL}
)

# Starting while already started re-stamps started_at: two devices racing
# on the same task is last-writer-wins. Starting a deferred task takes it
# back onto its own date.
ALLOWED_FROM: Dict[TimerAction, FrozenSet[Optional[CompletionStatus]]] = {
    TimerAction.start: frozenset(
        {
            None,
            CompletionStatus.started,
            CompletionStatus.stopped,
            CompletionStatus.blocked,
            CompletionStatus.deferred,
        }
    ),
    TimerAction.stop: frozenset({CompletionStatus.started}),
    TimerAction.done: _OPEN,
    TimerAction.skip: _OPEN,
    TimerAction.block: _OPEN,
    TimerAction.defer: _OPEN,
}


def _fold_session(state: CompletionState, now: datetime) -> int:
    """elapsed_ms including the open session, if any."""
    if state.status is not CompletionStatus.started or state.started_at is None:
        return state.elapsed_ms
    session_ms = int((now - as_utc(state.started_at)).total_seconds() * 1000)
    # a clock that went backwards never removes recorded time
    return state.elapsed_ms + max(session_ms, 0)


def _start(state, now, **_):
    return replace(
        state,
        status=CompletionStatus.started,
        started_at=now,
        completed_at=None,
        deferred_to=None,
    )


def _stop(state, now, **_):
    return replace(
        state,
        status=CompletionStatus.stopped,
        started_at=None,
        elapsed_ms=_fold_session(state, now),
    )


def _done(state, now, duration_minutes=None, **_):
    elapsed = _fold_session(state, now)
    if duration_minutes is not None:
        if duration_minutes < 0:
            raise ValidationError("duration_minutes cannot be negative")
        elapsed = int(round(duration_minutes * MS_PER_MINUTE))
    return replace(
        state,
        status=CompletionStatus.done,
        started_at=None,
        completed_at=now,
        elapsed_ms=elapsed,
        deferred_to=None,
    )


def _skip(state, now, **_):
    return replace(
        state,
        status=CompletionStatus.skipped,
        started_at=None,
        elapsed_ms=_fold_session(state, now),
    )


def _block(state, now, **_):
    return replace(
        state,
        status=CompletionStatus.blocked,
        started_at=None,
        elapsed_ms=_fold_session(state, now),
    )


def _defer(state, now, deferred_to=None, **_):
    if deferred_to is None:
        raise ValidationError("deferred_to is required to defer a task")
    if deferred_to <= state.date:
        raise ValidationError(
            f"deferred_to must be after {state.date.isoformat()}, got {deferred_to.isoformat()}"
        )
    return replace(
        state,
        status=CompletionStatus.deferred,
        started_at=None,
        elapsed_ms=_fold_session(state, now),
        deferred_to=deferred_to,
    )


_HANDLERS: Dict[TimerAction, Callable[..., CompletionState]] = {
    TimerAction.start: _start,
    TimerAction.stop: _stop,
    TimerAction.done: _done,
    TimerAction.skip: _skip,
    TimerAction.block: _block,
    TimerAction.defer: _defer,
}


def apply_transition(
    state: CompletionState,
    action: TimerAction,
    now: datetime,
    duration_minutes: Optional[float] = None,
    deferred_to: Optional[date] = None,
) -> CompletionState:
    """
    Apply a timer action to a completion snapshot.

    Args:
        state: Current snapshot (status None = unstarted)
        action: Action to apply
        now: Aware timestamp of the action
        duration_minutes: Manual duration for `done`; replaces elapsed time
        deferred_to: Target date for `defer`

    Returns:
        New snapshot

    Raises:
        InvalidTransitionError: If the action is not allowed from state.status
        ValidationError: If an override or deferral date is invalid
    """
    action = TimerAction(action)
    if state.status not in ALLOWED_FROM[action]:
        current = state.status.value if state.status else "unstarted"
        raise InvalidTransitionError(f"Cannot {action.value} a task that is {current}")

    return _HANDLERS[action](
        state,
        as_utc(now),
        duration_minutes=duration_minutes,
        deferred_to=deferred_to,
    )


# =====================================================================
# DURATIONS
# =====================================================================


def display_duration_minutes(elapsed_ms: Optional[int], default_minutes: int) -> float:
    """Recorded minutes when a duration was tracked, else the activity default."""
    if elapsed_ms and elapsed_ms > 0:
        return elapsed_ms / MS_PER_MINUTE
    return float(default_minutes)


def total_minutes(items: Iterable[Tuple[Optional[int], int]]) -> float:
    """Sum (elapsed_ms, default_minutes) pairs, falling back per item."""
    return sum(display_duration_minutes(elapsed, default) for elapsed, default in items)

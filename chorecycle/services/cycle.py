# services/cycle.py
import calendar
from datetime import date
from typing import Sequence, Tuple

from chorecycle.core.exceptions import ValidationError


# Personal (non-rota) activities repeat identically every week.
PERSONAL_WEEK = 1

MAX_CYCLE_WEEKS = 8


def week_of_cycle(target_date: date, cycle_start_date: date, cycle_weeks: int) -> int:
    """
    Resolve which week of an N-week cycle a date falls in.

    Args:
        target_date: Date to resolve
        cycle_start_date: First day of week 1
        cycle_weeks: Length of the cycle in weeks (>= 1)

    Returns:
        Week number in [1, cycle_weeks]. Dates before the start wrap
        backwards, so the day before the start is the last week.

    Raises:
        ValidationError: If cycle_weeks is less than 1
    """
    if cycle_weeks is None or cycle_weeks < 1:
        raise ValidationError(f"cycle_weeks must be >= 1, got {cycle_weeks}")

    days_since_start = (target_date - cycle_start_date).days
    # Python's // and % already floor towards -inf, so negatives wrap.
    return (days_since_start // 7) % cycle_weeks + 1


def day_of_week(target_date: date) -> int:
    """Day of week with Monday=0 .. Sunday=6."""
    return target_date.weekday()


def parse_iso_date(value, field: str = "date") -> date:
    """Parse a YYYY-MM-DD query value, raising ValidationError if missing or malformed."""
    if isinstance(value, date):
        return value
    if not value:
        raise ValidationError(f"{field} parameter required")
    try:
        return date.fromisoformat(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field} must be an ISO date (YYYY-MM-DD), got {value!r}")


def parse_month(value) -> Tuple[date, date]:
    """Parse a YYYY-MM query value into its first and last day."""
    if not value:
        raise ValidationError("month parameter required")
    try:
        year, month = (int(part) for part in value.split("-"))
        first = date(year, month, 1)
    except (TypeError, ValueError):
        raise ValidationError(f"month must be YYYY-MM, got {value!r}")
    return first, date(year, month, calendar.monthrange(year, month)[1])


def rota_cycle(user, memberships: Sequence) -> Tuple[date, int]:
    """
    (start date, weeks) of the cycle a user's rota rows follow.

    That is the primary family's rota when the user has memberships (they
    are expected in join order), else the user's own cycle.
    """
    if memberships:
        family = memberships[0].family
        return family.rota_start_date, family.rota_cycle_weeks
    return user.cycle_start_date, user.cycle_weeks

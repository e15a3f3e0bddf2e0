"""
Care math: days remaining until a care action is due, and urgency classification.

Every place that shows a plant's watering or fertilizing state goes through
these functions, so the dashboard, plant list, detail view and reminder digest
agree on what "due" means.
"""

from __future__ import annotations
from datetime import datetime
from typing import Optional

from greenmate.models import ActionType, Plant, PlantStatus
from greenmate.services.clock import to_utc

SECONDS_PER_DAY = 24 * 60 * 60


def _epoch_seconds(value: datetime) -> int:
    return int(to_utc(value).timestamp())


def floor_days_between(start: datetime, end: datetime) -> int:
    """
    Whole days elapsed from start to end.

    Elapsed whole seconds are divided by the length of a day and truncated
    toward zero, so 47 hours counts as 1 day and -25 hours as -1 day.
    """
    elapsed = _epoch_seconds(end) - _epoch_seconds(start)
    days = abs(elapsed) // SECONDS_PER_DAY
    return days if elapsed >= 0 else -days


def days_remaining(
    last_performed_at: Optional[datetime],
    interval_days: int,
    now: datetime,
) -> int:
    """
    Signed number of days until the action is next due.

    Args:
        last_performed_at: When the action was last done, or None if never
        interval_days: Days between required actions (assumed positive)
        now: Current instant

    Returns:
        0 if the action was never performed (due immediately), otherwise
        interval_days minus the whole days elapsed. Negative means overdue.
    """
    if last_performed_at is None:
        return 0
    return interval_days - floor_days_between(last_performed_at, now)


def classify(days: int) -> PlantStatus:
    """Map a days-remaining value to a status: <0 overdue, 0 needs attention, >0 healthy."""
    if days < 0:
        return PlantStatus.OVERDUE
    if days == 0:
        return PlantStatus.NEEDS_ATTENTION
    return PlantStatus.HEALTHY


def plant_days_remaining(plant: Plant, action: ActionType, now: datetime) -> int:
    """days_remaining() for one of a plant's two care timers."""
    return days_remaining(plant.last_performed_at(action), plant.interval_for(action), now)

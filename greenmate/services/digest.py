"""
Care reminder digest: one summary of pending care for a single notification.
"""

from __future__ import annotations
from datetime import datetime
from typing import Iterable, Optional

from greenmate.models import ActionType, CareDigest, Plant
from greenmate.services.care_math import plant_days_remaining

DIGEST_TITLE = "Plant Care Reminder"


def build_digest(plants: Iterable[Plant], now: datetime) -> CareDigest:
    """
    Count plants needing care right now.

    Water and fertilize are evaluated independently per plant. An action due
    today adds to water_count or fertilize_count; an overdue action adds to
    overdue_count instead. A plant overdue on both actions is counted once.

    Returns a zero digest when nothing is due; callers skip the notification.
    """
    water_count = 0
    fertilize_count = 0
    overdue_count = 0

    for plant in plants:
        water_days = plant_days_remaining(plant, ActionType.WATER, now)
        fertilize_days = plant_days_remaining(plant, ActionType.FERTILIZE, now)

        if water_days == 0:
            water_count += 1
        if fertilize_days == 0:
            fertilize_count += 1
        if water_days < 0 or fertilize_days < 0:
            overdue_count += 1

    return CareDigest(
        water_count=water_count,
        fertilize_count=fertilize_count,
        overdue_count=overdue_count,
    )


def format_digest_message(digest: CareDigest) -> Optional[str]:
    """Notification body such as "2 to water, 1 to fertilize, 1 overdue"; None if empty."""
    parts = []
    if digest.water_count > 0:
        parts.append(f"{digest.water_count} to water")
    if digest.fertilize_count > 0:
        parts.append(f"{digest.fertilize_count} to fertilize")
    if digest.overdue_count > 0:
        parts.append(f"{digest.overdue_count} overdue")

    if not parts:
        return None
    return ", ".join(parts)

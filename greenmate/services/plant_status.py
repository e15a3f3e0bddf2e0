"""
Plant status classification, plus the filtering and sorting used by plant lists.

A plant's headline status is the classification of the more urgent of its two
timers (minimum days remaining). A plant due for fertilizing in 5 days but one
day overdue for water is OVERDUE.
"""

from __future__ import annotations
from datetime import datetime
from enum import Enum
from typing import Iterable, List, Optional

from greenmate.models import ActionType, CareSchedule, Plant, PlantStatus
from greenmate.services.care_math import classify, plant_days_remaining


class PlantFilter(str, Enum):
    ALL = "all"
    NEEDS_ATTENTION = "needs_attention"  # includes overdue plants
    HEALTHY = "healthy"


class SortOrder(str, Enum):
    NAME_ASC = "name_asc"
    NAME_DESC = "name_desc"
    DATE_DESC = "date_desc"
    STATUS = "status"


def care_schedule(plant: Plant, now: datetime) -> CareSchedule:
    """Both care timers of a plant and the headline status derived from them."""
    water_days = plant_days_remaining(plant, ActionType.WATER, now)
    fertilize_days = plant_days_remaining(plant, ActionType.FERTILIZE, now)
    return CareSchedule(
        water_days_remaining=water_days,
        fertilize_days_remaining=fertilize_days,
        status=classify(min(water_days, fertilize_days)),
    )


def status_of(plant: Plant, now: datetime) -> PlantStatus:
    """Headline status of a plant: the more urgent of its two timers wins."""
    return care_schedule(plant, now).status


def _matches_query(plant: Plant, query: str) -> bool:
    needle = query.lower()
    return needle in plant.name.lower() or needle in plant.location.lower()


def filter_plants(
    plants: Iterable[Plant],
    now: datetime,
    status_filter: PlantFilter = PlantFilter.ALL,
    query: str = "",
    location: Optional[str] = None,
) -> List[Plant]:
    """
    Apply search, status and location filters to a plant list.

    Args:
        plants: Plants to filter (order is preserved)
        now: Current instant for status computation
        status_filter: ALL, NEEDS_ATTENTION (needs attention or overdue), or HEALTHY
        query: Case-insensitive substring matched against name or location
        location: Case-insensitive exact location match, None for any
    """
    result = list(plants)

    query = (query or "").strip()
    if query:
        result = [p for p in result if _matches_query(p, query)]

    if status_filter is PlantFilter.NEEDS_ATTENTION:
        result = [p for p in result if status_of(p, now) is not PlantStatus.HEALTHY]
    elif status_filter is PlantFilter.HEALTHY:
        result = [p for p in result if status_of(p, now) is PlantStatus.HEALTHY]

    if location:
        wanted = location.strip().lower()
        result = [p for p in result if p.location.strip().lower() == wanted]

    return result


def sort_plants(plants: Iterable[Plant], now: datetime, order: SortOrder = SortOrder.NAME_ASC) -> List[Plant]:
    """Sort a plant list; STATUS orders HEALTHY, NEEDS_ATTENTION, OVERDUE, then by name."""
    plants = list(plants)

    if order is SortOrder.NAME_ASC:
        return sorted(plants, key=lambda p: p.name.lower())
    if order is SortOrder.NAME_DESC:
        return sorted(plants, key=lambda p: p.name.lower(), reverse=True)
    if order is SortOrder.DATE_DESC:
        # Plants without created_at (not yet persisted) sink to the end
        dated = [p for p in plants if p.created_at is not None]
        undated = [p for p in plants if p.created_at is None]
        return sorted(dated, key=lambda p: p.created_at, reverse=True) + undated

    return sorted(plants, key=lambda p: (status_of(p, now).urgency, p.name.lower()))

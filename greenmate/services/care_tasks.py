"""
Care task calculation for the dashboard task list.

Each plant yields an independent WATER task and FERTILIZE task. Only tasks
inside the look-ahead window (overdue, due today or due tomorrow) are kept,
ordered most overdue first and then by plant name.

The dashboard shows two partitions: due today and overdue. Tasks due tomorrow
are computed but belong to neither partition.
"""

from __future__ import annotations
from datetime import datetime
from typing import Iterable, List, Tuple

from greenmate.models import ActionType, CareTask, Plant
from greenmate.services.care_math import classify, plant_days_remaining

# Tasks due further out than this are left off the list
LOOKAHEAD_DAYS = 1


def build_task(plant: Plant, action: ActionType, now: datetime) -> CareTask:
    days = plant_days_remaining(plant, action, now)
    return CareTask(plant=plant, action_type=action, days_until_due=days, status=classify(days))


def _sort_key(task: CareTask):
    return task.days_until_due, task.plant.name.lower()


def compute_tasks(plants: Iterable[Plant], now: datetime) -> List[CareTask]:
    """
    Expand plants into the prioritized list of pending care tasks.

    Args:
        plants: Plant snapshot (an empty list yields no tasks)
        now: Current instant

    Returns:
        Tasks with days_until_due <= LOOKAHEAD_DAYS, sorted ascending by
        days_until_due with ties broken by case-insensitive plant name.
    """
    tasks = []
    for plant in plants:
        for action in (ActionType.WATER, ActionType.FERTILIZE):
            task = build_task(plant, action, now)
            if task.days_until_due <= LOOKAHEAD_DAYS:
                tasks.append(task)

    return sorted(tasks, key=_sort_key)


def partition_tasks(tasks: Iterable[CareTask]) -> Tuple[List[CareTask], List[CareTask]]:
    """Split computed tasks into (due_today, overdue), keeping their order."""
    tasks = list(tasks)
    due_today = [t for t in tasks if t.is_due_today]
    overdue = [t for t in tasks if t.is_overdue]
    return due_today, overdue


def has_overdue(tasks: Iterable[CareTask]) -> bool:
    return any(t.is_overdue for t in tasks)

"""
Dashboard service: today's care tasks, overdue tasks and care statistics.

Loads the user's plants, runs the care engine, advances the care streak and
weekly counter, and records completed tasks. A failed plant fetch degrades to
"zero tasks, zero stats" instead of raising.
"""

from __future__ import annotations
from typing import Optional, Tuple

from greenmate.models import ActionType, CareStats, DashboardData
from greenmate.services import supabase_client
from greenmate.services.care_stats import CareStreakTracker, WeeklyCounter
from greenmate.services.care_tasks import compute_tasks, has_overdue, partition_tasks
from greenmate.services.clock import Clock, system_clock
from greenmate.services.digest import build_digest
from greenmate.services.state_store import StateStore, SupabaseStateStore
from greenmate.utils.errors import (
    CareServiceError,
    PlantFetchError,
    StateStoreError,
    app_logger,
    sanitize_error,
)


def _store_for(user_id: str, store: Optional[StateStore]) -> StateStore:
    return store if store is not None else SupabaseStateStore(user_id)


def load_dashboard(
    user_id: str,
    store: Optional[StateStore] = None,
    clock: Optional[Clock] = None,
) -> DashboardData:
    """
    Compute everything the dashboard shows for one user.

    Args:
        user_id: User's UUID
        store: Persisted counter store (defaults to the user's Supabase store)
        clock: Time source (defaults to the system clock)

    Returns:
        DashboardData with due-today and overdue tasks, stats and digest.
        On a plant fetch failure the task lists are empty, stats and digest
        are zero, the streak is not touched, and `error` holds a user-safe message.
    """
    clock = clock or system_clock
    store = _store_for(user_id, store)

    try:
        plants = supabase_client.fetch_all_plants(user_id)
    except PlantFetchError as e:
        return DashboardData(error=sanitize_error(e, "database", "Failed to load plants"))

    now = clock.now()
    tasks = compute_tasks(plants, now)
    due_today, overdue = partition_tasks(tasks)
    digest = build_digest(plants, now)

    try:
        streak = CareStreakTracker(store, clock).update(
            has_any_overdue_task=has_overdue(tasks),
            has_at_least_one_plant=bool(plants),
        )
        weekly = WeeklyCounter(store, clock).current()
    except StateStoreError as e:
        # Tasks are still useful without the counters
        return DashboardData(
            today_tasks=due_today,
            overdue_tasks=overdue,
            stats=CareStats(total_plants=len(plants)),
            digest=digest,
            error=sanitize_error(e, "database", "Failed to update care stats"),
        )

    return DashboardData(
        today_tasks=due_today,
        overdue_tasks=overdue,
        stats=CareStats(
            total_plants=len(plants),
            care_streak=streak.streak_days,
            tasks_completed_this_week=weekly.completed_count,
        ),
        digest=digest,
    )


def complete_task(
    user_id: str,
    plant_id: str,
    action_type: ActionType,
    store: Optional[StateStore] = None,
    clock: Optional[Clock] = None,
) -> Tuple[bool, Optional[str]]:
    """
    Mark a care task done: record the action and count it for this week.

    Args:
        user_id: User's UUID
        plant_id: Plant's UUID
        action_type: WATER or FERTILIZE
        store: Persisted counter store (defaults to the user's Supabase store)
        clock: Time source for the action timestamp and week bucket

    Returns:
        (success, error_message)
    """
    clock = clock or system_clock

    success, error = supabase_client.record_action_performed(
        user_id, plant_id, action_type, performed_at=clock.now()
    )
    if not success:
        return False, error

    try:
        WeeklyCounter(_store_for(user_id, store), clock).record_completion()
    except CareServiceError as e:
        # The action itself is recorded; only the weekly tally missed it
        app_logger().error(f"Failed to count completed task for user {user_id}: {e}")

    return True, None

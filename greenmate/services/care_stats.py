"""
Care streak and weekly completion counter.

Both are small state machines over values persisted in a StateStore.

Streak rules (evaluated once per load of the task list, at most once per UTC day):
- Nothing happens if today's index is not past the last recorded day.
- No overdue tasks and at least one plant:
    consecutive day -> streak + 1
    never tracked before -> streak = 1
    gap of 2+ days -> streak kept as is
- Any overdue task -> streak = 0
- No plants -> streak kept as is
Whenever the transition fires, the last recorded day moves to today.

Weekly counter rules: when a new 7-day bucket is observed the count resets to 0
before any completion from the same call is added.
"""

from __future__ import annotations
from dataclasses import replace
from typing import Optional
import logging

from greenmate.models import CareStreakState, WeeklyCounterState
from greenmate.services.clock import Clock, system_clock
from greenmate.services.state_store import (
    KEY_CARE_STREAK,
    KEY_LAST_STREAK_UPDATE,
    KEY_LAST_TASK_COUNT_WEEK,
    KEY_TASKS_COMPLETED_WEEK,
    StateStore,
)

logger = logging.getLogger(__name__)


def advance_streak(
    state: CareStreakState,
    has_any_overdue_task: bool,
    has_at_least_one_plant: bool,
    today_index: int,
) -> CareStreakState:
    """Pure streak transition. Returns the same state when today was already recorded."""
    if today_index <= state.last_updated_day_index:
        return state

    streak = state.streak_days
    if not has_any_overdue_task and has_at_least_one_plant:
        if today_index == state.last_updated_day_index + 1:
            streak += 1
        elif state.last_updated_day_index == 0:
            streak = 1
    elif has_any_overdue_task:
        streak = 0

    return CareStreakState(streak_days=streak, last_updated_day_index=today_index)


def roll_week(state: WeeklyCounterState, current_week_index: int) -> WeeklyCounterState:
    """Reset the count when a new week bucket is observed."""
    if current_week_index > state.last_reset_week_index:
        return WeeklyCounterState(completed_count=0, last_reset_week_index=current_week_index)
    return state


class CareStreakTracker:
    """Reads, advances and writes back the care streak for one user."""

    def __init__(self, store: StateStore, clock: Optional[Clock] = None):
        self.store = store
        self.clock = clock or system_clock

    def load(self) -> CareStreakState:
        return CareStreakState(
            streak_days=self.store.read_int(KEY_CARE_STREAK),
            last_updated_day_index=self.store.read_int(KEY_LAST_STREAK_UPDATE),
        )

    def save(self, state: CareStreakState) -> None:
        self.store.write(KEY_CARE_STREAK, state.streak_days)
        self.store.write(KEY_LAST_STREAK_UPDATE, state.last_updated_day_index)

    def update(
        self,
        has_any_overdue_task: bool,
        has_at_least_one_plant: bool,
        today_index: Optional[int] = None,
    ) -> CareStreakState:
        """
        Run the daily streak transition and persist the result.

        Args:
            has_any_overdue_task: True if any care task is currently overdue
            has_at_least_one_plant: False when the user has no plants
            today_index: UTC day index; defaults to the clock's current day

        Returns:
            The streak state after the transition (unchanged if already run today)
        """
        if today_index is None:
            today_index = self.clock.today_index()

        current = self.load()
        updated = advance_streak(current, has_any_overdue_task, has_at_least_one_plant, today_index)
        if updated == current:
            return current

        if current.streak_days > 0 and updated.streak_days == 0:
            logger.info(f"Care streak of {current.streak_days} day(s) reset by overdue care")
        logger.debug(
            f"Care streak {current.streak_days} -> {updated.streak_days} "
            f"(day {current.last_updated_day_index} -> {today_index})"
        )
        self.save(updated)
        return updated


class WeeklyCounter:
    """Tasks completed in the current 7-day bucket, for one user."""

    def __init__(self, store: StateStore, clock: Optional[Clock] = None):
        self.store = store
        self.clock = clock or system_clock

    def load(self) -> WeeklyCounterState:
        return WeeklyCounterState(
            completed_count=self.store.read_int(KEY_TASKS_COMPLETED_WEEK),
            last_reset_week_index=self.store.read_int(KEY_LAST_TASK_COUNT_WEEK),
        )

    def save(self, state: WeeklyCounterState) -> None:
        self.store.write(KEY_TASKS_COMPLETED_WEEK, state.completed_count)
        self.store.write(KEY_LAST_TASK_COUNT_WEEK, state.last_reset_week_index)

    def _rolled(self, week_index: Optional[int]) -> tuple:
        if week_index is None:
            week_index = self.clock.current_week_index()
        current = self.load()
        return current, roll_week(current, week_index)

    def current(self, week_index: Optional[int] = None) -> WeeklyCounterState:
        """Counter state for the current week, persisting a rollover if one happened."""
        current, rolled = self._rolled(week_index)
        if rolled != current:
            logger.debug(f"Weekly task counter reset for week {rolled.last_reset_week_index}")
            self.save(rolled)
        return rolled

    def record_completion(self, week_index: Optional[int] = None) -> WeeklyCounterState:
        """Count one completed care task, after applying any week rollover."""
        _, rolled = self._rolled(week_index)
        updated = replace(rolled, completed_count=rolled.completed_count + 1)
        self.save(updated)
        return updated

"""
Plain data structures shared by the care engine, services and routes.

Plants come from the persistence layer and are treated as read-only input.
Care tasks, statuses, schedules and digests are recomputed on every query.
The streak and weekly counter states are the only values that outlive a
request; they are persisted through a StateStore (see services/state_store.py).
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional
import re

DEFAULT_WATER_INTERVAL_DAYS = 3
DEFAULT_FERTILIZE_INTERVAL_DAYS = 14


class ActionType(str, Enum):
    """Care actions the engine schedules."""

    WATER = "water"
    FERTILIZE = "fertilize"

    @property
    def display_name(self) -> str:
        return "Watering" if self is ActionType.WATER else "Fertilizing"


class PlantStatus(str, Enum):
    """Headline care status of a plant or task."""

    HEALTHY = "healthy"
    NEEDS_ATTENTION = "needs_attention"
    OVERDUE = "overdue"

    @property
    def urgency(self) -> int:
        """Sort weight: OVERDUE > NEEDS_ATTENTION > HEALTHY."""
        return _STATUS_URGENCY[self]


_STATUS_URGENCY = {
    PlantStatus.HEALTHY: 0,
    PlantStatus.NEEDS_ATTENTION: 1,
    PlantStatus.OVERDUE: 2,
}


_FRACTION_PATTERN = re.compile(r"\.(\d+)")


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Parse a Supabase timestamp into an aware UTC datetime.

    Accepts datetime objects and ISO-8601 strings (with or without a trailing
    'Z'). PostgREST trims fractional seconds (".1234"), so fractions are
    padded or cut to microseconds first. Naive values are interpreted as UTC.
    Empty values return None; malformed strings raise ValueError.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        dt = value
    else:
        text = str(value).strip().replace("Z", "+00:00")
        text = _FRACTION_PATTERN.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), text, count=1)
        dt = datetime.fromisoformat(text)
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _isoformat(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass(frozen=True)
class Plant:
    """A plant profile as stored in the `plants` table."""

    id: str = ""
    name: str = ""
    location: str = ""
    water_interval_days: int = DEFAULT_WATER_INTERVAL_DAYS
    fertilize_interval_days: int = DEFAULT_FERTILIZE_INTERVAL_DAYS
    last_watered_at: Optional[datetime] = None
    last_fertilized_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    photo_url: Optional[str] = None

    @property
    def is_persisted(self) -> bool:
        return self.id != ""

    def interval_for(self, action: ActionType) -> int:
        if action is ActionType.WATER:
            return self.water_interval_days
        return self.fertilize_interval_days

    def last_performed_at(self, action: ActionType) -> Optional[datetime]:
        if action is ActionType.WATER:
            return self.last_watered_at
        return self.last_fertilized_at

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "Plant":
        """Build a Plant from a Supabase row dict."""
        water = record.get("water_interval_days")
        fertilize = record.get("fertilize_interval_days")
        return cls(
            id=str(record.get("id") or ""),
            name=record.get("name") or "",
            location=record.get("location") or "",
            water_interval_days=int(water) if water is not None else DEFAULT_WATER_INTERVAL_DAYS,
            fertilize_interval_days=int(fertilize) if fertilize is not None else DEFAULT_FERTILIZE_INTERVAL_DAYS,
            last_watered_at=parse_timestamp(record.get("last_watered_at")),
            last_fertilized_at=parse_timestamp(record.get("last_fertilized_at")),
            created_at=parse_timestamp(record.get("created_at")),
            photo_url=record.get("photo_url"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "location": self.location,
            "water_interval_days": self.water_interval_days,
            "fertilize_interval_days": self.fertilize_interval_days,
            "last_watered_at": _isoformat(self.last_watered_at),
            "last_fertilized_at": _isoformat(self.last_fertilized_at),
            "created_at": _isoformat(self.created_at),
            "photo_url": self.photo_url,
        }


@dataclass(frozen=True)
class CareTask:
    """A pending care action computed from a plant's schedule (never stored)."""

    plant: Plant
    action_type: ActionType
    days_until_due: int
    status: PlantStatus

    @property
    def is_overdue(self) -> bool:
        return self.days_until_due < 0

    @property
    def is_due_today(self) -> bool:
        return self.days_until_due == 0

    @property
    def due_description(self) -> str:
        days = self.days_until_due
        if days < -1:
            return f"{-days} days overdue"
        if days == -1:
            return "1 day overdue"
        if days == 0:
            return "Due today"
        if days == 1:
            return "Due tomorrow"
        return f"Due in {days} days"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "plant_id": self.plant.id,
            "plant_name": self.plant.name,
            "action": self.action_type.value,
            "days_until_due": self.days_until_due,
            "status": self.status.value,
            "is_overdue": self.is_overdue,
            "is_due_today": self.is_due_today,
            "due_description": self.due_description,
        }


@dataclass(frozen=True)
class CareAction:
    """One entry of a plant's care history (a `plant_actions` row)."""

    id: str
    plant_id: str
    action_type: ActionType
    performed_at: Optional[datetime] = None
    notes: Optional[str] = None

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "CareAction":
        return cls(
            id=str(record.get("id") or ""),
            plant_id=str(record.get("plant_id") or ""),
            action_type=ActionType(record.get("action_type")),
            performed_at=parse_timestamp(record.get("action_at")),
            notes=record.get("notes"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "plant_id": self.plant_id,
            "action": self.action_type.value,
            "label": "Watered" if self.action_type is ActionType.WATER else "Fertilized",
            "performed_at": _isoformat(self.performed_at),
            "notes": self.notes,
        }


@dataclass(frozen=True)
class CareSchedule:
    """Both care timers of one plant plus its headline status."""

    water_days_remaining: int
    fertilize_days_remaining: int
    status: PlantStatus

    def to_dict(self) -> Dict[str, Any]:
        return {
            "water_days_remaining": self.water_days_remaining,
            "fertilize_days_remaining": self.fertilize_days_remaining,
            "status": self.status.value,
        }


@dataclass(frozen=True)
class CareStreakState:
    streak_days: int = 0
    # Days since the Unix epoch; 0 means never tracked
    last_updated_day_index: int = 0


@dataclass(frozen=True)
class WeeklyCounterState:
    completed_count: int = 0
    # 7-day buckets since the Unix epoch; 0 means never reset
    last_reset_week_index: int = 0


@dataclass(frozen=True)
class CareDigest:
    """Pending care counts used to compose a single reminder notification."""

    water_count: int = 0
    fertilize_count: int = 0
    overdue_count: int = 0

    @property
    def total(self) -> int:
        return self.water_count + self.fertilize_count + self.overdue_count

    @property
    def is_empty(self) -> bool:
        return self.total == 0

    def to_dict(self) -> Dict[str, int]:
        return {
            "water_count": self.water_count,
            "fertilize_count": self.fertilize_count,
            "overdue_count": self.overdue_count,
        }


@dataclass(frozen=True)
class CareStats:
    total_plants: int = 0
    care_streak: int = 0
    tasks_completed_this_week: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            "total_plants": self.total_plants,
            "care_streak": self.care_streak,
            "tasks_completed_this_week": self.tasks_completed_this_week,
        }


@dataclass
class DashboardData:
    """Everything the dashboard shows after one load of the task list."""

    today_tasks: list = field(default_factory=list)
    overdue_tasks: list = field(default_factory=list)
    stats: CareStats = field(default_factory=CareStats)
    digest: CareDigest = field(default_factory=CareDigest)
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "today_tasks": [task.to_dict() for task in self.today_tasks],
            "overdue_tasks": [task.to_dict() for task in self.overdue_tasks],
            "stats": self.stats.to_dict(),
            "digest": self.digest.to_dict(),
            "error": self.error,
        }

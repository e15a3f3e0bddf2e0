"""
Key/value stores for the persisted care counters.

The streak tracker and weekly counter only need two operations, read(key) and
write(key, value), so they take a store object instead of reaching for a
global. Production uses SupabaseStateStore (one row per user and key in the
`user_care_state` table); tests and CLI dry runs use InMemoryStateStore.
"""

from __future__ import annotations
from typing import Dict, Optional
import logging

from greenmate.services import supabase_client
from greenmate.utils.errors import StateStoreError

logger = logging.getLogger(__name__)

# Keys shared with existing installs; do not rename
KEY_CARE_STREAK = "care_streak"
KEY_LAST_STREAK_UPDATE = "last_streak_update"
KEY_TASKS_COMPLETED_WEEK = "tasks_completed_week"
KEY_LAST_TASK_COUNT_WEEK = "last_task_count_week"

STATE_TABLE = "user_care_state"


class StateStore:
    """Capability interface: integer values by string key."""

    def read(self, key: str) -> Optional[int]:
        raise NotImplementedError

    def write(self, key: str, value: int) -> None:
        raise NotImplementedError

    def read_int(self, key: str, default: int = 0) -> int:
        value = self.read(key)
        return default if value is None else int(value)


class InMemoryStateStore(StateStore):
    def __init__(self, initial: Optional[Dict[str, int]] = None):
        self._values: Dict[str, int] = dict(initial or {})

    def read(self, key: str) -> Optional[int]:
        return self._values.get(key)

    def write(self, key: str, value: int) -> None:
        self._values[key] = int(value)

    def snapshot(self) -> Dict[str, int]:
        return dict(self._values)


class SupabaseStateStore(StateStore):
    """
    Per-user counters in Supabase.

    Table: user_care_state(user_id uuid, key text, value bigint),
    unique on (user_id, key). Uses the admin client so the scheduled job can
    run outside a user session.
    """

    def __init__(self, user_id: str, client=None):
        self.user_id = user_id
        self._client = client

    def _get_client(self):
        client = self._client or supabase_client.get_admin_client()
        if client is None:
            raise StateStoreError("Database not configured")
        return client

    def read(self, key: str) -> Optional[int]:
        client = self._get_client()
        try:
            response = (client.table(STATE_TABLE)
                        .select("value")
                        .eq("user_id", self.user_id)
                        .eq("key", key)
                        .maybe_single()
                        .execute())
        except Exception as e:
            raise StateStoreError(f"Error reading {key}: {e}") from e

        # maybe_single() returns no response at all when the row is missing
        row = response.data if response is not None else None
        if not row or row.get("value") is None:
            return None
        return int(row["value"])

    def write(self, key: str, value: int) -> None:
        client = self._get_client()
        try:
            client.table(STATE_TABLE).upsert(
                {"user_id": self.user_id, "key": key, "value": int(value)},
                on_conflict="user_id,key",
            ).execute()
        except Exception as e:
            raise StateStoreError(f"Error writing {key}: {e}") from e

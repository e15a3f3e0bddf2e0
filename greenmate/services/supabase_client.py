"""
Supabase client initialization and plant record helpers.

Provides centralized access to Supabase for:
- Plant records (read for care computation, thin CRUD for the plant API)
- Care journal entries (plant_actions table)
- Profile lookups for the daily reminder job

Plant reads raise PlantFetchError on failure so callers can decide how to
degrade; the dashboard treats a failed fetch as "zero plants".
"""

from __future__ import annotations
from typing import Any, Dict, List, Optional, Tuple
from datetime import datetime, timezone
import threading

from cachetools import TTLCache
from supabase import create_client, Client

from greenmate.models import ActionType, CareAction, Plant
from greenmate.utils.errors import PlantFetchError, app_logger


# Global client instances (initialized once per app)
_supabase_client: Optional[Client] = None  # User client (anon key)
_supabase_admin: Optional[Client] = None   # Admin client (service role key)

PLANTS_TABLE = "plants"
ACTIONS_TABLE = "plant_actions"
PROFILES_TABLE = "profiles"

# Plant snapshots per user, invalidated on every write
_CACHE_MAX_SIZE = 500
_plant_cache: TTLCache = TTLCache(maxsize=_CACHE_MAX_SIZE, ttl=300)
_cache_lock = threading.Lock()

# Columns written by the plant API; everything else is managed here or by the database
PLANT_FIELDS = (
    "name",
    "location",
    "water_interval_days",
    "fertilize_interval_days",
    "photo_url",
)

_LAST_PERFORMED_COLUMN = {
    ActionType.WATER: "last_watered_at",
    ActionType.FERTILIZE: "last_fertilized_at",
}


def init_supabase(app) -> None:
    """
    Initialize Supabase clients with app config.
    Creates two clients:
    - Regular client with anon key (for user operations)
    - Admin client with service role key (scheduled job, counters, journal)

    Call this from the Flask app factory.
    """
    global _supabase_client, _supabase_admin, _plant_cache

    ttl = app.config.get("PLANT_CACHE_TTL_SECONDS", 300)
    with _cache_lock:
        _plant_cache = TTLCache(maxsize=_CACHE_MAX_SIZE, ttl=ttl)

    url = app.config.get("SUPABASE_URL", "")
    anon_key = app.config.get("SUPABASE_ANON_KEY", "")
    service_key = app.config.get("SUPABASE_SERVICE_ROLE_KEY", "")

    if not url or not anon_key:
        app.logger.warning("Supabase URL or ANON_KEY not configured. Supabase features will be disabled.")
        _supabase_client = None
        _supabase_admin = None
        return

    try:
        _supabase_client = create_client(url, anon_key)
        app.logger.info("Supabase client initialized successfully")

        if service_key:
            _supabase_admin = create_client(url, service_key)
            app.logger.info("Supabase admin client initialized successfully")
        else:
            app.logger.warning("SUPABASE_SERVICE_ROLE_KEY not configured. Admin operations will be limited.")

    except Exception as e:
        app.logger.error(f"Failed to initialize Supabase client: {e}")
        _supabase_client = None
        _supabase_admin = None


def get_admin_client() -> Optional[Client]:
    """Get the admin Supabase client instance (admin client with service role key)."""
    return _supabase_admin


def _get_db() -> Optional[Client]:
    # Plant queries are always scoped by user_id, so the admin client is safe
    # to use and also works outside a user session (scheduled job, CLI).
    return _supabase_admin or _supabase_client


# ============================================================================
# Plant cache
# ============================================================================

def _cache_key(user_id: str) -> str:
    return f"plants:{user_id}"


def invalidate_plant_cache(user_id: str) -> None:
    """Drop the cached plant snapshot for a user. Call after any plant write."""
    with _cache_lock:
        _plant_cache.pop(_cache_key(user_id), None)


def clear_plant_cache() -> None:
    with _cache_lock:
        _plant_cache.clear()


# ============================================================================
# Plant reads
# ============================================================================

def _parse_plant_rows(rows: List[Dict[str, Any]]) -> List[Plant]:
    # A malformed row is skipped so the rest of the user's plants still load
    plants = []
    for row in rows:
        try:
            plants.append(Plant.from_record(row))
        except (TypeError, ValueError) as e:
            app_logger().warning(f"Skipping plant {row.get('id')} with unreadable data: {e}")
    return plants


def fetch_all_plants(user_id: str, use_cache: bool = True) -> List[Plant]:
    """
    Get all plants for a user, newest first.

    Args:
        user_id: Supabase user UUID
        use_cache: Serve a snapshot up to PLANT_CACHE_TTL_SECONDS old

    Returns:
        List of Plant objects (empty if the user has none)

    Raises:
        PlantFetchError: Supabase is not configured or the query failed
    """
    if use_cache:
        with _cache_lock:
            cached = _plant_cache.get(_cache_key(user_id))
        if cached is not None:
            return list(cached)

    db = _get_db()
    if not db:
        raise PlantFetchError("Database not configured")

    try:
        response = (db
                    .table(PLANTS_TABLE)
                    .select("*")
                    .eq("user_id", user_id)
                    .order("created_at", desc=True)
                    .execute())
    except Exception as e:
        raise PlantFetchError(f"Error fetching plants for user {user_id}: {e}") from e

    plants = _parse_plant_rows(response.data or [])

    if use_cache:
        with _cache_lock:
            _plant_cache[_cache_key(user_id)] = tuple(plants)

    return plants


def get_plant(plant_id: str, user_id: str) -> Optional[Plant]:
    """
    Get a single plant by ID, verifying ownership.

    Returns:
        Plant if found and owned by user, None otherwise
    """
    db = _get_db()
    if not db:
        return None

    try:
        response = (db
                    .table(PLANTS_TABLE)
                    .select("*")
                    .eq("id", plant_id)
                    .eq("user_id", user_id)
                    .maybe_single()
                    .execute())
        row = response.data if response is not None else None
        return Plant.from_record(row) if row else None
    except Exception as e:
        app_logger().error(f"Error getting plant {plant_id}: {e}")
        return None


# ============================================================================
# Plant writes
# ============================================================================

def create_plant(user_id: str, plant_data: Dict[str, Any]) -> Tuple[Optional[Plant], Optional[str]]:
    """
    Create a new plant for the user.

    Args:
        user_id: User UUID
        plant_data: Validated fields (see PLANT_FIELDS)

    Returns:
        (plant, error_message)
    """
    db = _get_db()
    if not db:
        return None, "Database not configured"

    record = {k: v for k, v in plant_data.items() if k in PLANT_FIELDS}
    record["user_id"] = user_id

    try:
        response = db.table(PLANTS_TABLE).insert(record).execute()
        if response.data:
            invalidate_plant_cache(user_id)
            return Plant.from_record(response.data[0]), None
        return None, "Failed to create plant"
    except Exception as e:
        return None, f"Error creating plant: {str(e)}"


def update_plant(
    plant_id: str,
    user_id: str,
    plant_data: Dict[str, Any],
) -> Tuple[Optional[Plant], Optional[str]]:
    """
    Update a plant's editable fields.

    Returns:
        (updated_plant, error_message)
    """
    db = _get_db()
    if not db:
        return None, "Database not configured"

    update_data = {k: v for k, v in plant_data.items() if k in PLANT_FIELDS}
    if not update_data:
        return None, "No fields to update"

    try:
        response = (db.table(PLANTS_TABLE)
                    .update(update_data)
                    .eq("id", plant_id)
                    .eq("user_id", user_id)
                    .execute())
        if response.data:
            invalidate_plant_cache(user_id)
            return Plant.from_record(response.data[0]), None
        return None, "Plant not found or unauthorized"
    except Exception as e:
        return None, f"Error updating plant: {str(e)}"


def delete_plant(plant_id: str, user_id: str) -> Tuple[bool, Optional[str]]:
    """
    Delete a plant and its care journal.

    Returns:
        (success, error_message)
    """
    db = _get_db()
    if not db:
        return False, "Database not configured"

    try:
        db.table(ACTIONS_TABLE).delete().eq("plant_id", plant_id).eq("user_id", user_id).execute()
        response = (db.table(PLANTS_TABLE)
                    .delete()
                    .eq("id", plant_id)
                    .eq("user_id", user_id)
                    .execute())
        if response.data:
            invalidate_plant_cache(user_id)
            return True, None
        return False, "Plant not found or unauthorized"
    except Exception as e:
        return False, f"Error deleting plant: {str(e)}"


def record_action_performed(
    user_id: str,
    plant_id: str,
    action_type: ActionType,
    performed_at: Optional[datetime] = None,
) -> Tuple[bool, Optional[str]]:
    """
    Record that a care action was performed on a plant.

    Updates the plant's last_watered_at / last_fertilized_at and adds a
    plant_actions journal row. If the journal insert fails after the plant
    timer was updated, the failure is logged and the call still succeeds.

    Args:
        user_id: User UUID (ownership check)
        plant_id: Plant UUID
        action_type: WATER or FERTILIZE
        performed_at: When the action happened (defaults to now, UTC)

    Returns:
        (success, error_message)
    """
    db = _get_db()
    if not db:
        return False, "Database not configured"

    performed_at = performed_at or datetime.now(timezone.utc)
    timestamp = performed_at.isoformat()

    try:
        response = (db.table(PLANTS_TABLE)
                    .update({_LAST_PERFORMED_COLUMN[action_type]: timestamp})
                    .eq("id", plant_id)
                    .eq("user_id", user_id)
                    .execute())
    except Exception as e:
        return False, f"Error recording {action_type.value}: {str(e)}"

    if not response.data:
        return False, "Plant not found or unauthorized"

    invalidate_plant_cache(user_id)

    try:
        db.table(ACTIONS_TABLE).insert({
            "user_id": user_id,
            "plant_id": plant_id,
            "action_type": action_type.value,
            "action_at": timestamp,
        }).execute()
    except Exception as e:
        # Plant timer is already updated; only the history entry is missing
        app_logger().warning(f"Failed to add journal entry for plant {plant_id}: {e}")

    return True, None


def get_recent_actions(plant_id: str, user_id: str, limit: int = 10) -> List[CareAction]:
    """
    Care history of one plant, most recent first.

    Returns an empty list if Supabase is unavailable or the query fails;
    unreadable journal rows are skipped.
    """
    db = _get_db()
    if not db:
        return []

    try:
        response = (db.table(ACTIONS_TABLE)
                    .select("*")
                    .eq("plant_id", plant_id)
                    .eq("user_id", user_id)
                    .order("action_at", desc=True)
                    .limit(limit)
                    .execute())
    except Exception as e:
        app_logger().error(f"Error fetching care history for plant {plant_id}: {e}")
        return []

    actions = []
    for row in response.data or []:
        try:
            actions.append(CareAction.from_record(row))
        except (TypeError, ValueError) as e:
            app_logger().warning(f"Skipping journal entry {row.get('id')}: {e}")
    return actions


# ============================================================================
# Profiles
# ============================================================================

def list_user_ids(notifications_only: bool = True) -> List[str]:
    """
    IDs of users to include in the daily care reminder run.

    Uses the admin client (bypasses RLS). Returns an empty list if the admin
    client is unavailable or the query fails.
    """
    if not _supabase_admin:
        return []

    try:
        query = _supabase_admin.table(PROFILES_TABLE).select("id")
        if notifications_only:
            query = query.eq("notifications_enabled", True)
        response = query.execute()
        return [row["id"] for row in (response.data or []) if row.get("id")]
    except Exception as e:
        app_logger().error(f"Error listing users for care reminders: {e}")
        return []

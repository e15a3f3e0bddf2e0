"""
Input validation and normalization for the plant and task APIs.

The care engine assumes positive intervals; this module is where that is
enforced. Names and locations are trimmed, bounded and stripped of odd
characters before they reach the database.
"""

from __future__ import annotations
import re
from typing import Any, Dict, Optional, Tuple

from greenmate.models import ActionType

_SAFE_CHARS_PATTERN = re.compile(r"[^a-zA-Z0-9\s\-\.,'()/&]+")

# UUID validation pattern (RFC 4122 compliant)
_UUID_PATTERN = re.compile(
    r'^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$',
    re.IGNORECASE
)

MAX_NAME_LEN = 80
MAX_LOCATION_LEN = 80
MIN_INTERVAL_DAYS = 1
MAX_INTERVAL_DAYS = 365


def is_valid_uuid(value: Any) -> bool:
    return isinstance(value, str) and bool(_UUID_PATTERN.match(value))


def _soft_sanitize(text: Optional[str], max_len: int) -> str:
    """
    Normalizes names/locations:
    - strip whitespace
    - bound length
    - remove disallowed characters via allowlist
    - collapse double spaces
    """
    t = (text or "").strip()
    if not t:
        return ""
    t = t[:max_len]
    t = _SAFE_CHARS_PATTERN.sub("", t)
    t = re.sub(r"\s{2,}", " ", t)
    return t.strip()


def parse_interval(value: Any, field_name: str) -> Tuple[Optional[int], Optional[str]]:
    """
    Parse a care interval in days.

    Returns:
        (days, error_message)
    """
    if isinstance(value, bool):
        return None, f"{field_name} must be a whole number of days."
    try:
        days = int(value)
    except (TypeError, ValueError):
        return None, f"{field_name} must be a whole number of days."
    if isinstance(value, float) and value != days:
        return None, f"{field_name} must be a whole number of days."
    if days < MIN_INTERVAL_DAYS or days > MAX_INTERVAL_DAYS:
        return None, f"{field_name} must be between {MIN_INTERVAL_DAYS} and {MAX_INTERVAL_DAYS} days."
    return days, None


def parse_action_type(value: Any) -> Optional[ActionType]:
    """Map 'water' / 'fertilize' (any case) to an ActionType, None if unknown."""
    if not isinstance(value, str):
        return None
    try:
        return ActionType(value.strip().lower())
    except ValueError:
        return None


def validate_plant_payload(
    data: Dict[str, Any],
    partial: bool = False,
    defaults: Optional[Dict[str, int]] = None,
) -> Tuple[Dict[str, Any], Optional[str]]:
    """
    Validate a plant create/update payload.

    Args:
        data: Raw JSON body
        partial: True for updates (only provided fields are validated)
        defaults: Interval defaults for creates, keyed like the payload

    Returns:
        (clean_payload, error_message)
    """
    if not isinstance(data, dict):
        return {}, "Invalid request body."

    clean: Dict[str, Any] = {}

    if "name" in data or not partial:
        name = _soft_sanitize(data.get("name"), MAX_NAME_LEN)
        if not name:
            return {}, "Plant name is required."
        clean["name"] = name

    if "location" in data:
        clean["location"] = _soft_sanitize(data.get("location"), MAX_LOCATION_LEN)

    for field_name, label in (
        ("water_interval_days", "Watering interval"),
        ("fertilize_interval_days", "Fertilizing interval"),
    ):
        if field_name in data:
            days, error = parse_interval(data[field_name], label)
            if error:
                return {}, error
            clean[field_name] = days
        elif not partial and defaults and field_name in defaults:
            clean[field_name] = defaults[field_name]

    if partial and not clean:
        return {}, "No fields to update."

    return clean, None

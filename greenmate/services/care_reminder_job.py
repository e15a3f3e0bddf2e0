"""
Daily care reminder job.

Builds each user's care digest and logs the reminder message that would be
sent. Runs from APScheduler (registered in create_app) or on demand through
`flask run-care-reminders`. Delivery is handled outside this service.
"""

from __future__ import annotations
from typing import Dict, Optional
import logging

from greenmate.services import supabase_client
from greenmate.services.clock import Clock, system_clock
from greenmate.services.digest import DIGEST_TITLE, build_digest, format_digest_message
from greenmate.utils.errors import PlantFetchError

logger = logging.getLogger(__name__)


def run_care_reminders(clock: Optional[Clock] = None) -> Dict[str, int]:
    """
    Compose the care digest for every user with notifications enabled.

    Returns:
        Counts: users_checked, notified (non-empty digest), skipped (nothing due),
        errors (plant fetch failed)
    """
    clock = clock or system_clock
    stats = {
        "users_checked": 0,
        "notified": 0,
        "skipped": 0,
        "errors": 0,
    }

    for user_id in supabase_client.list_user_ids():
        stats["users_checked"] += 1

        try:
            # Scheduled runs always read fresh data
            plants = supabase_client.fetch_all_plants(user_id, use_cache=False)
        except PlantFetchError as e:
            logger.warning(f"[CareReminders] Skipping user {user_id}: {e}")
            stats["errors"] += 1
            continue

        message = format_digest_message(build_digest(plants, clock.now()))
        if message is None:
            stats["skipped"] += 1
            continue

        logger.info(f"[CareReminders] {DIGEST_TITLE} for user {user_id}: {message}")
        stats["notified"] += 1

    logger.info(
        f"[CareReminders] Checked {stats['users_checked']} user(s): "
        f"{stats['notified']} notified, {stats['skipped']} skipped, {stats['errors']} errors"
    )
    return stats

"""
Care JSON endpoints: dashboard tasks and stats, task completion, reminder digest.

Endpoints (mounted under /api/v1):
- GET  /dashboard        Due-today and overdue tasks, streak and weekly stats
- POST /tasks/complete   Mark a watering/fertilizing task done
- GET  /digest           Pending care counts and the reminder message
"""

from __future__ import annotations
from flask import Blueprint, current_app, jsonify, request

from greenmate.extensions import limiter
from greenmate.services import dashboard as dashboard_service
from greenmate.services import supabase_client
from greenmate.services.clock import system_clock
from greenmate.services.digest import DIGEST_TITLE, build_digest, format_digest_message
from greenmate.utils.auth import get_current_user_id, require_auth
from greenmate.utils.errors import PlantFetchError, log_info, sanitize_error
from greenmate.utils.validation import is_valid_uuid, parse_action_type

care_bp = Blueprint("care", __name__)


@care_bp.before_request
def _enforce_ajax_for_mutations():
    """Require X-Requested-With on state-changing requests (CSRF protection for the JSON API)."""
    if request.method in ("POST", "PUT", "DELETE", "PATCH"):
        if request.headers.get("X-Requested-With") != "XMLHttpRequest":
            return jsonify({
                "success": False,
                "error": "Invalid request. Please refresh the page and try again."
            }), 403


@care_bp.route("/dashboard", methods=["GET"])
@require_auth
def dashboard():
    """Care tasks and stats for the signed-in user."""
    user_id = get_current_user_id()
    data = dashboard_service.load_dashboard(user_id)

    return jsonify({
        "success": data.error is None,
        **data.to_dict(),
    })


@care_bp.route("/tasks/complete", methods=["POST"])
@require_auth
@limiter.limit(lambda: current_app.config.get("TASK_COMPLETE_RATE_LIMIT", "30 per minute"))
def complete_task():
    """
    Mark a care task complete.

    Body: {"plant_id": "<uuid>", "action": "water" | "fertilize"}
    """
    user_id = get_current_user_id()
    payload = request.get_json(silent=True) or {}

    plant_id = payload.get("plant_id")
    if not is_valid_uuid(plant_id):
        return jsonify({"success": False, "error": "Invalid plant ID"}), 400

    action = parse_action_type(payload.get("action"))
    if action is None:
        return jsonify({"success": False, "error": "Action must be 'water' or 'fertilize'"}), 400

    success, error = dashboard_service.complete_task(user_id, plant_id, action)
    if not success:
        if error:
            current_app.logger.error(f"Complete task failed: {error}")
        return jsonify({"success": False, "error": "Failed to complete task"}), 400

    log_info("Care task completed", user_id=user_id, plant_id=plant_id, action=action.value)
    return jsonify({"success": True, "message": f"{action.display_name} recorded"})


@care_bp.route("/digest", methods=["GET"])
@require_auth
def digest():
    """Pending care counts for a single reminder notification."""
    user_id = get_current_user_id()

    try:
        plants = supabase_client.fetch_all_plants(user_id)
    except PlantFetchError as e:
        return jsonify({"success": False, "error": sanitize_error(e, "database", "Digest fetch failed")}), 503

    care_digest = build_digest(plants, system_clock.now())
    return jsonify({
        "success": True,
        "title": DIGEST_TITLE,
        "message": format_digest_message(care_digest),
        **care_digest.to_dict(),
    })

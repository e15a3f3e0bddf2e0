"""
Plant JSON endpoints (mounted under /api/v1).

- GET    /plants                 List with status; ?filter=&sort=&q=&location=
- POST   /plants                 Register a plant
- PATCH  /plants/<id>            Edit name, location or intervals
- DELETE /plants/<id>            Remove a plant and its care journal
- GET    /plants/<id>/schedule   Days until water/fertilize and headline status
- GET    /plants/<id>/history    Recent care actions (?limit=, default 10)
"""

from __future__ import annotations
from flask import Blueprint, current_app, jsonify, request

from greenmate.models import Plant
from greenmate.services import supabase_client
from greenmate.services.clock import system_clock
from greenmate.services.plant_status import (
    PlantFilter,
    SortOrder,
    care_schedule,
    filter_plants,
    sort_plants,
)
from greenmate.utils.auth import get_current_user_id, require_auth
from greenmate.utils.errors import GENERIC_MESSAGES, PlantFetchError, log_info, sanitize_error
from greenmate.utils.validation import is_valid_uuid, validate_plant_payload

plants_bp = Blueprint("plants", __name__)

HISTORY_LIMIT = 10
MAX_HISTORY_LIMIT = 50


@plants_bp.before_request
def _enforce_ajax_for_mutations():
    if request.method in ("POST", "PUT", "DELETE", "PATCH"):
        if request.headers.get("X-Requested-With") != "XMLHttpRequest":
            return jsonify({
                "success": False,
                "error": "Invalid request. Please refresh the page and try again."
            }), 403


def _plant_with_schedule(plant: Plant, now) -> dict:
    return {**plant.to_dict(), "schedule": care_schedule(plant, now).to_dict()}


def _parse_enum(enum_cls, raw, default):
    try:
        return enum_cls((raw or default.value).strip().lower())
    except ValueError:
        return None


@plants_bp.route("/plants", methods=["GET"])
@require_auth
def list_plants():
    """Plant list with status, filtered and sorted like the My Plants screen."""
    user_id = get_current_user_id()

    status_filter = _parse_enum(PlantFilter, request.args.get("filter"), PlantFilter.ALL)
    order = _parse_enum(SortOrder, request.args.get("sort"), SortOrder.NAME_ASC)
    if status_filter is None or order is None:
        return jsonify({"success": False, "error": GENERIC_MESSAGES["validation"]}), 400

    try:
        plants = supabase_client.fetch_all_plants(user_id)
    except PlantFetchError as e:
        return jsonify({
            "success": False,
            "error": sanitize_error(e, "database", "Plant list fetch failed"),
            "plants": [],
            "count": 0,
        }), 503

    now = system_clock.now()
    result = filter_plants(
        plants,
        now,
        status_filter=status_filter,
        query=request.args.get("q", ""),
        location=request.args.get("location"),
    )
    result = sort_plants(result, now, order)

    return jsonify({
        "success": True,
        "count": len(result),
        "total": len(plants),
        "plants": [_plant_with_schedule(p, now) for p in result],
    })


@plants_bp.route("/plants", methods=["POST"])
@require_auth
def create_plant():
    user_id = get_current_user_id()
    defaults = {
        "water_interval_days": current_app.config.get("DEFAULT_WATER_INTERVAL_DAYS", 3),
        "fertilize_interval_days": current_app.config.get("DEFAULT_FERTILIZE_INTERVAL_DAYS", 14),
    }

    payload, error = validate_plant_payload(request.get_json(silent=True), defaults=defaults)
    if error:
        return jsonify({"success": False, "error": error}), 400

    plant, error = supabase_client.create_plant(user_id, payload)
    if error or plant is None:
        current_app.logger.error(f"Create plant failed: {error}")
        return jsonify({"success": False, "error": GENERIC_MESSAGES["database"]}), 500

    log_info("Plant created", user_id=user_id, plant_id=plant.id)
    return jsonify({"success": True, "plant": _plant_with_schedule(plant, system_clock.now())}), 201


@plants_bp.route("/plants/<plant_id>", methods=["PATCH"])
@require_auth
def update_plant(plant_id):
    user_id = get_current_user_id()
    if not is_valid_uuid(plant_id):
        return jsonify({"success": False, "error": "Invalid plant ID"}), 400

    payload, error = validate_plant_payload(request.get_json(silent=True), partial=True)
    if error:
        return jsonify({"success": False, "error": error}), 400

    plant, error = supabase_client.update_plant(plant_id, user_id, payload)
    if error or plant is None:
        current_app.logger.error(f"Update plant failed: {error}")
        return jsonify({"success": False, "error": GENERIC_MESSAGES["not_found"]}), 404

    return jsonify({"success": True, "plant": _plant_with_schedule(plant, system_clock.now())})


@plants_bp.route("/plants/<plant_id>", methods=["DELETE"])
@require_auth
def delete_plant(plant_id):
    user_id = get_current_user_id()
    if not is_valid_uuid(plant_id):
        return jsonify({"success": False, "error": "Invalid plant ID"}), 400

    success, error = supabase_client.delete_plant(plant_id, user_id)
    if not success:
        current_app.logger.error(f"Delete plant failed: {error}")
        return jsonify({"success": False, "error": GENERIC_MESSAGES["not_found"]}), 404

    log_info("Plant deleted", user_id=user_id, plant_id=plant_id)
    return jsonify({"success": True, "message": "Plant deleted"})


@plants_bp.route("/plants/<plant_id>/schedule", methods=["GET"])
@require_auth
def plant_schedule(plant_id):
    """Care timers of one plant (the plant detail view)."""
    user_id = get_current_user_id()
    if not is_valid_uuid(plant_id):
        return jsonify({"success": False, "error": "Invalid plant ID"}), 400

    plant = supabase_client.get_plant(plant_id, user_id)
    if plant is None:
        return jsonify({"success": False, "error": GENERIC_MESSAGES["not_found"]}), 404

    return jsonify({"success": True, "plant": _plant_with_schedule(plant, system_clock.now())})


@plants_bp.route("/plants/<plant_id>/history", methods=["GET"])
@require_auth
def plant_history(plant_id):
    """Last care actions of one plant, newest first. History errors yield an empty list."""
    user_id = get_current_user_id()
    if not is_valid_uuid(plant_id):
        return jsonify({"success": False, "error": "Invalid plant ID"}), 400

    limit = request.args.get("limit", HISTORY_LIMIT, type=int)
    limit = max(1, min(limit, MAX_HISTORY_LIMIT))

    actions = supabase_client.get_recent_actions(plant_id, user_id, limit=limit)
    return jsonify({
        "success": True,
        "count": len(actions),
        "history": [action.to_dict() for action in actions],
    })

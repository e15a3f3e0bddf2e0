"""
Tests for the JSON API blueprints (greenmate/routes).
"""

from datetime import timedelta
from unittest.mock import patch

import pytest

from greenmate.models import ActionType, CareAction, CareStats, DashboardData
from greenmate.services.clock import FixedClock
from greenmate.utils.errors import PlantFetchError
from conftest import AJAX, NOW, PLANT_ID, USER_ID, make_plant


@pytest.fixture(autouse=True)
def _fixed_route_clock(monkeypatch):
    clock = FixedClock(NOW)
    monkeypatch.setattr("greenmate.routes.care.system_clock", clock)
    monkeypatch.setattr("greenmate.routes.plants.system_clock", clock)
    return clock


class TestAuthAndCsrf:
    def test_dashboard_requires_login(self, client):
        resp = client.get("/api/v1/dashboard")
        assert resp.status_code == 401
        assert resp.get_json() == {"success": False, "error": "Authentication required"}

    def test_mutation_without_ajax_header_is_rejected(self, auth_client):
        resp = auth_client.post("/api/v1/tasks/complete", json={"plant_id": PLANT_ID, "action": "water"})
        assert resp.status_code == 403

    def test_plant_mutation_without_ajax_header_is_rejected(self, auth_client):
        assert auth_client.delete(f"/api/v1/plants/{PLANT_ID}").status_code == 403

    def test_security_headers(self, client):
        resp = client.get("/api/v1/dashboard")
        assert resp.headers["X-Content-Type-Options"] == "nosniff"
        assert resp.headers["X-Frame-Options"] == "DENY"


class TestDashboardEndpoint:
    @patch("greenmate.routes.care.dashboard_service")
    def test_returns_dashboard(self, mock_service, auth_client):
        mock_service.load_dashboard.return_value = DashboardData(stats=CareStats(3, 2, 5))

        resp = auth_client.get("/api/v1/dashboard")

        data = resp.get_json()
        assert resp.status_code == 200
        assert data["success"] is True
        assert data["stats"] == {"total_plants": 3, "care_streak": 2, "tasks_completed_this_week": 5}
        assert data["today_tasks"] == [] and data["overdue_tasks"] == []
        mock_service.load_dashboard.assert_called_once_with(USER_ID)

    @patch("greenmate.routes.care.dashboard_service")
    def test_degraded_dashboard_reports_error(self, mock_service, auth_client):
        mock_service.load_dashboard.return_value = DashboardData(error="Unable to load data. Please try again.")

        data = auth_client.get("/api/v1/dashboard").get_json()

        assert data["success"] is False
        assert data["stats"]["total_plants"] == 0


class TestCompleteTaskEndpoint:
    @patch("greenmate.routes.care.dashboard_service")
    def test_success(self, mock_service, auth_client):
        mock_service.complete_task.return_value = (True, None)

        resp = auth_client.post(
            "/api/v1/tasks/complete", json={"plant_id": PLANT_ID, "action": "Water"}, headers=AJAX
        )

        assert resp.status_code == 200
        assert resp.get_json() == {"success": True, "message": "Watering recorded"}
        mock_service.complete_task.assert_called_once_with(USER_ID, PLANT_ID, ActionType.WATER)

    def test_invalid_plant_id(self, auth_client):
        resp = auth_client.post(
            "/api/v1/tasks/complete", json={"plant_id": "nope", "action": "water"}, headers=AJAX
        )
        assert resp.status_code == 400
        assert resp.get_json()["error"] == "Invalid plant ID"

    def test_invalid_action(self, auth_client):
        resp = auth_client.post(
            "/api/v1/tasks/complete", json={"plant_id": PLANT_ID, "action": "prune"}, headers=AJAX
        )
        assert resp.status_code == 400

    @patch("greenmate.routes.care.dashboard_service")
    def test_failure(self, mock_service, auth_client):
        mock_service.complete_task.return_value = (False, "Plant not found or unauthorized")

        resp = auth_client.post(
            "/api/v1/tasks/complete", json={"plant_id": PLANT_ID, "action": "fertilize"}, headers=AJAX
        )

        assert resp.status_code == 400
        assert resp.get_json()["error"] == "Failed to complete task"


class TestDigestEndpoint:
    @patch("greenmate.routes.care.supabase_client")
    def test_digest_message(self, mock_db, auth_client):
        mock_db.fetch_all_plants.return_value = [make_plant("Fern")]

        data = auth_client.get("/api/v1/digest").get_json()

        assert data["success"] is True
        assert data["title"] == "Plant Care Reminder"
        assert data["water_count"] == 1
        assert data["fertilize_count"] == 1
        assert data["message"] == "1 to water, 1 to fertilize"

    @patch("greenmate.routes.care.supabase_client")
    def test_digest_fetch_failure(self, mock_db, auth_client):
        mock_db.fetch_all_plants.side_effect = PlantFetchError("down")
        assert auth_client.get("/api/v1/digest").status_code == 503


class TestPlantsEndpoints:
    @patch("greenmate.routes.plants.supabase_client")
    def test_list_filters_and_sorts(self, mock_db, auth_client):
        mock_db.fetch_all_plants.return_value = [
            make_plant("Basil", water_days_ago=0, fertilize_days_ago=0),
            make_plant("Aloe"),
            make_plant("Cactus", water_days_ago=9, fertilize_days_ago=0),
        ]

        resp = auth_client.get("/api/v1/plants?filter=needs_attention&sort=name_asc")

        data = resp.get_json()
        assert resp.status_code == 200
        assert data["total"] == 3
        assert [p["name"] for p in data["plants"]] == ["Aloe", "Cactus"]
        assert data["plants"][1]["schedule"]["status"] == "overdue"

    @patch("greenmate.routes.plants.supabase_client")
    def test_list_defaults_to_name_order(self, mock_db, auth_client):
        mock_db.fetch_all_plants.return_value = [
            make_plant("cactus", created_at=NOW),
            make_plant("Aloe", created_at=NOW - timedelta(days=3)),
        ]

        data = auth_client.get("/api/v1/plants").get_json()

        assert [p["name"] for p in data["plants"]] == ["Aloe", "cactus"]

    def test_list_rejects_unknown_sort(self, auth_client):
        assert auth_client.get("/api/v1/plants?sort=random").status_code == 400

    @patch("greenmate.routes.plants.supabase_client")
    def test_list_fetch_failure(self, mock_db, auth_client):
        mock_db.fetch_all_plants.side_effect = PlantFetchError("down")
        assert auth_client.get("/api/v1/plants").status_code == 503

    @patch("greenmate.routes.plants.supabase_client")
    def test_create_applies_default_intervals(self, mock_db, auth_client):
        mock_db.create_plant.return_value = (make_plant("Pothos", id=PLANT_ID), None)

        resp = auth_client.post("/api/v1/plants", json={"name": "  Pothos "}, headers=AJAX)

        assert resp.status_code == 201
        mock_db.create_plant.assert_called_once_with(USER_ID, {
            "name": "Pothos",
            "water_interval_days": 3,
            "fertilize_interval_days": 14,
        })
        assert resp.get_json()["plant"]["schedule"]["water_days_remaining"] == 0

    def test_create_rejects_bad_interval(self, auth_client):
        resp = auth_client.post(
            "/api/v1/plants", json={"name": "Pothos", "water_interval_days": 0}, headers=AJAX
        )
        assert resp.status_code == 400

    @patch("greenmate.routes.plants.supabase_client")
    def test_update(self, mock_db, auth_client):
        mock_db.update_plant.return_value = (make_plant("Pothos", id=PLANT_ID, water_interval=5), None)

        resp = auth_client.patch(f"/api/v1/plants/{PLANT_ID}", json={"water_interval_days": 5}, headers=AJAX)

        assert resp.status_code == 200
        mock_db.update_plant.assert_called_once_with(PLANT_ID, USER_ID, {"water_interval_days": 5})

    @patch("greenmate.routes.plants.supabase_client")
    def test_update_missing_plant(self, mock_db, auth_client):
        mock_db.update_plant.return_value = (None, "Plant not found or unauthorized")
        resp = auth_client.patch(f"/api/v1/plants/{PLANT_ID}", json={"name": "X"}, headers=AJAX)
        assert resp.status_code == 404

    @patch("greenmate.routes.plants.supabase_client")
    def test_delete(self, mock_db, auth_client):
        mock_db.delete_plant.return_value = (True, None)
        resp = auth_client.delete(f"/api/v1/plants/{PLANT_ID}", headers=AJAX)
        assert resp.status_code == 200
        mock_db.delete_plant.assert_called_once_with(PLANT_ID, USER_ID)

    @patch("greenmate.routes.plants.supabase_client")
    def test_schedule(self, mock_db, auth_client):
        mock_db.get_plant.return_value = make_plant("Fern", id=PLANT_ID, water_days_ago=1, fertilize_days_ago=20)

        schedule = auth_client.get(f"/api/v1/plants/{PLANT_ID}/schedule").get_json()["plant"]["schedule"]

        assert schedule["water_days_remaining"] == 2
        assert schedule["fertilize_days_remaining"] == -6
        assert schedule["status"] == "overdue"

    @patch("greenmate.routes.plants.supabase_client")
    def test_schedule_unknown_plant(self, mock_db, auth_client):
        mock_db.get_plant.return_value = None
        assert auth_client.get(f"/api/v1/plants/{PLANT_ID}/schedule").status_code == 404


class TestPlantHistoryEndpoint:
    @patch("greenmate.routes.plants.supabase_client")
    def test_history_newest_first(self, mock_db, auth_client):
        mock_db.get_recent_actions.return_value = [
            CareAction("a2", PLANT_ID, ActionType.FERTILIZE, NOW),
            CareAction("a1", PLANT_ID, ActionType.WATER, NOW - timedelta(days=2)),
        ]

        data = auth_client.get(f"/api/v1/plants/{PLANT_ID}/history").get_json()

        assert data["success"] is True
        assert data["count"] == 2
        assert [(h["action"], h["label"]) for h in data["history"]] == [
            ("fertilize", "Fertilized"),
            ("water", "Watered"),
        ]
        mock_db.get_recent_actions.assert_called_once_with(PLANT_ID, USER_ID, limit=10)

    @patch("greenmate.routes.plants.supabase_client")
    def test_history_read_failure_is_empty_not_error(self, mock_db, auth_client):
        mock_db.get_recent_actions.return_value = []

        resp = auth_client.get(f"/api/v1/plants/{PLANT_ID}/history")

        assert resp.status_code == 200
        assert resp.get_json() == {"success": True, "count": 0, "history": []}

    @patch("greenmate.routes.plants.supabase_client")
    def test_history_limit_is_bounded(self, mock_db, auth_client):
        mock_db.get_recent_actions.return_value = []
        auth_client.get(f"/api/v1/plants/{PLANT_ID}/history?limit=500")
        mock_db.get_recent_actions.assert_called_once_with(PLANT_ID, USER_ID, limit=50)

    def test_history_rejects_bad_id(self, auth_client):
        assert auth_client.get("/api/v1/plants/not-a-uuid/history").status_code == 400

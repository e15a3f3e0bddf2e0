"""
Shared pytest fixtures: test app, signed-in client, fixed clock, in-memory store.
"""

import os
from datetime import datetime, timedelta, timezone

import pytest

os.environ["APP_CONFIG"] = "greenmate.config.TestConfig"

from greenmate import create_app  # noqa: E402
from greenmate.models import Plant  # noqa: E402
from greenmate.services import supabase_client  # noqa: E402
from greenmate.services.clock import FixedClock  # noqa: E402
from greenmate.services.state_store import InMemoryStateStore  # noqa: E402

NOW = datetime(2025, 6, 15, 12, 0, tzinfo=timezone.utc)
USER_ID = "11111111-1111-4111-8111-111111111111"
PLANT_ID = "22222222-2222-4222-8222-222222222222"
AJAX = {"X-Requested-With": "XMLHttpRequest"}


def make_plant(
    name="Fern",
    water_days_ago=None,
    fertilize_days_ago=None,
    water_interval=3,
    fertilize_interval=14,
    now=NOW,
    **kwargs,
):
    """Build a Plant whose timers were last reset N days before `now` (None = never)."""
    return Plant(
        id=kwargs.pop("id", f"plant-{name.lower()}"),
        name=name,
        water_interval_days=water_interval,
        fertilize_interval_days=fertilize_interval,
        last_watered_at=now - timedelta(days=water_days_ago) if water_days_ago is not None else None,
        last_fertilized_at=now - timedelta(days=fertilize_days_ago) if fertilize_days_ago is not None else None,
        **kwargs,
    )


@pytest.fixture(autouse=True)
def _reset_supabase(monkeypatch):
    """No test talks to a real Supabase project."""
    monkeypatch.setattr(supabase_client, "_supabase_client", None)
    monkeypatch.setattr(supabase_client, "_supabase_admin", None)
    supabase_client.clear_plant_cache()
    yield
    supabase_client.clear_plant_cache()


@pytest.fixture
def app():
    app = create_app()
    yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_client(client):
    with client.session_transaction() as sess:
        sess["user"] = {"id": USER_ID, "email": "grower@example.com"}
    return client


@pytest.fixture
def clock():
    return FixedClock(NOW)


@pytest.fixture
def store():
    return InMemoryStateStore()

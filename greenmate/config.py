"""
Centralized configuration for all environments.

Select a config by setting:
  APP_CONFIG=greenmate.config.DevConfig      # local dev
  APP_CONFIG=greenmate.config.ProdConfig     # production (default if unset)
  APP_CONFIG=greenmate.config.TestConfig     # pytest

Notes:
- SECRET_KEY is read from FLASK_SECRET_KEY
- Rate limiting uses Flask-Limiter v3 keys (RATELIMIT_*).
- Care reminder times are UTC, matching the UTC day boundaries used for streaks.
"""

from __future__ import annotations
import os
import secrets
from datetime import timedelta


class BaseConfig:
    # Generate a random key if env var is missing so dev/test never runs with
    # an empty string (production enforces a real key at startup)
    SECRET_KEY = os.getenv("FLASK_SECRET_KEY") or secrets.token_hex(32)
    DEBUG = False
    TESTING = False

    # Session configuration
    PERMANENT_SESSION_LIFETIME = timedelta(days=7)
    SESSION_COOKIE_SECURE = True
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = "Lax"

    # Supabase (plant records, care journal, persisted care counters)
    SUPABASE_URL = os.getenv("SUPABASE_URL", "")
    SUPABASE_ANON_KEY = os.getenv("SUPABASE_ANON_KEY", "")
    SUPABASE_SERVICE_ROLE_KEY = os.getenv("SUPABASE_SERVICE_ROLE_KEY", "")

    # Flask-Limiter v3
    RATELIMIT_ENABLED = os.getenv("RATELIMIT_ENABLED", "true").lower() == "true"
    RATELIMIT_STORAGE_URI = os.getenv("RATELIMIT_STORAGE_URI", "memory://")
    RATELIMIT_DEFAULT = os.getenv("RATELIMIT_DEFAULT", "40 per minute; 2000 per day")
    TASK_COMPLETE_RATE_LIMIT = "30 per minute"

    # Plant defaults (used when a new plant omits its intervals)
    DEFAULT_WATER_INTERVAL_DAYS = 3
    DEFAULT_FERTILIZE_INTERVAL_DAYS = 14

    # Plant query cache
    PLANT_CACHE_TTL_SECONDS = int(os.getenv("PLANT_CACHE_TTL_SECONDS", "300"))

    # Daily care reminder digest
    CARE_REMINDERS_ENABLED = os.getenv("CARE_REMINDERS_ENABLED", "true").lower() == "true"
    CARE_REMINDER_HOUR = int(os.getenv("CARE_REMINDER_HOUR", "9"))
    CARE_REMINDER_MINUTE = int(os.getenv("CARE_REMINDER_MINUTE", "0"))

    PREFERRED_URL_SCHEME = os.getenv("PREFERRED_URL_SCHEME", "https")


class ProdConfig(BaseConfig):
    """Production settings (selected by default if APP_CONFIG is unset)."""
    pass


class DevConfig(BaseConfig):
    """Developer-friendly settings."""
    ENV = "development"
    DEBUG = True
    PREFERRED_URL_SCHEME = "http"
    # Allow cookies over HTTP in dev
    SESSION_COOKIE_SECURE = False
    CARE_REMINDERS_ENABLED = False


class TestConfig(BaseConfig):
    """CI/pytest settings."""
    TESTING = True
    DEBUG = True
    RATELIMIT_ENABLED = False
    SESSION_COOKIE_SECURE = False
    CARE_REMINDERS_ENABLED = False
    SUPABASE_URL = ""
    SUPABASE_ANON_KEY = ""
    SUPABASE_SERVICE_ROLE_KEY = ""

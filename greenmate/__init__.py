"""
Application factory and global configuration.

Creates the Flask app, applies security headers, configures rate limiting,
registers the JSON blueprints and CLI commands, and schedules the daily care
reminder job. Care scheduling logic lives in greenmate.services, not here.
"""

from __future__ import annotations
import os
from flask import Flask, Response
from dotenv import load_dotenv
from .extensions import limiter
from .routes.care import care_bp
from .routes.plants import plants_bp
from .services import supabase_client


def _validate_production_security(app: Flask, cfg_path: str) -> None:
    """
    Validate critical security settings in production environments.

    Raises RuntimeError if production security requirements are not met.

    Checks:
    - SECRET_KEY must be set and strong (>= 32 characters)
    - DEBUG must be False
    - SESSION_COOKIE_SECURE must be True
    """
    is_production = "ProdConfig" in cfg_path
    if not is_production or app.config.get("TESTING", False):
        return

    errors = []

    secret_key = app.config.get("SECRET_KEY", "")
    if not secret_key:
        errors.append("SECRET_KEY is not set. Set FLASK_SECRET_KEY environment variable.")
    elif len(secret_key) < 32:
        errors.append(
            f"SECRET_KEY is too weak ({len(secret_key)} chars). "
            "Must be at least 32 characters for production security."
        )

    if app.config.get("DEBUG", False):
        errors.append("DEBUG must be False in production.")

    if not app.config.get("SESSION_COOKIE_SECURE", False):
        errors.append("SESSION_COOKIE_SECURE must be True in production.")

    if errors:
        error_msg = "\n\n[ERROR] PRODUCTION SECURITY VALIDATION FAILED:\n\n" + "\n\n".join(f"  * {err}" for err in errors)
        raise RuntimeError(error_msg)

    app.logger.info("[OK] Production security validation passed")


def _start_care_reminder_scheduler(app: Flask) -> None:
    """Schedule the daily care reminder digest (UTC)."""
    try:
        from apscheduler.schedulers.background import BackgroundScheduler
        from greenmate.services.care_reminder_job import run_care_reminders

        scheduler = BackgroundScheduler(timezone="UTC")

        # APScheduler runs jobs in background threads without app context
        def run_reminders():
            with app.app_context():
                run_care_reminders()

        hour = app.config.get("CARE_REMINDER_HOUR", 9)
        minute = app.config.get("CARE_REMINDER_MINUTE", 0)
        scheduler.add_job(
            func=run_reminders,
            trigger="cron",
            hour=hour,
            minute=minute,
            id="daily_care_reminders",
            name="Daily Care Reminder Digest",
            replace_existing=True
        )
        scheduler.start()
        app.logger.info(f"[Scheduler] Daily care reminder job scheduled for {hour:02d}:{minute:02d} UTC")

        import atexit
        atexit.register(lambda: scheduler.shutdown())

    except Exception as e:
        app.logger.warning(f"[Scheduler] Failed to initialize care reminder scheduler: {e}")


def create_app() -> Flask:
    # override=False so production env vars are not overwritten by a stale .env file
    load_dotenv(override=False)

    app = Flask(__name__)

    # Allow APP_CONFIG to override (e.g., greenmate.config.DevConfig)
    cfg_path = os.getenv("APP_CONFIG", "greenmate.config.ProdConfig")
    try:
        app.config.from_object(cfg_path)
    except (ImportError, AttributeError) as e:
        app.logger.warning(f"Could not load config object {cfg_path}: {e}")

    _validate_production_security(app, cfg_path)

    limiter.init_app(app)
    if not app.config.get("RATELIMIT_ENABLED", True):
        limiter.enabled = False

    if not app.secret_key:
        app.secret_key = app.config.get("SECRET_KEY", "")

    supabase_client.init_supabase(app)

    @app.after_request
    def apply_security_headers(resp: Response) -> Response:
        resp.headers["X-Content-Type-Options"] = "nosniff"
        resp.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        resp.headers["X-Frame-Options"] = "DENY"
        resp.headers["Cache-Control"] = "no-store"
        if app.config.get("SESSION_COOKIE_SECURE", False):
            resp.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        return resp

    app.register_blueprint(care_bp, url_prefix="/api/v1")
    app.register_blueprint(plants_bp, url_prefix="/api/v1")

    if not app.config.get("TESTING", False) and app.config.get("CARE_REMINDERS_ENABLED", True):
        _start_care_reminder_scheduler(app)

    from greenmate.cli import care_digest_command, care_tasks_command, run_care_reminders_command
    app.cli.add_command(care_tasks_command)
    app.cli.add_command(care_digest_command)
    app.cli.add_command(run_care_reminders_command)

    return app

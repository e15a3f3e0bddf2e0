"""
Production WSGI entry point.

Usage:
    gunicorn -w 2 -k gthread -b 0.0.0.0:$PORT wsgi:app

Run a single worker process (or set CARE_REMINDERS_ENABLED=false on all but
one) so the daily care reminder job is scheduled only once.
"""

from greenmate import create_app

app = create_app()

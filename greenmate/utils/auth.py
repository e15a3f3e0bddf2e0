"""
Authentication helpers for the JSON API.

The session is established by the sign-in flow (outside this service) and
holds the Supabase user under SESSION_USER_KEY.
"""

from __future__ import annotations
from functools import wraps
from typing import Any, Dict, Optional

from flask import g, jsonify, session

SESSION_USER_KEY = "user"


def get_current_user() -> Optional[Dict[str, Any]]:
    """Get currently logged-in user from session."""
    if hasattr(g, "user"):
        return g.user

    user = session.get(SESSION_USER_KEY)
    g.user = user if isinstance(user, dict) and user.get("id") else None
    return g.user


def get_current_user_id() -> Optional[str]:
    user = get_current_user()
    return user.get("id") if user else None


def require_auth(f):
    """
    Decorator to require authentication for an API route.

    Returns a 401 JSON error instead of redirecting.

    Usage:
        @api_bp.route('/dashboard')
        @require_auth
        def dashboard():
            user_id = get_current_user_id()
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not get_current_user_id():
            return jsonify({"success": False, "error": "Authentication required"}), 401
        return f(*args, **kwargs)

    return decorated_function

"""
Shared Flask extension instances.

Defined here so routes can import them without importing the app factory.
"""

from flask import session
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address


def rate_limit_key() -> str:
    """Limit signed-in users per account and anonymous callers per address."""
    user = session.get("user")
    if isinstance(user, dict) and user.get("id"):
        return f"user:{user['id']}"
    return get_remote_address()


# Storage and defaults come from RATELIMIT_* config in create_app()
limiter = Limiter(key_func=rate_limit_key)

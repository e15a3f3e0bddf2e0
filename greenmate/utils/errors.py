"""
Error types and helpers for sanitizing user-facing messages and logging.

Provides consistent error handling across the application:
- Exception classes raised by the Supabase adapters
- Sanitizes error messages to prevent information leakage
- Logs detailed error information for debugging
"""

from __future__ import annotations
import logging

from flask import current_app, has_app_context

logger = logging.getLogger(__name__)

# User-friendly generic error messages
GENERIC_MESSAGES = {
    "database": "We're experiencing technical difficulties. Please try again.",
    "validation": "The information provided is invalid. Please check and try again.",
    "permission": "You don't have permission to perform this action.",
    "not_found": "The requested item was not found.",
    "network": "Network error occurred. Please check your connection and try again.",
}


class CareServiceError(Exception):
    """Base class for failures in the external fetch/persist layer."""


class PlantFetchError(CareServiceError):
    """Plant records could not be fetched from Supabase."""


class StateStoreError(CareServiceError):
    """Persisted care counters could not be read or written."""


def app_logger() -> logging.Logger:
    """The Flask app logger inside an app context, this module's logger otherwise."""
    return current_app.logger if has_app_context() else logger


def sanitize_error(
    error: Exception,
    error_type: str = "database",
    log_prefix: str = ""
) -> str:
    """
    Sanitize error message for user display and log full details.

    Args:
        error: The exception that occurred
        error_type: Type of error (database, validation, permission, not_found, network)
        log_prefix: Optional prefix for log message context

    Returns:
        User-friendly error message

    Examples:
        >>> try:
        ...     plants = supabase_client.fetch_all_plants(user_id)
        ... except PlantFetchError as e:
        ...     message = sanitize_error(e, "database", "Failed to fetch plants")
    """
    error_message = str(error)
    log_message = f"{log_prefix}: {error_message}" if log_prefix else error_message

    if error_type in ["validation", "not_found"]:
        # Expected errors (user mistakes)
        app_logger().info(f"Expected error - {log_message}")
    else:
        app_logger().error(f"Unexpected error - {log_message}", exc_info=True)

    return GENERIC_MESSAGES.get(error_type, GENERIC_MESSAGES["database"])


def log_info(message: str, **context) -> None:
    """
    Log an info message with optional context.

    Examples:
        >>> log_info("Care task completed", user_id="123", action="water")
    """
    if context:
        context_str = ", ".join(f"{k}={v}" for k, v in context.items())
        message = f"{message} | Context: {context_str}"

    app_logger().info(message)

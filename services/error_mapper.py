# -*- coding: utf-8 -*-
"""Centralized error message mapper."""

from services.exceptions import (
    ApiException, CommitError, FetchError, NetworkException, ValidationException
)
from utils.logger import get_logger

logger = get_logger(__name__)

MESSAGES = {
    "connection": "Unable to reach the server. Please try again.",
    "timeout": "The server took too long to respond. Please try again.",
    "bad_request": "The server rejected the request. Please check the data and try again.",
    "not_found": "The requested record no longer exists.",
    "forbidden": "You do not have permission to perform this action.",
    "conflict": "The record was changed by someone else. Refresh and try again.",
    "server": "The server encountered an error. Please try again later.",
    "unexpected": "Something went wrong. Please try again.",
}


def map_api_error(error: ApiException) -> str:
    """Map API exception to a user-friendly message.

    Technical details are logged only - never shown to the user.
    """
    status = error.status_code or 0

    if status == 400:
        details = _extract_validation_details(error.response_data)
        if details:
            logger.warning(f"API validation error (400): {details}")
        return MESSAGES["bad_request"]

    logger.warning(f"API error ({status}): {error}")
    if status in (401, 403):
        return MESSAGES["forbidden"]
    if status == 404:
        return MESSAGES["not_found"]
    if status == 409:
        return MESSAGES["conflict"]
    if status >= 500:
        return MESSAGES["server"]
    return MESSAGES["connection"]


def map_network_error(error: NetworkException) -> str:
    """Map network exception to user-friendly message."""
    msg = str(error.original_error) if error.original_error else error.message
    if "timeout" in msg.lower() or "timed out" in msg.lower():
        return MESSAGES["timeout"]
    return MESSAGES["connection"]


def map_exception(error: Exception, context: str = None) -> str:
    """Map any exception to a user-friendly message.

    Commit and fetch wrappers are unwrapped to their original cause.
    """
    if isinstance(error, (CommitError, FetchError)) and error.original_error is not None:
        return map_exception(error.original_error, context)

    if isinstance(error, ApiException):
        if not error.context and context:
            error.context = context
        return map_api_error(error)

    if isinstance(error, NetworkException):
        return map_network_error(error)

    if isinstance(error, ValidationException):
        if error.errors:
            logger.warning(f"Validation error: {error.errors}")
        return error.message

    logger.warning(f"Unexpected error: {error}")
    return MESSAGES["unexpected"]


def _extract_validation_details(response_data: dict) -> str:
    """Extract validation error details from API response."""
    if not response_data:
        return ""

    errors = response_data.get("errors", {})
    if isinstance(errors, dict):
        lines = []
        for field, messages in errors.items():
            if isinstance(messages, list):
                for msg in messages:
                    lines.append(f"• {field}: {msg}")
            else:
                lines.append(f"• {field}: {messages}")
        return "\n".join(lines)

    if isinstance(errors, list):
        return "\n".join(f"• {e}" for e in errors)

    return response_data.get("message", "") or response_data.get("title", "")

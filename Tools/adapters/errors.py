"""
Adapter Error Handling.

Exception hierarchy for the external collaborators (Whoop API and the
Claude completion gateway), so callers can map each failure class to the
right response: 401 for missing credentials, 500 for upstream failures,
a fail-fast error when the gateway is not configured.
"""

import logging
from typing import Any, Optional

logger = logging.getLogger(__name__)


class AdapterError(Exception):
    """
    Base exception for all adapter errors.

    Attributes:
        message: Human-readable error description
        context: Additional context about the error
    """

    def __init__(self, message: str, context: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> dict[str, Any]:
        """
        Convert error to dictionary for logging/serialization.

        Returns:
            Dictionary with error details
        """
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "context": self.context,
        }


# Whoop API Errors


class WhoopAuthError(AdapterError):
    """
    No usable Whoop credential.

    Raised when nothing is stored yet, or when refreshing an expired token
    is rejected. Surfaced as 401 before any analysis runs.
    """

    def __init__(self, message: str = "Not authenticated", context: Optional[dict[str, Any]] = None):
        super().__init__(message, context)


class WhoopAPIError(AdapterError):
    """
    A Whoop API request failed.

    Carries the upstream status code when there was a response. Never
    retried; surfaced as 500 with the upstream message.
    """

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        status_code: Optional[int] = None,
        context: Optional[dict[str, Any]] = None,
    ):
        context = context or {}
        if path:
            context["path"] = path
        if status_code is not None:
            context["status_code"] = status_code
        super().__init__(message, context)
        self.path = path
        self.status_code = status_code


# Completion Gateway Errors


class GatewayUnavailableError(AdapterError):
    """The completion gateway is not configured (e.g. no API key)."""


class GatewayRequestError(AdapterError):
    """A completion request failed before or during generation."""


def log_error_with_context(
    error: Exception,
    component: str,
    additional_context: Optional[dict[str, Any]] = None,
    exc_info: bool = False,
) -> None:
    """
    Log an error with its structured details attached as ``error_context``.

    Args:
        error: Exception to log
        component: Where the error surfaced, e.g. "whoop" or "coach"
        additional_context: Extra fields merged into the logged context
        exc_info: Include the traceback
    """
    context = dict(additional_context or {})
    if isinstance(error, AdapterError):
        context.update(error.to_dict())
    else:
        context.update({"error_type": type(error).__name__, "message": str(error)})

    logger.error(
        f"[{component}] {context['error_type']}: {error}",
        extra={"error_context": context},
        exc_info=exc_info,
    )

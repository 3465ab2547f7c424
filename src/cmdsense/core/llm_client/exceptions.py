"""
Exceptions for remote inference communication.

All of them are ``RemoteInferenceError`` subclasses so the suggestion
engine can fall back to offline heuristics with a single handler.
"""

from typing import Any, Dict, Optional

from ...utils.error_handling import RemoteInferenceError


class RemoteConnectionError(RemoteInferenceError):
    """Exception raised when the inference endpoint cannot be reached."""
    pass


class RemoteServerError(RemoteInferenceError):
    """Exception raised when the inference endpoint returns a non-2xx status."""

    def __init__(self, message: str, status_code: Optional[int] = None,
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)
        self.status_code = status_code


class RemoteTimeoutError(RemoteInferenceError):
    """Exception raised when a request exceeds the transport timeout."""
    pass


class RemoteResponseError(RemoteInferenceError):
    """Exception raised when the response body is not a chat completion."""
    pass

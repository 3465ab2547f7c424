"""HTTP client for OpenAI-compatible chat completion endpoints."""

from .client import RemoteInferenceClient
from .exceptions import RemoteConnectionError, RemoteServerError, RemoteTimeoutError, RemoteResponseError

__all__ = [
    "RemoteInferenceClient",
    "RemoteConnectionError",
    "RemoteServerError",
    "RemoteTimeoutError",
    "RemoteResponseError",
]

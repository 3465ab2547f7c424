"""
Unified error handling utilities for CmdSense.

Nothing in the suggestion pipeline is allowed to be fatal. These decorators
standardize the two shapes error handling takes here: analyzer boundaries
that log and degrade to an empty contribution, and remote operations whose
failures are normalized into ``RemoteInferenceError`` so callers can fall
back to offline heuristics.
"""

import copy
import functools
import asyncio
import logging
from typing import Any, Callable, Optional, Dict

from .logging import get_logger


class CmdSenseError(Exception):
    """Base exception for all CmdSense errors."""
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(CmdSenseError):
    """Configuration-related error."""
    pass



class RemoteInferenceError(CmdSenseError):
    """Remote inference service failure; always recoverable."""
    pass


class ExplanationParseError(CmdSenseError):
    """Structured explanation payload could not be parsed."""
    pass


def _fallback_value(fallback: Any) -> Any:
    # Fresh copy per call so callers can mutate the degraded value
    if callable(fallback):
        return fallback()
    return copy.copy(fallback)


def degrade_on_error(operation_name: str, fallback: Any = None,
                     logger: Optional[logging.Logger] = None):
    """
    Decorator for analyzer boundaries: log any failure and return a fallback.

    Args:
        operation_name: Human-readable name of the operation
        fallback: Value (or zero-argument factory) returned on failure
        logger: Optional logger instance (defaults to an operation logger)
    """
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        async def async_wrapper(*args, **kwargs) -> Any:
            _logger = logger or get_logger(f"cmdsense.core.{operation_name}")
            try:
                return await func(*args, **kwargs)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                _logger.error(f"{operation_name} failed, degrading: {e}", exc_info=True)
                return _fallback_value(fallback)

        @functools.wraps(func)
        def sync_wrapper(*args, **kwargs) -> Any:
            _logger = logger or get_logger(f"cmdsense.core.{operation_name}")
            try:
                return func(*args, **kwargs)
            except Exception as e:
                _logger.error(f"{operation_name} failed, degrading: {e}", exc_info=True)
                return _fallback_value(fallback)

        if asyncio.iscoroutinefunction(func):
            return async_wrapper
        return sync_wrapper

    return decorator


def handle_remote_operation(operation_name: str):
    """
    Decorator to standardize error handling of async remote operations.

    ``RemoteInferenceError`` subclasses pass through untouched; connection errors
    and anything unexpected are wrapped so the caller
    only ever has to catch ``RemoteInferenceError``.

    Args:
        operation_name: Human-readable name of the operation
    """
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        async def async_wrapper(*args, **kwargs) -> Any:
            logger = get_logger(f"cmdsense.core.remote.{operation_name}")

            try:
                logger.debug(f"Starting {operation_name}")

                result = await func(*args, **kwargs)

                logger.debug(f"{operation_name} completed successfully")
                return result

            except RemoteInferenceError as e:
                logger.warning(f"{operation_name} failed: {e}")
                raise

            except ConnectionError as e:
                logger.warning(f"{operation_name} failed - connection error: {e}")
                raise RemoteInferenceError(
                    f"{operation_name} failed: Connection error",
                    details={"error_type": "connection", "original_error": str(e)}
                ) from e

            except Exception as e:
                logger.error(f"{operation_name} failed - unexpected error: {e}", exc_info=True)
                raise RemoteInferenceError(
                    f"{operation_name} failed: {e}",
                    details={"error_type": "unexpected", "original_error": str(e)}
                ) from e

        return async_wrapper

    return decorator

"""
CmdSense Utilities

This module provides logging and error handling helpers used throughout
CmdSense.
"""

from .logging import (
    setup_logging,
    get_logger,
    log_performance,
    performance_timer,
    log_config_info,
)

from .error_handling import (
    CmdSenseError,
    ConfigurationError,
    RemoteInferenceError,
    ExplanationParseError,
    degrade_on_error,
    handle_remote_operation,
)

__all__ = [
    # Logging utilities
    "setup_logging",
    "get_logger",
    "log_performance",
    "performance_timer",
    "log_config_info",

    # Error handling utilities
    "CmdSenseError",
    "ConfigurationError",
    "RemoteInferenceError",
    "ExplanationParseError",
    "degrade_on_error",
    "handle_remote_operation",
]

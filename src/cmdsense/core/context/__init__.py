"""
Terminal context: environment lookups and token completion.
"""

from .provider import ContextProvider, NullContextProvider, LocalContextProvider, PathCandidate
from .completion import CompletionService, ParsedInput, parse_command_input, classify_token

__all__ = [
    "ContextProvider",
    "NullContextProvider",
    "LocalContextProvider",
    "PathCandidate",
    "CompletionService",
    "ParsedInput",
    "parse_command_input",
    "classify_token",
]

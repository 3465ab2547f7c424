"""
Core services for CmdSense.

The suggestion package is imported first: the context package depends on
its static tables.
"""

from .suggestions import SuggestionEngine, SuggestionSession, SuggestionContext, AnalyzeResult
from .context import ContextProvider, NullContextProvider, LocalContextProvider
from .llm_client import RemoteInferenceClient

__all__ = [
    "SuggestionEngine",
    "SuggestionSession",
    "SuggestionContext",
    "AnalyzeResult",
    "ContextProvider",
    "NullContextProvider",
    "LocalContextProvider",
    "RemoteInferenceClient",
]

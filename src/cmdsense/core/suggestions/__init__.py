"""
Suggestion pipeline for CmdSense.

The pipeline consists of:
- Edit-distance matching and rule-based corrections
- History analysis (frequencies, sequences, patterns, optimizations)
- A bounded FIFO cache
- Remote inference prompting with offline fallbacks
- The SuggestionEngine orchestrator and the debounced SuggestionSession
"""

from .types import (
    SuggestionSource, CorrectionType, TokenKind,
    Suggestion, CorrectionSuggestion, OptimizationSuggestion,
    SequenceSuggestion, CompletionSuggestion,
    CorrectionRule, OptimizationTip, PatternDefinition,
    CommandToken, HistoryEntry, AnalysisResult, SuggestionContext,
    AnalyzeResult, StructuredExplanation, ExplanationExample,
    SearchResult, HistorySearchResult, PatternInsight, deduplicate_suggestions,
)
from .matching import levenshtein_distance, find_closest
from .corrections import CorrectionEngine
from .history_analyzer import HistoryAnalyzer, COMMAND_PATTERNS
from .history_search import HistorySearch
from .cache import SuggestionCache
from .offline import offline_suggestions, get_offline_explanation
from .remote import (
    RemoteSuggestionSource, parse_suggestions, parse_structured_explanation,
    parse_patterns, parse_search_results,
)
from .engine import SuggestionEngine
from .scheduler import SuggestionSession

__all__ = [
    # Types
    "SuggestionSource", "CorrectionType", "TokenKind",
    "Suggestion", "CorrectionSuggestion", "OptimizationSuggestion",
    "SequenceSuggestion", "CompletionSuggestion",
    "CorrectionRule", "OptimizationTip", "PatternDefinition",
    "CommandToken", "HistoryEntry", "AnalysisResult", "SuggestionContext",
    "AnalyzeResult", "StructuredExplanation", "ExplanationExample",
    "SearchResult", "HistorySearchResult", "PatternInsight", "deduplicate_suggestions",

    # Analyzers
    "levenshtein_distance", "find_closest", "CorrectionEngine",
    "HistoryAnalyzer", "COMMAND_PATTERNS", "HistorySearch",
    "SuggestionCache", "offline_suggestions", "get_offline_explanation",
    "RemoteSuggestionSource", "parse_suggestions", "parse_structured_explanation",
    "parse_patterns", "parse_search_results",

    # Orchestration
    "SuggestionEngine", "SuggestionSession",
]

"""
Suggestion Engine

The orchestrator that turns a partially typed command plus the recent
command history into a ranked, deduplicated list of suggestions. It
combines the correction engine, the history analyzer and either the
remote inference adapter or the offline heuristics, and caches the result.

Nothing raised inside the pipeline escapes ``analyze``; the worst case is
an empty suggestion list.
"""

from dataclasses import replace
from typing import List, Optional, Sequence, Union

from .cache import SuggestionCache, suggestion_key
from .corrections import CorrectionEngine
from .history_analyzer import HistoryAnalyzer
from .history_search import HistorySearch
from .offline import get_offline_explanation, offline_suggestions
from .remote import RemoteSuggestionSource, parse_structured_explanation
from .types import (
    AnalysisResult,
    AnalyzeResult,
    CompletionSuggestion,
    HistoryEntry,
    HistorySearchResult,
    StructuredExplanation,
    Suggestion,
    SuggestionContext,
    SuggestionSource,
    deduplicate_suggestions,
)
from ..context.completion import CompletionService
from ..context.provider import ContextProvider
from ..llm_client import RemoteInferenceClient
from ...config.models import CmdSenseConfig
from ...utils.error_handling import ExplanationParseError, RemoteInferenceError, degrade_on_error
from ...utils.logging import get_logger


STRUCTURED_COMMANDS = frozenset(('ls', 'cd', 'grep', 'find', 'git', 'docker', 'npm', 'yarn'))

Explanation = Union[str, StructuredExplanation]
History = Sequence[Union[str, HistoryEntry]]


def _history_commands(history: Optional[History]) -> List[str]:
    return [h.command if isinstance(h, HistoryEntry) else h for h in history or ()]


def _detached(result: HistorySearchResult) -> HistorySearchResult:
    return replace(result, results=[replace(r) for r in result.results])


class SuggestionEngine:
    """
    Service object producing suggestions and explanations.

    Construct one per session and pass it to whoever needs it. The engine
    owns its cache and the static catalogs; history is supplied per call.

    Args:
        config: Full configuration; defaults are used when omitted
        client: Remote inference client. Created from ``config.remote`` when
            the engine is online and none is given
        context_provider: Environment lookups for ``complete``
    """

    def __init__(self, config: Optional[CmdSenseConfig] = None,
                 client: Optional[RemoteInferenceClient] = None,
                 context_provider: Optional[ContextProvider] = None):
        self.config = config or CmdSenseConfig()
        self.logger = get_logger(__name__)

        engine_config = self.config.engine
        self.cache = SuggestionCache(self.config.cache.max_size)
        self.corrections = CorrectionEngine()
        self.history_analyzer = HistoryAnalyzer(
            window=engine_config.history_window,
            max_entries=self.config.cache.analysis_max_size,
        )
        self.history_search_service = HistorySearch()
        self.completion = CompletionService(context_provider, engine_config.max_completions)

        self.remote: Optional[RemoteSuggestionSource] = None
        if not self.config.is_offline:
            client = client or RemoteInferenceClient.from_config(self.config.remote)
            self.remote = RemoteSuggestionSource(client, self.config.remote, engine_config.context_depth)

        mode = "offline" if self.is_offline else f"online ({self.config.remote.model})"
        self.logger.info(f"Suggestion engine ready, {mode}")

    @property
    def is_offline(self) -> bool:
        return self.remote is None

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()

    async def aclose(self) -> None:
        """Release the HTTP client, if any."""
        if self.remote is not None:
            await self.remote.aclose()

    async def analyze(self, raw_input: str, context: Optional[SuggestionContext] = None) -> AnalyzeResult:
        """
        Produce suggestions for ``raw_input``.

        Args:
            raw_input: The partially typed command
            context: Directory, recent commands (most recent first) and last error

        Returns:
            AnalyzeResult with at most ``max_suggestions`` unique commands.
            It is a copy, so callers may modify it without touching the cache
        """
        context = context or SuggestionContext()
        try:
            return (await self._analyze(raw_input, context)).copy()
        except Exception as e:
            self.logger.error(f"Suggestion analysis failed for {raw_input!r}: {e}", exc_info=True)
            return AnalyzeResult()

    async def _analyze(self, raw_input: str, context: SuggestionContext) -> AnalyzeResult:
        engine_config = self.config.engine
        if not isinstance(raw_input, str) or len(raw_input.strip()) < engine_config.min_input_length:
            return AnalyzeResult()

        key = suggestion_key(raw_input, context.current_directory)
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        correction = self.corrections.check(raw_input)
        if correction is not None and correction.is_warning:
            self.logger.info(f"Dangerous command detected: {raw_input!r}")
            result = AnalyzeResult(suggestions=[correction], has_warning=True)
            self.cache.set(key, result)
            return result

        corrections = [correction] if correction else []
        pattern_suggestions = self._pattern_suggestions(raw_input, context)

        if self.remote is None:
            result = self._offline_result(raw_input, corrections, pattern_suggestions)
            self.cache.set(key, result)
            return result

        try:
            remote_suggestions = await self.remote.suggest(raw_input, context)
        except RemoteInferenceError as e:
            # Degrade for this call only; the next call tries the remote again
            self.logger.warning(f"Remote suggestions unavailable, using offline heuristics: {e}")
            return self._offline_result(raw_input, corrections, pattern_suggestions)

        for suggestion in remote_suggestions:
            if suggestion.source is None:
                suggestion.source = SuggestionSource.AI

        combined = deduplicate_suggestions(pattern_suggestions + remote_suggestions)
        result = AnalyzeResult(suggestions=combined[:engine_config.max_suggestions])
        self.cache.set(key, result)
        return result

    def _offline_result(self, raw_input: str, corrections: List[Suggestion],
                        pattern_suggestions: List[Suggestion]) -> AnalyzeResult:
        combined = deduplicate_suggestions(corrections + pattern_suggestions + offline_suggestions(raw_input))
        return AnalyzeResult(suggestions=combined[:self.config.engine.max_suggestions])

    def _pattern_suggestions(self, raw_input: str, context: SuggestionContext) -> List[Suggestion]:
        history = _history_commands(context.recent_commands)
        if not history:
            return []

        analysis = self.analyze_patterns(history, context)
        last_command = next((c.strip() for c in history if isinstance(c, str) and c.strip()), None)
        suggestions = self.history_analyzer.suggest_for_input(
            raw_input, analysis, last_command, limit=self.config.engine.pattern_suggestion_limit,
        )
        for suggestion in suggestions:
            suggestion.source = SuggestionSource.PATTERN
        return suggestions

    @degrade_on_error("pattern_analysis", fallback=AnalysisResult)
    def analyze_patterns(self, history: History,
                         context: Optional[SuggestionContext] = None) -> AnalysisResult:
        """Memoized history analysis; repeated calls do not recompute."""
        directory = context.current_directory if context else ""
        return self.history_analyzer.analyze(history, directory)

    async def discover_patterns(self, history: History,
                                context: Optional[SuggestionContext] = None) -> AnalysisResult:
        """
        History analysis with remote pattern insights when online.

        The local analysis is always computed first and its optimizations are
        offered to the remote service as hints. Offline, with fewer than two
        commands, or when the remote fails, the local analysis is returned
        without insights.
        """
        analysis = self.analyze_patterns(history, context)
        commands = _history_commands(history)
        if self.remote is None or len(commands) < 2:
            return analysis

        try:
            insights = await self.remote.pattern_insights(commands, analysis.optimizations)
        except RemoteInferenceError as e:
            self.logger.warning(f"Remote pattern insights unavailable, using local analysis: {e}")
            return analysis

        # The memoized analysis is shared, so insights go on a copy
        return replace(analysis, insights=insights)

    async def explain(self, command: str) -> Optional[Explanation]:
        """
        Explain ``command``.

        Offline, this is a static per-command-name text. Online, common
        commands get a StructuredExplanation and everything else free text;
        any remote failure falls back to the offline text.
        """
        if not isinstance(command, str) or not command.strip():
            return None

        command = command.strip()
        base = command.split()[0]

        if self.remote is not None and base in STRUCTURED_COMMANDS:
            return await self._explain_structured(command, base)

        key = f"explain:{command}"
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        if self.remote is None:
            explanation = get_offline_explanation(base)
        else:
            try:
                explanation = await self.remote.explain(command)
            except RemoteInferenceError as e:
                self.logger.warning(f"Remote explanation unavailable for {command!r}: {e}")
                explanation = get_offline_explanation(base)

        self.cache.set(key, explanation)
        return explanation

    async def _explain_structured(self, command: str, base: str) -> StructuredExplanation:
        key = f"structured:{command}"
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        fallback = StructuredExplanation(command=command, purpose=get_offline_explanation(base))

        try:
            reply = await self.remote.fetch_structured(command)
        except RemoteInferenceError as e:
            self.logger.warning(f"Remote structured explanation unavailable for {command!r}: {e}")
            return fallback

        try:
            explanation = parse_structured_explanation(reply)
        except ExplanationParseError as e:
            # Cached so a model that keeps replying badly is not asked again
            self.logger.warning(f"Could not parse structured explanation for {command!r}: {e}")
            explanation = fallback

        self.cache.set(key, explanation)
        return explanation

    @degrade_on_error("history_search", fallback=lambda: HistorySearchResult(query=""))
    def search_history(self, query: str, history: History,
                       context: Optional[SuggestionContext] = None) -> HistorySearchResult:
        commands = _history_commands(history)
        directory = context.current_directory if context else "~"
        return self.history_search_service.search(query, commands, directory)

    async def semantic_search(self, query: str, history: History,
                              context: Optional[SuggestionContext] = None) -> HistorySearchResult:
        """
        Natural-language history search.

        Online, the remote service ranks the history and the answer is cached
        under ``search:<query>:<directory>``. Offline, for blank queries or
        empty history, and whenever the remote fails, this is
        ``search_history``.
        """
        commands = _history_commands(history)
        if self.remote is None or not isinstance(query, str) or not query.strip() or not commands:
            return self.search_history(query, commands, context)

        directory = context.current_directory if context else "~"
        key = f"search:{query}:{directory}"
        cached = self.cache.get(key)
        if cached is not None:
            return _detached(cached)

        try:
            results = await self.remote.search(query, commands, directory)
        except RemoteInferenceError as e:
            self.logger.warning(f"Semantic search unavailable, using keyword search: {e}")
            return self.search_history(query, commands, context)

        result = HistorySearchResult(query=query, results=results[:self.history_search_service.limit],
                                     offline_mode=False)
        self.cache.set(key, result)
        return _detached(result)

    @degrade_on_error("completion", fallback=list)
    def complete(self, raw_input: str, context: Optional[SuggestionContext] = None) -> List[CompletionSuggestion]:
        """Context-aware completion of the token under the cursor."""
        context = context or SuggestionContext()
        return self.completion.complete(raw_input, context.current_directory, context.recent_commands)

    def clear_cache(self) -> None:
        self.cache.clear()
        self.history_analyzer.clear()
        self.logger.debug("Suggestion cache cleared")

    def clear_cache_by_prefix(self, prefix: str) -> int:
        return self.cache.clear_by_prefix(prefix)

    def get_cache_stats(self) -> dict:
        return self.cache.stats()

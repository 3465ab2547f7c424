"""
Debounced, cancellable suggestion loop for interactive input.

Every keystroke restarts a quiet-period timer. When the timer fires the
engine is asked for suggestions, and the answer is only applied if no newer
input arrived meanwhile. A monotonically increasing request token makes
stale results detectable even when cancellation comes too late.
"""

import asyncio
from typing import Awaitable, Callable, List, Optional, Union

from .engine import SuggestionEngine
from .types import AnalyzeResult, Suggestion, SuggestionContext
from ...utils.logging import get_logger


ResultCallback = Callable[[List[Suggestion], bool], Union[None, Awaitable[None]]]
ContextFactory = Callable[[], SuggestionContext]


class SuggestionSession:
    """
    One interactive input line bound to a suggestion engine.

    Args:
        engine: Engine used for analysis
        on_result: Called with ``(suggestions, has_warning)`` whenever the
            displayed suggestions change. May be a coroutine function
        context_factory: Returns the current terminal context at fire time
        debounce_ms: Quiet period before analysis starts
        min_input_length: Shorter input clears suggestions without analysis
    """

    def __init__(self, engine: SuggestionEngine,
                 on_result: Optional[ResultCallback] = None,
                 context_factory: Optional[ContextFactory] = None,
                 debounce_ms: Optional[int] = None,
                 min_input_length: Optional[int] = None):
        self.engine = engine
        self.on_result = on_result
        self.context_factory = context_factory or SuggestionContext
        self.debounce_ms = engine.config.session.debounce_ms if debounce_ms is None else debounce_ms
        self.min_input_length = (engine.config.engine.min_input_length
                                 if min_input_length is None else min_input_length)

        self.current_input = ""
        self.suggestions: List[Suggestion] = []
        self.has_warning = False

        self._token = 0
        self._pending: Optional[asyncio.Task] = None
        self._closed = False
        self.logger = get_logger(__name__)

    @property
    def token(self) -> int:
        """Identifier of the most recent request."""
        return self._token

    @property
    def pending(self) -> bool:
        return self._pending is not None and not self._pending.done()

    async def on_input(self, text: str) -> None:
        """Record new input and (re)start the debounce timer."""
        if self._closed:
            return

        self.current_input = text
        self._cancel_pending()
        self._token += 1

        if not text or len(text.strip()) < self.min_input_length:
            await self._apply([], False)
            return

        self._pending = asyncio.create_task(self._debounced(self._token, text))

    async def dismiss(self) -> None:
        """Cancel pending work and clear the displayed suggestions."""
        self._cancel_pending()
        self._token += 1
        await self._apply([], False)

    async def flush(self) -> None:
        """Wait for the pending analysis, if any, to finish."""
        task = self._pending
        if task is not None and not task.done():
            try:
                await task
            except asyncio.CancelledError:
                pass

    async def aclose(self) -> None:
        """Cancel pending work; later input is ignored."""
        self._closed = True
        task = self._pending
        self._cancel_pending()
        if task is not None:
            try:
                await task
            except asyncio.CancelledError:
                pass

    def _cancel_pending(self) -> None:
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
        self._pending = None

    async def _debounced(self, token: int, text: str) -> None:
        await asyncio.sleep(self.debounce_ms / 1000)

        result: AnalyzeResult = await self.engine.analyze(text, self.context_factory())

        if token != self._token or text != self.current_input:
            self.logger.debug(f"Dropping stale suggestions for {text!r} (token {token}, current {self._token})")
            return

        await self._apply(result.suggestions, result.has_warning)

    async def _apply(self, suggestions: List[Suggestion], has_warning: bool) -> None:
        self.suggestions = list(suggestions)
        self.has_warning = has_warning

        if self.on_result is None:
            return
        outcome = self.on_result(self.suggestions, has_warning)
        if asyncio.iscoroutine(outcome):
            await outcome

"""
Prompting and reply parsing for remote inference.

``RemoteSuggestionSource`` wraps a ``RemoteInferenceClient`` with the prompts
the engine needs: completions, free-text and JSON structured explanations,
history pattern insights and semantic history search. Every failure
surfaces as ``RemoteInferenceError`` (or ``ExplanationParseError`` for
unusable JSON) so the engine can fall back.
"""

import json
import re
from typing import List, Optional, Sequence

from .types import (
    CommandOptimization, ExplanationExample, PatternInsight, SearchResult,
    StructuredExplanation, Suggestion, SuggestionContext,
)
from ..llm_client import RemoteInferenceClient, RemoteResponseError
from ...config.models import RemoteConfig
from ...utils.error_handling import ExplanationParseError, handle_remote_operation
from ...utils.logging import get_logger


SUGGESTION_SYSTEM_PROMPT = (
    "You are a terminal assistant. Provide command completions and suggestions "
    "based on user input and context."
)
EXPLANATION_SYSTEM_PROMPT = (
    "You are a terminal assistant providing clear, accurate, and concise "
    "explanations of command line commands."
)
STRUCTURED_SYSTEM_PROMPT = (
    "You provide structured explanations of command line commands in valid JSON format."
)
PATTERN_SYSTEM_PROMPT = (
    "You analyze command history patterns to provide intelligent suggestions."
)
SEARCH_SYSTEM_PROMPT = (
    "You are a specialized search assistant that finds relevant commands in "
    "command history based on natural language queries."
)

SUGGESTION_LINE = re.compile(r'^(?:\d+\.\s*)?([^:]+):(.+)$')
FENCED_JSON = re.compile(r'```(?:json)?\s*([\s\S]*?)\s*```')
JSON_OBJECT = re.compile(r'\{[\s\S]*\}')
PATTERN_SUGGESTION_LINE = re.compile(
    r'^(?:[-*]\s*)?(?:\d+\.\s*)?[Ss]uggest(?:ion)?\b:?\s*(?:`([^`]+)`:?|([^:`]+):)\s*(.*)$'
)
PATTERN_NAME_LINE = re.compile(r'^(?:[-*]\s*)?(?:\d+\.\s*)?[Pp]attern:?\s*(.+)$')

AI_SCORE = 0.5
PATTERN_HISTORY_DEPTH = 10
SEARCH_HISTORY_DEPTH = 50
MAX_INSIGHTS = 5


def build_suggestion_prompt(command: str, context: SuggestionContext, depth: int = 5) -> str:
    """User prompt for completions; only the last ``depth`` commands are sent."""
    recent = [getattr(c, "command", c) for c in context.recent_commands[:depth]] if depth else []
    lines = [
        f"Current command: {command}",
        f"Current directory: {context.current_directory}",
        f"Recent commands: {', '.join(recent)}",
    ]
    if context.last_error:
        lines.append(f"Last error: {context.last_error}")
    lines.extend([
        "",
        "Based on this context, suggest 5 likely command completions or next actions.",
        'Format each suggestion as "command: brief explanation"',
        "Keep suggestions relevant and focused on the current command.",
    ])
    return "\n".join(lines)


def build_explanation_prompt(command: str) -> str:
    return (
        "Explain this terminal command in a clear and concise way:\n"
        f"{command}\n\n"
        "Include:\n"
        "1. What the command does\n"
        "2. Key arguments and flags used\n"
        "3. Potential risks or side effects, if any\n"
        "4. Common use cases\n\n"
        "Format your response as a single concise paragraph."
    )


def build_structured_prompt(command: str) -> str:
    return (
        "Explain this terminal command in detail:\n"
        f"{command}\n\n"
        "Provide a structured response with:\n"
        "- command: The exact command being explained\n"
        "- purpose: A short description of what this command does\n"
        "- options: A dictionary of key flags/options used with brief explanations\n"
        "- examples: A couple of related example commands with brief descriptions\n\n"
        "IMPORTANT: Format your response as a valid JSON object with those exact fields."
    )


def build_pattern_prompt(history: Sequence[str],
                         optimizations: Sequence[CommandOptimization] = ()) -> str:
    """User prompt for pattern insights; locally found optimizations are included as hints."""
    lines = ["Analyze these recent terminal commands and identify patterns or suggest follow-up commands:"]
    lines.extend(history[:PATTERN_HISTORY_DEPTH])
    if optimizations:
        lines.append("")
        lines.append("I've identified these potential optimizations:")
        lines.extend(f"- {o.original} -> {o.optimized} ({o.explanation})" for o in optimizations)
    lines.extend([
        "",
        "Based on this command history:",
        "1. What patterns do you see?",
        "2. What might be the user's next likely command?",
        "3. Are there command optimizations or shortcuts you would suggest?",
        "",
        'Name each pattern on a line "Pattern: <name>", followed by lines '
        '"Suggestion: `<command>`: <explanation>".',
    ])
    return "\n".join(lines)


def build_search_prompt(query: str, history: Sequence[str], directory: str) -> str:
    return "\n".join([
        f'Search through this command history for: "{query}"',
        "",
        "Commands:",
        *history[:SEARCH_HISTORY_DEPTH],
        "",
        f"Current directory: {directory or '~'}",
        "",
        "Return matches as a JSON array of objects with:",
        "- command: the matching command",
        "- score: relevance score between 0.0-1.0",
        '- matchType: why this matched (e.g. "exact", "semantic", "pattern")',
        "- reason: brief explanation of why this matches the query",
        "",
        "Return ONLY valid JSON in the following format:",
        '{"results": [{"command": ..., "score": ..., "matchType": ..., "reason": ...}]}',
    ])


def parse_suggestions(text: str) -> List[Suggestion]:
    """
    Parse ``command: explanation`` lines, optionally numbered.

    Lines that do not match are dropped. Returned suggestions carry no
    source; the engine tags them.
    """
    suggestions = []
    for line in (text or "").splitlines():
        if not line.strip():
            continue
        match = SUGGESTION_LINE.match(line.strip())
        if not match:
            continue
        command = match.group(1).strip()
        description = match.group(2).strip()
        if command:
            suggestions.append(Suggestion(command=command, description=description, score=AI_SCORE))
    return suggestions


def parse_structured_explanation(text: str) -> StructuredExplanation:
    """
    Parse a JSON explanation, possibly wrapped in a fenced code block.

    Raises:
        ExplanationParseError: If the payload is not JSON or lacks
            ``command``/``purpose``
    """
    payload = text or ""
    fenced = FENCED_JSON.search(payload)
    if fenced:
        payload = fenced.group(1)

    try:
        data = json.loads(payload)
    except json.JSONDecodeError as e:
        raise ExplanationParseError(f"Explanation is not valid JSON: {e}") from e

    if not isinstance(data, dict) or not data.get("command") or not data.get("purpose"):
        raise ExplanationParseError(
            "Response missing required command or purpose fields",
            details={"payload": payload[:200]}
        )

    options = data.get("options") or {}
    if not isinstance(options, dict):
        options = {}

    examples = []
    for example in data.get("examples") or []:
        if isinstance(example, dict) and example.get("command"):
            examples.append(ExplanationExample(command=str(example["command"]),
                                               description=example.get("description")))
        elif isinstance(example, str) and example.strip():
            examples.append(ExplanationExample(command=example.strip()))

    return StructuredExplanation(
        command=str(data["command"]),
        purpose=str(data["purpose"]),
        options={str(k): str(v) for k, v in options.items()},
        examples=examples,
    )


def parse_patterns(text: str, limit: int = MAX_INSIGHTS) -> List[PatternInsight]:
    """
    Parse ``Pattern:`` headings and the ``Suggestion:`` lines under them.

    A suggestion seen before any heading is filed under "Suggestion".
    Everything else in the reply is ignored.
    """
    insights = []
    current_pattern = None
    for line in (text or "").splitlines():
        line = line.strip()
        suggestion = PATTERN_SUGGESTION_LINE.match(line)
        if suggestion:
            command = (suggestion.group(1) or suggestion.group(2)).strip()
            if command:
                insights.append(PatternInsight(
                    suggestion=command,
                    description=suggestion.group(3).strip(),
                    pattern=current_pattern or "Suggestion",
                ))
            continue

        heading = PATTERN_NAME_LINE.match(line)
        if heading:
            current_pattern = heading.group(1).strip()

    return insights[:limit]


def _as_score(value) -> float:
    try:
        score = float(value)
    except (TypeError, ValueError):
        return AI_SCORE
    return min(1.0, max(0.0, score)) if score else AI_SCORE


def parse_search_results(text: str, history: Sequence[str], directory: str = "~") -> List[SearchResult]:
    """
    Parse a semantic search reply into SearchResults.

    The reply is a JSON object with a ``results`` array (a bare array is
    accepted too), optionally fenced or surrounded by prose. Missing fields
    get neutral defaults.

    Raises:
        RemoteResponseError: If no JSON can be recovered from the reply
    """
    payload = text or ""
    fenced = FENCED_JSON.search(payload)
    if fenced:
        payload = fenced.group(1)

    try:
        data = json.loads(payload)
    except json.JSONDecodeError:
        embedded = JSON_OBJECT.search(payload)
        try:
            data = json.loads(embedded.group(0)) if embedded else None
        except json.JSONDecodeError:
            data = None
        if data is None:
            raise RemoteResponseError("Search reply is not valid JSON", details={"payload": payload[:200]})

    items = data.get("results") if isinstance(data, dict) else data
    if not isinstance(items, list):
        raise RemoteResponseError("Search reply has no results array", details={"payload": payload[:200]})

    positions = {}
    for index, command in enumerate(history):
        positions.setdefault(command, index)

    results = []
    for item in items:
        if not isinstance(item, dict) or not item.get("command"):
            continue
        command = str(item["command"])
        results.append(SearchResult(
            command=command,
            score=_as_score(item.get("score")),
            match_type=str(item.get("matchType") or item.get("match_type") or "unknown"),
            reason=str(item.get("reason") or "Matches search criteria"),
            metadata={"position": positions.get(command), "directory": directory},
        ))
    return results


class RemoteSuggestionSource:
    """Remote inference adapter used by the suggestion engine."""

    def __init__(self, client: RemoteInferenceClient, config: Optional[RemoteConfig] = None,
                 context_depth: int = 5):
        self.client = client
        self.config = config or RemoteConfig()
        self.context_depth = context_depth
        self.logger = get_logger(__name__)

    @handle_remote_operation("suggest")
    async def suggest(self, command: str, context: SuggestionContext) -> List[Suggestion]:
        reply = await self.client.complete(
            SUGGESTION_SYSTEM_PROMPT,
            build_suggestion_prompt(command, context, self.context_depth),
            temperature=self.config.temperature,
            max_tokens=self.config.suggestion_max_tokens,
        )
        suggestions = parse_suggestions(reply)
        self.logger.debug(f"Remote returned {len(suggestions)} suggestions for {command!r}")
        return suggestions

    @handle_remote_operation("explain")
    async def explain(self, command: str) -> str:
        reply = await self.client.complete(
            EXPLANATION_SYSTEM_PROMPT,
            build_explanation_prompt(command),
            temperature=self.config.temperature,
            max_tokens=self.config.explanation_max_tokens,
        )
        return reply.strip()

    @handle_remote_operation("explain_structured")
    async def fetch_structured(self, command: str) -> str:
        """Raw reply for a structured explanation; parsing is left to the caller."""
        return await self.client.complete(
            STRUCTURED_SYSTEM_PROMPT,
            build_structured_prompt(command),
            temperature=self.config.structured_temperature,
            max_tokens=self.config.structured_max_tokens,
        )

    @handle_remote_operation("analyze_patterns")
    async def pattern_insights(self, history: Sequence[str],
                               optimizations: Sequence[CommandOptimization] = ()) -> List[PatternInsight]:
        reply = await self.client.complete(
            PATTERN_SYSTEM_PROMPT,
            build_pattern_prompt(history, optimizations),
            temperature=self.config.temperature,
            max_tokens=self.config.pattern_max_tokens,
        )
        insights = parse_patterns(reply)
        self.logger.debug(f"Remote returned {len(insights)} pattern insights")
        return insights

    @handle_remote_operation("search_history")
    async def search(self, query: str, history: Sequence[str], directory: str = "~") -> List[SearchResult]:
        reply = await self.client.complete(
            SEARCH_SYSTEM_PROMPT,
            build_search_prompt(query, history, directory),
            temperature=self.config.temperature,
            max_tokens=self.config.search_max_tokens,
        )
        return parse_search_results(reply, history, directory)

    async def aclose(self) -> None:
        await self.client.close()

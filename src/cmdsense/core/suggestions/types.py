"""
Shared types for the suggestion pipeline.

Suggestions are a small family of dataclasses keyed by ``source``: the base
``Suggestion`` carries what every candidate has, and each variant declares
the fields only its producers fill in.
"""

import re
import time
from dataclasses import dataclass, field, asdict, replace
from typing import Optional, List, Dict, Any, Tuple, Pattern, Union
from enum import Enum


class SuggestionSource(str, Enum):
    """Where a suggestion came from."""

    TYPO = "typo"
    SAFETY = "safety"
    SYNTAX = "syntax"
    FUZZY = "fuzzy"
    FREQUENCY = "frequency"
    PATTERN = "pattern"
    OPTIMIZATION = "optimization"
    SEQUENCE = "sequence"
    AI = "ai"
    OFFLINE = "offline"
    HISTORY = "history"
    FILE = "file"
    GIT = "git"
    NPM = "npm"


class CorrectionType(str, Enum):
    """Severity of a correction rule."""

    TYPO = "typo"
    SYNTAX = "syntax"
    DANGER = "danger"
    FUZZY = "fuzzy"


class TokenKind(str, Enum):
    """Classification of a command fragment."""

    NAME = "name"
    FLAG = "flag"
    PATH = "path"
    ARGUMENT = "argument"


@dataclass
class Suggestion:
    """A single ranked candidate shown to the user."""

    command: str
    description: str = ""
    source: Optional[SuggestionSource] = None
    score: float = 0.5

    def __post_init__(self):
        if not self.command or not self.command.strip():
            raise ValueError("Suggestion command must be non-empty")
        self.score = max(0.0, min(1.0, float(self.score)))

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["source"] = self.source.value if self.source else None
        for key, value in list(data.items()):
            if isinstance(value, Enum):
                data[key] = value.value
        return data


@dataclass
class CorrectionSuggestion(Suggestion):
    """Output of the correction engine."""

    type: CorrectionType = CorrectionType.TYPO
    is_warning: bool = False


@dataclass
class OptimizationSuggestion(Suggestion):
    """A cheaper or shorter form of something the user already does."""

    original: str = ""
    benefit_type: str = ""


@dataclass
class SequenceSuggestion(Suggestion):
    """A command that habitually follows the last executed command."""

    count: int = 0


@dataclass
class CompletionSuggestion(Suggestion):
    """Token completion; ``replacement`` is the token that was completed."""

    replacement: str = ""


@dataclass(frozen=True)
class CorrectionRule:
    """One entry in an ordered correction catalog."""

    pattern: Pattern
    explanation: str
    severity: CorrectionType
    replacement: Optional[str] = None

    @classmethod
    def compile(cls, regex: str, explanation: str, severity: CorrectionType,
                replacement: Optional[str] = None) -> "CorrectionRule":
        return cls(re.compile(regex), explanation, severity, replacement)


@dataclass(frozen=True)
class OptimizationTip:
    """Textual rewrite advertised by a pattern category."""

    from_text: str
    to_text: str
    benefit: str


@dataclass(frozen=True)
class PatternDefinition:
    """A recognizable command category."""

    name: str
    match_rule: Pattern
    description: str
    optimization_tips: Tuple[OptimizationTip, ...] = ()


@dataclass
class CommandToken:
    """A classified command fragment; parsing aid only."""

    text: str
    kind: TokenKind
    position: int


@dataclass
class HistoryEntry:
    """One executed command."""

    command: str
    timestamp: float = field(default_factory=time.time)


@dataclass
class CommandFrequency:
    command: str
    count: int
    popular_args: List[Tuple[str, int]] = field(default_factory=list)


@dataclass
class CommandSequence:
    commands: Tuple[str, ...]
    count: int


@dataclass
class RecognizedPattern:
    name: str
    description: str
    examples: List[str]
    count: int
    optimization_tips: Tuple[OptimizationTip, ...] = ()


@dataclass
class CommandOptimization:
    original: str
    optimized: str
    explanation: str
    benefit_type: str


@dataclass
class PatternInsight:
    """A workflow pattern reported by the remote service, with the command it suggests."""

    suggestion: str
    description: str
    pattern: str = "Suggestion"


@dataclass
class AnalysisResult:
    """Everything the history analyzer derives from one history slice."""

    command_frequency: List[CommandFrequency] = field(default_factory=list)
    command_sequences: List[CommandSequence] = field(default_factory=list)
    recognized_patterns: List[RecognizedPattern] = field(default_factory=list)
    optimizations: List[CommandOptimization] = field(default_factory=list)
    insights: List[PatternInsight] = field(default_factory=list)
    timestamp: float = field(default_factory=time.time)

    @property
    def is_empty(self) -> bool:
        return not (self.command_frequency or self.command_sequences
                    or self.recognized_patterns or self.optimizations
                    or self.insights)


@dataclass
class SuggestionContext:
    """Terminal state supplied by the caller for one analysis."""

    current_directory: str = "~"
    recent_commands: List[str] = field(default_factory=list)
    last_error: Optional[str] = None

    @classmethod
    def from_history(cls, history: List[Union[str, HistoryEntry]], **kwargs) -> "SuggestionContext":
        commands = [h.command if isinstance(h, HistoryEntry) else h for h in history]
        return cls(recent_commands=commands, **kwargs)


@dataclass
class AnalyzeResult:
    """Return value of ``SuggestionEngine.analyze``."""

    suggestions: List[Suggestion] = field(default_factory=list)
    has_warning: bool = False

    @property
    def commands(self) -> List[str]:
        return [s.command for s in self.suggestions]

    def copy(self) -> "AnalyzeResult":
        """Copy with fresh suggestion objects, detached from any cached result."""
        return AnalyzeResult(suggestions=[replace(s) for s in self.suggestions], has_warning=self.has_warning)


@dataclass
class ExplanationExample:
    command: str
    description: Optional[str] = None


@dataclass
class StructuredExplanation:
    """Explanation split into purpose, options and examples."""

    command: str
    purpose: str
    options: Dict[str, str] = field(default_factory=dict)
    examples: List[ExplanationExample] = field(default_factory=list)


@dataclass
class SearchResult:
    command: str
    score: float
    match_type: str
    reason: str
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass
class HistorySearchResult:
    query: str
    results: List[SearchResult] = field(default_factory=list)
    offline_mode: bool = True


def deduplicate_suggestions(suggestions: List[Suggestion]) -> List[Suggestion]:
    """Drop later suggestions whose ``command`` was already seen."""
    seen = set()
    deduped = []
    for suggestion in suggestions:
        if suggestion.command not in seen:
            seen.add(suggestion.command)
            deduped.append(suggestion)
    return deduped

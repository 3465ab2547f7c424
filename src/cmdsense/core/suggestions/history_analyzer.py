"""
Command history analysis.

Derives usage frequencies, recurring sequences, recognized workflow
categories and optimization hints from the caller's history, and turns
them into suggestions scoped to what the user is currently typing.
"""

import re
import threading
from collections import Counter, OrderedDict
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from .types import (
    AnalysisResult,
    CommandFrequency,
    CommandOptimization,
    CommandSequence,
    HistoryEntry,
    OptimizationSuggestion,
    OptimizationTip,
    PatternDefinition,
    RecognizedPattern,
    SequenceSuggestion,
    Suggestion,
    SuggestionSource,
    deduplicate_suggestions,
)
from ...utils.error_handling import degrade_on_error
from ...utils.logging import get_logger, log_performance


FREQUENCY_SCORE = 0.9
POPULAR_ARGS_SCORE = 0.85
PATTERN_SCORE = 0.8
OPTIMIZATION_SCORE = 0.75
SEQUENCE_SCORE = 0.95

TOP_FREQUENCIES = 5
TOP_SEQUENCES = 3
POPULAR_ARGS_LIMIT = 3


def _pattern(name: str, regex: str, description: str, *tips: Tuple[str, str, str]) -> PatternDefinition:
    return PatternDefinition(
        name=name,
        match_rule=re.compile(regex),
        description=description,
        optimization_tips=tuple(OptimizationTip(*tip) for tip in tips),
    )


COMMAND_PATTERNS: Tuple[PatternDefinition, ...] = (
    _pattern(
        'file-search', r'^(find|grep|ack|ag|rg)\s.+', 'File search operations',
        ('grep -r', 'rg', 'speed'),
        ('find . -name', 'fd', 'simplicity'),
    ),
    _pattern(
        'file-navigation', r'^(cd|pushd|popd)\s.+', 'Directory navigation',
        ('cd ..; cd ..', 'cd ../..', 'brevity'),
    ),
    _pattern(
        'file-operations', r'^(cp|mv|rm|mkdir)\s.+', 'File operations',
        ('mkdir dir && cd dir', 'mkdir -p dir && cd $_', 'efficiency'),
    ),
    _pattern(
        'git-operations', r'^git\s.+', 'Git operations',
        ('git add . && git commit -m', 'git commit -am', 'brevity'),
        ('git checkout', 'git switch', 'modern'),
    ),
    _pattern(
        'package-management', r'^(apt|yum|brew|npm|pip|cargo)\s.+', 'Package management',
        ('npm install', 'npm i', 'brevity'),
        ('apt-get update && apt-get upgrade', 'apt update && apt upgrade', 'modern'),
    ),
    _pattern(
        'process-management', r'^(ps|kill|pkill|top|htop)\s.+', 'Process management',
        ('ps aux | grep', 'pgrep', 'simplicity'),
    ),
    _pattern(
        'permission-operations', r'^(chmod|chown|sudo)\s.+', 'Permission operations',
        ('chmod +x', 'chmod 755', 'explicitness'),
    ),
)


def suggest_alias_name(command: str) -> str:
    """Initials for multi-word commands, the first three characters otherwise."""
    words = command.split()
    if len(words) > 1:
        alias = ''.join(word[0] for word in words)
    else:
        alias = command[:3]
    return alias.lower()


def combine_sequence(commands: Sequence[str]) -> Optional[str]:
    """Collapse a known two-command idiom into one command, or None."""
    if len(commands) != 2:
        return None

    first, second = commands
    if first.startswith('cd ') and second == 'ls':
        return f"ls {first[3:]}"

    if first.startswith('mkdir ') and second.startswith('cd '):
        directory = first[6:]
        if directory == second[3:]:
            return f"mkdir -p {directory} && cd $_"

    if first.startswith('git add ') and second.startswith('git commit -m'):
        if first[8:] == '.':
            return f"git commit -am{second[13:]}"

    return None


class HistoryAnalyzer:
    """
    Memoizing analyzer over caller-owned command history.

    Results are keyed by the first ``window`` entries plus the directory,
    so repeated calls with an unchanged history slice do not recompute.
    ``computations`` counts real (non-memoized) analyses.
    """

    def __init__(self, window: int = 20, max_entries: int = 50,
                 patterns: Tuple[PatternDefinition, ...] = COMMAND_PATTERNS):
        self.window = window
        self.max_entries = max_entries
        self.patterns = patterns
        self.computations = 0
        self._memo: "OrderedDict[Tuple, AnalysisResult]" = OrderedDict()
        self._lock = threading.RLock()
        self.logger = get_logger(__name__)

    def analyze(self, history: Sequence[Union[str, HistoryEntry]], directory: str = "") -> AnalysisResult:
        """
        Analyze ``history`` (position 0 is the most recent command).

        Malformed entries are skipped. The result is memoized.
        """
        commands = self._normalize(history)
        key = (tuple(commands[:self.window]), directory)

        with self._lock:
            cached = self._memo.get(key)
            if cached is not None:
                return cached

        with log_performance(f"history analysis of {len(commands)} commands"):
            result = self._compute(commands)

        with self._lock:
            self.computations += 1
            self._memo[key] = result
            while len(self._memo) > self.max_entries:
                self._memo.popitem(last=False)

        return result

    def clear(self) -> None:
        with self._lock:
            self._memo.clear()

    def _normalize(self, history: Sequence[Any]) -> List[str]:
        commands = []
        for entry in history or ():
            command = entry.command if isinstance(entry, HistoryEntry) else entry
            if not isinstance(command, str) or not command.strip():
                self.logger.debug(f"Skipping malformed history entry: {entry!r}")
                continue
            commands.append(command.strip())
        return commands

    def _compute(self, commands: List[str]) -> AnalysisResult:
        frequencies = self._command_frequency(commands)
        sequences = self._command_sequences(commands)
        patterns = self._recognize_patterns(commands)
        optimizations = self._optimizations(frequencies, sequences, patterns)

        return AnalysisResult(
            command_frequency=frequencies[:TOP_FREQUENCIES],
            command_sequences=sequences[:TOP_SEQUENCES],
            recognized_patterns=patterns,
            optimizations=optimizations,
        )

    def _command_frequency(self, commands: List[str]) -> List[CommandFrequency]:
        counts: Counter = Counter()
        arguments: Dict[str, Counter] = {}

        for command in commands:
            base, _, args = command.partition(' ')
            counts[base] += 1
            args = args.strip()
            if args:
                arguments.setdefault(base, Counter())[args] += 1

        # Counter.most_common keeps first-seen order among equal counts
        return [
            CommandFrequency(
                command=base,
                count=count,
                popular_args=arguments.get(base, Counter()).most_common(POPULAR_ARGS_LIMIT),
            )
            for base, count in counts.most_common()
        ]

    def _command_sequences(self, commands: List[str]) -> List[CommandSequence]:
        counts: Counter = Counter()
        for length in (2, 3):
            for i in range(len(commands) - length + 1):
                counts[tuple(commands[i:i + length])] += 1

        return [
            CommandSequence(commands=window, count=count)
            for window, count in counts.most_common()
            if count > 1
        ]

    def _recognize_patterns(self, commands: List[str]) -> List[RecognizedPattern]:
        recognized: Dict[str, RecognizedPattern] = {}

        for command in commands:
            for definition in self.patterns:
                if not definition.match_rule.search(command):
                    continue
                entry = recognized.get(definition.name)
                if entry is None:
                    recognized[definition.name] = RecognizedPattern(
                        name=definition.name,
                        description=definition.description,
                        examples=[command],
                        count=1,
                        optimization_tips=definition.optimization_tips,
                    )
                else:
                    if command not in entry.examples:
                        entry.examples.append(command)
                    entry.count += 1

        return sorted(recognized.values(), key=lambda p: p.count, reverse=True)

    def _optimizations(self, frequencies: List[CommandFrequency], sequences: List[CommandSequence],
                       patterns: List[RecognizedPattern]) -> List[CommandOptimization]:
        optimizations = []

        for pattern in patterns:
            for tip in pattern.optimization_tips:
                for example in pattern.examples:
                    if tip.from_text in example:
                        optimizations.append(CommandOptimization(
                            original=example,
                            optimized=example.replace(tip.from_text, tip.to_text, 1),
                            explanation=f"Use '{tip.to_text}' instead of '{tip.from_text}' "
                                        f"for better {tip.benefit}.",
                            benefit_type=tip.benefit,
                        ))

        for frequency in frequencies:
            if frequency.count >= 3 and len(frequency.command) > 10:
                optimizations.append(CommandOptimization(
                    original=frequency.command,
                    optimized=f"alias {suggest_alias_name(frequency.command)}='{frequency.command}'",
                    explanation="Create an alias for this frequently used command.",
                    benefit_type='efficiency',
                ))

        for sequence in sequences:
            if sequence.count < 2:
                continue
            combined = combine_sequence(sequence.commands)
            if combined:
                optimizations.append(CommandOptimization(
                    original=' && '.join(sequence.commands),
                    optimized=combined,
                    explanation="Combine these commands for efficiency.",
                    benefit_type='efficiency',
                ))

        return optimizations

    @degrade_on_error("history_analysis", fallback=list)
    def suggest_for_input(self, current_input: str, analysis: Optional[AnalysisResult],
                          last_command: Optional[str] = None, limit: int = 5) -> List[Suggestion]:
        """
        Turn an analysis into suggestions for ``current_input``.

        Sorted by score (discovery order among equal scores), deduplicated
        and capped at ``limit``. Any internal failure yields an empty list.
        """
        if analysis is None or not current_input:
            return []

        suggestions: List[Suggestion] = []

        for frequency in analysis.command_frequency:
            if not frequency.command.startswith(current_input) or frequency.command == current_input:
                continue
            suggestions.append(Suggestion(
                command=frequency.command,
                description=f"Used {frequency.count} times recently",
                source=SuggestionSource.FREQUENCY,
                score=FREQUENCY_SCORE,
            ))
            for args, count in frequency.popular_args:
                suggestions.append(Suggestion(
                    command=f"{frequency.command} {args}",
                    description=f"Used {count} times",
                    source=SuggestionSource.FREQUENCY,
                    score=POPULAR_ARGS_SCORE,
                ))

        for pattern in analysis.recognized_patterns:
            for example in pattern.examples:
                if example.startswith(current_input) and example != current_input:
                    suggestions.append(Suggestion(
                        command=example,
                        description=f"{pattern.description} pattern",
                        source=SuggestionSource.PATTERN,
                        score=PATTERN_SCORE,
                    ))

        for optimization in analysis.optimizations:
            original = optimization.original
            if original.startswith(current_input) or (len(current_input) > 3 and current_input in original):
                suggestions.append(OptimizationSuggestion(
                    command=optimization.optimized,
                    description=f"Optimization: {optimization.explanation}",
                    source=SuggestionSource.OPTIMIZATION,
                    score=OPTIMIZATION_SCORE,
                    original=original,
                    benefit_type=optimization.benefit_type,
                ))

        if last_command:
            for sequence in analysis.command_sequences:
                if sequence.commands[0] != last_command or len(sequence.commands) < 2:
                    continue
                next_command = sequence.commands[1]
                if next_command.startswith(current_input):
                    suggestions.append(SequenceSuggestion(
                        command=next_command,
                        description=f"Often follows '{last_command}'",
                        source=SuggestionSource.SEQUENCE,
                        score=SEQUENCE_SCORE,
                        count=sequence.count,
                    ))

        # sorted() is stable, so equal scores keep discovery order
        ranked = sorted(suggestions, key=lambda s: s.score, reverse=True)
        return deduplicate_suggestions(ranked)[:limit]

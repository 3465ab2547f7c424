"""
Rule-based command correction.

Four ordered catalogs are checked in strict priority: exact typos, dangerous
commands, syntax rewrites and finally a fuzzy match of the command name.
The first rule that fires wins.
"""

from typing import Dict, Iterable, Optional, Tuple

from .matching import find_closest
from .offline import KNOWN_COMMANDS
from .types import CorrectionRule, CorrectionSuggestion, CorrectionType, SuggestionSource
from ...utils.logging import get_logger


TYPO_SCORE = 0.98
DANGER_SCORE = 0.99
SYNTAX_SCORE = 0.97
FUZZY_SCORE = 0.96

WARNING_PREFIX = "⚠️ "

COMMON_TYPOS: Dict[str, str] = {
    'cd..': 'cd ..',
    'giit': 'git',
    'grpe': 'grep',
    'pythno': 'python',
    'npmm': 'npm',
    'tra': 'tar',
    'cta': 'cat',
    'mkidr': 'mkdir',
    'touhc': 'touch',
    'suod': 'sudo',
}

DANGEROUS_COMMANDS: Tuple[CorrectionRule, ...] = (
    CorrectionRule.compile(
        r'^rm\s+-rf\s+/', 'This command will delete your entire filesystem!',
        CorrectionType.DANGER,
    ),
    CorrectionRule.compile(
        r'^rm\s+-rf\s+~', 'This command will delete your home directory!',
        CorrectionType.DANGER,
    ),
    CorrectionRule.compile(
        r'^rm\s+-rf\s+\.', 'This command will delete everything in the current directory!',
        CorrectionType.DANGER, 'rm -rf ./specific-dir',
    ),
    CorrectionRule.compile(
        r'^chmod\s+-R\s+777', 'Setting 777 permissions recursively is a security risk',
        CorrectionType.DANGER, 'chmod -R 755 for directories, 644 for files',
    ),
    CorrectionRule.compile(
        r'^sudo\s+chmod\s+-R\s+777', 'Setting 777 permissions recursively is a security risk',
        CorrectionType.DANGER, 'sudo chmod -R 755 for directories, 644 for files',
    ),
    CorrectionRule.compile(
        r'git\s+reset\s+--hard', 'This will discard all uncommitted changes',
        CorrectionType.DANGER, 'git stash to preserve changes',
    ),
    CorrectionRule.compile(
        r':\s*[wW][qQ]!', 'Force quitting vim without saving changes',
        CorrectionType.DANGER, ':w to save changes first',
    ),
)

SYNTAX_RULES: Tuple[CorrectionRule, ...] = (
    CorrectionRule.compile(
        r'^cd\s+([^\s]+)\s+([^\s]+)', 'cd only accepts one directory argument',
        CorrectionType.SYNTAX, r'cd \1',
    ),
    CorrectionRule.compile(
        r'^git\s+commit\s+([^-].*)', 'Commit message needs -m flag',
        CorrectionType.SYNTAX, r'git commit -m "\1"',
    ),
    CorrectionRule.compile(
        r'^git\s+add\s+(\S+)\s+git\s+commit', 'Multiple git commands need to be separated',
        CorrectionType.SYNTAX, r'git add \1 && git commit',
    ),
    CorrectionRule.compile(
        r'^find\s+(\S+)\s+-name', 'find -name pattern should be quoted',
        CorrectionType.SYNTAX, r'find \1 -name "*pattern*"',
    ),
)


class CorrectionEngine:
    """
    Checks a command against the correction catalogs.

    The catalogs are immutable; an engine can be shared freely.
    """

    def __init__(self, vocabulary: Optional[Iterable[str]] = None,
                 max_distance: int = 3, max_length_delta: int = 3):
        self.vocabulary = tuple(vocabulary) if vocabulary is not None else KNOWN_COMMANDS
        self.max_distance = max_distance
        self.max_length_delta = max_length_delta
        self.logger = get_logger(__name__)

    def check(self, command: str) -> Optional[CorrectionSuggestion]:
        """
        Return the highest-priority correction for ``command`` or None.

        Args:
            command: Raw, possibly partial command line

        Returns:
            A CorrectionSuggestion; danger results carry ``is_warning=True``
        """
        if not command or not command.strip():
            return None

        command = command.strip()
        return (
            self._check_typo(command)
            or self._check_danger(command)
            or self._check_syntax(command)
            or self._check_fuzzy(command)
        )

    def _check_typo(self, command: str) -> Optional[CorrectionSuggestion]:
        stripped = command.strip()
        if stripped in COMMON_TYPOS:
            corrected = COMMON_TYPOS[stripped]
        else:
            first, sep, rest = stripped.partition(' ')
            if first not in COMMON_TYPOS:
                return None
            corrected = COMMON_TYPOS[first] + sep + rest

        return CorrectionSuggestion(
            command=corrected,
            description=f"Did you mean '{corrected}'?",
            source=SuggestionSource.TYPO,
            score=TYPO_SCORE,
            type=CorrectionType.TYPO,
        )

    def _check_danger(self, command: str) -> Optional[CorrectionSuggestion]:
        for rule in DANGEROUS_COMMANDS:
            if rule.pattern.search(command):
                self.logger.debug(f"Dangerous command matched {rule.pattern.pattern!r}")
                return CorrectionSuggestion(
                    command=rule.replacement or command,
                    description=WARNING_PREFIX + rule.explanation,
                    source=SuggestionSource.SAFETY,
                    score=DANGER_SCORE,
                    type=CorrectionType.DANGER,
                    is_warning=True,
                )
        return None

    def _check_syntax(self, command: str) -> Optional[CorrectionSuggestion]:
        for rule in SYNTAX_RULES:
            match = rule.pattern.search(command)
            if match:
                return CorrectionSuggestion(
                    command=match.expand(rule.replacement),
                    description=rule.explanation,
                    source=SuggestionSource.SYNTAX,
                    score=SYNTAX_SCORE,
                    type=CorrectionType.SYNTAX,
                )
        return None

    def _check_fuzzy(self, command: str) -> Optional[CorrectionSuggestion]:
        parts = command.strip().split()
        first = parts[0]
        if len(first) < 2:
            return None

        closest = find_closest(first, self.vocabulary, self.max_distance, self.max_length_delta)
        if closest is None:
            return None

        candidate, _ = closest
        if candidate.lower() == first.lower():
            return None

        corrected = ' '.join([candidate] + parts[1:])
        return CorrectionSuggestion(
            command=corrected,
            description=f"Did you mean '{candidate}'?",
            source=SuggestionSource.FUZZY,
            score=FUZZY_SCORE,
            type=CorrectionType.FUZZY,
        )


def is_dangerous(command: str) -> bool:
    """True if ``command`` matches any dangerous-command rule."""
    command = (command or "").strip()
    return any(rule.pattern.search(command) for rule in DANGEROUS_COMMANDS)


"""
Token completion for partially typed commands.

The input is split into classified tokens; the token under the cursor
(always the last one) is completed from command-name tables, flag tables
or the context provider depending on its position and the command name.
"""

import os
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from .provider import ContextProvider, NullContextProvider
from ..suggestions.offline import BASIC_COMMANDS, COMMON_FLAGS, GIT_SUBCOMMAND_FLAGS
from ..suggestions.types import CommandToken, CompletionSuggestion, SuggestionSource, TokenKind
from ...utils.logging import get_logger


PATH_COMMANDS = ('cd', 'ls', 'mkdir', 'rm', 'cp', 'mv', 'cat')
BRANCH_SUBCOMMANDS = ('checkout', 'switch', 'branch', 'merge', 'rebase')

COMMAND_NAMES = {
    **BASIC_COMMANDS,
    'docker': 'Container management',
    'npm': 'Node.js package manager',
    'yarn': 'Alternative package manager',
}

COMPLETION_SCORE = 0.7
HISTORY_SCORE = 0.75


@dataclass
class ParsedInput:
    """The input split into tokens plus the token being completed."""
    tokens: List[CommandToken] = field(default_factory=list)
    current_token: str = ""
    position: int = 0

    @property
    def command_name(self) -> Optional[str]:
        return self.tokens[0].text if self.tokens else None

    def word(self, index: int) -> Optional[str]:
        return self.tokens[index].text if index < len(self.tokens) else None


def classify_token(text: str, position: int) -> TokenKind:
    if position == 0:
        return TokenKind.NAME
    if text.startswith('-'):
        return TokenKind.FLAG
    if '/' in text or text.startswith(('.', '~')):
        return TokenKind.PATH
    return TokenKind.ARGUMENT


def parse_command_input(text: str) -> ParsedInput:
    """
    Tokenize ``text``; a trailing space means a new, empty token is current.
    """
    words = text.split()
    tokens = [CommandToken(word, classify_token(word, i), i) for i, word in enumerate(words)]

    if not words:
        return ParsedInput(tokens, "", 0)
    if text.endswith(' '):
        return ParsedInput(tokens, "", len(words))
    return ParsedInput(tokens, words[-1], len(words) - 1)


def escape_path(path: str) -> str:
    return path.replace(' ', '\\ ')


class CompletionService:
    """Context-aware token completion."""

    def __init__(self, provider: Optional[ContextProvider] = None, max_completions: int = 15):
        self.provider = provider or NullContextProvider()
        self.max_completions = max_completions
        self.logger = get_logger(__name__)

    def complete(self, text: str, directory: str = "~",
                 history: Optional[Sequence[str]] = None) -> List[CompletionSuggestion]:
        """
        Complete the last token of ``text``.

        Returns:
            Completions whose ``command`` is the full input with the current
            token replaced; empty for blank input
        """
        if not text or not text.strip():
            return []

        parsed = parse_command_input(text)
        name = parsed.command_name

        if parsed.position == 0:
            values = self._command_names(parsed.current_token, history or ())
        elif parsed.position == 1 and name in COMMON_FLAGS:
            values = self._table(COMMON_FLAGS[name], parsed.current_token, SuggestionSource.OFFLINE)
        else:
            values = self._arguments(parsed, directory)

        completions = []
        seen = set()
        head = text[:len(text) - len(parsed.current_token)]
        for value, description, source, score in values:
            command = head + value
            if command in seen or value == parsed.current_token:
                continue
            seen.add(command)
            completions.append(CompletionSuggestion(
                command=command,
                description=description,
                source=source,
                score=score,
                replacement=value,
            ))

        return completions[:self.max_completions]

    def _command_names(self, prefix: str, history: Sequence[str]):
        values = []
        seen = set()
        for entry in history:
            words = entry.split() if isinstance(entry, str) else []
            if words and words[0] not in seen and words[0].startswith(prefix):
                seen.add(words[0])
                values.append((words[0], 'Recent command', SuggestionSource.HISTORY, HISTORY_SCORE))

        values.extend(self._table(COMMAND_NAMES, prefix, SuggestionSource.OFFLINE))
        return values

    def _table(self, table, prefix: str, source: SuggestionSource):
        return [
            (value, description, source, COMPLETION_SCORE)
            for value, description in table.items()
            if value.startswith(prefix)
        ]

    def _arguments(self, parsed: ParsedInput, directory: str):
        name = parsed.command_name
        prefix = parsed.current_token

        if name in PATH_COMMANDS:
            return self._paths(prefix, directory, dirs_only=(name == 'cd'))

        if name == 'git':
            return self._git(parsed, directory)

        if name in ('npm', 'yarn') and parsed.word(1) == 'run':
            scripts = self._safe_lookup(self.provider.npm_scripts, directory)
            return [(s, 'npm script', SuggestionSource.NPM, COMPLETION_SCORE)
                    for s in scripts if s.startswith(prefix)]

        if name == 'find' and parsed.position >= 2:
            previous = parsed.word(parsed.position - 1)
            if previous in ('-name', '-path'):
                pattern = f'"*{prefix}*"'
                return [(pattern, 'Glob pattern', SuggestionSource.OFFLINE, COMPLETION_SCORE)]

        return self._paths(prefix, directory)

    def _git(self, parsed: ParsedInput, directory: str):
        subcommand = parsed.word(1)
        prefix = parsed.current_token

        if prefix.startswith('-'):
            flags = GIT_SUBCOMMAND_FLAGS.get(subcommand, {})
            return self._table(flags, prefix, SuggestionSource.GIT)

        if subcommand in BRANCH_SUBCOMMANDS:
            branches = self._safe_lookup(self.provider.git_branches, directory)
            return [(b, 'Git branch', SuggestionSource.GIT, COMPLETION_SCORE)
                    for b in branches if b.startswith(prefix)]

        return self._paths(prefix, directory)

    def _paths(self, prefix: str, directory: str, dirs_only: bool = False):
        dir_part, _, base_name = prefix.rpartition('/')
        if '/' in prefix:
            dir_part += '/'
            if dir_part.startswith(('/', '~')):
                target = dir_part
            else:
                target = os.path.join(directory, dir_part)
        else:
            target = directory

        entries = self._safe_lookup(self.provider.list_directory, target, base_name, dirs_only)
        values = []
        for entry in entries:
            value = escape_path(dir_part + entry.name) + ('/' if entry.is_directory else '')
            description = 'Directory' if entry.is_directory else 'File'
            values.append((value, description, SuggestionSource.FILE, COMPLETION_SCORE))
        return values

    def _safe_lookup(self, lookup, *args):
        # Provider failures only ever cost completions
        try:
            return list(lookup(*args) or [])
        except Exception as e:
            self.logger.debug(f"Context lookup {lookup.__name__} failed: {e}")
            return []

"""
Offline keyword search over command history.

Scores each history entry by keyword hits, exact/prefix match against the
whole query, membership in categories named by the query, and recency.
"""

from typing import Dict, List, Sequence, Tuple

from .types import HistorySearchResult, SearchResult
from ...utils.logging import get_logger


STOP_WORDS = frozenset((
    'the', 'a', 'an', 'in', 'on', 'at', 'by', 'for', 'with', 'about', 'from',
    'to', 'of', 'search', 'find', 'show', 'display', 'list', 'get', 'my', 'me',
    'commands', 'command',
))

COMMAND_CATEGORIES: Dict[str, Tuple[str, ...]] = {
    'git': ('git', 'commit', 'branch', 'merge', 'rebase', 'checkout', 'push', 'pull'),
    'network': ('curl', 'wget', 'ping', 'ssh', 'scp', 'netstat', 'network', 'http', 'download'),
    'filesystem': ('ls', 'cd', 'cp', 'mv', 'rm', 'mkdir', 'touch', 'file', 'directory', 'folder'),
    'process': ('ps', 'kill', 'pkill', 'top', 'htop', 'process'),
    'package': ('npm', 'yarn', 'pip', 'apt', 'brew', 'cargo', 'install', 'package'),
    'docker': ('docker', 'container', 'image', 'compose'),
}

CATEGORY_REASONS = {
    'git': 'Git operation',
    'network': 'Network command',
    'filesystem': 'File operation',
    'process': 'Process management',
    'package': 'Package management',
    'docker': 'Container operation',
}

KEYWORD_WEIGHT = 0.2
EXACT_WEIGHT = 0.8
PREFIX_WEIGHT = 0.5
CATEGORY_WEIGHT = 0.3
RECENCY_MAX = 0.3
RECENCY_DECAY = 0.01
SCORE_THRESHOLD = 0.2
RESULT_LIMIT = 10


def extract_keywords(query: str) -> List[str]:
    return [w for w in query.lower().split() if len(w) > 2 and w not in STOP_WORDS]


def extract_categories(query: str) -> List[str]:
    words = set(query.lower().split())
    return [name for name, terms in COMMAND_CATEGORIES.items() if words.intersection(terms)]


def is_in_category(command: str, category: str) -> bool:
    terms = COMMAND_CATEGORIES.get(category, ())
    return bool(set(command.split()).intersection(terms))


class HistorySearch:
    """Ranks history entries against a free-text query."""

    def __init__(self, limit: int = RESULT_LIMIT):
        self.limit = limit
        self.logger = get_logger(__name__)

    def search(self, query: str, history: Sequence[str], directory: str = "~") -> HistorySearchResult:
        """
        Search ``history`` (position 0 is most recent) for ``query``.

        An entry only qualifies when it matches the query somehow; recency
        then breaks ties between otherwise similar matches.
        """
        if not query or not query.strip():
            return HistorySearchResult(query=query or "")

        normalized_query = query.strip().lower()
        keywords = extract_keywords(normalized_query)
        categories = extract_categories(normalized_query)

        results = []
        for index, command in enumerate(history):
            if not isinstance(command, str) or not command.strip():
                continue
            normalized = command.strip().lower()

            relevance = sum(KEYWORD_WEIGHT for keyword in keywords if keyword in normalized)
            if normalized == normalized_query:
                relevance += EXACT_WEIGHT
            elif normalized.startswith(normalized_query):
                relevance += PREFIX_WEIGHT
            relevance += sum(CATEGORY_WEIGHT for category in categories if is_in_category(normalized, category))
            if normalized_query in normalized and relevance == 0:
                relevance = KEYWORD_WEIGHT

            if relevance == 0:
                continue

            score = min(1.0, relevance + max(0.0, RECENCY_MAX - index * RECENCY_DECAY))
            if score <= SCORE_THRESHOLD:
                continue

            results.append(SearchResult(
                command=command,
                score=round(score, 4),
                match_type=self._match_type(normalized, normalized_query, categories),
                reason=self._match_reason(normalized, normalized_query, categories),
                metadata={"position": index, "directory": directory},
            ))

        results.sort(key=lambda r: r.score, reverse=True)
        self.logger.debug(f"History search {query!r}: {len(results)} matches")
        return HistorySearchResult(query=query, results=results[:self.limit], offline_mode=True)

    @staticmethod
    def _match_type(command: str, query: str, categories: List[str]) -> str:
        if command == query:
            return 'exact'
        if command.startswith(query):
            return 'prefix'
        if categories:
            return categories[0]
        if query in command:
            return 'substring'
        return 'semantic'

    @staticmethod
    def _match_reason(command: str, query: str, categories: List[str]) -> str:
        if command == query:
            return 'Exact match for your search'
        if command.startswith(query):
            return f'Starts with "{query}"'
        if categories:
            return CATEGORY_REASONS.get(categories[0], f'Related to {categories[0]}')
        if query in command:
            return f'Contains "{query}"'
        return 'Semantically relevant to your search'

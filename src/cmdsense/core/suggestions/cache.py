"""
Bounded FIFO cache for suggestion results and explanations.

Eviction is by insertion order only: reads never refresh an entry and
overwriting a key keeps its original slot.
"""

import threading
from collections import OrderedDict
from typing import Any, Dict, Hashable, List, Optional

from ...utils.logging import get_logger


CATEGORY_PREFIXES = (
    ("explain:", "explanations"),
    ("structured:", "structured"),
    ("pattern:", "patterns"),
    ("search:", "searches"),
)


def suggestion_key(command: str, directory: str) -> str:
    return f"{command}:{directory}"


class SuggestionCache:
    """Thread-safe first-in-first-out cache."""

    def __init__(self, max_size: int = 100):
        if max_size < 1:
            raise ValueError("max_size must be at least 1")
        self.max_size = max_size
        self._entries: "OrderedDict[Hashable, Any]" = OrderedDict()
        self._lock = threading.RLock()
        self.logger = get_logger(__name__)

    def get(self, key: Hashable, default: Optional[Any] = None) -> Any:
        with self._lock:
            return self._entries.get(key, default)

    def set(self, key: Hashable, value: Any) -> None:
        """Store ``value``; a new key may evict the oldest inserted one."""
        with self._lock:
            if key in self._entries:
                self._entries[key] = value
                return

            while len(self._entries) >= self.max_size:
                evicted, _ = self._entries.popitem(last=False)
                self.logger.debug(f"Cache full, evicted {evicted!r}")

            self._entries[key] = value

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def clear_by_prefix(self, prefix: str) -> int:
        """
        Remove every string key starting with ``prefix``.

        An empty prefix removes nothing.

        Returns:
            Number of entries removed
        """
        if not prefix:
            return 0

        with self._lock:
            doomed = [k for k in self._entries if isinstance(k, str) and k.startswith(prefix)]
            for key in doomed:
                del self._entries[key]
            return len(doomed)

    def keys(self) -> List[Hashable]:
        """Keys in insertion order, oldest first."""
        with self._lock:
            return list(self._entries)

    def stats(self) -> Dict[str, Any]:
        """Size, capacity and a per-category entry count."""
        counts = {"suggestions": 0, "explanations": 0, "structured": 0, "patterns": 0, "searches": 0, "other": 0}
        with self._lock:
            for key in self._entries:
                counts[self._categorize(key)] += 1
            size = len(self._entries)

        return {"size": size, "max_size": self.max_size, "category_counts": counts}

    @staticmethod
    def _categorize(key: Hashable) -> str:
        if not isinstance(key, str):
            return "other"
        for prefix, category in CATEGORY_PREFIXES:
            if key.startswith(prefix):
                return category
        if ":" in key:
            return "suggestions"
        return "other"

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: Hashable) -> bool:
        with self._lock:
            return key in self._entries

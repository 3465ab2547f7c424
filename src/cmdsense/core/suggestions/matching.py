"""
Edit-distance matching used for fuzzy command-name correction.
"""

from typing import Iterable, Optional, Tuple


def levenshtein_distance(a: str, b: str) -> int:
    """Minimal number of single-character insertions, deletions and substitutions."""
    if not a:
        return len(b)
    if not b:
        return len(a)

    # Full matrix; tokens are short so O(|a|*|b|) space is fine
    rows = len(a) + 1
    cols = len(b) + 1
    matrix = [[0] * cols for _ in range(rows)]

    for i in range(rows):
        matrix[i][0] = i
    for j in range(cols):
        matrix[0][j] = j

    for i in range(1, rows):
        for j in range(1, cols):
            cost = 0 if a[i - 1] == b[j - 1] else 1
            matrix[i][j] = min(
                matrix[i - 1][j] + 1,
                matrix[i][j - 1] + 1,
                matrix[i - 1][j - 1] + cost,
            )

    return matrix[-1][-1]


def find_closest(
    word: str,
    vocabulary: Iterable[str],
    max_distance: int = 3,
    max_length_delta: int = 3,
) -> Optional[Tuple[str, int]]:
    """
    Find the vocabulary entry closest to ``word``.

    Candidates whose length differs by more than ``max_length_delta`` are
    skipped. Only a strictly smaller distance replaces the current best, so
    ties go to the entry listed first.

    Returns:
        ``(candidate, distance)`` or None if nothing is within ``max_distance``
    """
    if not word:
        return None

    needle = word.lower()
    best: Optional[Tuple[str, int]] = None

    for candidate in vocabulary:
        if abs(len(candidate) - len(word)) > max_length_delta:
            continue

        distance = levenshtein_distance(needle, candidate.lower())
        if distance > max_distance:
            continue
        if best is None or distance < best[1]:
            best = (candidate, distance)
            if distance == 0:
                break

    return best

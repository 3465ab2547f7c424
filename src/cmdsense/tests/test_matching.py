"""
Tests for edit-distance matching.
"""

import pytest

from cmdsense.core.suggestions.matching import levenshtein_distance, find_closest

pytestmark = pytest.mark.unit


class TestLevenshteinDistance:
    """Test the Levenshtein distance implementation."""

    @pytest.mark.parametrize("a,b,expected", [
        ("", "", 0),
        ("", "abc", 3),
        ("abc", "", 3),
        ("git", "git", 0),
        ("giit", "git", 1),
        ("kitten", "sitting", 3),
        ("flaw", "lawn", 2),
        ("grpe", "grep", 2),
    ])
    def test_known_distances(self, a, b, expected):
        assert levenshtein_distance(a, b) == expected

    @pytest.mark.parametrize("a,b", [("mkidr", "mkdir"), ("docker", "dokcer"), ("ls", "cd"), ("", "x")])
    def test_symmetric(self, a, b):
        assert levenshtein_distance(a, b) == levenshtein_distance(b, a)

    def test_identity_is_zero(self):
        for word in ("ls", "chmod", "python3", ""):
            assert levenshtein_distance(word, word) == 0


class TestFindClosest:
    """Test nearest-vocabulary lookup."""

    def test_exact_match_returns_zero_distance(self):
        assert find_closest("git", ["grep", "git"]) == ("git", 0)

    def test_nearest_candidate(self):
        assert find_closest("gti", ["grep", "git", "cat"]) == ("git", 2)

    def test_case_insensitive(self):
        assert find_closest("GIT", ["git"]) == ("git", 0)

    def test_ties_go_to_vocabulary_order(self):
        # "cx" is one edit from both "cd" and "cp"
        assert find_closest("cx", ["cd", "cp"]) == ("cd", 1)
        assert find_closest("cx", ["cp", "cd"]) == ("cp", 1)

    def test_length_delta_pruning(self):
        # "l" vs "python": length differs by 5, never compared
        assert find_closest("l", ["python"]) is None

    def test_distance_limit(self):
        assert find_closest("abcdef", ["uvwxyz"]) is None
        assert find_closest("abcdef", ["uvwxyz"], max_distance=6) == ("uvwxyz", 6)

    def test_empty_word(self):
        assert find_closest("", ["ls"]) is None

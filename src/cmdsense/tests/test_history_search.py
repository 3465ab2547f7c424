"""
Tests for offline history search.
"""

import pytest

from cmdsense.core.suggestions.history_search import (
    HistorySearch, extract_keywords, extract_categories, is_in_category,
)


HISTORY = [
    "git push origin main",
    "ls -la",
    "curl https://example.com",
    "git status",
    "docker ps",
    "npm install",
]


@pytest.fixture
def search():
    return HistorySearch()


class TestQueryParsing:

    def test_keywords_drop_stop_words_and_short_words(self):
        assert extract_keywords("show me my git commits on main") == ["git", "commits", "main"]

    def test_categories(self):
        assert extract_categories("download with curl") == ["network"]
        assert extract_categories("git container") == ["git", "docker"]
        assert extract_categories("hello") == []

    def test_category_membership_is_by_word(self):
        assert is_in_category("docker ps", "docker")
        assert not is_in_category("dockerfile", "docker")


class TestHistorySearch:

    def test_exact_match_ranks_first(self, search):
        result = search.search("git status", HISTORY)

        top = result.results[0]
        assert top.command == "git status"
        assert top.match_type == "exact"
        assert top.reason == "Exact match for your search"
        assert top.score <= 1.0

    def test_prefix_match(self, search):
        result = search.search("ls", HISTORY)

        top = result.results[0]
        assert top.command == "ls -la"
        assert top.match_type == "prefix"
        assert top.reason == 'Starts with "ls"'

    def test_category_search(self, search):
        result = search.search("network download", HISTORY)

        assert [r.command for r in result.results] == ["curl https://example.com"]
        assert result.results[0].reason == "Network command"

    def test_unrelated_entries_are_excluded(self, search):
        result = search.search("git", HISTORY)
        assert {r.command for r in result.results} == {"git push origin main", "git status"}

    def test_recency_breaks_ties(self, search):
        result = search.search("git", ["git a", "ls", "git b"])
        assert [r.command for r in result.results] == ["git a", "git b"]

    def test_metadata(self, search):
        result = search.search("docker", HISTORY, directory="/srv")
        assert result.results[0].metadata == {"position": 4, "directory": "/srv"}

    def test_substring_match(self, search):
        result = search.search("example", HISTORY)

        assert result.results[0].command == "curl https://example.com"
        assert result.results[0].match_type == "substring"

    def test_limit(self):
        history = [f"git commit -m 'change {i}'" for i in range(30)]
        assert len(HistorySearch(limit=10).search("git", history).results) == 10

    def test_blank_query(self, search):
        result = search.search("   ", HISTORY)
        assert result.results == []

    def test_malformed_entries_skipped(self, search):
        result = search.search("git", [None, "", "git log", 7])
        assert [r.command for r in result.results] == ["git log"]

    def test_offline_flag(self, search):
        assert search.search("git", HISTORY).offline_mode is True

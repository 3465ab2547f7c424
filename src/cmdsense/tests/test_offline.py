"""
Tests for the offline heuristics.
"""

import pytest

from cmdsense.core.suggestions.offline import (
    BASIC_COMMANDS, KNOWN_COMMANDS, OFFLINE_EXPLANATIONS,
    get_offline_explanation, offline_suggestions, replace_last_word,
)
from cmdsense.core.suggestions.types import CompletionSuggestion, SuggestionSource

pytestmark = pytest.mark.unit


class TestOfflineSuggestions:
    """Completion of the last word from the static tables."""

    def test_ls_dash_offers_flags(self):
        suggestions = offline_suggestions("ls -")
        by_flag = {s.replacement: s for s in suggestions}

        for flag in ("-l", "-a", "-h", "-t"):
            assert by_flag[flag].command == f"ls {flag}"
            assert by_flag[flag].description
        assert len({s.command for s in suggestions}) == len(suggestions)

    def test_command_name_prefix(self):
        commands = [s.command for s in offline_suggestions("mk")]
        assert commands == ["mkdir"]

    def test_only_last_word_is_replaced(self):
        suggestions = offline_suggestions("sudo ch")
        assert [s.command for s in suggestions] == ["sudo chmod", "sudo chown"]

    def test_exact_name_is_not_suggested(self):
        assert offline_suggestions("ls") == []

    def test_flags_need_a_dash(self):
        assert offline_suggestions("grep i") == []

    def test_unknown_command_has_no_flags(self):
        assert offline_suggestions("tar -") == []

    def test_trailing_space_gives_nothing(self):
        assert offline_suggestions("ls ") == []

    def test_capped_at_five(self):
        assert len(offline_suggestions("c")) <= 5

    def test_shape(self):
        suggestion = offline_suggestions("gre")[0]
        assert isinstance(suggestion, CompletionSuggestion)
        assert suggestion.source == SuggestionSource.OFFLINE
        assert suggestion.score == pytest.approx(0.6)
        assert suggestion.description == BASIC_COMMANDS["grep"]


class TestOfflineExplanations:

    def test_known_command(self):
        assert get_offline_explanation("ls") == OFFLINE_EXPLANATIONS["ls"]

    def test_unknown_command(self):
        assert get_offline_explanation("frobnicate") == 'No offline explanation available for "frobnicate".'

    def test_vocabulary_includes_basic_commands(self):
        assert set(BASIC_COMMANDS).issubset(KNOWN_COMMANDS)


@pytest.mark.parametrize("command,replacement,expected", [
    ("ls -", "-l", "ls -l"),
    ("gi", "git", "git"),
    ("cd  sr", "src", "cd  src"),
])
def test_replace_last_word(command, replacement, expected):
    assert replace_last_word(command, replacement) == expected

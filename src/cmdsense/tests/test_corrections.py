"""
Test suite for the rule-based correction engine.
"""

import pytest

from cmdsense.core.suggestions.corrections import (
    CorrectionEngine, COMMON_TYPOS, DANGEROUS_COMMANDS, SYNTAX_RULES, is_dangerous
)
from cmdsense.core.suggestions.types import CorrectionType, SuggestionSource

pytestmark = pytest.mark.unit


@pytest.fixture
def engine():
    return CorrectionEngine()


class TestTypoCorrections:
    """Exact typo dictionary lookups."""

    def test_whole_input_typo(self, engine):
        result = engine.check("cd..")
        assert result.command == "cd .."
        assert result.source == SuggestionSource.TYPO
        assert result.type == CorrectionType.TYPO
        assert result.score == pytest.approx(0.98)

    def test_first_token_typo_keeps_arguments(self, engine):
        result = engine.check("giit status")
        assert result.command == "git status"
        assert result.source == SuggestionSource.TYPO
        assert not result.is_warning

    @pytest.mark.parametrize("typo,fixed", sorted(COMMON_TYPOS.items()))
    def test_every_dictionary_entry(self, engine, typo, fixed):
        assert engine.check(typo).command == fixed


class TestDangerousCommands:
    """Dangerous-command catalog."""

    @pytest.mark.parametrize("command,alternative", [
        ("rm -rf /", None),
        ("rm -rf ~/", None),
        ("rm -rf .", "rm -rf ./specific-dir"),
        ("chmod -R 777 /var/www", "chmod -R 755 for directories, 644 for files"),
        ("sudo chmod -R 777 /srv", "sudo chmod -R 755 for directories, 644 for files"),
        ("git reset --hard HEAD~1", "git stash to preserve changes"),
        (":wq!", ":w to save changes first"),
    ])
    def test_danger_detected(self, engine, command, alternative):
        result = engine.check(command)

        assert result.is_warning is True
        assert result.type == CorrectionType.DANGER
        assert result.source == SuggestionSource.SAFETY
        assert result.score == pytest.approx(0.99)
        assert result.description.startswith("⚠️ ")
        assert result.command == (alternative or command)

    def test_rules_are_immutable_and_ordered(self):
        assert isinstance(DANGEROUS_COMMANDS, tuple)
        assert DANGEROUS_COMMANDS[0].pattern.pattern == r'^rm\s+-rf\s+/'
        with pytest.raises(AttributeError):
            DANGEROUS_COMMANDS[0].explanation = "changed"

    def test_is_dangerous_helper(self):
        assert is_dangerous("rm -rf /")
        assert not is_dangerous("rm -rf build")

    def test_leading_whitespace_still_dangerous(self, engine):
        assert is_dangerous("  rm -rf /")
        result = engine.check("\t rm -rf .")
        assert result.is_warning
        assert result.command == "rm -rf ./specific-dir"


class TestSyntaxRules:
    """Syntax rewrite rules with back-references."""

    @pytest.mark.parametrize("command,expected", [
        ("cd foo bar", "cd foo"),
        ("git commit fix the bug", 'git commit -m "fix the bug"'),
        ("git add . git commit", "git add . && git commit"),
        ("find src -name foo", 'find src -name "*pattern*"'),
    ])
    def test_rewrites(self, engine, command, expected):
        result = engine.check(command)
        assert result.command == expected
        assert result.source == SuggestionSource.SYNTAX
        assert result.score == pytest.approx(0.97)

    def test_commit_with_flag_is_left_alone(self, engine):
        assert engine.check('git commit -m "done"') is None

    def test_rules_tuple(self):
        assert len(SYNTAX_RULES) == 4


class TestFuzzyCorrections:
    """Fuzzy matching of the command name."""

    def test_transposed_name(self, engine):
        result = engine.check("sl -la")
        assert result.command == "ls -la"
        assert result.source == SuggestionSource.FUZZY
        assert result.score == pytest.approx(0.96)

    def test_misspelled_grep(self, engine):
        assert engine.check("gerp foo").command == "grep foo"

    def test_known_command_gives_nothing(self, engine):
        assert engine.check("ls -la") is None
        assert engine.check("echo hello") is None

    def test_single_character_is_not_fuzzed(self, engine):
        assert engine.check("x") is None

    def test_custom_vocabulary(self):
        engine = CorrectionEngine(vocabulary=["kubectl"])
        assert engine.check("kubectll get pods").command == "kubectl get pods"


class TestPriority:
    """First matching catalog wins."""

    def test_typo_wins_over_fuzzy(self, engine):
        # "grpe" is also within fuzzy range of "grep"; the typo table answers first
        assert engine.check("grpe foo").source == SuggestionSource.TYPO

    def test_danger_wins_over_syntax(self, engine):
        assert engine.check("rm -rf / tmp").type == CorrectionType.DANGER

    @pytest.mark.parametrize("blank", ["", "   ", None])
    def test_blank_input(self, engine, blank):
        assert engine.check(blank) is None

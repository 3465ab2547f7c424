"""
Tests for the command-line interface.
"""

import io
import json

import pytest

from cmdsense.cli import parse_args, handle_cli_command

pytestmark = pytest.mark.integration


@pytest.fixture(autouse=True)
def isolated_cwd(tmp_path, monkeypatch):
    """Keep config discovery away from the repository's configs/ and leave logging alone."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr("cmdsense.cli.handlers.setup_logging", lambda config, verbose=False: None)


def run(capsys, *argv):
    code = handle_cli_command(parse_args(list(argv)))
    return code, capsys.readouterr()


class TestParser:

    def test_global_options(self):
        args = parse_args(["--offline", "--json", "--cwd", "/srv", "suggest", "giit", "--last-error", "boom"])

        assert args.offline and args.json
        assert args.cwd == "/srv"
        assert args.command == "suggest"
        assert args.text == "giit"
        assert args.last_error == "boom"

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            parse_args(["--version"])
        assert exc_info.value.code == 0
        assert "CmdSense" in capsys.readouterr().out


class TestHandlers:

    def test_suggest_prints_correction(self, capsys):
        code, out = run(capsys, "--offline", "suggest", "giit status")

        assert code == 0
        assert "git status" in out.out

    def test_suggest_json(self, capsys):
        code, out = run(capsys, "--offline", "--json", "suggest", "rm -rf /")

        payload = json.loads(out.out)
        assert code == 0
        assert payload["has_warning"] is True
        assert payload["suggestions"][0]["source"] == "safety"
        assert payload["suggestions"][0]["type"] == "danger"

    def test_explain_offline(self, capsys):
        code, out = run(capsys, "--offline", "explain", "ls -la")

        assert code == 0
        assert "List directory contents" in out.out

    def test_patterns_need_history(self, capsys):
        code, out = run(capsys, "--offline", "patterns")
        assert code == 1

    def test_patterns_from_history_file(self, capsys, tmp_path):
        history = tmp_path / "history"
        history.write_text("mkdir proj\ncd proj\n" * 3)

        code, out = run(capsys, "--offline", "--history", str(history), "patterns")

        assert code == 0
        assert "mkdir -p proj && cd $_" in out.out

    def test_zsh_history_is_understood(self, capsys, tmp_path):
        history = tmp_path / "zsh_history"
        history.write_text(": 1700000000:0;git status\n: 1700000001:0;ls -la\n")

        code, out = run(capsys, "--offline", "--json", "--history", str(history), "search", "git status")

        payload = json.loads(out.out)
        assert payload["results"][0]["command"] == "git status"

    def test_missing_history_file(self, capsys, tmp_path):
        code, out = run(capsys, "--offline", "--history", str(tmp_path / "nope"), "search", "git")

        assert code == 1
        assert "Cannot read history" in out.err

    def test_complete(self, capsys, tmp_path):
        (tmp_path / "src").mkdir()
        code, out = run(capsys, "--offline", "--cwd", str(tmp_path), "complete", "cd s")

        assert code == 0
        assert "cd src/" in out.out

    def test_bad_config(self, capsys, tmp_path):
        code, out = run(capsys, "--config", str(tmp_path / "missing.yaml"), "suggest", "ls")

        assert code == 1
        assert "Configuration error" in out.err

    @pytest.mark.slow
    def test_interactive_reads_stdin(self, capsys, monkeypatch):
        monkeypatch.setattr("sys.stdin", io.StringIO("giit status\n"))

        code, out = run(capsys, "--offline", "interactive")

        assert code == 0
        assert "git status" in out.out
        assert "Goodbye" in out.out

# tests/test_cli.py
"""Tests for the command-line interface."""
from unittest.mock import MagicMock, patch

import pytest
from typer.testing import CliRunner

from cmdsense import __version__
from cmdsense.api import get_engine
from cmdsense.cli import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def quiet_cli(clean_registry):
    """Keep CLI runs from reconfiguring logging or leaking services."""
    with patch("cmdsense.cli.setup_logging"):
        yield


@pytest.fixture
def bash_history(history_file):
    return history_file("cd src\nls -la\ngit status\ngit status\nvim app.py\ngit status\n")


def test_version():
    result = runner.invoke(app, ["--version"])

    assert result.exit_code == 0
    assert __version__ in result.stdout


def test_analyze(bash_history, tmp_path):
    result = runner.invoke(app, ["analyze", "-f", str(bash_history), "-s", "bash", "--cwd", str(tmp_path)])

    assert result.exit_code == 0
    assert "Patterns in 6 commands" in result.stdout
    assert "RepeatedCommand" in result.stdout


def test_analyze_missing_history_file(tmp_path):
    result = runner.invoke(app, ["analyze", "-f", str(tmp_path / "missing")])

    assert result.exit_code == 1
    assert "History file not found" in result.stdout


def test_search(bash_history, tmp_path):
    result = runner.invoke(app, ["search", "git", "-f", str(bash_history), "--cwd", str(tmp_path)])

    assert result.exit_code == 0
    assert "git status" in result.stdout


def test_search_without_matches(history_file, tmp_path):
    path = history_file("ls\n")

    result = runner.invoke(app, ["search", "kubernetes", "pods", "-f", str(path), "--cwd", str(tmp_path)])

    assert result.exit_code == 0
    assert "No commands match" in result.stdout


def test_search_online_without_api_key(bash_history):
    with patch("cmdsense.cli.get_remote_ranker", side_effect=ValueError("Gemini API key is not configured.")):
        result = runner.invoke(app, ["search", "git", "-f", str(bash_history), "--online"])

    assert result.exit_code == 1
    assert "API key" in result.stdout


def test_search_online_uses_ranker(bash_history, tmp_path):
    ranker = MagicMock(return_value=[{"command": "vim app.py", "score": 0.95, "reason": "Editing"}])
    with patch("cmdsense.cli.get_remote_ranker", return_value=ranker):
        result = runner.invoke(app, ["search", "edit", "code", "-f", str(bash_history), "--online",
                                     "--cwd", str(tmp_path)])

    assert result.exit_code == 0
    assert "vim app.py" in result.stdout
    assert ranker.call_args[0][0] == "edit code"


def test_search_online_from_settings(bash_history, tmp_path):
    get_engine().update_settings(offline=False)
    ranker = MagicMock(return_value=[{"command": "vim app.py", "score": 0.95}])
    with patch("cmdsense.cli.get_remote_ranker", return_value=ranker):
        result = runner.invoke(app, ["search", "edit", "-f", str(bash_history), "--cwd", str(tmp_path)])

    assert result.exit_code == 0
    assert "vim app.py" in result.stdout
    ranker.assert_called_once()


def test_offline_flag_overrides_settings(bash_history, tmp_path):
    get_engine().update_settings(offline=False)
    ranker = MagicMock(return_value=[])
    with patch("cmdsense.cli.get_remote_ranker", return_value=ranker):
        result = runner.invoke(app, ["search", "git", "-f", str(bash_history), "--offline", "--cwd", str(tmp_path)])

    assert result.exit_code == 0
    assert "git status" in result.stdout
    ranker.assert_not_called()


def test_online_setting_without_key_searches_offline(bash_history, tmp_path):
    get_engine().update_settings(offline=False)
    with patch("cmdsense.cli.get_remote_ranker", side_effect=ValueError("Gemini API key is not configured.")):
        result = runner.invoke(app, ["search", "git", "-f", str(bash_history), "--cwd", str(tmp_path)])

    assert result.exit_code == 0
    assert "Searching offline" in result.stdout
    assert "git status" in result.stdout


def test_complete(bash_history, tmp_path):
    result = runner.invoke(app, ["complete", "gi", "-f", str(bash_history), "--cwd", str(tmp_path)])

    assert result.exit_code == 0
    assert "git" in result.stdout


def test_config_shows_settings():
    result = runner.invoke(app, ["config"])

    assert result.exit_code == 0
    assert "cache_capacity" in result.stdout


@pytest.mark.parametrize("value", ["bogus=1", "search_result_limit=lots", "no_equals_sign"])
def test_config_rejects_bad_values(value):
    result = runner.invoke(app, ["config", "--set", value])

    assert result.exit_code == 1
    assert "Error" in result.stdout

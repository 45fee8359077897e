# tests/test_history.py
"""Tests for shell history file parsing and loading."""
from datetime import datetime

import pytest

from cmdsense.history import default_history_file, load_history, parse_history
from cmdsense.models import ShellType


def _texts(entries):
    return [e.text for e in entries]


def test_plain_bash_history():
    entries = parse_history("ls -la\n\ncd src\ngit status\n")

    assert _texts(entries) == ["ls -la", "cd src", "git status"]
    assert all(e.timestamp is None for e in entries)


def test_bash_history_with_timestamps():
    entries = parse_history("#1700000000\nls -la\ncd src\n")

    assert entries[0].timestamp == datetime.fromtimestamp(1700000000)
    assert entries[1].timestamp is None


def test_zsh_extended_history():
    content = ": 1700000000:0;git status\n: 1700000060:2;make test\n"

    entries = parse_history(content)

    assert _texts(entries) == ["git status", "make test"]
    assert entries[1].timestamp == datetime.fromtimestamp(1700000060)


def test_zsh_multiline_command():
    content = ": 1700000000:0;for f in *.py; do \\\necho $f\\\ndone\n: 1700000010:0;ls\n"

    entries = parse_history(content)

    assert _texts(entries) == ["for f in *.py; do \necho $f\ndone", "ls"]
    assert entries[0].timestamp == datetime.fromtimestamp(1700000000)


def test_fish_history():
    content = "\n".join([
        "- cmd: cd project",
        "  when: 1700000000",
        "- cmd: vim notes.md",
        "  when: 1700000100",
        "  paths:",
        "    - notes.md",
        "- cmd: git status",
        "  when: 1700000200",
        "",
    ])

    entries = parse_history(content)

    assert _texts(entries) == ["cd project", "vim notes.md", "git status"]
    assert entries[2].timestamp == datetime.fromtimestamp(1700000200)


def test_load_history_is_most_recent_first(history_file):
    path = history_file("one\ntwo\nthree\nfour\n")

    entries = load_history(path, limit=3)

    assert _texts(entries) == ["four", "three", "two"]


def test_load_history_tolerates_bad_bytes(tmp_path):
    path = tmp_path / ".zsh_history"
    path.write_bytes(b": 1700000000:0;echo caf\xe9\n")

    entries = load_history(path)

    assert len(entries) == 1
    assert entries[0].text.startswith("echo caf")


def test_load_history_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_history(tmp_path / "missing")


def test_no_default_file_for_other_shells():
    assert default_history_file(ShellType.OTHER) is None

    with pytest.raises(FileNotFoundError):
        load_history(shell=ShellType.OTHER)


def test_default_history_file_from_shell_env(monkeypatch):
    monkeypatch.setenv("SHELL", "/usr/bin/zsh")

    assert default_history_file().name == ".zsh_history"

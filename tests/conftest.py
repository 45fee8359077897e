# tests/conftest.py
"""
Common test fixtures for cmdsense.
"""
from datetime import datetime
from pathlib import Path

import pytest

from cmdsense.cache import ResultCache
from cmdsense.core.registry import registry
from cmdsense.models import CandidateKind, CompletionCandidate, Context, ShellType

FIXED_NOW = datetime(2024, 5, 1, 12, 0, 0)


class RecordingLookup:
    """Lookup double that records its calls and returns canned candidates."""

    def __init__(self, kind=CandidateKind.PATH, values=(), error=None):
        self.kind = kind
        self.values = list(values)
        self.error = error
        self.calls = []

    def __call__(self, prefix, ctx):
        self.calls.append((prefix, ctx))
        if self.error is not None:
            raise self.error
        return [
            CompletionCandidate(value=value, label=value, description=self.kind.value, kind=self.kind)
            for value in self.values
            if value.startswith(prefix)
        ]


@pytest.fixture
def ctx():
    """A bash context with a fixed timestamp, so outputs are deterministic."""
    return Context(
        current_directory="/home/user/project",
        shell_type=ShellType.BASH,
        timestamp=FIXED_NOW,
    )


@pytest.fixture
def cache():
    return ResultCache(capacity=10)


@pytest.fixture
def git_history():
    """Most-recent-first history of a small feature-branch session."""
    return [
        "git push",
        "git commit -m 'add login form'",
        "git add .",
        "vim src/login.py",
        "git checkout -b feature/login",
        "git status",
        "ls -la",
        "cd ~/project",
    ]


@pytest.fixture
def fake_lookups():
    """Lookup doubles for every key the completion provider asks for."""
    return {
        "path": RecordingLookup(CandidateKind.PATH, ["README.md", "setup.cfg", "src", "tests"]),
        "directory": RecordingLookup(CandidateKind.DIRECTORY, ["src", "tests"]),
        "branch": RecordingLookup(CandidateKind.BRANCH, ["main", "feature/login", "fix/typo"]),
        "remote": RecordingLookup(CandidateKind.REMOTE, ["origin", "upstream"]),
        "unstaged": RecordingLookup(CandidateKind.FILE, ["src/app.py", "README.md"]),
    }


@pytest.fixture
def history_file(tmp_path):
    """Write a history file and return its path."""
    def _write(content: str, name: str = ".bash_history") -> Path:
        path = tmp_path / name
        path.write_text(content)
        return path
    return _write


@pytest.fixture
def clean_registry():
    """Drop services created by a test from the global registry."""
    registry.clear()
    yield registry
    registry.clear()

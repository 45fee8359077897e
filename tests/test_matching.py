# tests/test_matching.py
"""Tests for the tokenizing and matching helpers."""
import re
from datetime import timedelta

import pytest

from cmdsense.matching import (
    Matcher,
    base_command,
    common_prefix_length,
    count_occurrences,
    extract_keywords,
    extract_timeframe,
    match_sequence,
)


@pytest.mark.parametrize("cmd,expected", [
    ("git status", "git"),
    ("  ls   -la ", "ls"),
    ("", ""),
    ("   ", ""),
])
def test_base_command(cmd, expected):
    assert base_command(cmd) == expected


def test_extract_keywords_drops_stop_words_and_short_words():
    assert extract_keywords("Show me the git commands to push") == ["git", "push"]


@pytest.mark.parametrize("query,expected", [
    ("git commands from today", timedelta(hours=24)),
    ("what did I run yesterday", timedelta(hours=48)),
    ("docker this week", timedelta(days=7)),
    ("docker last week", timedelta(days=14)),
    ("npm this month", timedelta(days=30)),
    ("ssh last month", timedelta(days=60)),
    ("ssh to prod", None),
])
def test_extract_timeframe(query, expected):
    assert extract_timeframe(query) == expected


def test_common_prefix_length():
    assert common_prefix_length("git", "gi") == 2
    assert common_prefix_length("grep", "git") == 1
    assert common_prefix_length("", "git") == 0


def test_prefix_matcher():
    matcher = Matcher.prefix("git add")

    assert matcher.matches("git add .")
    assert not matcher.matches("git commit")
    assert not matcher.matches("")
    assert not matcher.matches(None)


def test_regex_matcher_searches_anywhere():
    matcher = Matcher.regex(r"\|\s*grep")

    assert matcher.matches("cat log | grep error")
    assert not matcher.matches("grep error log")


def test_match_sequence_is_positional():
    """Each template is tested against the command at the same position."""
    history = ["git commit -m x", "git add .", "vim a.py"]

    assert match_sequence(["git commit", "git add"], history)
    assert not match_sequence(["git add", "git commit"], history)
    assert not match_sequence(["git commit", "vim"], history)


def test_match_sequence_accepts_compiled_regex():
    history = ["ls", "cd /tmp"]

    assert match_sequence(["ls", re.compile(r"^cd\s")], history)


def test_match_sequence_needs_enough_history():
    assert not match_sequence(["ls", "cd"], ["ls"])
    assert not match_sequence([], ["ls"])


def test_count_occurrences_is_non_overlapping():
    history = ["a", "a", "a", "a", "b"]

    assert count_occurrences(history, ["a", "a"]) == 2
    assert count_occurrences(history, ["a", "b"]) == 1
    assert count_occurrences(history, ["b", "a"]) == 0
    assert count_occurrences(history, []) == 0
    assert count_occurrences(["a"], ["a", "b"]) == 0

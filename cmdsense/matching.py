# cmdsense/matching.py
"""
Tokenizing and matching helpers shared by every component.

Commands are treated as whitespace-separated text, not parsed shell syntax.
"""
import re
from dataclasses import dataclass
from datetime import timedelta
from typing import List, Optional, Sequence, Union

STOP_WORDS = frozenset({
    "the", "a", "an", "in", "on", "at", "by", "for", "with", "about", "from",
    "to", "of", "search", "find", "show", "display", "list", "get", "my", "me",
    "commands", "command",
})

# Ordered: the first timeframe phrase found in a query wins
TIMEFRAME_PATTERNS = [
    (re.compile(r"today|last 24 hours", re.IGNORECASE), timedelta(hours=24)),
    (re.compile(r"yesterday", re.IGNORECASE), timedelta(hours=48)),
    (re.compile(r"this week|last 7 days", re.IGNORECASE), timedelta(days=7)),
    (re.compile(r"last week", re.IGNORECASE), timedelta(days=14)),
    (re.compile(r"this month", re.IGNORECASE), timedelta(days=30)),
    (re.compile(r"last month", re.IGNORECASE), timedelta(days=60)),
]


def base_command(cmd: str) -> str:
    """First whitespace-delimited token of a command, or '' for blank input."""
    parts = cmd.split() if cmd else []
    return parts[0] if parts else ""


def extract_keywords(query: str) -> List[str]:
    """Lowercased query words longer than two characters, minus stop words."""
    return [
        word for word in query.lower().split()
        if len(word) > 2 and word not in STOP_WORDS
    ]


def extract_timeframe(query: str) -> Optional[timedelta]:
    """Window of time a natural-language query asks about, if any."""
    for regex, window in TIMEFRAME_PATTERNS:
        if regex.search(query):
            return window
    return None


def common_prefix_length(left: str, right: str) -> int:
    """Number of leading characters two strings share."""
    length = 0
    for a, b in zip(left, right):
        if a != b:
            break
        length += 1
    return length


@dataclass(frozen=True)
class Matcher:
    """A string-prefix or regular-expression test on one command string."""

    pattern: str
    is_regex: bool = False

    def __post_init__(self):
        if self.is_regex:
            object.__setattr__(self, "_compiled", re.compile(self.pattern))

    @classmethod
    def prefix(cls, text: str) -> "Matcher":
        return cls(text, False)

    @classmethod
    def regex(cls, pattern: str) -> "Matcher":
        return cls(pattern, True)

    def matches(self, cmd: Optional[str]) -> bool:
        if not cmd:
            return False
        if self.is_regex:
            return self._compiled.search(cmd) is not None
        return cmd.startswith(self.pattern)

    def __repr__(self) -> str:
        kind = "regex" if self.is_regex else "prefix"
        return f"Matcher.{kind}({self.pattern!r})"


MatcherLike = Union[Matcher, str, re.Pattern]


def as_matcher(template: MatcherLike) -> Matcher:
    """Plain strings become prefix matchers, compiled regexes regex matchers."""
    if isinstance(template, Matcher):
        return template
    if isinstance(template, str):
        return Matcher.prefix(template)
    return Matcher.regex(template.pattern)


def match_sequence(templates: Sequence[MatcherLike], history: Sequence[str]) -> bool:
    """
    Test the most recent commands against templates position by position.

    ``templates[i]`` must match ``history[i]`` for every template; this is a
    strict positional match, not a subsequence search.

    Args:
        templates: Prefix strings, compiled regexes or Matchers
        history: Commands, most recent first

    Returns:
        True when every template matches its position
    """
    if not templates or len(history) < len(templates):
        return False

    for template, cmd in zip(templates, history):
        if not as_matcher(template).matches(cmd):
            return False
    return True


def count_occurrences(history: Sequence[str], sequence: Sequence[str]) -> int:
    """
    Count non-overlapping occurrences of a contiguous run of commands.

    Args:
        history: Commands to scan
        sequence: Exact commands that must appear back to back

    Returns:
        Number of occurrences; the scan resumes after each match
    """
    size = len(sequence)
    if size == 0 or len(history) < size:
        return 0

    target = list(sequence)
    count = 0
    i = 0
    while i <= len(history) - size:
        if list(history[i:i + size]) == target:
            count += 1
            i += size
        else:
            i += 1
    return count

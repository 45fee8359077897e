# cmdsense/__init__.py
"""
cmdsense: command intelligence for shell history.

Pattern mining, relevance-ranked history search and context-aware
completion over a most-recent-first list of shell commands.
"""

__version__ = '0.1.0'

from cmdsense.engine import CommandIntelligenceEngine
from cmdsense.models import (
    CandidateKind,
    CommandHistoryEntry,
    CompletionCandidate,
    Context,
    Mode,
    Pattern,
    PatternKind,
    SearchFilters,
    SearchResult,
    ShellType,
)

__all__ = [
    'CandidateKind',
    'CommandHistoryEntry',
    'CommandIntelligenceEngine',
    'CompletionCandidate',
    'Context',
    'Mode',
    'Pattern',
    'PatternKind',
    'SearchFilters',
    'SearchResult',
    'ShellType',
    '__version__',
]

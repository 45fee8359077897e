# cmdsense/models.py
"""
Data model shared by the analyzer, history search and completion provider.

Everything the engine returns is a frozen pydantic model so cached results
can be handed out without copying.
"""
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Callable, FrozenSet, Iterable, List, Mapping, Optional, Sequence, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ShellType(str, Enum):
    """Shell flavours with dedicated pattern tables."""
    BASH = "bash"
    ZSH = "zsh"
    FISH = "fish"
    OTHER = "other"

    @classmethod
    def parse(cls, value: Any) -> "ShellType":
        """Coerce a shell name (or path such as /bin/zsh) into a ShellType."""
        if isinstance(value, ShellType):
            return value
        if not value:
            return cls.OTHER
        name = str(value).strip().lower().rsplit("/", 1)[-1]
        for member in cls:
            if member.value == name:
                return member
        return cls.OTHER


class CommandHistoryEntry(BaseModel):
    """A command from the shell history, optionally with when it ran."""
    model_config = ConfigDict(frozen=True)

    text: str
    timestamp: Optional[datetime] = None


HistoryItem = Union[str, CommandHistoryEntry]


def history_texts(history: Optional[Iterable[HistoryItem]]) -> List[str]:
    """Command strings of a history sequence, order preserved."""
    if not history:
        return []
    return [item.text if isinstance(item, CommandHistoryEntry) else str(item) for item in history]


def history_timestamps(history: Optional[Iterable[HistoryItem]]) -> List[Optional[datetime]]:
    """Timestamps of a history sequence, None where unknown."""
    if not history:
        return []
    return [item.timestamp if isinstance(item, CommandHistoryEntry) else None for item in history]


class Context(BaseModel):
    """Snapshot of the terminal state for a single engine call."""
    model_config = ConfigDict(frozen=True)

    current_directory: str = "~"
    shell_type: ShellType = ShellType.BASH
    recent_error: Optional[str] = None
    recent_commands: List[str] = Field(default_factory=list)
    timestamp: datetime = Field(default_factory=datetime.now)

    @field_validator("shell_type", mode="before")
    @classmethod
    def _coerce_shell(cls, value: Any) -> ShellType:
        return ShellType.parse(value)


class PatternKind(str, Enum):
    REPEATED_COMMAND = "RepeatedCommand"
    CREATE_ALIAS = "CreateAlias"
    SEQUENTIAL_COMMANDS = "SequentialCommands"
    COMMAND_OPTIMIZATION = "CommandOptimization"
    WORKFLOW = "Workflow"
    SHELL_TIP = "ShellTip"


class Pattern(BaseModel):
    """A usage pattern detected in the history and what to do about it."""
    model_config = ConfigDict(frozen=True)

    kind: PatternKind
    suggestion: str
    description: str
    confidence: int = Field(..., description="Heuristic strength, 0-100")
    shell_type: Optional[str] = None

    @field_validator("confidence", mode="before")
    @classmethod
    def _clamp_confidence(cls, value: Any) -> int:
        return max(0, min(100, int(value)))


class MatchType(str, Enum):
    EXACT = "exact"
    PREFIX = "prefix"
    SUBSTRING = "substring"
    SEMANTIC = "semantic"


class SearchMetadata(BaseModel):
    model_config = ConfigDict(frozen=True)

    timestamp: datetime
    directory: str


class SearchResult(BaseModel):
    """
    A ranked history entry.

    ``match_type`` is one of the MatchType values, or the name of the
    command category (``git``, ``network``...) when the category bonus
    decided the match.
    """
    model_config = ConfigDict(frozen=True)

    command: str
    score: float
    match_type: str
    reason: str
    metadata: SearchMetadata

    @field_validator("score", mode="before")
    @classmethod
    def _clamp_score(cls, value: Any) -> float:
        return max(0.0, min(1.0, float(value)))


class SearchFilters(BaseModel):
    """Post-filters over a ranked result list; they never change scores."""
    model_config = ConfigDict(frozen=True)

    timeframe: Optional[timedelta] = None
    categories: Optional[FrozenSet[str]] = None
    min_score: Optional[float] = None

    @classmethod
    def from_query(cls, query: str, min_score: Optional[float] = None) -> "SearchFilters":
        """Build filters from the timeframe and categories named in a query."""
        from cmdsense.matching import extract_timeframe
        from cmdsense.search.categories import extract_categories

        categories = extract_categories(query)
        return cls(
            timeframe=extract_timeframe(query),
            categories=frozenset(categories) if categories else None,
            min_score=min_score,
        )

    @property
    def is_empty(self) -> bool:
        return self.timeframe is None and not self.categories and self.min_score is None


class CandidateKind(str, Enum):
    COMMAND = "command"
    SUBCOMMAND = "subcommand"
    FLAG = "flag"
    PATH = "path"
    DIRECTORY = "directory"
    BRANCH = "branch"
    HISTORY = "history"
    REMOTE = "remote"
    FILE = "file"


class CompletionCandidate(BaseModel):
    model_config = ConfigDict(frozen=True)

    value: str
    label: str
    description: str = ""
    kind: CandidateKind


RemoteRankFn = Callable[[str, Sequence[str], Context, float], Iterable[Union[Mapping[str, Any], SearchResult]]]
LookupFn = Callable[[str, Context], List[CompletionCandidate]]


@dataclass
class Mode:
    """Whether history search may call a remote ranker, and how long it may wait."""
    offline: bool = True
    remote_rank_fn: Optional[RemoteRankFn] = None
    timeout: float = 5.0

    @property
    def online(self) -> bool:
        return not self.offline and self.remote_rank_fn is not None

# cmdsense/completion/provider.py
"""
Context-aware completion of a partially typed command line.
"""
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from cmdsense.cache import ResultCache, fingerprint
from cmdsense.completion.tables import (
    COMMON_COMMANDS,
    COMMON_FLAGS,
    DIRECTORY_COMMANDS,
    GIT_BRANCH_SUBCOMMANDS,
    GIT_REMOTE_SUBCOMMANDS,
    GIT_SUBCOMMAND_FLAGS,
    GIT_UNSTAGED_SUBCOMMANDS,
)
from cmdsense.constants import CACHE_PREFIX_COMPLETE, DEFAULT_COMPLETION_LIMIT
from cmdsense.matching import base_command, common_prefix_length
from cmdsense.models import (
    CandidateKind,
    CompletionCandidate,
    Context,
    HistoryItem,
    LookupFn,
    history_texts,
)
from cmdsense.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class ParsedInput:
    """A command line split at the token being completed."""
    preceding_tokens: Tuple[str, ...]
    current_token: str

    @property
    def token_position(self) -> int:
        return len(self.preceding_tokens)

    @property
    def command(self) -> str:
        return self.preceding_tokens[0] if self.preceding_tokens else ""


def parse_input(text: str) -> ParsedInput:
    """
    Split input on its last whitespace boundary.

    A trailing space means a new, empty token is being typed.
    """
    tokens = text.split()
    if not tokens:
        return ParsedInput((), "")
    if text[-1].isspace():
        return ParsedInput(tuple(tokens), "")
    return ParsedInput(tuple(tokens[:-1]), tokens[-1])


def _table_candidates(table: Mapping[str, str], prefix: str, flags_only: bool = False) -> List[CompletionCandidate]:
    candidates = []
    for option, description in table.items():
        is_flag = option.startswith("-")
        if flags_only and not is_flag:
            continue
        if option.startswith(prefix):
            candidates.append(CompletionCandidate(
                value=option,
                label=option,
                description=description,
                kind=CandidateKind.FLAG if is_flag else CandidateKind.SUBCOMMAND,
            ))
    return candidates


class CompletionProvider:
    """Produces completion candidates from history, static tables and lookups."""

    def __init__(
        self,
        cache: Optional[ResultCache] = None,
        lookups: Optional[Mapping[str, LookupFn]] = None,
        limit: int = DEFAULT_COMPLETION_LIMIT,
    ):
        self._cache = cache
        self._lookups: Dict[str, LookupFn] = dict(lookups or {})
        self.limit = limit
        self._logger = logger

    def complete(
        self,
        text: str,
        ctx: Context,
        history: Sequence[HistoryItem] = (),
    ) -> List[CompletionCandidate]:
        """
        Get completion candidates for a partially typed command.

        Args:
            text: The command line typed so far
            ctx: The terminal context of this call
            history: Commands, most recent first

        Returns:
            Ranked candidates, at most ``limit`` of them
        """
        if not text or not text.strip():
            return []

        commands = history_texts(history)

        key = None
        if self._cache is not None:
            key = f"{CACHE_PREFIX_COMPLETE}{ctx.current_directory}:{text}:{fingerprint(commands)}"
            cached, found = self._cache.get(key)
            if found:
                self._logger.debug(f"Completion cache hit for '{text}'")
                return cached

        parsed = parse_input(text)
        candidates = self._candidates(parsed, ctx, commands)
        result = self._rank(candidates, parsed.current_token)[:self.limit]

        if key is not None:
            self._cache.put(key, result)
        return result

    def _candidates(self, parsed: ParsedInput, ctx: Context, commands: List[str]) -> List[CompletionCandidate]:
        prefix = parsed.current_token

        if parsed.token_position == 0:
            return self._command_candidates(prefix, commands)

        command = parsed.command
        if parsed.token_position == 1 and command in COMMON_FLAGS:
            table = COMMON_FLAGS[command]
            entries = _table_candidates(table, prefix)
            has_subcommands = any(not option.startswith("-") for option in table)
            # Flag-only tables (ls, grep...) still take paths as first argument
            if entries or has_subcommands or prefix.startswith("-"):
                return entries

        if command in DIRECTORY_COMMANDS:
            return self._directories(prefix, ctx)

        if command == "git" and len(parsed.preceding_tokens) >= 2:
            return self._git_candidates(parsed.preceding_tokens[1], prefix, ctx)

        if prefix.startswith("-") and command in COMMON_FLAGS:
            return _table_candidates(COMMON_FLAGS[command], prefix, flags_only=True)

        return self._lookup("path", prefix, ctx)

    def _command_candidates(self, prefix: str, commands: List[str]) -> List[CompletionCandidate]:
        seen = set()
        candidates = []
        for cmd in commands:
            name = base_command(cmd)
            if name and name not in seen and name.startswith(prefix):
                seen.add(name)
                candidates.append(CompletionCandidate(
                    value=name, label=name, description="Recent command", kind=CandidateKind.HISTORY,
                ))

        for name, description in COMMON_COMMANDS.items():
            if name.startswith(prefix) and name not in seen:
                candidates.append(CompletionCandidate(
                    value=name, label=name, description=description, kind=CandidateKind.COMMAND,
                ))
        return candidates

    def _git_candidates(self, subcommand: str, prefix: str, ctx: Context) -> List[CompletionCandidate]:
        if prefix.startswith("-") and subcommand in GIT_SUBCOMMAND_FLAGS:
            return _table_candidates(GIT_SUBCOMMAND_FLAGS[subcommand], prefix)
        if subcommand in GIT_BRANCH_SUBCOMMANDS:
            return self._lookup("branch", prefix, ctx)
        if subcommand in GIT_REMOTE_SUBCOMMANDS:
            return self._lookup("remote", prefix, ctx)
        if subcommand in GIT_UNSTAGED_SUBCOMMANDS:
            return self._lookup("unstaged", prefix, ctx)
        return self._lookup("path", prefix, ctx)

    def _directories(self, prefix: str, ctx: Context) -> List[CompletionCandidate]:
        if "directory" in self._lookups:
            return self._lookup("directory", prefix, ctx)
        return [c for c in self._lookup("path", prefix, ctx) if c.kind == CandidateKind.DIRECTORY]

    def _lookup(self, name: str, prefix: str, ctx: Context) -> List[CompletionCandidate]:
        lookup = self._lookups.get(name)
        if lookup is None:
            return []
        try:
            return list(lookup(prefix, ctx))
        except Exception as e:
            self._logger.with_context(lookup=name, prefix=prefix).warning(
                f"Completion lookup failed: {type(e).__name__} - {e}"
            )
            return []

    @staticmethod
    def _rank(candidates: List[CompletionCandidate], current_token: str) -> List[CompletionCandidate]:
        unique: Dict[str, CompletionCandidate] = {}
        for candidate in candidates:
            unique.setdefault(candidate.value, candidate)

        return sorted(
            unique.values(),
            key=lambda c: (
                c.kind != CandidateKind.HISTORY,
                -common_prefix_length(c.value, current_token),
                c.value,
            ),
        )

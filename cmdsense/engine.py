# cmdsense/engine.py
"""
The command intelligence engine: one object wiring settings, the result
cache and the three components (analyzer, history search, completion).
"""
import threading
from typing import List, Mapping, Optional, Sequence

from cmdsense.analysis import PatternAnalyzer
from cmdsense.cache import ResultCache
from cmdsense.completion import CompletionProvider, default_lookups
from cmdsense.config import EngineSettings
from cmdsense.constants import CACHE_PREFIX_COMPLETE, CACHE_PREFIX_PATTERNS, CACHE_PREFIX_SEARCH
from cmdsense.models import (
    CompletionCandidate,
    Context,
    HistoryItem,
    LookupFn,
    Mode,
    Pattern,
    RemoteRankFn,
    SearchFilters,
    SearchResult,
    ShellType,
)
from cmdsense.search import HistorySearch
from cmdsense.utils.logging import get_logger

logger = get_logger(__name__)

# Settings whose change makes cached results of a namespace stale
_SEARCH_SETTINGS = {"offline", "remote_timeout", "remote_history_window", "min_search_score", "search_result_limit"}
_COMPLETION_SETTINGS = {"completion_limit"}
_PATTERN_SETTINGS = {"analysis_window"}


class CommandIntelligenceEngine:
    """
    Facade over pattern analysis, history search and completion.

    All three operations share one ``ResultCache``; changing settings
    drops exactly the cached results the change can affect.
    """

    def __init__(
        self,
        settings: Optional[EngineSettings] = None,
        cache: Optional[ResultCache] = None,
        lookups: Optional[Mapping[str, LookupFn]] = None,
    ):
        self._settings = settings or EngineSettings()
        self._cache = cache if cache is not None else ResultCache(self._settings.cache_capacity)
        self._lookups = dict(lookups) if lookups is not None else default_lookups()
        self._lock = threading.Lock()
        self._build_components()

    def _build_components(self) -> None:
        settings = self._settings
        self.analyzer = PatternAnalyzer(cache=self._cache, window=settings.analysis_window)
        self.history_search = HistorySearch(
            cache=self._cache,
            result_limit=settings.search_result_limit,
            min_score=settings.min_search_score,
            remote_history_window=settings.remote_history_window,
        )
        self.completion = CompletionProvider(
            cache=self._cache,
            lookups=self._lookups,
            limit=settings.completion_limit,
        )

    @property
    def settings(self) -> EngineSettings:
        return self._settings

    @property
    def cache(self) -> ResultCache:
        return self._cache

    def default_context(self, **overrides) -> Context:
        """A Context for the configured shell, with optional field overrides."""
        values = {"shell_type": self._settings.shell_type, **overrides}
        return Context(**values)

    def analyze(
        self,
        history: Sequence[HistoryItem],
        ctx: Optional[Context] = None,
        shell_type: Optional[ShellType] = None,
    ) -> List[Pattern]:
        """Detect usage patterns in the history."""
        return self.analyzer.analyze(history, ctx or self.default_context(), shell_type)

    def search(
        self,
        query: str,
        history: Sequence[HistoryItem],
        ctx: Optional[Context] = None,
        mode: Optional[Mode] = None,
        filters: Optional[SearchFilters] = None,
    ) -> List[SearchResult]:
        """Search the history; without a mode, the configured one is used."""
        return self.history_search.search(
            query,
            history,
            ctx or self.default_context(),
            mode or self.mode(),
            filters,
        )

    def complete(
        self,
        text: str,
        ctx: Optional[Context] = None,
        history: Sequence[HistoryItem] = (),
    ) -> List[CompletionCandidate]:
        """Complete a partially typed command line."""
        return self.completion.complete(text, ctx or self.default_context(), history)

    def mode(self, remote_rank_fn: Optional[RemoteRankFn] = None) -> Mode:
        """Build a Mode from the settings; online only with a remote function."""
        return Mode(
            offline=self._settings.offline,
            remote_rank_fn=remote_rank_fn,
            timeout=self._settings.remote_timeout,
        )

    def update_settings(self, **changes) -> EngineSettings:
        """
        Apply setting changes and drop the cached results they invalidate.

        Raises:
            pydantic.ValidationError: If a changed value is invalid
        """
        with self._lock:
            old = self._settings
            new = EngineSettings(**{**old.model_dump(), **changes})
            changed = {name for name in EngineSettings.model_fields if getattr(new, name) != getattr(old, name)}
            if not changed:
                return old

            self._settings = new
            if "cache_capacity" in changed:
                logger.info(f"Cache capacity changed to {new.cache_capacity}; starting with an empty cache")
                self._cache = ResultCache(new.cache_capacity)
            elif "shell_type" in changed:
                logger.debug(f"Shell changed to {new.shell_type.value}; clearing all cached results")
                self._cache.clear()
            else:
                if changed & _SEARCH_SETTINGS:
                    self._cache.invalidate_prefix(CACHE_PREFIX_SEARCH)
                if changed & _COMPLETION_SETTINGS:
                    self._cache.invalidate_prefix(CACHE_PREFIX_COMPLETE)
                if changed & _PATTERN_SETTINGS:
                    self._cache.invalidate_prefix(CACHE_PREFIX_PATTERNS)

            self._build_components()
            logger.debug(f"Updated engine settings: {sorted(changed)}")
            return new

    def invalidate(self, prefix: str = "") -> int:
        """Drop cached results whose key starts with ``prefix`` (all by default)."""
        return self._cache.invalidate_prefix(prefix)

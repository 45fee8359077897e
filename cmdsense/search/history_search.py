# cmdsense/search/history_search.py
"""
Relevance-ranked search over the shell history.

Online mode asks an injected remote ranker first; any failure there falls
back to the local scorer, so a search never fails because the remote did.
"""
from datetime import datetime, timedelta
from typing import Any, List, Mapping, Optional, Sequence

from cmdsense.cache import ResultCache
from cmdsense.constants import (
    CACHE_PREFIX_SEARCH,
    DEFAULT_MIN_SEARCH_SCORE,
    DEFAULT_SEARCH_RESULT_LIMIT,
    HISTORY_SPACING_MINUTES,
    REMOTE_HISTORY_WINDOW,
)
from cmdsense.matching import extract_keywords
from cmdsense.models import (
    Context,
    HistoryItem,
    MatchType,
    Mode,
    SearchFilters,
    SearchMetadata,
    SearchResult,
    history_texts,
    history_timestamps,
)
from cmdsense.search.categories import CATEGORY_REASONS, extract_categories, is_command_in_category
from cmdsense.utils.logging import get_logger

logger = get_logger(__name__)

# Offline scoring weights
KEYWORD_WEIGHT = 0.2
EXACT_WEIGHT = 0.8
PREFIX_WEIGHT = 0.5
CATEGORY_WEIGHT = 0.3
RECENCY_MAX = 0.3
RECENCY_DECAY = 0.01

DEFAULT_REMOTE_SCORE = 0.5
DEFAULT_REMOTE_REASON = "Matches search criteria"


def approximate_timestamp(ctx: Context, index: int) -> datetime:
    """Timestamp of the history entry at ``index`` assuming fixed spacing."""
    return ctx.timestamp - timedelta(minutes=HISTORY_SPACING_MINUTES * index)


def _local_naive(value: datetime) -> datetime:
    """Aware datetimes become naive local time so both kinds compare."""
    if value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)


def apply_filters(
    results: Sequence[SearchResult],
    filters: Optional[SearchFilters],
    ctx: Context,
) -> List[SearchResult]:
    """
    Drop results outside a timeframe, category set or score floor.

    Filtering never rescores or reorders; it only removes results.
    """
    if filters is None or filters.is_empty:
        return list(results)

    # History files give naive local times; callers may pass aware ones
    cutoff = None
    if filters.timeframe is not None:
        cutoff = _local_naive(ctx.timestamp - filters.timeframe)

    kept = []
    for result in results:
        if cutoff is not None and _local_naive(result.metadata.timestamp) < cutoff:
            continue
        if filters.categories and not any(
            is_command_in_category(result.command, category) for category in filters.categories
        ):
            continue
        if filters.min_score is not None and result.score < filters.min_score:
            continue
        kept.append(result)
    return kept


class HistorySearch:
    """Ranks history entries against a natural-language or keyword query."""

    def __init__(
        self,
        cache: Optional[ResultCache] = None,
        result_limit: int = DEFAULT_SEARCH_RESULT_LIMIT,
        min_score: float = DEFAULT_MIN_SEARCH_SCORE,
        remote_history_window: int = REMOTE_HISTORY_WINDOW,
    ):
        self._cache = cache
        self.result_limit = result_limit
        self.min_score = min_score
        self.remote_history_window = remote_history_window
        self._logger = logger

    def search(
        self,
        query: str,
        history: Sequence[HistoryItem],
        ctx: Context,
        mode: Optional[Mode] = None,
        filters: Optional[SearchFilters] = None,
    ) -> List[SearchResult]:
        """
        Search the history for commands relevant to a query.

        Args:
            query: Keywords or a natural-language request
            history: Commands, most recent first
            ctx: The terminal context of this call
            mode: Online/offline mode; offline when omitted
            filters: Optional post-filters

        Returns:
            Results ordered by descending score
        """
        if not query or not query.strip():
            return []

        mode = mode or Mode()
        key = f"{CACHE_PREFIX_SEARCH}{query}:{ctx.current_directory}"

        if self._cache is not None:
            cached, found = self._cache.get(key)
            if found:
                self._logger.debug(f"Search cache hit for '{query}'")
                return apply_filters(cached, filters, ctx)

        results = None
        remote_failed = False
        if mode.online:
            try:
                results = self.remote_search(query, history, ctx, mode)
            except Exception as e:
                remote_failed = True
                self._logger.with_context(query=query, directory=ctx.current_directory).warning(
                    f"Remote ranking failed, using offline search: {type(e).__name__} - {e}"
                )

        if results is None:
            results = self.offline_search(query, history, ctx)

        # A failed remote call is retried on the next search rather than cached
        if self._cache is not None and not remote_failed:
            self._cache.put(key, results)

        return apply_filters(results, filters, ctx)

    def offline_search(
        self,
        query: str,
        history: Sequence[HistoryItem],
        ctx: Context,
    ) -> List[SearchResult]:
        """Deterministic local scoring of every history entry."""
        normalized_query = query.strip().lower()
        if not normalized_query:
            return []

        keywords = extract_keywords(normalized_query)
        categories = extract_categories(normalized_query)
        commands = history_texts(history)
        timestamps = history_timestamps(history)

        results = []
        for index, command in enumerate(commands):
            normalized = command.lower()
            score = 0.0

            for keyword in keywords:
                if keyword in normalized:
                    score += KEYWORD_WEIGHT

            if normalized == normalized_query:
                score += EXACT_WEIGHT
            elif normalized.startswith(normalized_query):
                score += PREFIX_WEIGHT

            matched_categories = [c for c in categories if is_command_in_category(command, c)]
            score += CATEGORY_WEIGHT * len(matched_categories)

            score += max(0.0, RECENCY_MAX - index * RECENCY_DECAY)
            score = min(1.0, score)

            if score <= self.min_score:
                continue

            match_type, reason = self._explain(normalized, normalized_query, query.strip(), matched_categories)
            results.append(SearchResult(
                command=command,
                score=score,
                match_type=match_type,
                reason=reason,
                metadata=SearchMetadata(
                    timestamp=timestamps[index] or approximate_timestamp(ctx, index),
                    directory=ctx.current_directory,
                ),
            ))

        results.sort(key=lambda r: -r.score)
        return results[:self.result_limit]

    @staticmethod
    def _explain(normalized: str, normalized_query: str, query: str, matched_categories: List[str]):
        if normalized == normalized_query:
            return MatchType.EXACT.value, "Exact match for your search"
        if normalized.startswith(normalized_query):
            return MatchType.PREFIX.value, f'Starts with "{query}"'
        if matched_categories:
            category = matched_categories[0]
            return category, CATEGORY_REASONS[category]
        if normalized_query in normalized:
            return MatchType.SUBSTRING.value, f'Contains "{query}"'
        return MatchType.SEMANTIC.value, "Semantically relevant to your search"

    def remote_search(
        self,
        query: str,
        history: Sequence[HistoryItem],
        ctx: Context,
        mode: Mode,
    ) -> List[SearchResult]:
        """
        Rank through the injected remote function.

        Raises whatever the remote function raises, plus ValueError or
        ValidationError for payloads that do not fit the result shape.
        """
        commands = history_texts(history)
        window = commands[:self.remote_history_window]

        self._logger.debug(f"Remote ranking '{query}' over {len(window)} commands")
        raw_results = mode.remote_rank_fn(query, window, ctx, mode.timeout)
        if raw_results is None:
            raise ValueError("Remote ranker returned no results payload")

        timestamps = history_timestamps(history)
        positions = {}
        for index, command in enumerate(commands):
            positions.setdefault(command, index)

        results = [self._normalize_remote(item, positions, timestamps, ctx) for item in raw_results]
        results.sort(key=lambda r: -r.score)
        return results[:self.result_limit]

    @staticmethod
    def _normalize_remote(
        item: Any,
        positions: Mapping[str, int],
        timestamps: List[Optional[datetime]],
        ctx: Context,
    ) -> SearchResult:
        if isinstance(item, SearchResult):
            return item
        if not isinstance(item, Mapping):
            raise ValueError(f"Unexpected remote result of type {type(item).__name__}")

        command = item.get("command")
        if not isinstance(command, str) or not command:
            raise ValueError(f"Remote result without a command: {item!r}")

        metadata = item.get("metadata")
        if metadata is None:
            position = positions.get(command, 0)
            known = timestamps[position] if position < len(timestamps) else None
            metadata = SearchMetadata(
                timestamp=known or approximate_timestamp(ctx, position),
                directory=ctx.current_directory,
            )

        score = item.get("score")
        return SearchResult(
            command=command,
            score=DEFAULT_REMOTE_SCORE if score is None else score,
            match_type=item.get("match_type") or item.get("matchType") or MatchType.SEMANTIC.value,
            reason=item.get("reason") or DEFAULT_REMOTE_REASON,
            metadata=metadata,
        )

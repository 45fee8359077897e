# cmdsense/search/__init__.py
"""History search: offline scoring, remote ranking and result filters."""
from cmdsense.search.categories import CATEGORIES, extract_categories, is_command_in_category
from cmdsense.search.history_search import HistorySearch, apply_filters

__all__ = [
    "CATEGORIES",
    "HistorySearch",
    "apply_filters",
    "extract_categories",
    "is_command_in_category",
]

# cmdsense/analysis/__init__.py
"""Usage pattern mining over shell history."""
from cmdsense.analysis.analyzer import PatternAnalyzer, suggest_alias_name

__all__ = ["PatternAnalyzer", "suggest_alias_name"]

# cmdsense/completion/__init__.py
"""Completion candidates for partially typed commands."""
from cmdsense.completion.lookups import default_lookups
from cmdsense.completion.provider import CompletionProvider, ParsedInput, parse_input

__all__ = ["CompletionProvider", "ParsedInput", "default_lookups", "parse_input"]

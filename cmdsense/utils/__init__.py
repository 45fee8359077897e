# cmdsense/utils/__init__.py
"""
Utility functions for cmdsense.

Logging setup and the context-aware logger used throughout the package.
"""

from .logging import setup_logging, get_logger

# EnhancedLogger is available but not exported by default
# Import directly from enhanced_logging when needed

__all__ = ['setup_logging', 'get_logger']

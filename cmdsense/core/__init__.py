# cmdsense/core/__init__.py
"""
Core infrastructure for cmdsense.
"""
from cmdsense.core.registry import registry, ServiceRegistry

__all__ = ['registry', 'ServiceRegistry']

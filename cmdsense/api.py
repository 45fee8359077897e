# cmdsense/api.py
"""
Public API for cmdsense components.

This module provides functions to access process-wide components with lazy initialization.
"""
from cmdsense.core.registry import registry


# Engine API
def get_engine():
    """Get the default command intelligence engine, configured from the config file."""
    from cmdsense.config import config_manager
    from cmdsense.engine import CommandIntelligenceEngine
    return registry.get_or_create(
        "engine",
        CommandIntelligenceEngine,
        factory=lambda: CommandIntelligenceEngine(settings=config_manager.config.engine),
    )


# Remote Ranker API
def get_remote_ranker():
    """
    Get the Gemini remote ranker.

    Raises:
        ValueError: If no Gemini API key is configured
    """
    from cmdsense.config import config_manager
    from cmdsense.remote import GeminiRanker
    api = config_manager.config.api
    return registry.get_or_create(
        "remote_ranker",
        GeminiRanker,
        factory=lambda: GeminiRanker(api_key=api.gemini_api_key, model=api.gemini_model),
    )


# Config Manager API
def get_config_manager():
    """Get the configuration manager instance."""
    from cmdsense.config import ConfigManager, config_manager
    return registry.get_or_create("config_manager", ConfigManager, factory=lambda: config_manager)

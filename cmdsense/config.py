# cmdsense/config.py
"""
Configuration management for cmdsense.
Uses TOML format for configuration files.
"""
import os
from pathlib import Path
from typing import Dict, Any, Optional
import sys

from cmdsense.utils.logging import get_logger


# --- TOML Library Handling ---

# Reader (tomllib for >= 3.11, tomli for < 3.11)
if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

import tomli_w

# --- Pydantic and Environment Handling ---
from pydantic import BaseModel, Field, ValidationError, field_validator
from dotenv import load_dotenv

from cmdsense.constants import (
    CONFIG_FILE,
    GEMINI_MODEL,
    REQUEST_TIMEOUT,
    DEFAULT_CACHE_CAPACITY,
    DEFAULT_SEARCH_RESULT_LIMIT,
    DEFAULT_COMPLETION_LIMIT,
    DEFAULT_MIN_SEARCH_SCORE,
    REMOTE_HISTORY_WINDOW,
    ANALYSIS_WINDOW,
)
from cmdsense.models import ShellType

logger = get_logger(__name__)

_TRUE_VALUES = {"1", "true", "yes", "on"}

# --- Configuration Models ---

class ApiConfig(BaseModel):
    """Remote ranking API settings."""
    gemini_api_key: Optional[str] = Field(None, description="Google Gemini API Key")
    gemini_model: str = Field(GEMINI_MODEL, description="Model used for remote history ranking")


class EngineSettings(BaseModel):
    """Tunables of the command intelligence engine."""
    cache_capacity: int = Field(DEFAULT_CACHE_CAPACITY, ge=1, description="Maximum cached results")
    search_result_limit: int = Field(DEFAULT_SEARCH_RESULT_LIMIT, ge=1, description="Maximum search results")
    completion_limit: int = Field(DEFAULT_COMPLETION_LIMIT, ge=1, description="Maximum completion candidates")
    min_search_score: float = Field(DEFAULT_MIN_SEARCH_SCORE, ge=0.0, le=1.0, description="Offline search score threshold")
    shell_type: ShellType = Field(ShellType.BASH, description="Shell flavour used for shell-specific tables")
    offline: bool = Field(True, description="Skip the remote ranking call; when false the CLI ranks with Gemini")
    remote_timeout: float = Field(float(REQUEST_TIMEOUT), gt=0, description="Remote ranking timeout in seconds")
    remote_history_window: int = Field(REMOTE_HISTORY_WINDOW, ge=1, description="History entries sent to the remote ranker")
    analysis_window: int = Field(ANALYSIS_WINDOW, ge=2, description="Recent commands considered for workflows")

    @field_validator("shell_type", mode="before")
    @classmethod
    def _coerce_shell(cls, value: Any) -> ShellType:
        return ShellType.parse(value)


class AppConfig(BaseModel):
    """Application configuration settings."""
    api: ApiConfig = Field(default_factory=ApiConfig, description="API configuration")
    engine: EngineSettings = Field(default_factory=EngineSettings, description="Engine configuration")
    debug: bool = Field(False, description="Enable debug mode")


# --- Configuration Manager ---

class ConfigManager:
    """Manages the configuration for cmdsense using TOML."""

    def __init__(self, config_file: Optional[Path] = None):
        """Initializes the ConfigManager with default settings."""
        self._config: AppConfig = AppConfig()
        self.config_file = Path(config_file) if config_file else CONFIG_FILE
        self._load_environment()

    def _load_environment(self) -> None:
        """Loads API keys and overrides from environment variables and .env file."""
        load_dotenv()
        gemini_api_key = os.getenv("GEMINI_API_KEY")
        if gemini_api_key:
            self._config.api.gemini_api_key = gemini_api_key

        offline = os.getenv("CMDSENSE_OFFLINE")
        if offline is not None:
            self._config.engine.offline = offline.strip().lower() in _TRUE_VALUES

        shell = os.getenv("CMDSENSE_SHELL")
        if shell:
            self._config.engine.shell_type = ShellType.parse(shell)

    def _reset(self) -> None:
        logger.error("Using default configuration and environment variables.")
        self._config = AppConfig()
        self._load_environment()

    def load_config(self) -> None:
        """Loads configuration from the TOML config file."""
        if not self.config_file.exists():
            logger.debug(f"Configuration file not found at '{self.config_file}'. Using defaults.")
            return

        try:
            logger.debug(f"Loading configuration from: {self.config_file}")
            with open(self.config_file, "rb") as f:
                config_data = tomllib.load(f)

            if isinstance(config_data.get("api"), dict):
                self._config.api = ApiConfig(**config_data["api"])

            if isinstance(config_data.get("engine"), dict):
                self._config.engine = EngineSettings(**config_data["engine"])

            if "debug" in config_data:
                if isinstance(config_data["debug"], bool):
                    self._config.debug = config_data["debug"]
                else:
                    logger.warning(
                        f"Invalid type for 'debug' in {self.config_file}. "
                        f"Expected boolean, got {type(config_data['debug'])}. Ignoring."
                    )

            # Environment wins over the file
            self._load_environment()

        except tomllib.TOMLDecodeError as e:
            logger.error(f"Error decoding TOML configuration file ({self.config_file}): {e}")
            self._reset()
        except ValidationError as e:
            logger.error(f"Invalid configuration values in {self.config_file}: {e}")
            self._reset()
        except OSError as e:
            logger.error(f"Error accessing configuration file {self.config_file}: {e}")
            self._reset()

    def save_config(self) -> None:
        """Saves the current configuration to the config file (as TOML)."""
        config_dict: Dict[str, Any] = self._config.model_dump(mode="json", exclude_none=True)
        # Never persist secrets picked up from the environment
        config_dict.get("api", {}).pop("gemini_api_key", None)

        self.config_file.parent.mkdir(parents=True, exist_ok=True)
        with open(self.config_file, "wb") as f:
            tomli_w.dump(config_dict, f)
        logger.info(f"Configuration saved to {self.config_file}")

    def update_engine(self, **changes: Any) -> EngineSettings:
        """Validate and apply engine setting changes."""
        merged = {**self._config.engine.model_dump(), **changes}
        self._config.engine = EngineSettings(**merged)
        return self._config.engine

    @property
    def config(self) -> AppConfig:
        """Provides read-only access to the current application configuration."""
        return self._config


# --- Global Instance ---

config_manager = ConfigManager()
config_manager.load_config()

"""
Constants for the cmdsense command intelligence engine.
"""
from pathlib import Path
import os

# Application information
APP_NAME = "cmdsense"
APP_VERSION = "0.1.0"
APP_DESCRIPTION = "Command intelligence for your shell history: patterns, search and completion"

# Paths
CONFIG_DIR = Path(os.path.expanduser("~/.config/cmdsense"))
CONFIG_FILE = CONFIG_DIR / "config.toml"
LOG_DIR = CONFIG_DIR / "logs"

# Shell history locations, used when no history file is given
SHELL_HISTORY_FILES = {
    "bash": Path(os.path.expanduser("~/.bash_history")),
    "zsh": Path(os.path.expanduser("~/.zsh_history")),
    "fish": Path(os.path.expanduser("~/.local/share/fish/fish_history")),
}

# Logging
LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level} | {message}"
LOG_ROTATION = "10 MB"
LOG_RETENTION = "10 days"

# Remote ranking (online search)
GEMINI_MODEL = "gemini-2.0-flash"
GEMINI_MAX_TOKENS = 500
GEMINI_TEMPERATURE = 0.3
REQUEST_TIMEOUT = 5  # seconds

# Engine defaults
DEFAULT_CACHE_CAPACITY = 100
DEFAULT_SEARCH_RESULT_LIMIT = 10
DEFAULT_COMPLETION_LIMIT = 20
DEFAULT_MIN_SEARCH_SCORE = 0.2
DEFAULT_HISTORY_LIMIT = 500
REMOTE_HISTORY_WINDOW = 50
ANALYSIS_WINDOW = 20

# Cache key namespaces
CACHE_PREFIX_PATTERNS = "patterns:"
CACHE_PREFIX_SEARCH = "search:"
CACHE_PREFIX_COMPLETE = "complete:"

# Spacing used to approximate timestamps of history entries without one
HISTORY_SPACING_MINUTES = 10

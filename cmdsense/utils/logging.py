# cmdsense/utils/logging.py
"""
Logging configuration for cmdsense.

Engine modules log through ``get_logger`` (stdlib ``logging`` underneath);
``setup_logging`` routes those records into loguru sinks.
"""
import sys
import logging
from pathlib import Path
from typing import Dict, Optional

from loguru import logger
from cmdsense.constants import LOG_DIR, LOG_FORMAT, LOG_ROTATION, LOG_RETENTION
from cmdsense.utils.enhanced_logging import EnhancedLogger

_enhanced_loggers: Dict[str, EnhancedLogger] = {}


class InterceptHandler(logging.Handler):
    """Forward stdlib logging records to loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def setup_logging(debug: bool = False, log_dir: Optional[Path] = None) -> None:
    """
    Configure the application logging.

    Args:
        debug: Whether to enable debug logging.
        log_dir: Directory for log files, defaults to LOG_DIR.
    """
    log_dir = log_dir or LOG_DIR
    log_dir.mkdir(parents=True, exist_ok=True)

    logger.remove()

    log_level = "DEBUG" if debug else "INFO"
    logger.add(
        sys.stderr,
        format=LOG_FORMAT,
        level=log_level,
        diagnose=debug,
    )

    log_file = log_dir / "cmdsense.log"
    logger.add(
        log_file,
        format=LOG_FORMAT,
        level="INFO",
        rotation=LOG_ROTATION,
        retention=LOG_RETENTION,
        compression="zip",
    )

    json_log_file = log_dir / "cmdsense_structured.log"
    logger.add(
        json_log_file,
        serialize=True,
        level="INFO",
        rotation=LOG_ROTATION,
        retention=LOG_RETENTION,
        compression="zip",
    )

    # Engine loggers are stdlib loggers; hand their records to loguru
    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)

    logger.debug(f"Logging initialized. Log files: {log_file}, {json_log_file}")


def get_logger(name: str = "cmdsense") -> EnhancedLogger:
    """
    Get a logger instance with the given name.

    Args:
        name: The name for the logger.

    Returns:
        An enhanced logger instance.
    """
    if name in _enhanced_loggers:
        return _enhanced_loggers[name]

    enhanced_logger = EnhancedLogger(name)
    _enhanced_loggers[name] = enhanced_logger

    return enhanced_logger

# cmdsense/utils/enhanced_logging.py
import json
import inspect
import logging
from datetime import datetime
from typing import Dict, Any, Optional


class EnhancedLogger:
    """
    Stdlib logger wrapper that tags every message with its caller.

    Loggers derived with ``with_context`` also carry fields such as the
    query or lookup involved, and then emit a JSON body instead.
    """

    def __init__(self, name: str, context: Optional[Dict[str, Any]] = None):
        self._logger = logging.getLogger(name)
        self._context: Dict[str, Any] = dict(context or {})

    def with_context(self, **context) -> 'EnhancedLogger':
        """Create a new logger with added context."""
        return EnhancedLogger(self._logger.name, {**self._context, **context})

    @property
    def context(self) -> Dict[str, Any]:
        return dict(self._context)

    @property
    def name(self) -> str:
        return self._logger.name

    def _format_message(self, msg: str, extra: Optional[Dict[str, Any]] = None) -> str:
        # Skip _log and the level method
        frame = inspect.currentframe().f_back.f_back.f_back
        if frame is not None:
            caller = f"{frame.f_code.co_filename.split('/')[-1]}:{frame.f_code.co_name}:{frame.f_lineno}"
        else:
            caller = "<unknown>"

        context = {**self._context, **(extra or {})}
        if not context:
            return f"{msg} [{caller}]"

        return json.dumps({
            "timestamp": datetime.now().isoformat(),
            "message": msg,
            "context": context,
            "caller": caller,
        }, default=str)

    def _log(self, level: int, msg: str, *args, **kwargs) -> None:
        if not self._logger.isEnabledFor(level):
            return
        extra = kwargs.pop("extra", None)
        self._logger.log(level, self._format_message(msg, extra), *args, **kwargs)

    def debug(self, msg: str, *args, **kwargs) -> None:
        self._log(logging.DEBUG, msg, *args, **kwargs)

    def info(self, msg: str, *args, **kwargs) -> None:
        self._log(logging.INFO, msg, *args, **kwargs)

    def warning(self, msg: str, *args, **kwargs) -> None:
        self._log(logging.WARNING, msg, *args, **kwargs)

    def error(self, msg: str, *args, **kwargs) -> None:
        self._log(logging.ERROR, msg, *args, **kwargs)

    def exception(self, msg: str, *args, **kwargs) -> None:
        """Log an error with the active exception's traceback attached."""
        kwargs.setdefault("exc_info", True)
        self._log(logging.ERROR, msg, *args, **kwargs)

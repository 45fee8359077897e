# tests/test_logging.py
"""Tests for logger creation, context handling and loguru setup."""
import json
import logging
from unittest.mock import MagicMock

from loguru import logger as loguru_logger

from cmdsense.models import Mode
from cmdsense.search import HistorySearch
from cmdsense.utils.enhanced_logging import EnhancedLogger
from cmdsense.utils.logging import get_logger, setup_logging


def test_get_logger_is_cached():
    assert get_logger("cmdsense.tests") is get_logger("cmdsense.tests")
    assert get_logger("cmdsense.tests").name == "cmdsense.tests"


def test_message_without_context_carries_caller(caplog):
    log = EnhancedLogger("cmdsense.tests.plain")

    with caplog.at_level(logging.INFO, logger="cmdsense.tests.plain"):
        log.info("Loaded history")

    message = caplog.records[0].getMessage()
    assert message.startswith("Loaded history [")
    assert "test_message_without_context_carries_caller" in message


def test_context_is_serialized(caplog):
    log = EnhancedLogger("cmdsense.tests.ctx").with_context(shell="zsh")

    with caplog.at_level(logging.WARNING, logger="cmdsense.tests.ctx"):
        log.warning("Remote ranking failed", extra={"query": "git"})

    data = json.loads(caplog.records[0].getMessage())
    assert data["message"] == "Remote ranking failed"
    assert data["context"] == {"shell": "zsh", "query": "git"}


def test_with_context_does_not_touch_parent():
    parent = EnhancedLogger("cmdsense.tests.parent").with_context(cwd="/tmp")

    child = parent.with_context(shell="fish")

    assert parent.context == {"cwd": "/tmp"}
    assert child.context == {"cwd": "/tmp", "shell": "fish"}
    assert child.name == "cmdsense.tests.parent"


def test_exception_attaches_traceback(caplog):
    log = EnhancedLogger("cmdsense.tests.exc")

    with caplog.at_level(logging.ERROR, logger="cmdsense.tests.exc"):
        try:
            raise OSError("disk full")
        except OSError:
            log.exception("Error saving configuration")

    record = caplog.records[0]
    assert record.levelno == logging.ERROR
    assert record.exc_info[0] is OSError


def test_search_fallback_logs_query_context(caplog, ctx):
    failing = MagicMock(side_effect=TimeoutError("deadline"))

    with caplog.at_level(logging.WARNING, logger="cmdsense.search.history_search"):
        HistorySearch().search("git", ["git status"], ctx, mode=Mode(offline=False, remote_rank_fn=failing))

    data = json.loads(caplog.records[0].getMessage())
    assert data["message"].startswith("Remote ranking failed")
    assert data["context"] == {"query": "git", "directory": "/home/user/project"}


def test_setup_logging_writes_log_files(tmp_path):
    try:
        setup_logging(debug=True, log_dir=tmp_path)
        get_logger("cmdsense.tests.setup").info("engine ready")
        loguru_logger.complete()

        assert (tmp_path / "cmdsense.log").exists()
        assert "engine ready" in (tmp_path / "cmdsense.log").read_text()
        assert (tmp_path / "cmdsense_structured.log").exists()
    finally:
        loguru_logger.remove()
        logging.basicConfig(handlers=[], level=logging.WARNING, force=True)

# cmdsense/history.py
"""
Shell history file loading.

Understands plain bash history (with optional ``#<epoch>`` timestamp
lines), zsh extended history (``: <epoch>:<duration>;command``) and fish
history (``- cmd: ...`` / ``  when: <epoch>``). Entries come back most
recent first, which is the order every engine operation expects.
"""
import os
import re
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Union

from cmdsense.constants import DEFAULT_HISTORY_LIMIT, SHELL_HISTORY_FILES
from cmdsense.models import CommandHistoryEntry, ShellType
from cmdsense.utils.logging import get_logger

logger = get_logger(__name__)

_ZSH_EXTENDED = re.compile(r"^: *(\d+):\d+;(.*)$")
_BASH_TIMESTAMP = re.compile(r"^#(\d{9,})$")
_FISH_CMD = re.compile(r"^- cmd: ?(.*)$")
_FISH_WHEN = re.compile(r"^\s+when: *(\d+)$")
_FISH_META = re.compile(r"^\s+(paths:|- )")


def _from_epoch(value: str) -> Optional[datetime]:
    try:
        return datetime.fromtimestamp(int(value))
    except (ValueError, OverflowError, OSError):
        return None


def parse_history(content: str) -> List[CommandHistoryEntry]:
    """
    Parse history file content into entries, oldest first as in the file.

    The formats are detected per line, so a file that switched format
    midway (bash to zsh extended, for example) still parses.
    """
    entries: List[CommandHistoryEntry] = []
    pending_timestamp: Optional[datetime] = None
    continued: Optional[List[str]] = None
    continued_ts: Optional[datetime] = None

    for raw_line in content.splitlines():
        # zsh writes multi-line commands with a trailing backslash
        if continued is not None:
            if raw_line.endswith("\\"):
                continued.append(raw_line[:-1])
                continue
            continued.append(raw_line)
            entries.append(CommandHistoryEntry(text="\n".join(continued).strip(), timestamp=continued_ts))
            continued = None
            continue

        line = raw_line.rstrip()
        if not line.strip():
            continue

        match = _ZSH_EXTENDED.match(line)
        if match:
            timestamp = _from_epoch(match.group(1))
            command = match.group(2)
            if command.endswith("\\"):
                continued = [command[:-1]]
                continued_ts = timestamp
                continue
            if command.strip():
                entries.append(CommandHistoryEntry(text=command.strip(), timestamp=timestamp))
            continue

        match = _FISH_CMD.match(line)
        if match:
            if match.group(1).strip():
                entries.append(CommandHistoryEntry(text=match.group(1).strip()))
            continue

        match = _FISH_WHEN.match(line)
        if match:
            if entries and entries[-1].timestamp is None:
                entries[-1] = CommandHistoryEntry(text=entries[-1].text, timestamp=_from_epoch(match.group(1)))
            continue

        # Other fish metadata (paths lists and their items)
        if _FISH_META.match(line):
            continue

        match = _BASH_TIMESTAMP.match(line)
        if match:
            pending_timestamp = _from_epoch(match.group(1))
            continue

        entries.append(CommandHistoryEntry(text=line.strip(), timestamp=pending_timestamp))
        pending_timestamp = None

    if continued is not None:
        entries.append(CommandHistoryEntry(text="\n".join(continued).strip(), timestamp=continued_ts))

    return entries


def default_history_file(shell: Optional[ShellType] = None) -> Optional[Path]:
    """History file of a shell, guessed from $SHELL when not given."""
    shell = shell or ShellType.parse(os.environ.get("SHELL"))
    return SHELL_HISTORY_FILES.get(shell.value)


def load_history(
    path: Optional[Union[str, Path]] = None,
    shell: Optional[ShellType] = None,
    limit: int = DEFAULT_HISTORY_LIMIT,
) -> List[CommandHistoryEntry]:
    """
    Load a shell history file.

    Args:
        path: History file; defaults to the file of ``shell``
        shell: Shell whose default history file is read when ``path`` is None
        limit: Maximum number of entries returned

    Returns:
        Entries, most recent first

    Raises:
        FileNotFoundError: If there is no history file to read
    """
    history_path = Path(path).expanduser() if path else default_history_file(shell)
    if history_path is None:
        raise FileNotFoundError(f"No default history file for shell '{shell.value if shell else 'unknown'}'")
    if not history_path.exists():
        raise FileNotFoundError(f"History file not found: {history_path}")

    logger.debug(f"Loading shell history from {history_path}")
    # zsh stores non-ASCII bytes "metafied"; never fail on undecodable input
    content = history_path.read_text(encoding="utf-8", errors="replace")
    entries = parse_history(content)
    logger.debug(f"Loaded {len(entries)} history entries from {history_path}")

    entries.reverse()
    return entries[:limit]

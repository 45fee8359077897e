# cmdsense/completion/lookups.py
"""
Default environment lookups for the completion provider.

Each lookup takes the prefix being completed and the call's Context and
returns candidates. The provider never touches the filesystem or git
itself; hosts that want different behaviour pass their own lookups.
"""
import re
import subprocess
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from cmdsense.completion.tables import GIT_STATUS_DESCRIPTIONS
from cmdsense.models import CandidateKind, CompletionCandidate, Context, LookupFn
from cmdsense.utils.logging import get_logger

logger = get_logger(__name__)

GIT_TIMEOUT = 2  # seconds

_SHELL_SPECIAL = re.compile(r"([\s'\"\\()&;|<>$`!*?\[\]{}])")


def escape_path(path: str) -> str:
    """Backslash-escape characters the shell would otherwise interpret."""
    return _SHELL_SPECIAL.sub(r"\\\1", path)


def _working_directory(ctx: Context) -> Path:
    return Path(ctx.current_directory).expanduser()


def path_lookup(prefix: str, ctx: Context) -> List[CompletionCandidate]:
    """
    Complete a file or directory path relative to the context's directory.

    Args:
        prefix: Partial path; may be absolute, ``~/``-relative or contain directories
        ctx: Context whose ``current_directory`` anchors relative paths

    Returns:
        Matching entries, directories as ``directory`` and files as ``path``
    """
    if "/" in prefix:
        shown_dir = prefix[:prefix.rfind("/") + 1]
        name = prefix[len(shown_dir):]
        target = Path(shown_dir).expanduser() if shown_dir.startswith("~/") else Path(shown_dir)
        if not target.is_absolute():
            target = _working_directory(ctx) / target
    else:
        shown_dir = ""
        name = prefix
        target = _working_directory(ctx)

    if not target.is_dir():
        return []

    candidates = []
    for item in sorted(target.iterdir(), key=lambda p: p.name):
        if not item.name.startswith(name):
            continue
        # Hidden entries only when asked for explicitly
        if item.name.startswith(".") and not name.startswith("."):
            continue

        is_dir = item.is_dir()
        candidates.append(CompletionCandidate(
            value=escape_path(shown_dir + item.name),
            label=item.name + ("/" if is_dir else ""),
            description="Directory" if is_dir else "File",
            kind=CandidateKind.DIRECTORY if is_dir else CandidateKind.PATH,
        ))
    return candidates


def directory_lookup(prefix: str, ctx: Context) -> List[CompletionCandidate]:
    """Like path_lookup, keeping directories only."""
    return [c for c in path_lookup(prefix, ctx) if c.kind == CandidateKind.DIRECTORY]


def _run_git(args: Sequence[str], ctx: Context) -> Optional[str]:
    """Output of a git command, or None outside a repository."""
    result = subprocess.run(
        ["git", *args],
        cwd=_working_directory(ctx),
        capture_output=True,
        text=True,
        timeout=GIT_TIMEOUT,
    )
    if result.returncode != 0:
        logger.debug(f"git {' '.join(args)} failed: {result.stderr.strip()}")
        return None
    return result.stdout


def parse_git_branches(output: str) -> List[CompletionCandidate]:
    """Parse ``git branch --all`` output (``* main``, ``  remotes/origin/dev``)."""
    branches = []
    for line in output.splitlines():
        if not line.strip():
            continue
        is_current = line.startswith("*")
        name = re.sub(r"^\*?\s+", "", line).strip()
        # Symbolic refs and detached heads are not branch names
        if " -> " in name or name.startswith("("):
            continue

        is_remote = name.startswith("remotes/")
        display = name[len("remotes/"):] if is_remote else name
        if is_current:
            description = "Current branch"
        elif is_remote:
            description = "Remote branch"
        else:
            description = "Local branch"

        branches.append(CompletionCandidate(
            value=display,
            label=display,
            description=description,
            kind=CandidateKind.BRANCH,
        ))
    return branches


def parse_git_status(output: str) -> List[CompletionCandidate]:
    """Parse ``git status --porcelain`` output (``XY filename``)."""
    files = []
    for line in output.splitlines():
        if not line.strip():
            continue
        status = line[:2]
        file_name = line[3:]
        if " -> " in file_name:
            file_name = file_name.split(" -> ", 1)[1]

        description = "File"
        for letter, text in GIT_STATUS_DESCRIPTIONS:
            if letter in status:
                description = text

        files.append(CompletionCandidate(
            value=escape_path(file_name),
            label=file_name,
            description=description,
            kind=CandidateKind.FILE,
        ))
    return files


def git_branch_lookup(prefix: str, ctx: Context) -> List[CompletionCandidate]:
    output = _run_git(["branch", "--all"], ctx)
    if output is None:
        return []
    return [b for b in parse_git_branches(output) if b.value.startswith(prefix)]


def git_remote_lookup(prefix: str, ctx: Context) -> List[CompletionCandidate]:
    output = _run_git(["remote"], ctx)
    if output is None:
        return []
    return [
        CompletionCandidate(value=remote, label=remote, description="Git remote", kind=CandidateKind.REMOTE)
        for remote in (line.strip() for line in output.splitlines())
        if remote and remote.startswith(prefix)
    ]


def git_unstaged_lookup(prefix: str, ctx: Context) -> List[CompletionCandidate]:
    output = _run_git(["status", "--porcelain"], ctx)
    if output is None:
        return path_lookup(prefix, ctx)

    files = parse_git_status(output)
    if prefix:
        return [f for f in files if f.value.startswith(prefix)]
    return [CompletionCandidate(value=".", label=".", description="All changes", kind=CandidateKind.FILE)] + files


def default_lookups() -> Dict[str, LookupFn]:
    """Filesystem and git lookups keyed the way the completion provider asks for them."""
    return {
        "path": path_lookup,
        "directory": directory_lookup,
        "branch": git_branch_lookup,
        "remote": git_remote_lookup,
        "unstaged": git_unstaged_lookup,
    }

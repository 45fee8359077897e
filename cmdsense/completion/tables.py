# cmdsense/completion/tables.py
"""
Static completion data: common commands, their subcommands and flags.
"""
from typing import Dict

COMMON_COMMANDS: Dict[str, str] = {
    "ls": "List directory contents",
    "cd": "Change directory",
    "mkdir": "Make directories",
    "rm": "Remove files or directories",
    "cp": "Copy files and directories",
    "mv": "Move/rename files",
    "cat": "Display file contents",
    "grep": "Search file patterns",
    "find": "Search for files",
    "ps": "Show process status",
    "kill": "Terminate processes",
    "chmod": "Change file permissions",
    "chown": "Change file owner/group",
    "sudo": "Execute command as superuser",
    "apt": "Package management",
    "git": "Version control system",
    "docker": "Container management",
    "npm": "Node.js package manager",
    "yarn": "Alternative package manager",
}

# Second-token completions per command; entries starting with '-' are flags
COMMON_FLAGS: Dict[str, Dict[str, str]] = {
    "ls": {
        "-a": "Show all files (including hidden)",
        "-l": "Use long listing format",
        "-h": "Human-readable file sizes",
        "--help": "Display help information",
        "-R": "List subdirectories recursively",
        "-S": "Sort by file size",
        "-t": "Sort by modification time",
        "-r": "Reverse order while sorting",
        "-1": "List one file per line",
    },
    "git": {
        "add": "Add files to staging area",
        "commit": "Commit staged changes",
        "push": "Push commits to remote",
        "pull": "Pull changes from remote",
        "checkout": "Switch branches",
        "switch": "Switch branches",
        "branch": "List or create branches",
        "status": "Show working tree status",
        "log": "Show commit logs",
        "fetch": "Download objects and refs from remote",
        "merge": "Join two or more development histories",
        "rebase": "Reapply commits on top of another base",
        "reset": "Reset current HEAD to specified state",
        "restore": "Restore working tree files",
        "stash": "Stash changes in working directory",
        "tag": "Create, list, delete, or verify tags",
        "clone": "Clone a repository into a new directory",
        "diff": "Show changes between commits, commit and working tree, etc",
        "remote": "Manage remote repositories",
        "config": "Get and set repository or global options",
    },
    "npm": {
        "install": "Install a package",
        "i": "Shorthand for install",
        "uninstall": "Remove a package",
        "remove": "Remove a package",
        "run": "Run a script defined in package.json",
        "start": "Start a package",
        "test": "Test a package",
        "publish": "Publish a package",
        "update": "Update packages",
        "list": "List installed packages",
        "search": "Search for packages",
        "init": "Create a package.json file",
        "audit": "Run a security audit",
        "help": "Get help on npm",
        "--global": "Install packages globally",
    },
    "yarn": {
        "add": "Install a package",
        "remove": "Remove a package",
        "install": "Install all dependencies",
        "run": "Run a script defined in package.json",
        "start": "Start a package",
        "test": "Test a package",
        "build": "Build a package",
        "info": "Show information about a package",
        "list": "List installed packages",
        "global": "Install packages globally",
        "upgrade": "Upgrade packages to their latest version",
        "why": "Show why a package is installed",
    },
    "docker": {
        "run": "Run a command in a new container",
        "ps": "List containers",
        "build": "Build an image from a Dockerfile",
        "pull": "Pull an image or a repository",
        "push": "Push an image or a repository",
        "images": "List images",
        "exec": "Run a command in a running container",
        "logs": "Fetch the logs of a container",
        "stop": "Stop one or more running containers",
        "rm": "Remove one or more containers",
        "rmi": "Remove one or more images",
        "volume": "Manage volumes",
        "network": "Manage networks",
        "compose": "Docker Compose (multi-container) commands",
        "system": "Manage Docker",
        "login": "Log in to a Docker registry",
        "logout": "Log out from a Docker registry",
    },
    "find": {
        "-name": "Search for files by name",
        "-type": "Search for files by type",
        "-size": "Search for files by size",
        "-mtime": "Search for files by modification time",
        "-exec": "Execute a command on found files",
        "-delete": "Delete found files",
        "-print": "Print found files",
        "-maxdepth": "Limit directory traversal depth",
        "-mindepth": "Start searching at given depth",
    },
    "grep": {
        "-i": "Case-insensitive search",
        "-r": "Recursive search",
        "-v": "Invert match (select non-matching lines)",
        "-n": "Print line numbers",
        "-l": "Print only names of files containing matches",
        "-c": "Print only count of matching lines",
        "-e": "Use pattern as regex pattern",
        "-A": "Print N lines after match",
        "-B": "Print N lines before match",
        "-C": "Print N lines before and after match",
    },
}

GIT_SUBCOMMAND_FLAGS: Dict[str, Dict[str, str]] = {
    "commit": {
        "-m": "Commit message",
        "-a": "Automatically stage all modified files",
        "--amend": "Amend previous commit",
        "--no-edit": "Use previous commit message",
        "--allow-empty": "Allow empty commit",
    },
    "push": {
        "-u": "Set upstream for current branch",
        "--force": "Force push",
        "--tags": "Push tags",
        "--all": "Push all branches",
        "--dry-run": "Simulate push",
    },
    "pull": {
        "--rebase": "Rebase instead of merge",
        "--no-rebase": "Merge instead of rebase",
        "--force": "Force pull",
        "--allow-unrelated-histories": "Allow unrelated histories",
    },
    "checkout": {
        "-b": "Create and checkout a new branch",
        "-t": "Track a remote branch",
        "-f": "Force checkout",
        "--orphan": "Create a new orphan branch",
    },
}

# Commands whose arguments are directories
DIRECTORY_COMMANDS = frozenset({"cd", "pushd", "rmdir"})

GIT_BRANCH_SUBCOMMANDS = frozenset({"checkout", "switch", "branch", "merge", "rebase"})
GIT_REMOTE_SUBCOMMANDS = frozenset({"push", "pull", "fetch"})
GIT_UNSTAGED_SUBCOMMANDS = frozenset({"add", "restore"})

# Status letters of `git status --porcelain`, checked in order; the last hit wins
GIT_STATUS_DESCRIPTIONS = (
    ("M", "Modified file"),
    ("A", "Added file"),
    ("D", "Deleted file"),
    ("R", "Renamed file"),
    ("?", "Untracked file"),
)

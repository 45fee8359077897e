# cmdsense/search/categories.py
"""
Command categories used to boost and filter history search results.
"""
import re
from typing import Dict, List

from cmdsense.matching import base_command

_WORD_SPLIT = re.compile(r"[^a-z0-9_]+")

# Per category: base commands that belong to it, and terms that mark a
# command (or a query) as being about it.
CATEGORIES: Dict[str, Dict[str, List[str]]] = {
    "git": {
        "commands": ["git", "gh", "tig"],
        "terms": ["git", "commit", "branch", "merge", "rebase", "checkout", "stash", "push", "pull", "clone"],
    },
    "network": {
        "commands": ["ping", "curl", "wget", "ssh", "scp", "rsync", "netstat", "ss", "nslookup",
                     "dig", "host", "traceroute", "ifconfig", "ip", "nc", "telnet", "ftp", "sftp"],
        "terms": ["network", "http", "https", "url", "port", "host", "ssh", "download", "upload", "dns"],
    },
    "filesystem": {
        "commands": ["ls", "cd", "mkdir", "rmdir", "touch", "cp", "mv", "rm", "find", "chmod", "chown",
                     "ln", "cat", "less", "head", "tail", "du", "df", "tar", "zip", "unzip", "pwd"],
        "terms": ["file", "files", "directory", "folder", "path", "disk", "permission", "archive"],
    },
    "process": {
        "commands": ["ps", "top", "htop", "kill", "killall", "pkill", "pgrep", "bg", "fg", "jobs",
                     "nohup", "systemctl", "service", "journalctl"],
        "terms": ["process", "processes", "pid", "kill", "service", "daemon", "running", "job"],
    },
    "docker": {
        "commands": ["docker", "docker-compose", "podman", "kubectl"],
        "terms": ["docker", "container", "containers", "image", "images", "compose", "kubernetes", "pod"],
    },
    "package": {
        "commands": ["npm", "yarn", "pnpm", "pip", "pip3", "apt", "apt-get", "brew", "dnf", "yum",
                     "pacman", "cargo", "gem", "composer"],
        "terms": ["package", "packages", "install", "dependency", "dependencies", "npm", "pip", "apt", "brew"],
    },
}

CATEGORY_REASONS = {
    "git": "Git operation",
    "network": "Network command",
    "filesystem": "File operation",
    "process": "Process management",
    "docker": "Container operation",
    "package": "Package management",
}


def is_command_in_category(cmd: str, category: str) -> bool:
    """True when the base command is listed or one of the command's words is a category term."""
    table = CATEGORIES.get(category)
    if table is None:
        return False
    if base_command(cmd) in table["commands"]:
        return True
    words = set(_WORD_SPLIT.split(cmd.lower()))
    return any(term in words for term in table["terms"])


def extract_categories(query: str) -> List[str]:
    """Categories a natural-language query mentions, in table order."""
    words = set(query.lower().split())
    found = []
    for name, table in CATEGORIES.items():
        if name in words or words.intersection(table["terms"]) or words.intersection(table["commands"]):
            found.append(name)
    return found

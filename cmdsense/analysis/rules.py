# cmdsense/analysis/rules.py
"""
Static rule tables for the pattern analyzer.

Every table is plain data consumed by the generic matching code in
``cmdsense.analysis.analyzer``: adding a workflow or an optimization means
adding a row here, not a branch there.
"""
import re
from dataclasses import dataclass, field
from typing import Callable, FrozenSet, Optional, Sequence, Tuple, Union

from cmdsense.matching import Matcher, base_command
from cmdsense.models import ShellType

Rewrite = Union[str, Callable[[re.Match], str]]
Suggestion = Union[str, Callable[[Sequence[str]], str]]

P = Matcher.prefix
R = Matcher.regex


@dataclass(frozen=True)
class SequenceRule:
    """Two or more most-recent commands that predict the next one."""
    templates: Tuple[Matcher, ...]
    suggestion: Suggestion
    description: str
    confidence: int

    def render(self, history: Sequence[str]) -> str:
        if callable(self.suggestion):
            return self.suggestion(history)
        return self.suggestion


@dataclass(frozen=True)
class WorkflowDefinition:
    """A named multi-step flow recognised when enough of its steps were run."""
    name: str
    description: str
    domain: str
    step_patterns: Tuple[Matcher, ...]
    match_threshold: int
    followup_suggestion: str

    def __post_init__(self):
        if not 1 <= self.match_threshold <= len(self.step_patterns):
            raise ValueError(
                f"Workflow '{self.name}': match_threshold {self.match_threshold} "
                f"must be between 1 and {len(self.step_patterns)}"
            )

    def matched_steps(self, commands: Sequence[str]) -> int:
        """How many steps appear anywhere in ``commands``, order ignored."""
        return sum(
            1 for step in self.step_patterns
            if any(step.matches(cmd) for cmd in commands)
        )


@dataclass(frozen=True)
class OptimizationRule:
    """A regex rewrite that turns a command into a better equivalent."""
    pattern: str
    rewrite: Rewrite
    explanation: str
    category: str
    regex: "re.Pattern" = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "regex", re.compile(self.pattern))

    def apply(self, command: str) -> Optional[str]:
        """The rewritten command, or None when the rule does not apply."""
        if not self.regex.search(command):
            return None
        return self.regex.sub(self.rewrite, command, count=1)


@dataclass(frozen=True)
class ShellTipRule:
    """A tip shown when the last command (or the last error) fits a shape."""
    name: str
    matcher: Matcher
    suggestion: str
    description: str
    confidence: int
    shells: Optional[FrozenSet[ShellType]] = None
    on_error: bool = False

    def applies_to(self, shell: ShellType) -> bool:
        return self.shells is None or shell in self.shells


def _dir_from_mkdir(history: Sequence[str]) -> str:
    """Last argument of the most recent mkdir (handles ``mkdir -p``)."""
    for cmd in history:
        if cmd.startswith("mkdir "):
            parts = cmd.split()
            if len(parts) > 1:
                return parts[-1]
    return ""


SEQUENCE_RULES: Tuple[SequenceRule, ...] = (
    SequenceRule((P("cd"), P("ls")), "ls",
                 "List files in the new directory", 80),
    SequenceRule((P("git add"), P("git commit")), 'git commit -m "commit message"',
                 "Commit the changes you just added", 85),
    SequenceRule((P("git commit"), P("git push")), "git push",
                 "Push your commits to the remote repository", 90),
    SequenceRule((P("npm install"), P("npm start")), "npm start",
                 "Start the npm application after installation", 75),
    SequenceRule((P("mkdir"), P("cd")), lambda history: f"cd {_dir_from_mkdir(history)}".rstrip(),
                 "Change to the directory you just created", 70),
)


GIT_WORKFLOWS = (
    WorkflowDefinition(
        name="Git Feature Branch",
        description="Creating and working with a feature branch",
        domain="git",
        step_patterns=(R(r"^git\s+(checkout\s+-b|switch\s+-c)\s+\S+"), R(r"^git\s+add\s"),
                       R(r"^git\s+commit\b"), R(r"^git\s+push\b")),
        match_threshold=3,
        followup_suggestion="git push --set-upstream origin HEAD",
    ),
    WorkflowDefinition(
        name="Git Pull Request",
        description="Syncing the main branch after pushing a change",
        domain="git",
        step_patterns=(R(r"^git\s+push\b"), R(r"^git\s+(checkout|switch)\s+(main|master)\b"),
                       R(r"^git\s+pull\b")),
        match_threshold=3,
        followup_suggestion="git merge",
    ),
    WorkflowDefinition(
        name="Git Stash",
        description="Temporarily saving changes while switching branches",
        domain="git",
        step_patterns=(R(r"^git\s+stash(\s+(save|push)\b.*)?$"), R(r"^git\s+(checkout|switch)\s+\w"),
                       R(r"^git\s+pull\b")),
        match_threshold=2,
        followup_suggestion="git stash pop",
    ),
    WorkflowDefinition(
        name="Git Rebase",
        description="Rebasing a feature branch onto an updated main branch",
        domain="git",
        step_patterns=(R(r"^git\s+(checkout|switch)\s+(main|master)\b"), R(r"^git\s+pull\b"),
                       R(r"^git\s+rebase\s+\S+"), R(r"^git\s+push\s+.*--force")),
        match_threshold=3,
        followup_suggestion="git pull --rebase",
    ),
    WorkflowDefinition(
        name="Git Commit Amend",
        description="Amending the last commit and rewriting the remote",
        domain="git",
        step_patterns=(R(r"^git\s+add\s"), R(r"^git\s+commit\s+.*--amend"),
                       R(r"^git\s+push\s+.*--force\b(?!-)")),
        match_threshold=2,
        followup_suggestion="git push --force-with-lease",
    ),
    WorkflowDefinition(
        name="Git Conflict Resolution",
        description="Resolving conflicts after a merge",
        domain="git",
        step_patterns=(R(r"^git\s+merge\s"), R(r"^git\s+status\b")),
        match_threshold=2,
        followup_suggestion="git add . && git merge --continue",
    ),
)

NPM_WORKFLOWS = (
    WorkflowDefinition(
        name="Node Project Setup",
        description="Setting up a new Node.js project",
        domain="npm",
        step_patterns=(R(r"^mkdir\s"), R(r"^cd\s"), R(r"^npm\s+init\b"), R(r"^npm\s+(install|i)\b")),
        match_threshold=3,
        followup_suggestion="npm init -y",
    ),
    WorkflowDefinition(
        name="Node Development",
        description="Installing, running, testing and building a Node.js project",
        domain="npm",
        step_patterns=(R(r"^npm\s+(install|i)\b"), R(r"^npm\s+(run\s+)?start\b"),
                       R(r"^npm\s+(run\s+)?test\b"), R(r"^npm\s+run\s+build\b")),
        match_threshold=3,
        followup_suggestion="npx npm-run-all test build",
    ),
    WorkflowDefinition(
        name="Node Dependency Update",
        description="Managing the dependencies of a Node.js project",
        domain="npm",
        step_patterns=(R(r"^npm\s+outdated\b"), R(r"^npm\s+update\b"),
                       R(r"^npm\s+(install|i)\s+\S+"), R(r"^npm\s+uninstall\s")),
        match_threshold=2,
        followup_suggestion="npm audit fix",
    ),
    WorkflowDefinition(
        name="Node Package Publishing",
        description="Publishing a package to the npm registry",
        domain="npm",
        step_patterns=(R(r"^npm\s+version\s+(patch|minor|major)\b"), R(r"^npm\s+run\s+build\b"),
                       R(r"^npm\s+(run\s+)?test\b"), R(r"^npm\s+publish\b")),
        match_threshold=3,
        followup_suggestion="npm version patch && npm publish",
    ),
    WorkflowDefinition(
        name="Yarn Development",
        description="Using the Yarn package manager",
        domain="npm",
        step_patterns=(R(r"^yarn\s+add\b"), R(r"^yarn\s+remove\b"), R(r"^yarn\s+start\b"),
                       R(r"^yarn\s+build\b"), R(r"^yarn\s+test\b")),
        match_threshold=3,
        followup_suggestion="yarn upgrade-interactive",
    ),
)

DOCKER_WORKFLOWS = (
    WorkflowDefinition(
        name="Docker Build and Run",
        description="Building an image and running a container from it",
        domain="docker",
        step_patterns=(R(r"^docker\s+build\s"), R(r"^docker\s+run\s"), R(r"^docker\s+(ps|images)\b")),
        match_threshold=2,
        followup_suggestion="docker run -d -p 8080:80 <image>",
    ),
    WorkflowDefinition(
        name="Docker Compose",
        description="Managing services with Docker Compose",
        domain="docker",
        step_patterns=(R(r"^docker[- ]compose\s+build\b"), R(r"^docker[- ]compose\s+up\b"),
                       R(r"^docker[- ]compose\s+down\b"), R(r"^docker[- ]compose\s+logs\b")),
        match_threshold=3,
        followup_suggestion="docker-compose up -d && docker-compose logs -f",
    ),
    WorkflowDefinition(
        name="Docker Container Management",
        description="Inspecting running containers",
        domain="docker",
        step_patterns=(R(r"^docker\s+ps\b"), R(r"^docker\s+exec\s+-it\b"), R(r"^docker\s+logs\b")),
        match_threshold=2,
        followup_suggestion="docker cp <container>:/path/file .",
    ),
    WorkflowDefinition(
        name="Docker Image Cleanup",
        description="Removing images and containers",
        domain="docker",
        step_patterns=(R(r"^docker\s+images\b"), R(r"^docker\s+rmi\b"), R(r"^docker\s+rm\b")),
        match_threshold=2,
        followup_suggestion="docker system prune -a",
    ),
)

FILESYSTEM_WORKFLOWS = (
    WorkflowDefinition(
        name="Directory Creation",
        description="Creating a directory tree and its first files",
        domain="filesystem",
        step_patterns=(R(r"^mkdir\s+-p\s"), R(r"^cd\s"), R(r"^touch\s")),
        match_threshold=2,
        followup_suggestion="mkdir -p path/to/nested/dir && touch path/to/nested/dir/file.txt",
    ),
    WorkflowDefinition(
        name="File Search and Edit",
        description="Finding files by name and content, then editing them",
        domain="filesystem",
        step_patterns=(R(r"^find\s"), R(r"^grep\s+-\w*r"), R(r"^(vi|vim|nano|emacs)\s")),
        match_threshold=2,
        followup_suggestion='find . -type f -name "*.ext" -exec grep -l "pattern" {} +',
    ),
    WorkflowDefinition(
        name="Archive Extraction",
        description="Downloading and unpacking an archive",
        domain="filesystem",
        step_patterns=(R(r"^(wget|curl)\s.*\.(tar\.gz|tgz|zip)\b"), R(r"^ls\s+-\w*l"), R(r"^(tar|unzip)\s")),
        match_threshold=2,
        followup_suggestion="tar -xzf file.tar.gz",
    ),
    WorkflowDefinition(
        name="File Permissions",
        description="Inspecting and changing file permissions",
        domain="filesystem",
        step_patterns=(R(r"^ls\s+-\w*l"), R(r"^chmod\s"), R(r"^chown\s")),
        match_threshold=2,
        followup_suggestion="chown -R user:group directory",
    ),
    WorkflowDefinition(
        name="Disk Usage Analysis",
        description="Looking for what fills the disk",
        domain="filesystem",
        step_patterns=(R(r"^df\b"), R(r"^du\b"), R(r"^ncdu\b")),
        match_threshold=2,
        followup_suggestion="du -h --max-depth=1 | sort -hr",
    ),
    WorkflowDefinition(
        name="Log File Analysis",
        description="Reading system logs",
        domain="filesystem",
        step_patterns=(R(r"^ls\s.*/var/log"), R(r"^(cat|less|tail)\s.*/var/log/"), R(r"^grep\s.*/var/log/")),
        match_threshold=2,
        followup_suggestion="grep ERROR /var/log/syslog | tail -n 50",
    ),
)

NETWORK_WORKFLOWS = (
    WorkflowDefinition(
        name="Network Diagnostics",
        description="Testing connectivity and name resolution",
        domain="network",
        step_patterns=(R(r"^ping\s"), R(r"^traceroute\s"), R(r"^(nslookup|dig|host)\s")),
        match_threshold=2,
        followup_suggestion="mtr <host>",
    ),
    WorkflowDefinition(
        name="Remote Access",
        description="Working on and copying files to a remote host",
        domain="network",
        step_patterns=(R(r"^ssh\s"), R(r"^scp\s"), R(r"^rsync\s")),
        match_threshold=2,
        followup_suggestion="ssh-copy-id user@hostname",
    ),
    WorkflowDefinition(
        name="Service Management",
        description="Checking and restarting a system service",
        domain="network",
        step_patterns=(R(r"^systemctl\s+status\b"), R(r"^journalctl\b"),
                       R(r"^systemctl\s+(start|stop|restart)\b")),
        match_threshold=2,
        followup_suggestion="systemctl restart <service> && journalctl -u <service> -f",
    ),
    WorkflowDefinition(
        name="HTTP Requests",
        description="Fetching data from web APIs",
        domain="network",
        step_patterns=(R(r"^curl\s"), R(r"^wget\s"), R(r"^http\s")),
        match_threshold=2,
        followup_suggestion="curl -s https://api.example.com | jq",
    ),
    WorkflowDefinition(
        name="Port Inspection",
        description="Finding which process listens on a port",
        domain="network",
        step_patterns=(R(r"^netstat\s"), R(r"^ss\s"), R(r"^lsof\s+-i")),
        match_threshold=2,
        followup_suggestion="lsof -i :80",
    ),
)

WORKFLOWS: Tuple[WorkflowDefinition, ...] = (
    GIT_WORKFLOWS + NPM_WORKFLOWS + DOCKER_WORKFLOWS + FILESYSTEM_WORKFLOWS + NETWORK_WORKFLOWS
)


FILESYSTEM_COMMANDS = frozenset({
    "ls", "cd", "mkdir", "touch", "cp", "mv", "rm", "find", "grep", "chmod", "chown",
    "tar", "zip", "unzip", "df", "du", "cat", "less", "tail",
})
NETWORK_COMMANDS = frozenset({
    "ping", "traceroute", "nslookup", "dig", "host", "curl", "wget", "http", "ssh",
    "scp", "rsync", "netstat", "ss", "lsof", "systemctl", "journalctl",
})
_NODE_COMMAND = re.compile(r"^(npm|yarn|node)\s")


def _is_docker(cmd: str) -> bool:
    lowered = cmd.lower()
    return cmd.startswith("docker ") or "docker-compose" in lowered or "dockerfile" in lowered


# A domain's workflows are only considered when its gate passes on a recent command
DOMAIN_GATES = {
    "git": lambda cmd: cmd.startswith("git "),
    "npm": lambda cmd: _NODE_COMMAND.match(cmd) is not None,
    "docker": _is_docker,
    "filesystem": lambda cmd: base_command(cmd) in FILESYSTEM_COMMANDS,
    "network": lambda cmd: base_command(cmd) in NETWORK_COMMANDS,
}


def _list_then_dir(match: re.Match) -> str:
    flags = match.group(2) or ""
    return f"ls{flags} {match.group(1)}"


# Checked in order; only the first matching rule applies to a command
OPTIMIZATION_RULES: Tuple[OptimizationRule, ...] = (
    OptimizationRule(
        pattern=r"\bcat\s+([^\s|>]+)\s+\|\s+grep\s+(\S+)",
        rewrite=r"grep \2 \1",
        explanation="Use grep directly on the file instead of piping from cat",
        category="Simplification",
    ),
    OptimizationRule(
        pattern=r"\bfind\s+(\S+)\s+-name\s+[\"']([^\"']+)[\"']\s+\|\s+xargs\s+(.+)$",
        rewrite=r'find \1 -name "\2" -exec \3 {} +',
        explanation="Use find with -exec instead of piping to xargs",
        category="Efficiency",
    ),
    OptimizationRule(
        pattern=r"\bps\s+aux\s+\|\s+grep\s+(\S+)",
        rewrite=r"pgrep -af \1",
        explanation="Use pgrep to find processes without matching the grep itself",
        category="Simplification",
    ),
    OptimizationRule(
        pattern=r"\bgit\s+add\s+\.\s*&&\s*git\s+commit\s+-m\b",
        rewrite="git commit -am",
        explanation="Use 'git commit -am' to stage tracked changes and commit in one step",
        category="Brevity",
    ),
    OptimizationRule(
        pattern=r"^cd\s+(\S+)\s*(?:;|&&)\s*ls(\s+-\w+)?\s*$",
        rewrite=_list_then_dir,
        explanation="List the directory without changing into it",
        category="Brevity",
    ),
    OptimizationRule(
        pattern=r"\bcd\s+\.\.\s*(?:;|&&)\s*cd\s+\.\.",
        rewrite="cd ../..",
        explanation="Go up two levels with a single cd",
        category="Brevity",
    ),
    OptimizationRule(
        pattern=r"\bmkdir\s+(?!-p\b)(\S+)\s*(?:;|&&)\s*cd\s+\1(?=\s|$)",
        rewrite=r"mkdir -p \1 && cd \1",
        explanation="Use mkdir -p so missing parents are created and an existing directory is not an error",
        category="Efficiency",
    ),
    OptimizationRule(
        pattern=r"\becho\s+[\"']?([^|>\"']+?)[\"']?\s+>\s+(\S+)",
        rewrite=r'printf "%s\\n" "\1" > \2',
        explanation="Use printf instead of echo for more predictable output",
        category="Reliability",
    ),
    OptimizationRule(
        pattern=r"\bls\s+-la\s+\|\s+grep\s+(?!--color)(\S+)",
        rewrite=r"ls -la | grep --color=auto \1",
        explanation="Add color to grep output for better readability",
        category="Usability",
    ),
    OptimizationRule(
        pattern=r"\bfor\s+(\w+)\s+in\s+\$\(seq\s+(\d+)\s+(\d+)\)",
        rewrite=r"for \1 in {\2..\3}",
        explanation="Use brace expansion instead of seq for better performance",
        category="Performance",
    ),
    OptimizationRule(
        pattern=r"^grep\s+-r\s+(.+)$",
        rewrite=r"rg \1",
        explanation="ripgrep searches recursively by default and is much faster than grep -r",
        category="Speed",
    ),
    OptimizationRule(
        pattern=r"\bapt-get\s+(install|update|upgrade|remove)\b",
        rewrite=r"apt \1",
        explanation="apt is the friendlier front end to apt-get for interactive use",
        category="Modern",
    ),
    OptimizationRule(
        pattern=r"\bgit\s+checkout\s+-b\s+",
        rewrite="git switch -c ",
        explanation="git switch -c is the dedicated command for creating and switching branches",
        category="Modern",
    ),
)


BASH = frozenset({ShellType.BASH})
ZSH = frozenset({ShellType.ZSH})
FISH = frozenset({ShellType.FISH})
POSIX_LIKE = frozenset({ShellType.BASH, ShellType.ZSH})

SHELL_TIPS: Tuple[ShellTipRule, ...] = (
    ShellTipRule("Bash History Search", R(r"^history\b"), "CTRL+R",
                 "Use CTRL+R to interactively search command history", 75, BASH),
    ShellTipRule("Bash Job Control", R(r"^jobs$"), "fg %1",
                 "Use fg to bring background jobs to the foreground", 70, BASH),
    ShellTipRule("Bash Command Substitution", R(r"`[^`]*`"), "$(command)",
                 "Use $(command) for command substitution instead of backticks", 65, BASH),
    ShellTipRule("Bash For Loop", R(r"^for\s+\w+\s+in\s+\$\(seq\b"), "for i in {1..10}; do echo $i; done",
                 "Use brace expansion for numeric sequences in for loops", 60, BASH),
    ShellTipRule("Zsh Recursive Globbing", R(r"^ls\s+\*\.\w+$"), "ls **/*.ext",
                 "Use ** glob for recursive matching in zsh", 75, ZSH),
    ShellTipRule("Zsh Directory Stack", R(r"^(pushd|popd)\b"), "cd -",
                 "Use cd - to navigate to the previous directory", 80, ZSH),
    ShellTipRule("Zsh Spell Correction", R(r"command not found"), "setopt CORRECT",
                 "Enable zsh spelling correction with setopt CORRECT", 65, ZSH, on_error=True),
    ShellTipRule("Fish Autosuggestions", R(r"^history\b"), "Use → key",
                 "Press the right arrow key to accept autosuggestions", 90, FISH),
    ShellTipRule("Fish Functions", R(r"^function\s+\w+"), "funcsave function_name",
                 "Use funcsave to persist functions across sessions", 75, FISH),
    ShellTipRule("Fish Abbreviations", R(r"^abbr\b"), 'abbr -a gs "git status"',
                 "Create abbreviations for common commands", 80, FISH),
    ShellTipRule("Fish Path Variable", R(r"^set\s+-x\s+PATH\b"), "fish_add_path /new/path",
                 "Use fish_add_path to add directories to PATH", 85, FISH),
    ShellTipRule("Fish Command Substitution", R(r"\$\([^)]*\)"), "(command)",
                 "Use (command) for command substitution in fish", 70, FISH),
    ShellTipRule("Retry as Root", R(r"(?i)permission denied"), "sudo !!",
                 "Rerun the previous command with sudo", 70, POSIX_LIKE, on_error=True),
    ShellTipRule("Retry as Root in Fish", R(r"(?i)permission denied"), "sudo $history[1]",
                 "In fish, use sudo $history[1] instead of sudo !!", 70, FISH, on_error=True),
    ShellTipRule("Find Command", R(r"^find\s+\.\s+-name\b"),
                 'find . -type f -name "*.js" -exec grep -l "pattern" {} \\;',
                 "Combine find with grep to search file contents", 70),
    ShellTipRule("Grep Include Filter", R(r"^grep\s+-r\b"), 'grep -r --include="*.js" "pattern" .',
                 "Use --include to filter files when grepping", 75),
    ShellTipRule("Output Redirection", R(r">\s*/dev/null"), "command &>/dev/null",
                 "Use &> to redirect both stdout and stderr", 65),
    ShellTipRule("Disk Usage", R(r"^du\s+-h\b"), "du -h --max-depth=1 | sort -hr",
                 "Combine du with sort to see the largest directories first", 80),
    ShellTipRule("Process Filter", R(r"^ps\s+aux$"), 'ps aux | grep "process name"',
                 "Filter ps output with grep to find specific processes", 75),
)

# cmdsense/analysis/analyzer.py
"""
Pattern mining over the shell history.

The analyzer runs a fixed series of passes over the history (repeated
commands, sequential pairs, recurring runs, workflows, optimizations and
shell tips), merges what they find and ranks it by confidence.
"""
import re
import shlex
from collections import Counter
from typing import List, Optional, Sequence

from cmdsense.analysis.rules import (
    DOMAIN_GATES,
    OPTIMIZATION_RULES,
    SEQUENCE_RULES,
    SHELL_TIPS,
    WORKFLOWS,
)
from cmdsense.cache import ResultCache, fingerprint
from cmdsense.constants import ANALYSIS_WINDOW, CACHE_PREFIX_PATTERNS
from cmdsense.matching import count_occurrences, match_sequence
from cmdsense.models import Context, HistoryItem, Pattern, PatternKind, ShellType, history_texts
from cmdsense.utils.logging import get_logger

logger = get_logger(__name__)

OPTIMIZATION_CONFIDENCE = 65
ALIAS_MIN_COUNT = 3
ALIAS_CONFIDENCE_PENALTY = 10

# Runs of consecutive commands that recur often enough to combine
RUN_MIN_LENGTH = 2
RUN_MAX_LENGTH = 3
RUN_MIN_OCCURRENCES = 2
RUN_CONFIDENCE = 70

_ALIAS_UNSAFE = re.compile(r"[^\w.-]")

# Prefix letter used when aliasing subcommands of these tools
_ALIAS_PREFIXES = {"git": "g", "docker": "d", "npm": "n"}


def suggest_alias_name(cmd: str) -> str:
    """
    Suggest a short alias name for a command.

    ``git status`` becomes ``gstatus`` (same for docker and npm); anything
    else uses the first letter of the command plus the first two letters of
    its first argument.
    """
    parts = cmd.split()
    if not parts:
        return ""

    base = parts[0]
    if base in _ALIAS_PREFIXES and len(parts) > 1:
        name = _ALIAS_PREFIXES[base] + parts[1]
    else:
        name = base[:1] + (parts[1][:2] if len(parts) > 1 else "")
    return _ALIAS_UNSAFE.sub("", name) or base


class PatternAnalyzer:
    """Detects repeated commands, sequences, workflows and improvable commands."""

    def __init__(self, cache: Optional[ResultCache] = None, window: int = ANALYSIS_WINDOW):
        self._cache = cache
        self._window = window
        self._logger = logger

    def analyze(
        self,
        history: Sequence[HistoryItem],
        ctx: Context,
        shell_type: Optional[ShellType] = None,
    ) -> List[Pattern]:
        """
        Analyze the history for usage patterns.

        Args:
            history: Commands, most recent first
            ctx: The terminal context of this call
            shell_type: Shell whose tip tables apply; defaults to ``ctx.shell_type``

        Returns:
            Patterns deduplicated by suggestion, highest confidence first
        """
        commands = history_texts(history)
        if len(commands) < 2:
            return []

        shell = ShellType.parse(shell_type) if shell_type is not None else ctx.shell_type

        key = None
        if self._cache is not None:
            key = self._cache_key(commands, ctx, shell)
            cached, found = self._cache.get(key)
            if found:
                self._logger.debug(f"Pattern cache hit for {len(commands)} commands")
                return cached

        patterns: List[Pattern] = []
        patterns.extend(self._repeated_commands(commands))
        patterns.extend(self._sequential_commands(commands))
        patterns.extend(self._recurring_runs(commands))
        patterns.extend(self._workflows(commands, ctx))
        patterns.extend(self._optimizations(commands))
        patterns.extend(self._shell_tips(commands, ctx, shell))

        result = self._rank(patterns)
        self._logger.debug(f"Detected {len(result)} patterns in {len(commands)} commands")

        if key is not None:
            self._cache.put(key, result)
        return result

    def _cache_key(self, commands: List[str], ctx: Context, shell: ShellType) -> str:
        material = commands + ["\x1e"] + list(ctx.recent_commands) + ["\x1e", ctx.recent_error or ""]
        return f"{CACHE_PREFIX_PATTERNS}{shell.value}:{ctx.current_directory}:{fingerprint(material)}"

    def _repeated_commands(self, commands: List[str]) -> List[Pattern]:
        # Counter keeps first-seen order, so ties stay in history order
        counts = Counter(cmd.strip() for cmd in commands if cmd.strip())
        patterns = []
        for cmd, count in counts.items():
            if count <= 1:
                continue

            confidence = min(100, count * 20)
            patterns.append(Pattern(
                kind=PatternKind.REPEATED_COMMAND,
                suggestion=cmd,
                description=f"You've used this command {count} times recently",
                confidence=confidence,
            ))

            if count >= ALIAS_MIN_COUNT and " " in cmd:
                patterns.append(Pattern(
                    kind=PatternKind.CREATE_ALIAS,
                    suggestion=f"alias {suggest_alias_name(cmd)}={shlex.quote(cmd)}",
                    description="Create an alias for this frequently used command",
                    confidence=confidence - ALIAS_CONFIDENCE_PENALTY,
                ))
        return patterns

    def _sequential_commands(self, commands: List[str]) -> List[Pattern]:
        return [
            Pattern(
                kind=PatternKind.SEQUENTIAL_COMMANDS,
                suggestion=rule.render(commands),
                description=rule.description,
                confidence=rule.confidence,
            )
            for rule in SEQUENCE_RULES
            if match_sequence(rule.templates, commands)
        ]

    def _recurring_runs(self, commands: List[str]) -> List[Pattern]:
        """Runs of back-to-back commands that repeat, offered as one ``&&`` chain."""
        window = [cmd.strip() for cmd in commands[:self._window]]
        seen = set()
        patterns = []
        for size in range(RUN_MIN_LENGTH, RUN_MAX_LENGTH + 1):
            for start in range(len(window) - size + 1):
                run = tuple(window[start:start + size])
                if run in seen or not all(run) or len(set(run)) == 1:
                    continue
                seen.add(run)

                count = count_occurrences(window, run)
                if count < RUN_MIN_OCCURRENCES:
                    continue

                # The window is most recent first; chains run oldest first
                patterns.append(Pattern(
                    kind=PatternKind.SEQUENTIAL_COMMANDS,
                    suggestion=" && ".join(reversed(run)),
                    description=f"You've run these {size} commands together {count} times; combine them",
                    confidence=RUN_CONFIDENCE,
                ))
        return patterns

    def _workflows(self, commands: List[str], ctx: Context) -> List[Pattern]:
        window = commands[:self._window]
        gate_source = list(ctx.recent_commands) or window

        active_domains = {
            domain for domain, gate in DOMAIN_GATES.items()
            if any(gate(cmd) for cmd in gate_source)
        }
        if not active_domains:
            return []

        patterns = []
        for workflow in WORKFLOWS:
            if workflow.domain not in active_domains:
                continue
            matched = workflow.matched_steps(window)
            if matched < workflow.match_threshold:
                continue

            self._logger.debug(f"Workflow '{workflow.name}' matched {matched} steps")
            patterns.append(Pattern(
                kind=PatternKind.WORKFLOW,
                suggestion=workflow.followup_suggestion,
                description=f"{workflow.name}: {workflow.description}",
                confidence=min(95, 50 + 10 * matched),
            ))
        return patterns

    def _optimizations(self, commands: List[str]) -> List[Pattern]:
        patterns = []
        for cmd in dict.fromkeys(commands):
            for rule in OPTIMIZATION_RULES:
                rewritten = rule.apply(cmd)
                if rewritten is None:
                    continue
                if rewritten != cmd:
                    patterns.append(Pattern(
                        kind=PatternKind.COMMAND_OPTIMIZATION,
                        suggestion=rewritten,
                        description=rule.explanation,
                        confidence=OPTIMIZATION_CONFIDENCE,
                    ))
                break
        return patterns

    def _shell_tips(self, commands: List[str], ctx: Context, shell: ShellType) -> List[Pattern]:
        last_command = commands[0]
        patterns = []
        for rule in SHELL_TIPS:
            if not rule.applies_to(shell):
                continue
            target = ctx.recent_error if rule.on_error else last_command
            if rule.matcher.matches(target):
                patterns.append(Pattern(
                    kind=PatternKind.SHELL_TIP,
                    suggestion=rule.suggestion,
                    description=rule.description,
                    confidence=rule.confidence,
                    shell_type=shell.value,
                ))
        return patterns

    @staticmethod
    def _rank(patterns: List[Pattern]) -> List[Pattern]:
        seen = set()
        unique = []
        for pattern in patterns:
            if pattern.suggestion in seen:
                continue
            seen.add(pattern.suggestion)
            unique.append(pattern)
        return sorted(unique, key=lambda p: -p.confidence)

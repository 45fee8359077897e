# tests/test_analyzer.py
"""Tests for the pattern analyzer and its rule tables."""
import shlex

import pytest

from cmdsense.analysis import PatternAnalyzer, suggest_alias_name
from cmdsense.analysis.rules import WorkflowDefinition, P
from cmdsense.cache import ResultCache
from cmdsense.models import CommandHistoryEntry, Context, PatternKind, ShellType


def _find(patterns, kind, suggestion=None):
    return [
        p for p in patterns
        if p.kind == kind and (suggestion is None or p.suggestion == suggestion)
    ]


@pytest.fixture
def analyzer():
    return PatternAnalyzer()


@pytest.mark.parametrize("history", [[], ["git status"]])
def test_short_history_yields_nothing(analyzer, ctx, history):
    assert analyzer.analyze(history, ctx) == []


def test_repeated_command(analyzer, ctx):
    history = ["git status", "ls -la", "git status", "cd src", "git status"]

    patterns = analyzer.analyze(history, ctx)

    repeated = _find(patterns, PatternKind.REPEATED_COMMAND, "git status")
    assert len(repeated) == 1
    assert repeated[0].confidence == 60


def test_frequent_command_gets_alias(analyzer, ctx):
    history = ["git status", "ls -la", "git status", "cd src", "git status"]

    patterns = analyzer.analyze(history, ctx)

    aliases = _find(patterns, PatternKind.CREATE_ALIAS)
    assert [a.suggestion for a in aliases] == ["alias gstatus='git status'"]
    assert aliases[0].confidence == 50


def test_no_alias_below_three_uses(analyzer, ctx):
    patterns = analyzer.analyze(["git status", "ls", "git status"], ctx)

    assert _find(patterns, PatternKind.REPEATED_COMMAND, "git status")[0].confidence == 40
    assert _find(patterns, PatternKind.CREATE_ALIAS) == []


def test_no_alias_for_single_word_command(analyzer, ctx):
    patterns = analyzer.analyze(["ls", "ls", "ls"], ctx)

    assert _find(patterns, PatternKind.CREATE_ALIAS) == []


def test_alias_quotes_embedded_single_quotes(analyzer, ctx):
    patterns = analyzer.analyze(["git commit -m 'wip'"] * 3, ctx)

    aliases = _find(patterns, PatternKind.CREATE_ALIAS)
    assert len(aliases) == 1
    assert shlex.split(aliases[0].suggestion) == ["alias", "gcommit=git commit -m 'wip'"]


def test_repeat_confidence_is_capped(analyzer, ctx):
    patterns = analyzer.analyze(["make test"] * 8, ctx)

    assert _find(patterns, PatternKind.REPEATED_COMMAND, "make test")[0].confidence == 100


@pytest.mark.parametrize("cmd,expected", [
    ("git status", "gstatus"),
    ("docker ps", "dps"),
    ("npm test", "ntest"),
    ("kubectl get pods", "kge"),
    ("make", "m"),
    ("git log --oneline", "glog"),
])
def test_suggest_alias_name(cmd, expected):
    assert suggest_alias_name(cmd) == expected


def test_cd_then_ls_sequence(analyzer, ctx):
    patterns = analyzer.analyze(["cd /path/to/dir", "ls -la"], ctx)

    sequential = _find(patterns, PatternKind.SEQUENTIAL_COMMANDS, "ls")
    assert len(sequential) == 1
    assert sequential[0].confidence == 80


def test_mkdir_sequence_suggests_the_new_directory(analyzer, ctx):
    patterns = analyzer.analyze(["mkdir -p build/out", "cd .."], ctx)

    assert _find(patterns, PatternKind.SEQUENTIAL_COMMANDS, "cd build/out")


def test_sequence_is_positional(analyzer, ctx):
    """A matching pair further back in the history is not a sequence."""
    patterns = analyzer.analyze(["vim notes.txt", "cd /tmp", "ls"], ctx)

    assert _find(patterns, PatternKind.SEQUENTIAL_COMMANDS) == []


def test_recurring_run_is_combined(analyzer, ctx):
    history = ["make test", "vim app.py", "make test", "vim app.py", "git status"]

    patterns = analyzer.analyze(history, ctx)

    runs = [p for p in _find(patterns, PatternKind.SEQUENTIAL_COMMANDS) if " && " in p.suggestion]
    assert [r.suggestion for r in runs] == ["vim app.py && make test"]
    assert runs[0].confidence == 70
    assert "2 commands together 2 times" in runs[0].description


def test_recurring_three_command_run(analyzer, ctx):
    history = ["git push", "git commit -m x", "git add .", "git push", "git commit -m x", "git add ."]

    patterns = analyzer.analyze(history, ctx)

    runs = _find(patterns, PatternKind.SEQUENTIAL_COMMANDS, "git add . && git commit -m x && git push")
    assert len(runs) == 1
    assert "3 commands together 2 times" in runs[0].description


@pytest.mark.parametrize("history", [
    ["make", "vim a.py", "git status"],
    ["ls", "ls", "ls", "ls"],
])
def test_no_run_without_a_repeat(analyzer, ctx, history):
    patterns = analyzer.analyze(history, ctx)

    assert not any(" && " in p.suggestion for p in _find(patterns, PatternKind.SEQUENTIAL_COMMANDS))


def test_git_feature_branch_workflow(analyzer, ctx, git_history):
    patterns = analyzer.analyze(git_history, ctx)

    workflows = _find(patterns, PatternKind.WORKFLOW, "git push --set-upstream origin HEAD")
    assert len(workflows) == 1
    assert workflows[0].description.startswith("Git Feature Branch")
    assert workflows[0].confidence == 90


def test_workflow_needs_domain_gate(analyzer, git_history):
    """Recent commands outside the git domain keep git workflows quiet."""
    ctx = Context(current_directory="/tmp", recent_commands=["python manage.py runserver"])

    patterns = analyzer.analyze(git_history, ctx)

    assert _find(patterns, PatternKind.WORKFLOW, "git push --set-upstream origin HEAD") == []


def test_workflow_below_threshold(analyzer, ctx):
    patterns = analyzer.analyze(["git checkout -b feature/x", "git add ."], ctx)

    assert _find(patterns, PatternKind.WORKFLOW, "git push --set-upstream origin HEAD") == []


@pytest.mark.parametrize("threshold", [0, 3])
def test_workflow_threshold_must_fit_steps(threshold):
    with pytest.raises(ValueError):
        WorkflowDefinition(
            name="Broken",
            description="",
            domain="git",
            step_patterns=(P("git add"), P("git commit")),
            match_threshold=threshold,
            followup_suggestion="git push",
        )


@pytest.mark.parametrize("cmd,expected", [
    ("cat app.log | grep ERROR", "grep ERROR app.log"),
    ('find . -name "*.pyc" | xargs rm', 'find . -name "*.pyc" -exec rm {} +'),
    ("ps aux | grep nginx", "pgrep -af nginx"),
    ("git add . && git commit -m 'wip'", "git commit -am 'wip'"),
    ("cd src && ls -la", "ls -la src"),
    ("git checkout -b feature/x", "git switch -c feature/x"),
])
def test_optimizations(analyzer, ctx, cmd, expected):
    patterns = analyzer.analyze([cmd, "true"], ctx)

    optimizations = _find(patterns, PatternKind.COMMAND_OPTIMIZATION)
    assert [p.suggestion for p in optimizations] == [expected]
    assert optimizations[0].confidence == 65


def test_shell_tip_for_bash(analyzer, ctx):
    patterns = analyzer.analyze(["history | tail", "ls"], ctx)

    tips = _find(patterns, PatternKind.SHELL_TIP, "CTRL+R")
    assert len(tips) == 1
    assert tips[0].shell_type == "bash"


def test_shell_tip_for_fish(analyzer, ctx):
    patterns = analyzer.analyze(["history", "ls"], ctx, shell_type=ShellType.FISH)

    assert _find(patterns, PatternKind.SHELL_TIP, "Use → key")
    assert _find(patterns, PatternKind.SHELL_TIP, "CTRL+R") == []


def test_other_shell_only_gets_generic_tips(analyzer, ctx):
    patterns = analyzer.analyze(["du -h /var", "history"], ctx, shell_type="tcsh")

    tips = _find(patterns, PatternKind.SHELL_TIP)
    assert [t.suggestion for t in tips] == ["du -h --max-depth=1 | sort -hr"]
    assert tips[0].shell_type == "other"


def test_error_tip_uses_recent_error(analyzer):
    ctx = Context(shell_type="fish", recent_error="cat: /etc/shadow: Permission denied")

    patterns = analyzer.analyze(["cat /etc/shadow", "ls"], ctx)

    suggestions = [p.suggestion for p in _find(patterns, PatternKind.SHELL_TIP)]
    assert "sudo $history[1]" in suggestions
    assert "sudo !!" not in suggestions


def test_patterns_are_unique_sorted_and_bounded(analyzer, ctx, git_history):
    patterns = analyzer.analyze(git_history * 3, ctx)

    suggestions = [p.suggestion for p in patterns]
    assert len(suggestions) == len(set(suggestions))
    confidences = [p.confidence for p in patterns]
    assert confidences == sorted(confidences, reverse=True)
    assert all(0 <= c <= 100 for c in confidences)


def test_analyze_is_deterministic(analyzer, ctx, git_history):
    assert analyzer.analyze(git_history, ctx) == analyzer.analyze(git_history, ctx)


def test_accepts_history_entries(analyzer, ctx):
    history = [CommandHistoryEntry(text="git status")] * 3

    patterns = analyzer.analyze(history, ctx)

    assert _find(patterns, PatternKind.REPEATED_COMMAND, "git status")


def test_results_are_cached(ctx, git_history):
    cache = ResultCache(capacity=5)
    analyzer = PatternAnalyzer(cache=cache)

    first = analyzer.analyze(git_history, ctx)
    second = analyzer.analyze(git_history, ctx)

    assert first == second
    assert len(cache) == 1
    assert cache.keys()[0].startswith("patterns:bash:/home/user/project:")
    assert cache.stats.hits == 1


def test_cache_key_depends_on_history(ctx, git_history):
    cache = ResultCache(capacity=5)
    analyzer = PatternAnalyzer(cache=cache)

    analyzer.analyze(git_history, ctx)
    analyzer.analyze(git_history[1:], ctx)

    assert len(cache) == 2

# cmdsense/cli.py
"""
Command-line interface for cmdsense.

Loads a shell history file and prints what the engine makes of it, the
way a terminal host would call the engine.
"""
import os
import sys
from pathlib import Path
from typing import List, Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from cmdsense import __version__
from cmdsense.api import get_config_manager, get_engine, get_remote_ranker
from cmdsense.constants import APP_DESCRIPTION, DEFAULT_HISTORY_LIMIT
from cmdsense.history import load_history
from cmdsense.models import CommandHistoryEntry, Context, Mode, SearchFilters, ShellType
from cmdsense.utils.logging import setup_logging, get_logger

app = typer.Typer(help="cmdsense: command intelligence for your shell history")
logger = get_logger(__name__)
console = Console()

HistoryFileOption = typer.Option(None, "--history-file", "-f", help="Shell history file to read")
ShellOption = typer.Option(None, "--shell", "-s", help="Shell flavour (bash, zsh, fish)")
CwdOption = typer.Option(None, "--cwd", help="Directory to use as the current directory")


def version_callback(value: bool):
    """Display version information and exit."""
    if value:
        console.print(f"cmdsense version: {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    debug: bool = typer.Option(
        False, "--debug", "-d", help="Enable debug mode"
    ),
    version: bool = typer.Option(
        False, "--version", "-v", callback=version_callback, is_eager=True, help="Show version and exit"
    ),
):
    """cmdsense: command intelligence for your shell history"""
    get_config_manager().config.debug = debug
    setup_logging(debug=debug)


def _load(history_file: Optional[Path], shell: Optional[ShellType], limit: int = DEFAULT_HISTORY_LIMIT) -> List[CommandHistoryEntry]:
    try:
        return load_history(history_file, shell=shell, limit=limit)
    except (FileNotFoundError, OSError) as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise typer.Exit(1)


def _shell(value: Optional[str]) -> Optional[ShellType]:
    return ShellType.parse(value) if value else None


def _context(shell: Optional[ShellType], cwd: Optional[Path], history: List[CommandHistoryEntry]) -> Context:
    engine = get_engine()
    overrides = {
        "current_directory": str(cwd) if cwd else os.getcwd(),
        "recent_commands": [entry.text for entry in history[:engine.settings.analysis_window]],
    }
    if shell is not None:
        overrides["shell_type"] = shell
    return engine.default_context(**overrides)


@app.command()
def analyze(
    history_file: Optional[Path] = HistoryFileOption,
    shell: Optional[str] = ShellOption,
    cwd: Optional[Path] = CwdOption,
):
    """Show usage patterns, aliases and optimizations found in the history."""
    shell_type = _shell(shell)
    history = _load(history_file, shell_type)
    ctx = _context(shell_type, cwd, history)

    patterns = get_engine().analyze(history, ctx)
    if not patterns:
        console.print("[yellow]No patterns found in the history.[/yellow]")
        return

    table = Table(title=f"Patterns in {len(history)} commands")
    table.add_column("Kind", style="cyan")
    table.add_column("Suggestion", style="green")
    table.add_column("Confidence", justify="right")
    table.add_column("Description")
    for pattern in patterns:
        table.add_row(pattern.kind.value, pattern.suggestion, str(pattern.confidence), pattern.description)
    console.print(table)


@app.command()
def search(
    query: List[str] = typer.Argument(..., help="Keywords or a natural-language query"),
    history_file: Optional[Path] = HistoryFileOption,
    shell: Optional[str] = ShellOption,
    cwd: Optional[Path] = CwdOption,
    online: Optional[bool] = typer.Option(
        None, "--online/--offline",
        help="Rank with the Gemini API, falling back to local search; defaults to the offline setting",
    ),
    use_filters: bool = typer.Option(
        True, "--filters/--no-filters", help="Apply timeframes and categories named in the query"
    ),
):
    """Search the history for commands matching a query."""
    full_query = " ".join(query)
    shell_type = _shell(shell)
    history = _load(history_file, shell_type)
    ctx = _context(shell_type, cwd, history)
    engine = get_engine()

    mode = Mode(offline=True)
    if online or (online is None and not engine.settings.offline):
        try:
            ranker = get_remote_ranker()
        except ValueError as e:
            if online:
                console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
                raise typer.Exit(1)
            # Online only by configuration, so a missing key degrades to offline
            console.print(f"[yellow]{escape(str(e))} Searching offline.[/yellow]")
        else:
            mode = Mode(offline=False, remote_rank_fn=ranker, timeout=engine.settings.remote_timeout)

    filters = SearchFilters.from_query(full_query) if use_filters else None
    results = engine.search(full_query, history, ctx, mode=mode, filters=filters)
    if not results:
        console.print(f"[yellow]No commands match \"{full_query}\".[/yellow]")
        return

    table = Table(title=f"Results for \"{full_query}\"")
    table.add_column("Command", style="green")
    table.add_column("Score", justify="right")
    table.add_column("Match", style="cyan")
    table.add_column("Reason")
    for result in results:
        table.add_row(result.command, f"{result.score:.2f}", result.match_type, result.reason)
    console.print(table)


@app.command()
def complete(
    text: str = typer.Argument(..., help="Partially typed command line; quote it to keep a trailing space"),
    history_file: Optional[Path] = HistoryFileOption,
    shell: Optional[str] = ShellOption,
    cwd: Optional[Path] = CwdOption,
):
    """Show completion candidates for a partially typed command."""
    shell_type = _shell(shell)
    history = _load(history_file, shell_type)
    ctx = _context(shell_type, cwd, history)

    candidates = get_engine().complete(text, ctx, history)
    if not candidates:
        console.print("[yellow]No completions.[/yellow]")
        return

    table = Table(title=f"Completions for \"{text}\"")
    table.add_column("Value", style="green")
    table.add_column("Kind", style="cyan")
    table.add_column("Description")
    for candidate in candidates:
        table.add_row(candidate.value, candidate.kind.value, candidate.description)
    console.print(table)


@app.command("config")
def show_config(
    set_values: Optional[List[str]] = typer.Option(
        None, "--set", help="Change an engine setting, e.g. --set search_result_limit=5"
    ),
    save: bool = typer.Option(False, "--save", help="Write the configuration file"),
):
    """Show (and optionally change) the engine configuration."""
    config_manager = get_config_manager()

    if set_values:
        changes = {}
        for item in set_values:
            name, sep, value = item.partition("=")
            if not sep:
                console.print(f"[bold red]Error:[/bold red] expected NAME=VALUE, got '{item}'")
                raise typer.Exit(1)
            changes[name.strip()] = value.strip()

        unknown = sorted(set(changes) - set(type(config_manager.config.engine).model_fields))
        if unknown:
            console.print(f"[bold red]Error:[/bold red] unknown setting(s): {', '.join(unknown)}")
            raise typer.Exit(1)

        try:
            settings = config_manager.update_engine(**changes)
            get_engine().update_settings(**settings.model_dump())
        except ValidationError as e:
            console.print(f"[bold red]Error:[/bold red] invalid setting: {escape(str(e))}")
            raise typer.Exit(1)

    if save:
        try:
            config_manager.save_config()
        except OSError as e:
            logger.exception("Error saving configuration")
            console.print(f"[bold red]Error:[/bold red] could not save configuration: {escape(str(e))}")
            raise typer.Exit(1)
        console.print(f"[green]Configuration saved to {config_manager.config_file}[/green]")

    config = config_manager.config
    console.print(Panel(f"cmdsense v{__version__}\n{APP_DESCRIPTION}", title="Status", expand=False))

    table = Table(title="Engine Settings")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")
    for name, value in config.engine.model_dump(mode="json").items():
        table.add_row(name, str(value))

    api_key_status = "[green]Configured[/green]" if config.api.gemini_api_key else "[red]Not configured[/red]"
    table.add_row("gemini_api_key", api_key_status)
    table.add_row("gemini_model", config.api.gemini_model)
    table.add_row("debug", "Enabled" if config.debug else "Disabled")
    console.print(table)


def run():
    """Entry point used by ``python -m cmdsense``."""
    try:
        app()
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted.[/yellow]")
        sys.exit(130)

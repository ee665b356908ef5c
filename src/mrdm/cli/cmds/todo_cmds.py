"""
CLI commands for annotation tracking.

Usage:
    mrdm todo init
    mrdm todo list
    mrdm todo list --patterns TODO,FIXME --path "lib/**/*.py"
    mrdm todo list --out TODO.md
    mrdm todo done

``list`` stamps new annotations with ids, updates ``.mrdm/todos.json`` and
prints the checklist. ``done`` does the same but first asks what to do with
items that disappeared from the code or came back after being marked done.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape

from mrdm.config import ScanConfig, init_config, load_config
from mrdm.errors import MrdmError, TodoIOError
from mrdm.todo import TodoRun, list_todos, mark_done

app = typer.Typer(help="Track TODO-style annotations in source files")

# Checklist goes to stdout; status and errors go to stderr
console = Console(stderr=True)


# =============================================================================
# Shared options
# =============================================================================

PatternsOption = Annotated[
    str | None,
    typer.Option(
        "--patterns",
        "-p",
        help="Comma-separated categories to look for (e.g. TODO,FIXME)",
    ),
]
PathOption = Annotated[
    str | None,
    typer.Option(
        "--path",
        help="File or glob to scan instead of the configured include list",
    ),
]
OutOption = Annotated[
    str | None,
    typer.Option(
        "--out",
        "-o",
        help="Write the checklist to this file (with editor links) instead of stdout",
    ),
]
RootOption = Annotated[
    Path,
    typer.Option(
        "--root",
        help="Project root containing .mrdm/",
        file_okay=False,
    ),
]


# =============================================================================
# Helpers
# =============================================================================


def _resolve_config(
    root: Path, patterns: str | None, path: str | None, out: str | None
) -> ScanConfig:
    return load_config(root).with_overrides(patterns=patterns, path=path, out=out)


def _fail(error: Exception) -> typer.Exit:
    message = escape(str(error))
    if isinstance(error, TodoIOError) and error.path is not None:
        path = escape(str(error.path))
        if path not in message:
            message = f"{path}: {message}"
    console.print(f"[red]Error: {message}[/red]", soft_wrap=True)
    return typer.Exit(1)


def _print_summary(run: TodoRun) -> None:
    new = len(run.scan.new_ids)
    files = len(run.scan.rewritten_files)
    done = sum(1 for item in run.items.values() if item.done)
    console.print(
        f"[green]✓[/green] {len(run.items)} item(s), {done} done"
        f" [dim]({new} new id(s) written to {files} file(s))[/dim]"
    )
    if run.output_path is not None:
        console.print(f"  Checklist: [cyan]{escape(str(run.output_path))}[/cyan]")


# =============================================================================
# Commands
# =============================================================================


@app.command("init")
def init_cmd(root: RootOption = Path(".")):
    """Create a default .mrdm/config.json."""
    try:
        path = init_config(root)
    except MrdmError as e:
        raise _fail(e)
    console.print(f"[green]Created {escape(str(path))}[/green]")


@app.command("list")
def list_cmd(
    patterns: PatternsOption = None,
    path: PathOption = None,
    out: OutOption = None,
    root: RootOption = Path("."),
):
    """Scan for annotations, assign ids, save and print the checklist."""
    config = _resolve_config(root, patterns, path, out)
    try:
        run = list_todos(config, root)
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted[/yellow]")
        raise typer.Exit(130)
    except MrdmError as e:
        raise _fail(e)
    _print_summary(run)


@app.command("done")
def done_cmd(
    patterns: PatternsOption = None,
    path: PathOption = None,
    out: OutOption = None,
    root: RootOption = Path("."),
):
    """Scan, then resolve items that vanished from or came back to the code."""
    config = _resolve_config(root, patterns, path, out)
    try:
        run = mark_done(config, root, output=typer.echo)
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted[/yellow]")
        raise typer.Exit(130)
    except MrdmError as e:
        raise _fail(e)

    result = run.reconcile
    decided = result is not None and any(
        (result.marked_done, result.removed, result.reopened, result.duplicated)
    )
    if decided:
        console.print(
            f"  [dim]{len(result.marked_done)} marked done, {len(result.removed)} removed, "
            f"{len(result.reopened)} reopened, {len(result.duplicated)} duplicated[/dim]"
        )
    _print_summary(run)


def register(parent: typer.Typer):
    """Register todo commands with the parent CLI app."""
    parent.add_typer(app, name="todo", help="Track TODO-style annotations in source files")

from __future__ import annotations

import typer
from rich.console import Console
from rich.text import Text

from mrdm import __version__
from mrdm.cli.cmds import _HELP, register_todo
from mrdm.logging import configure_logging

console = Console()

_ACCENT = "bold #6366f1"


def _show_banner():
    """Display the name and version."""
    console.print()
    console.print(Text(f"  mrdm v{__version__}", style=_ACCENT))
    console.print(Text("  In-code annotations as a persistent checklist", style="dim italic"))
    console.print()


def _show_help():
    """Display short help with the main commands."""
    _show_banner()

    console.print(Text("  Commands", style="bold #a78bfa"))
    console.print()

    commands = [
        ("todo init", "Create .mrdm/config.json with defaults"),
        ("todo list", "Assign ids, update the store, print the checklist"),
        ("todo done", "Resolve items that vanished or came back"),
    ]
    for cmd, desc in commands:
        console.print(f"    [{_ACCENT}]{cmd:12}[/{_ACCENT}] [dim]{desc}[/dim]")

    console.print()
    console.print("    [dim]Run[/dim] [white]mrdm --help[/white] [dim]for all options[/dim]")
    console.print()


def version_callback(value: bool):
    """Show version and exit."""
    if value:
        console.print(f"mrdm {__version__}")
        raise typer.Exit()


app = typer.Typer(
    invoke_without_command=True,
    no_args_is_help=False,
    add_completion=False,
    help=_HELP,
    rich_markup_mode="markdown",
)


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Log scan progress to stderr.",
    ),
):
    """mrdm - track in-code annotations."""
    configure_logging("DEBUG" if verbose else None)

    if ctx.invoked_subcommand is None:
        _show_help()
        raise typer.Exit()


register_todo(app)


def main():
    app()


if __name__ == "__main__":
    main()

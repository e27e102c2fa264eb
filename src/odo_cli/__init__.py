#!/usr/bin/env python3
"""
odo CLI - bootstrap a devfile component in the current directory

Usage:
    odo init
    odo init --name my-app --devfile python
    odo registry --filter java

Or install globally:
    uv tool install odo-cli
    odo init
"""

import sys
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text
from typer.core import TyperGroup

from .errors import InitError, InputClosed, WriteError
from .log import level_from_env, setup_logging
from .preferences import Preferences, Registry
from .prompts import ArrowPrompter, Prompter, RichConsole
from .registry import RegistryClient
from .wizard import Wizard

# ASCII Art Banner
BANNER = r"""
  ___   __| | ___
 / _ \ / _` |/ _ \
| (_) | (_| | (_) |
 \___/ \__,_|\___/
"""

TAGLINE = "Fast, iterative container-based application development"

QUICKSTART = [
    ("odo init", "create a component in the current directory"),
    ("odo registry", "list the devfiles the configured registries offer"),
]

console = Console(highlight=False)


class BannerGroup(TyperGroup):
    """Prints the odo banner above the generated help."""

    def format_help(self, ctx, formatter):
        show_banner()
        super().format_help(ctx, formatter)


app = typer.Typer(
    name="odo",
    help="Bootstrap devfile components from a devfile registry",
    add_completion=False,
    invoke_without_command=True,
    cls=BannerGroup,
)


def show_banner():
    body = Text(BANNER.strip("\n"), style="bold cyan")
    body.append(f"\n\n{TAGLINE}", style="italic")
    console.print(Panel(body, border_style="cyan", expand=False, padding=(0, 2)))


@app.callback()
def callback(ctx: typer.Context):
    """Bare ``odo`` shows the banner and the two entry commands."""
    if ctx.invoked_subcommand is not None or ctx.resilient_parsing:
        return
    show_banner()
    grid = Table.grid(padding=(0, 2))
    for command, summary in QUICKSTART:
        grid.add_row(Text(command, style="cyan"), Text(summary, style="dim"))
    console.print(grid)
    console.print()


def build_registry(registries: list[Registry], skip_tls: bool = False) -> RegistryClient:
    return RegistryClient(registries, skip_tls=skip_tls)


def _fail(title: str, message: str, debug: bool = False) -> None:
    console.print(Panel(escape(message), title=f"[red]{title}[/red]", border_style="red", padding=(1, 2)))
    if debug:
        _env_pairs = [
            ("Python", sys.version.split()[0]),
            ("Platform", sys.platform),
            ("CWD", str(Path.cwd())),
        ]
        _label_width = max(len(k) for k, _ in _env_pairs)
        env_lines = [f"{k.ljust(_label_width)} → [bright_black]{escape(v)}[/bright_black]" for k, v in _env_pairs]
        console.print(Panel("\n".join(env_lines), title="Debug Environment", border_style="magenta"))


@app.command()
def init(
    name: Optional[str] = typer.Option(None, "--name", help="Name of the component to create"),
    devfile: Optional[str] = typer.Option(None, "--devfile", help="Name of the devfile in the devfile registry"),
    devfile_path: Optional[str] = typer.Option(None, "--devfile-path", help="Path or URL of a devfile to use instead of the registry"),
    devfile_registry: Optional[str] = typer.Option(None, "--devfile-registry", help="Only look the devfile up in this registry"),
    starter: Optional[str] = typer.Option(None, "--starter", help="Name of the starter project to download"),
    skip_tls: bool = typer.Option(False, "--skip-tls", help="Skip SSL/TLS verification (not recommended)"),
    verbose: Optional[int] = typer.Option(None, "-v", "--verbose", help="Log verbosity (overrides ODO_LOG_LEVEL)"),
    debug: bool = typer.Option(False, "--debug", help="Show diagnostic output on failure"),
):
    """
    Bootstrap a new component in the current directory.

    Without flags an interactive wizard runs: it looks at the files in the
    current directory, proposes a matching devfile from the registry (or
    asks for a language and project type), optionally downloads a starter
    project and writes devfile.yaml. Existing files are never modified.

    Examples:
        odo init
        odo init --name my-go-app --devfile go
        odo init --name my-go-app --devfile go --starter go-starter
        odo init --name my-app --devfile-path ./devfile.yaml
        odo init --name my-app --devfile nodejs --devfile-registry DefaultDevfileRegistry
    """
    setup_logging(verbose if verbose is not None else level_from_env())

    interactive = not any((name, devfile, devfile_path, starter))
    if not interactive and not name:
        _fail("Invalid Flags", "--name is required when --devfile, --devfile-path or --starter is used")
        raise typer.Exit(1)

    try:
        registries = Preferences.load().select(devfile_registry)
    except InitError as e:
        _fail(e.title, str(e), debug)
        raise typer.Exit(1)

    terminal = RichConsole(console)
    if interactive and sys.stdin.isatty() and console.is_terminal:
        prompter: Prompter = ArrowPrompter(terminal)
    else:
        prompter = Prompter(terminal)

    catalog = build_registry(registries, skip_tls=skip_tls)
    wizard = Wizard(terminal, catalog, Path.cwd(), prompter)
    try:
        if interactive:
            wizard.run()
        else:
            wizard.run_non_interactive(name, devfile=devfile, devfile_path=devfile_path, starter=starter)
    except KeyboardInterrupt:
        console.print("\n[yellow]Selection cancelled[/yellow]")
        raise typer.Exit(1)
    except InputClosed as e:
        console.print(f"\n[yellow]{escape(str(e))}[/yellow]")
        raise typer.Exit(1)
    except WriteError as e:
        _fail(e.title, str(e), debug)
        if e.result and e.result.written:
            console.print("[yellow]Files written before the failure:[/yellow]")
            for path in e.result.written:
                console.print(f"  - {escape(path)}")
        raise typer.Exit(1)
    except InitError as e:
        _fail(e.title, str(e), debug)
        raise typer.Exit(1)
    except OSError as e:
        _fail("I/O Error", str(e), debug)
        raise typer.Exit(1)
    finally:
        catalog.close()


@app.command("registry")
def registry_list(
    filter_text: Optional[str] = typer.Option(None, "--filter", help="Only show devfiles whose name, language or project type contains this text"),
    devfile_registry: Optional[str] = typer.Option(None, "--devfile-registry", help="Only list devfiles from this registry"),
    details: bool = typer.Option(False, "--details", help="Show language, project type and starter projects"),
    skip_tls: bool = typer.Option(False, "--skip-tls", help="Skip SSL/TLS verification (not recommended)"),
):
    """List the devfiles available in the configured registries."""
    setup_logging(level_from_env())
    try:
        catalog = build_registry(Preferences.load().select(devfile_registry), skip_tls=skip_tls)
    except InitError as e:
        _fail(e.title, str(e))
        raise typer.Exit(1)

    try:
        entries = catalog.list_templates()
    except InitError as e:
        _fail(e.title, str(e))
        raise typer.Exit(1)
    finally:
        catalog.close()

    if filter_text:
        needle = filter_text.lower()
        entries = [
            e for e in entries
            if needle in e.name.lower() or needle in e.language.lower() or needle in e.project_type.lower()
        ]
    if not entries:
        console.print("[yellow]No devfile matches the given filter[/yellow]")
        raise typer.Exit(1)

    table = Table(title="Devfiles", border_style="cyan")
    table.add_column("NAME", style="cyan")
    table.add_column("REGISTRY")
    if details:
        table.add_column("LANGUAGE")
        table.add_column("PROJECT TYPE")
        table.add_column("STARTER PROJECTS")
    else:
        table.add_column("DESCRIPTION")
    for entry in entries:
        if details:
            table.add_row(entry.name, entry.registry, entry.language, entry.project_type, ", ".join(entry.starters))
        else:
            table.add_row(entry.name, entry.registry, entry.description)
    console.print(table)


def main():
    app()


if __name__ == "__main__":
    main()

"""Typer CLI application for scaffoldkit."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from typer import Argument, Exit, Option, Typer

import scaffoldkit
from scaffoldkit.cli._prompts import TerminalChannel
from scaffoldkit.core import (
    FileOutcome,
    HookPhase,
    MaterializedFile,
    MergeMode,
    ScaffoldError,
    generate,
    open_template,
    parse_overrides,
)

app = Typer(add_completion=False, context_settings={"help_option_names": ["-h", "--help"]})
_console = Console()

_RULE = "[yellow]" + "-" * 53 + "[/]"


def _version_callback(value: bool) -> None:
    if value:
        _console.print(f"scaffoldkit {scaffoldkit.__version__}")
        raise Exit()


@app.callback()
def main(
    version: Annotated[
        bool,
        Option(
            "--version",
            help="Show the version and exit.",
            callback=_version_callback,
            is_eager=True,
            expose_value=False,
        ),
    ] = False,
) -> None:
    """scaffoldkit: generate projects from parameterized templates."""


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _print_file(record: MaterializedFile) -> None:
    style = record.outcome.style
    suffix = "" if record.outcome is FileOutcome.CREATED else f" [dim]({record.outcome.value})[/]"
    _console.print(f"[dim]│[/]  [{style}]{escape(str(record.path))}[/]{suffix}")


def _print_hook(phase: HookPhase, command: str) -> None:
    _console.print(f"[dim]│[/]  [magenta]✨ {escape(command)}[/] [dim]({phase.value})[/]")


def _merge_mode(force: bool, append: bool) -> MergeMode:
    if force:
        return MergeMode.FORCE
    if append:
        return MergeMode.APPEND
    return MergeMode.CREATE


@app.command()
def create(
    template: Annotated[
        str, Argument(help="Template directory, or git repository URL to clone it from")
    ],
    name: Annotated[
        str | None,
        Option("--name", "-n", help="Project name (skips the prompt asking for it)"),
    ] = None,
    target_dir: Annotated[
        Path | None,
        Option(
            "--target-directory",
            "-d",
            help="Where to generate the project. Defaults to ./<name>.",
            show_default=False,
        ),
    ] = None,
    params: Annotated[
        list[str] | None,
        Option("--param", "-p", help="Parameter value as NAME=VALUE. Repeatable."),
    ] = None,
    force: Annotated[
        bool, Option("--force", "-f", help="Overwrite files in an existing target directory")
    ] = False,
    append: Annotated[
        bool,
        Option(
            "--append",
            "-a",
            help="Add files to an existing target directory without overwriting any",
        ),
    ] = False,
    git_ref: Annotated[
        str | None,
        Option("--git-ref", "-t", help="Commit, tag or branch to check out after cloning"),
    ] = None,
    subpath: Annotated[
        str | None,
        Option("--path", "-r", help="Template location inside the repository"),
    ] = None,
    interactive: Annotated[
        bool,
        Option(
            "--interactive/--no-input",
            help="Prompt for missing values, or use defaults and fail on required ones.",
        ),
    ] = True,
    verbose: Annotated[bool, Option("--verbose", "-v", help="Log engine decisions")] = False,
) -> None:
    """Generate a new project from a template."""
    _configure_logging(verbose)

    if force and append:
        _console.print("[bold red]Error:[/] --force and --append cannot be used together.")
        raise Exit(code=2)
    mode = _merge_mode(force, append)

    # Header
    _console.print()
    _console.print(f"[bold cyan]●[/]  scaffoldkit v{scaffoldkit.__version__}")
    _console.print("[dim]│[/]")

    channel = TerminalChannel(_console) if interactive else None
    try:
        overrides = parse_overrides(params or [])
        with open_template(template, git_ref, subpath) as template_root:
            result = generate(
                template_root,
                target_dir,
                project_name=name,
                overrides=overrides,
                channel=channel,
                mode=mode,
                on_progress=_print_file,
                on_hook=_print_hook,
            )
    except (ScaffoldError, OSError) as exc:
        _console.print(f"[bold red]Error:[/] {escape(str(exc))}")
        raise Exit(code=1) from None

    project = result.context.project_name
    _console.print("[dim]│[/]")
    _console.print(
        f"[bold cyan]●[/]  Done! Your project [bold green]{escape(project)}[/] "
        f"has been generated in {escape(str(result.target_dir))}"
    )

    if result.notes:
        _console.print()
        _console.print(_RULE)
        _console.print()
        _console.print(escape(result.notes), highlight=False)
        _console.print()
        _console.print(_RULE)
    _console.print()

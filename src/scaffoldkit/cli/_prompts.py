"""Clack-style interactive prompts using Rich + simple-term-menu."""

from __future__ import annotations

import sys
from collections.abc import Sequence

from rich.console import Console
from rich.markup import escape
from simple_term_menu import TerminalMenu

_console = Console()


def _print_bar() -> None:
    _console.print("[dim]│[/]")


def _clear_lines(n: int) -> None:
    """Move cursor up *n* lines and clear to end of screen."""
    sys.stdout.write(f"\033[{n}A\033[J")
    sys.stdout.flush()


class TerminalChannel:
    """Prompt channel backed by the real terminal."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or _console

    def ask(self, prompt: str) -> str:
        """Display a clack-style free text prompt."""
        self.console.print(f"[bold cyan]◆[/]  {escape(prompt)}")
        self.console.print("[dim]│[/]  ", end="")
        answer = input()

        # Overwrite the ◆ question + │ input line
        _clear_lines(2)

        self.console.print(f"[bold green]◇[/]  {escape(prompt)}")
        self.console.print(f"[dim]│[/]  {escape(answer)}")
        _print_bar()
        return answer

    def choose(
        self, prompt: str, options: Sequence[str], multiple: bool, preselected: Sequence[str]
    ) -> list[str]:
        """Display a clack-style selection prompt and return the chosen labels."""
        self.console.print(f"[bold cyan]◆[/]  {escape(prompt)}")
        _print_bar()

        cursor_index = options.index(preselected[0]) if preselected else 0
        menu = TerminalMenu(
            list(options),
            cursor_index=cursor_index,
            multi_select=multiple,
            multi_select_select_on_accept=False,
            multi_select_empty_ok=True,
            preselected_entries=list(preselected) if multiple else None,
            show_multi_select_hint=multiple,
            menu_cursor="│  ● ",
            menu_cursor_style=("fg_cyan", "bold"),
            menu_highlight_style=("fg_cyan",),
        )
        raw = menu.show()

        if raw is None and not multiple:
            raise SystemExit(1)

        if raw is None:
            indices: list[int] = []
        elif isinstance(raw, tuple):
            indices = [int(i) for i in raw]
        else:
            indices = [int(raw)]

        # Overwrite the ◆ question + │ bar that stayed on screen
        _clear_lines(2)

        self.console.print(f"[bold green]◇[/]  {escape(prompt)}")
        for i, label in enumerate(options):
            if i in indices:
                self.console.print(f"[dim]│[/]  [bold green]●[/] {escape(label)}")
            else:
                self.console.print(f"[dim]│[/]    [dim s]{escape(label)}[/]")
        _print_bar()

        return [options[i] for i in indices]

    def notify(self, message: str) -> None:
        self.console.print(f"[bold yellow]▲[/]  {escape(message)}")
        _print_bar()

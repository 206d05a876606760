"""Lifecycle hook execution."""

from __future__ import annotations

import logging
import shlex
import subprocess
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import Path

from scaffoldkit.core.errors import HookError
from scaffoldkit.core.types import HookPhase

logger = logging.getLogger(__name__)

COMMAND_NOT_FOUND = 127
COMMAND_NOT_EXECUTABLE = 126


@dataclass(frozen=True)
class HookInvocation:
    """A finished hook command and its exit status."""

    command: str
    phase: HookPhase
    cwd: Path
    exit_code: int


def split_command(command: str) -> list[str]:
    """Split a hook command line into an argument vector using POSIX shell-word rules."""
    argv = shlex.split(command)
    if not argv:
        raise ValueError("command argument is invalid: empty after splitting")
    return argv


def run_command(command: str, cwd: Path) -> int:
    """Run one command without a shell, streaming its output, and return its exit status."""
    argv = split_command(command)
    if not Path(cwd).is_dir():
        raise NotADirectoryError(f"hook working directory '{cwd}' does not exist")
    try:
        completed = subprocess.run(argv, cwd=str(cwd), check=False)
    except FileNotFoundError:
        logger.debug("Command not found: %s", argv[0])
        return COMMAND_NOT_FOUND
    except PermissionError:
        logger.debug("Command not executable: %s", argv[0])
        return COMMAND_NOT_EXECUTABLE
    return completed.returncode


def run_hooks(
    phase: HookPhase,
    commands: Sequence[str],
    cwd: Path,
    on_start: Callable[[str], None] | None = None,
) -> list[HookInvocation]:
    """
    Run *commands* in order inside *cwd*, stopping at the first failure.

    Args:
        phase: Which lifecycle phase the commands belong to.
        commands: Command lines, run one after another.
        cwd: Working directory, the generated project root.
        on_start: Called with each command line right before it runs.

    Returns:
        One invocation record per command, all successful.

    Raises:
        HookError: When a command exits with a non-zero status. Later commands
            of the phase are not run.
    """
    invocations: list[HookInvocation] = []
    for command in commands:
        if on_start is not None:
            on_start(command)
        logger.debug("Running %s hook in %s: %s", phase.value, cwd, command)
        exit_code = run_command(command, cwd)
        if exit_code != 0:
            raise HookError(phase.value, command, exit_code)
        invocations.append(HookInvocation(command, phase, Path(cwd), exit_code))
    return invocations

"""Tests for scaffoldkit.core.hooks: ordered, fail-fast command execution."""

from pathlib import Path

import pytest

from scaffoldkit.core.errors import HookError
from scaffoldkit.core.hooks import (
    COMMAND_NOT_FOUND,
    run_command,
    run_hooks,
    split_command,
)
from scaffoldkit.core.types import HookPhase


class TestSplitCommand:
    def test_shell_words(self):
        assert split_command("sh -c 'echo hi > out.txt'") == ["sh", "-c", "echo hi > out.txt"]

    def test_empty(self):
        with pytest.raises(ValueError, match="empty"):
            split_command("   ")


class TestRunCommand:
    def test_runs_in_cwd(self, tmp_path: Path):
        assert run_command("touch created.txt", tmp_path) == 0
        assert (tmp_path / "created.txt").exists()

    def test_exit_status(self, tmp_path: Path):
        assert run_command("sh -c 'exit 3'", tmp_path) == 3

    def test_missing_executable(self, tmp_path: Path):
        assert run_command("definitely-not-a-real-command-xyz", tmp_path) == COMMAND_NOT_FOUND

    def test_missing_working_directory(self, tmp_path: Path):
        with pytest.raises(NotADirectoryError, match="does not exist"):
            run_command("true", tmp_path / "gone")


class TestRunHooks:
    def test_in_order(self, tmp_path: Path):
        commands = [
            "sh -c 'echo one >> log.txt'",
            "sh -c 'echo two >> log.txt'",
        ]
        invocations = run_hooks(HookPhase.POST, commands, tmp_path)
        assert (tmp_path / "log.txt").read_text() == "one\ntwo\n"
        assert [i.command for i in invocations] == commands
        assert all(i.exit_code == 0 and i.phase is HookPhase.POST for i in invocations)
        assert all(i.cwd == tmp_path for i in invocations)

    def test_stops_at_first_failure(self, tmp_path: Path):
        commands = ["touch first", "sh -c 'exit 4'", "touch third"]
        with pytest.raises(HookError) as info:
            run_hooks(HookPhase.PRE, commands, tmp_path)
        assert info.value.phase == "pre"
        assert info.value.command == "sh -c 'exit 4'"
        assert info.value.exit_code == 4
        assert (tmp_path / "first").exists()
        assert not (tmp_path / "third").exists()

    def test_missing_executable_is_hook_error(self, tmp_path: Path):
        with pytest.raises(HookError) as info:
            run_hooks(HookPhase.POST, ["no-such-binary-for-hooks"], tmp_path)
        assert info.value.exit_code == COMMAND_NOT_FOUND

    def test_on_start_callback(self, tmp_path: Path):
        seen: list[str] = []
        run_hooks(HookPhase.PRE, ["true", "true"], tmp_path, on_start=seen.append)
        assert seen == ["true", "true"]

    def test_no_commands(self, tmp_path: Path):
        assert run_hooks(HookPhase.PRE, [], tmp_path) == []

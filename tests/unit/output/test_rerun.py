"""
shellfix — unit tests for output capture

File: tests/unit/output/test_rerun.py

Purpose
- Validate shell resolution, slow-command detection, output merging, and the
  timeout-bounded re-run.
"""

from __future__ import annotations

import asyncio
import os
import time

import psutil
import pytest

from shellfix.config.settings import Settings
from shellfix.output.rerun import (
    capture_command,
    get_output,
    is_slow_command,
    kill_process_tree,
    merge_output,
    resolve_shell,
    resolve_shell_argv,
    shell_arguments,
)

pytestmark = [pytest.mark.unit]


def _sh_env(**extra: str) -> dict[str, str]:
    return {"SHELL": "/bin/sh", "PATH": os.environ.get("PATH", "/usr/bin:/bin"), **extra}


class TestShellResolution:
    def test_tf_shell_wins_over_shell(self) -> None:
        assert resolve_shell({"TF_SHELL": "zsh", "SHELL": "/bin/bash"}) == "zsh"
        assert resolve_shell({"SHELL": "/bin/bash"}) == "/bin/bash"
        assert resolve_shell({}) == "/bin/sh"

    @pytest.mark.parametrize(
        ("shell", "expected"),
        [
            ("/usr/bin/fish", ("-c",)),
            ("pwsh", ("-NoProfile", "-NonInteractive", "-Command")),
            ("C:\\Windows\\System32\\WindowsPowerShell\\v1.0\\powershell.exe", ("-NoProfile", "-NonInteractive", "-Command")),
            ("cmd.exe", ("/C",)),
        ],
    )
    def test_shell_arguments(self, shell: str, expected: tuple[str, ...]) -> None:
        assert shell_arguments(shell) == expected

    def test_resolve_shell_argv(self) -> None:
        assert resolve_shell_argv("ls -la", environ={"SHELL": "/bin/bash"}) == [
            "/bin/bash",
            "-c",
            "ls -la",
        ]


class TestSlowCommands:
    @pytest.mark.parametrize(
        "script",
        ["gradle build", "./gradlew test", "sudo vagrant up", "env lein run", "Gradle"],
    )
    def test_detects_slow_commands(self, script: str) -> None:
        assert is_slow_command(script, ("lein", "gradle", "./gradlew", "vagrant"))

    @pytest.mark.parametrize("script", ["gradlefoo", "ls gradle", "vagrantfile"])
    def test_requires_word_boundary_at_start(self, script: str) -> None:
        assert not is_slow_command(script, ("gradle", "vagrant"))


class TestMergeOutput:
    def test_stderr_comes_first(self) -> None:
        assert merge_output("error\n", "out\n") == "error\nout\n"

    def test_separator_added_when_stderr_lacks_newline(self) -> None:
        assert merge_output("error", "out") == "error\nout"

    def test_single_stream(self) -> None:
        assert merge_output("", "out") == "out"
        assert merge_output("err", "") == "err"


class TestGetOutput:
    async def test_captures_both_streams(self) -> None:
        output = await get_output("echo out; echo err 1>&2; exit 1", 5, env=_sh_env())

        assert output == "err\nout\n"

    async def test_timeout_kills_and_keeps_partial_output(self) -> None:
        started = time.monotonic()

        output = await get_output("echo started; sleep 10", 0.3, env=_sh_env())

        assert "started" in output
        assert time.monotonic() - started < 5

    async def test_stdin_is_not_inherited(self) -> None:
        output = await get_output("cat; echo done", 5, env=_sh_env())

        assert output == "done\n"


def test_capture_command_applies_settings_env() -> None:
    settings = Settings(env={"SHELLFIX_CAPTURE_VALUE": "hello"}, wait_command=5)

    command = capture_command('echo "$SHELLFIX_CAPTURE_VALUE"', settings, environ=_sh_env())

    assert command.script == 'echo "$SHELLFIX_CAPTURE_VALUE"'
    assert command.output == "hello\n"


def test_capture_command_missing_shell_yields_empty_output() -> None:
    settings = Settings(wait_command=1)

    command = capture_command("ls", settings, environ={"SHELL": "/nonexistent/shell"})

    assert command.output == ""


class TestKillProcessTree:
    async def test_kills_shell_and_children(self) -> None:
        process = await asyncio.create_subprocess_exec(
            "/bin/sh", "-c", "sleep 30 & sleep 30; wait"
        )
        await asyncio.sleep(0.2)
        children = psutil.Process(process.pid).children(recursive=True)

        kill_process_tree(process.pid)
        await process.wait()

        _, alive = psutil.wait_procs(children, timeout=5)
        assert alive == []

    def test_missing_process_is_ignored(self) -> None:
        process = psutil.Popen(["/bin/sh", "-c", "exit 0"])
        process.wait()

        kill_process_tree(process.pid)

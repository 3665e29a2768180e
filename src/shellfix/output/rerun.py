"""
shellfix — output capture.

File: src/shellfix/output/rerun.py

Purpose
- Re-run the failed script through the user's shell and capture what it
  printed, so rules can inspect the error text.

Functional requirements
- The run is bounded by ``wait_command`` or, for slow commands,
  ``wait_slow_command`` seconds; on timeout the shell and everything it started
  are killed and the output produced so far is kept.
- Captured output is stderr first, then stdout.
"""

from __future__ import annotations

import asyncio
import logging
import os
from contextlib import suppress
from typing import TYPE_CHECKING, Final

import psutil

from shellfix.constants import ENV_SHELL
from shellfix.core.command import Command
from shellfix.utils.concurrency import run_with_timeout

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from shellfix.config.settings import Settings

logger = logging.getLogger(__name__)

DEFAULT_SHELL: Final[str] = "/bin/sh"
SLOW_COMMAND_PREFIXES: Final[tuple[str, ...]] = ("sudo ", "sudo -e ", "env ", "time ")
_READ_CHUNK: Final[int] = 4096
_DRAIN_GRACE_SECONDS: Final[float] = 0.5
_WORD_BOUNDARY_CHARS: Final[tuple[str, ...]] = (" ", "\t", "-")


def resolve_shell(environ: Mapping[str, str] | None = None) -> str:
    env_map = os.environ if environ is None else environ
    for name in (ENV_SHELL, "SHELL"):
        value = env_map.get(name, "").strip()
        if value:
            return value
    return DEFAULT_SHELL


def shell_arguments(shell: str) -> tuple[str, ...]:
    basename = shell.replace("\\", "/").rsplit("/", 1)[-1].lower()
    if basename.endswith(".exe"):
        basename = basename[: -len(".exe")]
    if basename in {"powershell", "pwsh"}:
        return ("-NoProfile", "-NonInteractive", "-Command")
    if basename == "cmd":
        return ("/C",)
    return ("-c",)


def resolve_shell_argv(script: str, *, environ: Mapping[str, str] | None = None) -> list[str]:
    """Return the argv that runs ``script`` through the resolved shell."""

    shell = resolve_shell(environ)
    return [shell, *shell_arguments(shell), script]


def is_slow_command(script: str, slow_commands: Iterable[str]) -> bool:
    lowered = script.lower()
    candidates = [lowered]
    candidates.extend(
        lowered[len(prefix) :] for prefix in SLOW_COMMAND_PREFIXES if lowered.startswith(prefix)
    )
    for slow in slow_commands:
        slow_lower = slow.lower()
        for candidate in candidates:
            if not candidate.startswith(slow_lower):
                continue
            remaining = candidate[len(slow_lower) :]
            if not remaining or remaining.startswith(_WORD_BOUNDARY_CHARS):
                return True
    return False


async def get_output(
    script: str,
    timeout: float,
    *,
    env: Mapping[str, str] | None = None,
) -> str:
    """Run ``script`` and return its merged output, killing it after ``timeout``."""

    run_env = dict(os.environ if env is None else env)
    argv = resolve_shell_argv(script, environ=run_env)
    logger.debug("capturing output of %r via %s", script, argv[0])

    process = await asyncio.create_subprocess_exec(
        *argv,
        stdin=asyncio.subprocess.DEVNULL,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
        env=run_env,
    )
    stdout_buffer = bytearray()
    stderr_buffer = bytearray()
    readers = [
        asyncio.create_task(_drain(process.stdout, stdout_buffer)),
        asyncio.create_task(_drain(process.stderr, stderr_buffer)),
    ]

    try:
        await run_with_timeout(process.wait(), timeout)
    except TimeoutError:
        logger.debug("command %r timed out after %ss, killing it", script, timeout)
        kill_process_tree(process.pid)
        await process.wait()

    _, pending = await asyncio.wait(readers, timeout=_DRAIN_GRACE_SECONDS)
    for task in pending:
        task.cancel()
    if pending:
        await asyncio.gather(*pending, return_exceptions=True)

    return merge_output(
        stderr_buffer.decode("utf-8", errors="replace"),
        stdout_buffer.decode("utf-8", errors="replace"),
    )


def merge_output(stderr: str, stdout: str) -> str:
    if not stdout:
        return stderr
    if not stderr:
        return stdout
    separator = "" if stderr.endswith("\n") else "\n"
    return f"{stderr}{separator}{stdout}"


def kill_process_tree(pid: int) -> None:
    """Kill ``pid`` and every descendant, children first."""

    try:
        root = psutil.Process(pid)
        victims = [*root.children(recursive=True), root]
    except psutil.NoSuchProcess:
        return
    for victim in victims:
        with suppress(psutil.NoSuchProcess):
            victim.kill()


def capture_command(
    script: str,
    settings: Settings,
    *,
    environ: Mapping[str, str] | None = None,
) -> Command:
    """Re-run ``script`` with the configured timeout and build a ``Command``."""

    timeout = (
        settings.wait_slow_command
        if is_slow_command(script, settings.slow_commands)
        else settings.wait_command
    )
    run_env = dict(os.environ if environ is None else environ)
    run_env.update(settings.env)
    try:
        output = asyncio.run(get_output(script, timeout, env=run_env))
    except OSError as exc:
        logger.warning("unable to re-run %r: %s", script, exc)
        output = ""
    return Command(script=script, output=output)


async def _drain(stream: asyncio.StreamReader | None, sink: bytearray) -> None:
    if stream is None:
        return
    while chunk := await stream.read(_READ_CHUNK):
        sink.extend(chunk)


__all__ = [
    "DEFAULT_SHELL",
    "capture_command",
    "get_output",
    "is_slow_command",
    "kill_process_tree",
    "merge_output",
    "resolve_shell",
    "resolve_shell_argv",
    "shell_arguments",
]

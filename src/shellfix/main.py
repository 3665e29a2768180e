"""
shellfix — process entrypoint.

File: src/shellfix/main.py

Purpose
- Own the exit-code contract the shell function relies on and turn any
  exception escaping the CLI into one of those codes.

Functional requirements
- The first exception in the cause/context chain that has a dedicated code
  decides the exit code; anything else is an internal error.
- Internal errors print a traceback; expected failures print one line.
"""

from __future__ import annotations

import sys
import traceback
from enum import IntEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence


class ExitCode(IntEnum):
    """Exit codes of the ``shellfix`` process."""

    SUCCESS = 0
    COMMAND_FAILED = 1
    CONFIG_ERROR = 2
    NO_CORRECTION = 3
    INTERNAL_ERROR = 4


def cli_entrypoint(argv: Sequence[str] | None = None) -> int:
    """Run the CLI and return a process exit code; used by the console script."""

    try:
        from shellfix.ui.cli import run_cli

        return _coerce_exit_code(run_cli(argv))
    except SystemExit as exc:
        return _coerce_exit_code(exc.code)
    except BaseException as exc:  # noqa: BLE001 - last line before the shell.
        code = exit_code_for(exc)
        _report(exc, code)
        return int(code)


def exit_code_for(exc: BaseException) -> ExitCode:
    from shellfix.config import ConfigLoadError, ConfigValidationError
    from shellfix.core.command import EmptyCommandError
    from shellfix.core.corrected import CommandExecutionError

    routes: tuple[tuple[tuple[type[BaseException], ...], ExitCode], ...] = (
        ((ConfigLoadError, ConfigValidationError), ExitCode.CONFIG_ERROR),
        ((CommandExecutionError,), ExitCode.COMMAND_FAILED),
        ((EmptyCommandError, KeyboardInterrupt), ExitCode.NO_CORRECTION),
    )
    for link in _causes(exc):
        for types, code in routes:
            if isinstance(link, types):
                return code
    return ExitCode.INTERNAL_ERROR


def _causes(exc: BaseException) -> Iterator[BaseException]:
    """Yield ``exc`` and the exceptions it was raised from or during."""

    visited: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in visited:
        visited.add(id(current))
        yield current
        if current.__cause__ is not None:
            current = current.__cause__
        elif not current.__suppress_context__:
            current = current.__context__
        else:
            current = None


def _coerce_exit_code(value: object) -> int:
    if value is None:
        return int(ExitCode.SUCCESS)
    if isinstance(value, int) and any(value == code for code in ExitCode):
        return value
    # sys.exit("message") ends up here.
    if isinstance(value, str) and value.strip():
        print(value.strip(), file=sys.stderr)
    return int(ExitCode.INTERNAL_ERROR)


def _report(exc: BaseException, code: ExitCode) -> None:
    if code is ExitCode.INTERNAL_ERROR:
        traceback.print_exception(exc, file=sys.stderr)
        return
    message = str(exc).strip() or type(exc).__name__
    print(f"shellfix: {message}", file=sys.stderr)


__all__ = ["ExitCode", "cli_entrypoint", "exit_code_for"]

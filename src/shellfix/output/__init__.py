"""Output capture exports."""

from shellfix.output.rerun import (
    capture_command,
    get_output,
    is_slow_command,
    resolve_shell,
    resolve_shell_argv,
)

__all__ = [
    "capture_command",
    "get_output",
    "is_slow_command",
    "resolve_shell",
    "resolve_shell_argv",
]

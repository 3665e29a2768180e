"""Prefix commands that failed on a permission error with ``sudo``."""

from __future__ import annotations

from typing import TYPE_CHECKING, Final

from shellfix.core.rule import Rule, register_builtin_rule

if TYPE_CHECKING:
    from collections.abc import Sequence

    from shellfix.core.command import Command

PERMISSION_PATTERNS: Final[tuple[str, ...]] = (
    "Permission denied",
    "EACCES",
    "permission denied",
    "Operation not permitted",
    "you cannot perform this operation unless you are root",
    "must be root",
    "need to be root",
    "needs to be run as root",
    "requires superuser privileges",
    "requires root",
    "Access denied",
    "access denied",
    "must have root privileges",
    "This operation requires root",
    "Unable to write",
    "Cannot open",
    "Read-only file system",
    "only root can",
    "must be superuser",
    "you need root privileges",
    "insufficient permissions",
    "are you root?",
    "Please run as root",
    "not allowed to perform this operation",
)

# Programs that already elevate or switch users.
ELEVATING_COMMANDS: Final[frozenset[str]] = frozenset({"sudo", "su", "pkexec", "doas", "runas"})


@register_builtin_rule()
class SudoRule(Rule):
    name = "sudo"
    priority = 50

    def is_match(self, command: Command) -> bool:
        if command.parts and command.app_name.lower() in ELEVATING_COMMANDS:
            return False
        return any(pattern in command.output for pattern in PERMISSION_PATTERNS)

    def get_new_command(self, command: Command) -> Sequence[str]:
        # Keep the caller's environment when the script expands variables.
        if "$" in command.script:
            return [f"sudo -E {command.script}"]
        return [f"sudo {command.script}"]


__all__ = ["ELEVATING_COMMANDS", "PERMISSION_PATTERNS", "SudoRule"]

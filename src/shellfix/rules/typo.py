"""Rules for mistyped program names and subcommands."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Final

from shellfix.core.rule import Rule, for_app, register_builtin_rule
from shellfix.utils.executables import program_exists
from shellfix.utils.fuzzy import get_close_matches

if TYPE_CHECKING:
    from collections.abc import Sequence

    from shellfix.core.command import Command

NOT_FOUND_PATTERNS: Final[tuple[str, ...]] = (
    "command not found",
    "not recognized",
    "not found",
    "unknown command",
)

PYTHON_ALTERNATIVES: Final[dict[str, tuple[str, ...]]] = {
    "python": ("python3", "python2"),
    "python3": ("python",),
    "python2": ("python3", "python"),
    "pip": ("pip3", "pip2"),
    "pip3": ("pip",),
    "pip2": ("pip3", "pip"),
}

SYSTEMCTL_COMMANDS: Final[tuple[str, ...]] = (
    "start",
    "stop",
    "restart",
    "reload",
    "status",
    "enable",
    "disable",
    "is-active",
    "is-enabled",
    "is-failed",
    "list-units",
    "list-unit-files",
    "list-sockets",
    "list-timers",
    "list-dependencies",
    "daemon-reload",
    "daemon-reexec",
    "show",
    "cat",
    "edit",
    "mask",
    "unmask",
    "link",
    "revert",
    "preset",
    "preset-all",
    "isolate",
    "kill",
    "clean",
    "freeze",
    "thaw",
    "set-property",
    "reset-failed",
    "poweroff",
    "reboot",
    "suspend",
    "hibernate",
    "hybrid-sleep",
    "suspend-then-hibernate",
)

SYSTEMCTL_ERRORS: Final[tuple[str, ...]] = (
    "unknown operation",
    "unknown command",
    "invalid",
    "not a valid",
    "unrecognized option",
    "failed to",
    "too few arguments",
    "requires at least",
)

_SL_PATTERN: Final[re.Pattern[str]] = re.compile(r"^sl(?=$|[ \t])")


def _reports_not_found(output: str, patterns: Sequence[str] = NOT_FOUND_PATTERNS) -> bool:
    lowered = output.lower()
    return any(pattern in lowered for pattern in patterns)


@register_builtin_rule()
class SlLsRule(Rule):
    """``sl`` -> ``ls``."""

    name = "sl_ls"
    priority = 100

    def is_match(self, command: Command) -> bool:
        return bool(_SL_PATTERN.match(command.script.strip())) and _reports_not_found(
            command.output
        )

    def get_new_command(self, command: Command) -> Sequence[str]:
        return [_SL_PATTERN.sub("ls", command.script.strip(), count=1)]


@register_builtin_rule(wrap=for_app(*PYTHON_ALTERNATIVES))
class PythonCommandRule(Rule):
    """Swap between python/pip versions that are actually installed."""

    name = "python_command"
    priority = 150

    def is_match(self, command: Command) -> bool:
        return command.parts[0] in PYTHON_ALTERNATIVES and _reports_not_found(
            command.output, (*NOT_FOUND_PATTERNS, "no such file or directory")
        )

    def get_new_command(self, command: Command) -> Sequence[str]:
        program = command.parts[0]
        rest = command.script.strip()[len(program) :]
        return [
            f"{alternative}{rest}"
            for alternative in PYTHON_ALTERNATIVES.get(program, ())
            if program_exists(alternative)
        ]


@register_builtin_rule(wrap=for_app("systemctl"))
class SystemctlRule(Rule):
    """Fix swapped ``systemctl <unit> <command>`` or a misspelled subcommand."""

    name = "systemctl"
    priority = 200

    def is_match(self, command: Command) -> bool:
        return _reports_not_found(command.output, SYSTEMCTL_ERRORS)

    def get_new_command(self, command: Command) -> Sequence[str]:
        parts = list(command.parts)
        if len(parts) < 2:
            return []
        if len(parts) >= 3 and parts[2] in SYSTEMCTL_COMMANDS:
            return [" ".join(["systemctl", parts[2], parts[1], *parts[3:]])]

        matches = get_close_matches(parts[1], SYSTEMCTL_COMMANDS, 3, 0.6)
        return [" ".join(["systemctl", match, *parts[2:]]) for match in matches]


__all__ = [
    "NOT_FOUND_PATTERNS",
    "PYTHON_ALTERNATIVES",
    "PythonCommandRule",
    "SYSTEMCTL_COMMANDS",
    "SlLsRule",
    "SystemctlRule",
]

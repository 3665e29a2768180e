"""
shellfix — unknown program rule.

File: src/shellfix/rules/no_command.py

Purpose
- When the shell reports an unknown program, suggest the closest program
  on ``PATH`` or in the recent shell history.

Functional requirements
- The unknown name is taken from the shell's error line when possible, else
  from the first token of the script.
- Shell names reported as the error source are never taken as the unknown name.
- The tool's own executables are never suggested.
"""

from __future__ import annotations

import os
import re
import shlex
from typing import TYPE_CHECKING, Final

from shellfix.constants import ENV_HISTORY, SELF_EXECUTABLES
from shellfix.core.rule import Rule, register_builtin_rule
from shellfix.utils.executables import get_all_executables
from shellfix.utils.fuzzy import get_close_matches

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from shellfix.core.command import Command

NOT_FOUND_PATTERNS: Final[tuple[str, ...]] = (
    "command not found",
    "not found",
    "not recognized",
    "is not recognized as an internal or external command",
    "not recognized as the name of a cmdlet",
    "is not recognized",
    "unknown command",
    "couldn't find",
    "could not find",
    "not an operable program",
    "is not a recognized",
    "is not operable",
)

_UNKNOWN_NAME_PATTERNS: Final[tuple[re.Pattern[str], ...]] = (
    re.compile(r"^(?:\S+: )?(?:line \d+: )?([^:\s]+): command not found"),
    re.compile(r"^\S+: \d+: ([^:\s]+): not found"),
    re.compile(r"command not found: ([^\s]+)"),
    re.compile(r"Unknown command[:\s]+([^\s]+)"),
    re.compile(r"'([^']+)' is not recognized"),
    re.compile(r"The term '([^']+)' is not recognized"),
    re.compile(r"^([^:\s]+):.*(not found|not recognized)"),
)

SHELL_NAMES: Final[frozenset[str]] = frozenset(
    {"bash", "zsh", "fish", "sh", "powershell", "pwsh", "cmd"}
)


def extract_unknown_name(output: str) -> str | None:
    """Return the program name the shell complained about, if any."""

    for pattern in _UNKNOWN_NAME_PATTERNS:
        for line in output.splitlines():
            match = pattern.search(line)
            if match is None:
                continue
            name = match.group(1).strip()
            if name and name not in SHELL_NAMES:
                return name
    return None


def history_programs(environ: Mapping[str, str] | None = None) -> list[str]:
    """First words of the history lines exported by the shell function, deduplicated."""

    env_map = os.environ if environ is None else environ
    seen: set[str] = set()
    programs: list[str] = []
    for line in env_map.get(ENV_HISTORY, "").splitlines():
        words = line.split()
        if not words:
            continue
        program = words[0]
        if program in SELF_EXECUTABLES or program in seen:
            continue
        seen.add(program)
        programs.append(program)
    return programs


@register_builtin_rule()
class NoCommandRule(Rule):
    name = "no_command"
    priority = 500

    def is_match(self, command: Command) -> bool:
        lowered = command.output.lower()
        return any(pattern in lowered for pattern in NOT_FOUND_PATTERNS)

    def get_new_command(self, command: Command) -> Sequence[str]:
        if not command.parts:
            return []
        broken = extract_unknown_name(command.output) or command.parts[0]

        candidates = list(get_all_executables())
        known = set(candidates)
        candidates.extend(program for program in history_programs() if program not in known)

        matches = get_close_matches(broken, candidates, 3, 0.6)
        rest = _rest_of_script(command)
        return [f"{match}{rest}" for match in matches]


def _rest_of_script(command: Command) -> str:
    script = command.script.strip()
    first = command.parts[0]
    if script.startswith(first):
        return script[len(first) :]
    if len(command.parts) == 1:
        return ""
    return " " + shlex.join(command.parts[1:])


__all__ = [
    "NOT_FOUND_PATTERNS",
    "NoCommandRule",
    "SHELL_NAMES",
    "extract_unknown_name",
    "history_programs",
]

"""
shellfix — ``cd`` rules.

File: src/shellfix/rules/cd.py

Purpose
- Repair the usual ways a change of directory goes wrong: a missing space
  (``cd..``), a missing directory, a misspelled directory, and ``cs``.

Functional requirements
- ``cd`` is a shell builtin, so matching looks at the script text rather than
  at the PATH.
"""

from __future__ import annotations

import logging
import shlex
from pathlib import Path, PurePath
from typing import TYPE_CHECKING, Final

from shellfix.core.rule import Rule, register_builtin_rule
from shellfix.utils.fuzzy import get_close_matches

if TYPE_CHECKING:
    from collections.abc import Sequence

    from shellfix.core.command import Command

logger = logging.getLogger(__name__)

MISSING_DIRECTORY_PATTERNS: Final[tuple[str, ...]] = (
    "no such file or directory",
    "not a directory",
    "does not exist",
    "cannot find path",
    "the system cannot find the path",
)


def _is_cd(command: Command) -> bool:
    script = command.script.strip()
    return script == "cd" or script.startswith("cd ")


def _reports_missing_directory(output: str) -> bool:
    lowered = output.lower()
    return any(pattern in lowered for pattern in MISSING_DIRECTORY_PATTERNS)


def list_directories(parent: Path) -> list[str]:
    """Return the sorted names of the subdirectories of ``parent``."""

    try:
        return sorted(entry.name for entry in parent.iterdir() if entry.is_dir())
    except OSError as exc:
        logger.debug("cannot list %s: %s", parent, exc)
        return []


@register_builtin_rule()
class CdParentRule(Rule):
    """``cd..`` -> ``cd ..``."""

    name = "cd_parent"
    priority = 100
    requires_output = False

    def is_match(self, command: Command) -> bool:
        script = command.script.strip()
        return script.startswith("cd") and script[2:].startswith(".")

    def get_new_command(self, command: Command) -> Sequence[str]:
        rest = command.script.strip()[2:]
        return [f"cd {rest.strip()}"]


@register_builtin_rule()
class CdMkdirRule(Rule):
    """Create the missing directory, then enter it."""

    name = "cd_mkdir"
    priority = 200

    def is_match(self, command: Command) -> bool:
        return _is_cd(command) and _reports_missing_directory(command.output)

    def get_new_command(self, command: Command) -> Sequence[str]:
        if len(command.parts) < 2:
            return []
        directory = shlex.quote(" ".join(command.parts[1:]))
        return [f"mkdir -p {directory} && cd {directory}"]


@register_builtin_rule()
class CdCorrectionRule(Rule):
    """Suggest the sibling directories closest to a misspelled one."""

    name = "cd_correction"
    priority = 300

    def is_match(self, command: Command) -> bool:
        return command.script.strip().startswith("cd ") and _reports_missing_directory(
            command.output
        )

    def get_new_command(self, command: Command) -> Sequence[str]:
        if len(command.parts) < 2:
            return []
        target = PurePath(command.parts[1])
        parent = target.parent
        search_in_cwd = str(parent) in {"", "."}
        search_dir = Path.cwd() if search_in_cwd else Path(parent)
        if not search_dir.is_dir():
            return []

        matches = get_close_matches(target.name, list_directories(search_dir), 3, 0.6)
        if search_in_cwd:
            return [f"cd {shlex.quote(match)}" for match in matches]
        return [f"cd {shlex.quote(str(parent / match))}" for match in matches]


@register_builtin_rule()
class CdCsRule(Rule):
    """``cs`` -> ``cd``."""

    name = "cd_cs"
    priority = 900
    requires_output = False

    def is_match(self, command: Command) -> bool:
        return bool(command.parts) and command.parts[0] == "cs"

    def get_new_command(self, command: Command) -> Sequence[str]:
        script = command.script.lstrip()
        if script.startswith("cs"):
            return [f"cd{script[2:]}"]
        return ["cd"]


__all__ = [
    "CdCorrectionRule",
    "CdCsRule",
    "CdMkdirRule",
    "CdParentRule",
    "MISSING_DIRECTORY_PATTERNS",
    "list_directories",
]

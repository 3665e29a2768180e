"""
shellfix — filesystem command rules.

File: src/shellfix/rules/system.py

Purpose
- Fix ``mkdir`` without ``-p``, ``rm`` on a directory, and ``unzip`` calls
  that spill an archive's entries into the current directory.

What should be included in this file
- ``dirty_unzip`` is the bundled rule with a side effect: once the corrected
  extraction succeeded, the stray files of the first extraction are removed.

Functional requirements
- The side effect never removes anything outside the current directory.
"""

from __future__ import annotations

import logging
import re
import shlex
import zipfile
from pathlib import Path
from typing import TYPE_CHECKING, Final

from shellfix.core.rule import Rule, for_app, register_builtin_rule

if TYPE_CHECKING:
    from collections.abc import Sequence

    from shellfix.core.command import Command

logger = logging.getLogger(__name__)

_MKDIR_PATTERN: Final[re.Pattern[str]] = re.compile(r"\bmkdir\s")
_RM_PATTERN: Final[re.Pattern[str]] = re.compile(r"\brm\s")


@register_builtin_rule(wrap=for_app("mkdir"))
class MkdirPRule(Rule):
    name = "mkdir_p"

    def is_match(self, command: Command) -> bool:
        return "No such file or directory" in command.output

    def get_new_command(self, command: Command) -> Sequence[str]:
        return [_MKDIR_PATTERN.sub("mkdir -p ", command.script, count=1)]


@register_builtin_rule(wrap=for_app("rm", "hdfs"))
class RmDirRule(Rule):
    name = "rm_dir"

    def is_match(self, command: Command) -> bool:
        return "is a directory" in command.output.lower()

    def get_new_command(self, command: Command) -> Sequence[str]:
        flags = "-r" if "hdfs" in command.script else "-rf"
        return [_RM_PATTERN.sub(f"rm {flags} ", command.script, count=1)]


def zip_file_argument(command: Command) -> str | None:
    """Return the archive named by an ``unzip`` command, adding ``.zip`` if missing."""

    for part in command.parts[1:]:
        if part.startswith("-"):
            continue
        return part if part.endswith(".zip") else f"{part}.zip"
    return None


def is_bad_zip(path: str) -> bool:
    """An archive is "dirty" when it has more than one top-level entry."""

    try:
        with zipfile.ZipFile(path) as archive:
            names = archive.namelist()
    except (OSError, zipfile.BadZipFile) as exc:
        logger.debug("cannot inspect %s: %s", path, exc)
        return False
    top_level = {name.split("/", 1)[0] for name in names if name}
    return len(top_level) > 1


@register_builtin_rule(wrap=for_app("unzip"))
class DirtyUnzipRule(Rule):
    """Extract into a directory named after the archive instead of the cwd."""

    name = "dirty_unzip"
    requires_output = False

    def is_match(self, command: Command) -> bool:
        if "-d" in command.parts:
            return False
        archive = zip_file_argument(command)
        return archive is not None and is_bad_zip(archive)

    def get_new_command(self, command: Command) -> Sequence[str]:
        archive = zip_file_argument(command)
        if archive is None:
            return []
        target = archive[: -len(".zip")]
        return [f"{command.script} -d {shlex.quote(target)}"]

    def side_effect(self, command: Command, new_script: str) -> None:
        archive = zip_file_argument(command)
        if archive is None:
            return
        cwd = Path.cwd().resolve()
        with zipfile.ZipFile(archive) as archive_file:
            names = archive_file.namelist()
        for name in names:
            path = (cwd / name).resolve()
            if not path.is_relative_to(cwd) or path == cwd:
                continue
            if path.is_file():
                try:
                    path.unlink()
                except OSError as exc:
                    logger.warning("could not remove %s: %s", path, exc)


__all__ = [
    "DirtyUnzipRule",
    "MkdirPRule",
    "RmDirRule",
    "is_bad_zip",
    "zip_file_argument",
]

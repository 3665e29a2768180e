"""
shellfix — failed command value type.

File: src/shellfix/core/command.py

Purpose
- Hold the script a user typed and the merged output it produced.

What should be included in this file
- Lazily tokenized, cached shell parts with a whitespace fallback.
- Derivation of a sibling command with a different script.

Functional requirements
- ``script`` and ``output`` never change after construction.
- A derived command never reuses the token cache of its source.
"""

from __future__ import annotations

import shlex
from dataclasses import dataclass, replace
from functools import cached_property
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence


class EmptyCommandError(ValueError):
    """Raised when a command is built from an empty argument vector."""


@dataclass(frozen=True)
class Command:
    """One failed invocation: the raw script and its captured output."""

    script: str
    output: str = ""

    @cached_property
    def parts(self) -> tuple[str, ...]:
        """Shell-lexical tokens of ``script``, computed once per instance."""

        try:
            return tuple(shlex.split(self.script, posix=True))
        except ValueError:
            return tuple(self.script.split())

    @property
    def app_name(self) -> str:
        if not self.parts:
            return ""
        # POSIX lexing drops the backslashes of a Windows path.
        try:
            first = shlex.split(self.script, posix=False)[0]
        except (ValueError, IndexError):
            return app_basename(self.parts[0])
        return app_basename(first.strip("\"'"))

    def with_script(self, script: str) -> Command:
        """Return a new command with ``script`` replaced and ``output`` kept."""

        return replace(self, script=script)

    @classmethod
    def from_raw_script(cls, raw_script: Sequence[str], output: str = "") -> Command:
        """Join an argument vector into a script, quoting only where required."""

        if not raw_script or not any(part.strip() for part in raw_script):
            raise EmptyCommandError("cannot build a command from an empty script")

        rendered: list[str] = []
        for part in raw_script:
            if any(char.isspace() for char in part) or "'" in part or '"' in part:
                rendered.append(shlex.quote(part))
            else:
                rendered.append(part)
        return cls(script=" ".join(rendered).strip(), output=output)


def app_basename(token: str) -> str:
    """Return the program name of ``token`` without directories or ``.exe``."""

    name = token.replace("\\", "/").rsplit("/", 1)[-1]
    if name.lower().endswith(".exe"):
        name = name[: -len(".exe")]
    return name


__all__ = ["Command", "EmptyCommandError", "app_basename"]

"""
shellfix — shell integration interface.

File: src/shellfix/shells/base.py

Purpose
- Describe what the tool needs from an interactive shell: the function that
  wires the alias, the recent history, the user's aliases, and how commands
  are chained.

Functional requirements
- History and aliases come from the variables the generated function exports
  (``TF_HISTORY``, ``TF_SHELL_ALIASES``); the tool never reads history files.
"""

from __future__ import annotations

import abc
import os
from typing import TYPE_CHECKING, Final

from shellfix.constants import ENV_HISTORY, ENV_SHELL_ALIASES

if TYPE_CHECKING:
    from collections.abc import Mapping

# Cursor jump plus matching backspaces; marks where the user's command starts in
# terminal output for instant mode.
USER_COMMAND_MARK: Final[str] = "\x1b[9999;H"
USER_COMMAND_MARK_ERASE: Final[str] = "\x08" * len(USER_COMMAND_MARK)


class Shell(abc.ABC):
    """One supported interactive shell."""

    name: str = ""
    and_separator: str = " && "
    or_separator: str = " || "

    @abc.abstractmethod
    def app_alias(
        self, alias_name: str, instant_mode: bool = False, alter_history: bool = True
    ) -> str:
        """Return the shell source that defines the ``alias_name`` function.

        With ``alter_history`` the function records the corrected command in
        the shell history.
        """

    def get_history(
        self,
        environ: Mapping[str, str] | None = None,
        history_limit: int | None = None,
    ) -> list[str]:
        """Return recent commands, oldest first."""

        env_map = os.environ if environ is None else environ
        lines = [
            self.script_from_history(line).strip()
            for line in env_map.get(ENV_HISTORY, "").splitlines()
        ]
        history = [line for line in lines if line]
        if history_limit is not None:
            history = history[-history_limit:] if history_limit > 0 else []
        return history

    def script_from_history(self, line: str) -> str:
        return line

    def get_aliases(self, environ: Mapping[str, str] | None = None) -> dict[str, str]:
        env_map = os.environ if environ is None else environ
        aliases: dict[str, str] = {}
        for line in env_map.get(ENV_SHELL_ALIASES, "").splitlines():
            parsed = self.parse_alias(line)
            if parsed is not None:
                aliases[parsed[0]] = parsed[1]
        return aliases

    def parse_alias(self, line: str) -> tuple[str, str] | None:
        """Parse ``alias name='value'`` (or ``name=value``) into a pair."""

        stripped = line.strip()
        if stripped.startswith("alias "):
            stripped = stripped[len("alias ") :]
        name, separator, value = stripped.partition("=")
        name = name.strip()
        if not separator or not name:
            return None
        value = value.strip()
        if len(value) >= 2 and value[0] == value[-1] and value[0] in {"'", '"'}:
            value = value[1:-1]
        return name, value

    def and_(self, *commands: str) -> str:
        return self.and_separator.join(commands)

    def or_(self, *commands: str) -> str:
        return self.or_separator.join(commands)

    def expand_aliases(self, script: str, aliases: Mapping[str, str]) -> str:
        """Replace a leading alias with its value."""

        first, _, rest = script.partition(" ")
        if first not in aliases:
            return script
        return f"{aliases[first]} {rest}".strip()

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


__all__ = ["Shell", "USER_COMMAND_MARK", "USER_COMMAND_MARK_ERASE"]

"""
shellfix — corrected command value type.

File: src/shellfix/core/corrected.py

Purpose
- Represent one candidate fix: the replacement script, its resolved priority,
  and the side effect of the rule that produced it.

What should be included in this file
- Total ordering by ``(priority, script)`` and script-only equality.
- Execution through the platform shell with inherited stdio.
- An explicit side-effect value bound to the originating rule and command.

Functional requirements
- A non-zero exit status is surfaced as ``CommandExecutionError``.
- The side effect runs only after a successful execution.
"""

from __future__ import annotations

import logging
import os
import subprocess
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from shellfix.output.rerun import resolve_shell_argv

if TYPE_CHECKING:
    from collections.abc import Mapping

    from shellfix.config.settings import Settings
    from shellfix.core.command import Command
    from shellfix.core.rule import Rule

logger = logging.getLogger(__name__)


class CommandExecutionError(RuntimeError):
    """Raised when a corrected command exits with a non-zero status."""

    def __init__(self, script: str, exit_code: int) -> None:
        self.script = script
        self.exit_code = exit_code
        super().__init__(f"command {script!r} exited with status {exit_code}")


@dataclass(frozen=True, slots=True)
class SideEffect:
    """Deferred call of ``rule.side_effect`` for the command that failed."""

    rule: Rule
    command: Command

    def __call__(self, new_script: str) -> None:
        logger.debug("running side effect of rule %s", self.rule.name)
        self.rule.side_effect(self.command, new_script)


@dataclass(frozen=True, slots=True, eq=False)
class CorrectedCommand:
    """One ranked candidate replacement for a failed command."""

    script: str
    priority: int
    side_effect: SideEffect | None = field(default=None, repr=False)

    def sort_key(self) -> tuple[int, str]:
        return (self.priority, self.script)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, CorrectedCommand):
            return NotImplemented
        return self.sort_key() < other.sort_key()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CorrectedCommand):
            return NotImplemented
        return self.script == other.script

    def __hash__(self) -> int:
        return hash(self.script)

    def run_side_effect(self) -> None:
        if self.side_effect is not None:
            self.side_effect(self.script)

    def run(
        self,
        original_command: Command,
        settings: Settings,
        *,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        """Execute the script with inherited stdio, then run the side effect."""

        base_env = dict(os.environ if environ is None else environ)
        base_env.update(settings.env)
        argv = resolve_shell_argv(self.script, environ=base_env)
        logger.debug("running %r for failed command %r", argv, original_command.script)

        completed = subprocess.run(argv, env=base_env, check=False)
        if completed.returncode != 0:
            raise CommandExecutionError(self.script, completed.returncode)
        self.run_side_effect()


__all__ = ["CommandExecutionError", "CorrectedCommand", "SideEffect"]

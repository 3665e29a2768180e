"""
shellfix — git ecosystem wrapper.

File: src/shellfix/rules/git/support.py

Purpose
- Scope a rule to ``git`` / ``hub`` and normalize the command first: when
  git traced an alias expansion, the inner rule sees the expanded script.

Functional requirements
- Alias expansion replaces the alias once, on a word boundary, and keeps the
  captured output.
- Every capability except ``is_match`` and ``get_new_command`` is forwarded
  unchanged to the wrapped rule.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Final

from shellfix.core.rule import Rule, is_app

if TYPE_CHECKING:
    from collections.abc import Sequence

    from shellfix.core.command import Command

GIT_APPS: Final[tuple[str, ...]] = ("git", "hub")
ALIAS_TRACE_MARKER: Final[str] = "trace: alias expansion:"

_ALIAS_TRACE_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"trace: alias expansion: ([^ ]*) => ([^\n]*)"
)


def is_git_command(command: Command) -> bool:
    return is_app(command, *GIT_APPS)


def expand_git_alias(command: Command) -> Command:
    """Return ``command`` with a traced git alias replaced by its expansion."""

    if ALIAS_TRACE_MARKER not in command.output:
        return command
    match = _ALIAS_TRACE_PATTERN.search(command.output)
    if match is None:
        return command

    alias = match.group(1)
    if not alias:
        return command
    # git prints the expansion with each word single-quoted.
    expansion = " ".join(word.strip("'") for word in match.group(2).split())
    script = re.sub(
        rf"\b{re.escape(alias)}\b",
        lambda _: expansion,
        command.script,
        count=1,
    )
    return command.with_script(script)


class GitSupport(Rule):
    """Wrap ``inner`` so it only sees git commands, with aliases expanded."""

    def __init__(self, inner: Rule) -> None:
        self.inner = inner

    @property  # type: ignore[override]
    def name(self) -> str:
        return self.inner.name

    @property  # type: ignore[override]
    def priority(self) -> int:
        return self.inner.priority

    @property  # type: ignore[override]
    def enabled_by_default(self) -> bool:
        return self.inner.enabled_by_default

    @property  # type: ignore[override]
    def requires_output(self) -> bool:
        return self.inner.requires_output

    def is_match(self, command: Command) -> bool:
        if not is_git_command(command):
            return False
        return self.inner.is_match(expand_git_alias(command))

    def get_new_command(self, command: Command) -> Sequence[str]:
        return self.inner.get_new_command(expand_git_alias(command))

    def side_effect(self, command: Command, new_script: str) -> None:
        self.inner.side_effect(command, new_script)

    def has_side_effect(self) -> bool:
        return self.inner.has_side_effect()

    def __repr__(self) -> str:
        return f"GitSupport({self.inner!r})"


def git_support(rule: Rule) -> Rule:
    return GitSupport(rule)


__all__ = [
    "ALIAS_TRACE_MARKER",
    "GIT_APPS",
    "GitSupport",
    "expand_git_alias",
    "git_support",
    "is_git_command",
]

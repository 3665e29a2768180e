"""Rules for unknown git subcommands and single-dash long options."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Final

from shellfix.core.rule import Rule, register_builtin_rule
from shellfix.rules.git.support import git_support
from shellfix.utils.executables import get_all_matched_commands, replace_command

if TYPE_CHECKING:
    from collections.abc import Sequence

    from shellfix.core.command import Command

SUGGESTION_HEADERS: Final[tuple[str, ...]] = ("The most similar command", "Did you mean")

COMMON_GIT_COMMANDS: Final[tuple[str, ...]] = (
    "add",
    "bisect",
    "branch",
    "checkout",
    "cherry-pick",
    "clone",
    "commit",
    "config",
    "diff",
    "fetch",
    "grep",
    "init",
    "log",
    "merge",
    "mv",
    "pull",
    "push",
    "rebase",
    "remote",
    "reset",
    "restore",
    "revert",
    "rm",
    "show",
    "stash",
    "status",
    "switch",
    "tag",
    "worktree",
)

_BROKEN_COMMAND_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"git: '([^']*)' is not a git command"
)
_SINGLE_DASH_OPTION_PATTERN: Final[re.Pattern[str]] = re.compile(r" -([a-z]{2,})")


def broken_git_command(output: str) -> str | None:
    match = _BROKEN_COMMAND_PATTERN.search(output)
    if match is None or not match.group(1):
        return None
    return match.group(1)


def _has_suggestions(output: str) -> bool:
    return any(header in output for header in SUGGESTION_HEADERS)


@register_builtin_rule(wrap=git_support)
class GitNotCommandRule(Rule):
    """Use the subcommands git itself suggested."""

    name = "git_not_command"

    def is_match(self, command: Command) -> bool:
        return " is not a git command. See 'git --help'." in command.output and _has_suggestions(
            command.output
        )

    def get_new_command(self, command: Command) -> Sequence[str]:
        broken = broken_git_command(command.output)
        if broken is None:
            return []
        matched = get_all_matched_commands(command.output, SUGGESTION_HEADERS)
        return replace_command(command.script, broken, matched)


@register_builtin_rule(wrap=git_support)
class GitCommandTypoRule(Rule):
    """Fall back to well-known subcommands when git offered no suggestion."""

    name = "git_command_typo"
    priority = 1100

    def is_match(self, command: Command) -> bool:
        return " is not a git command" in command.output and not _has_suggestions(
            command.output
        )

    def get_new_command(self, command: Command) -> Sequence[str]:
        broken = broken_git_command(command.output)
        if broken is None:
            return []
        return replace_command(command.script, broken, COMMON_GIT_COMMANDS)


@register_builtin_rule(wrap=git_support)
class GitTwoDashesRule(Rule):
    """``git commit -amend`` -> ``git commit --amend``."""

    name = "git_two_dashes"

    def is_match(self, command: Command) -> bool:
        if not _SINGLE_DASH_OPTION_PATTERN.search(command.script):
            return False
        return "error: unknown switch" in command.output or "error: did you mean" in command.output

    def get_new_command(self, command: Command) -> Sequence[str]:
        return [_SINGLE_DASH_OPTION_PATTERN.sub(r" --\1", command.script)]


__all__ = [
    "COMMON_GIT_COMMANDS",
    "GitCommandTypoRule",
    "GitNotCommandRule",
    "GitTwoDashesRule",
    "broken_git_command",
]

"""Rules for failed ``git push`` invocations."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Final

from shellfix.core.rule import Rule, register_builtin_rule
from shellfix.rules.git.support import git_support
from shellfix.utils.executables import replace_argument

if TYPE_CHECKING:
    from collections.abc import Sequence

    from shellfix.core.command import Command

_SUGGESTED_PUSH_PATTERN: Final[re.Pattern[str]] = re.compile(r"git push (.*)")
_UPSTREAM_HINT_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"To push to the upstream branch\s+on the remote, use\s+git push ([^\n]+)"
)
_BRANCH_MISMATCH_MARKERS: Final[tuple[tuple[str, ...], ...]] = (
    ("push your current branch", "with the same name on the remote"),
    ("upstream branch of your current branch does not match", "the same name on the remote"),
)
_BEHIND_MESSAGES: Final[tuple[str, ...]] = (
    "Updates were rejected because the tip of your current branch is behind",
    "Updates were rejected because the remote contains work that you do",
)


def _strip_push_target(words: list[str]) -> list[str]:
    """Drop ``--set-upstream``/``-u`` and its value, else every positional after ``push``."""

    for flag in ("--set-upstream", "-u"):
        if flag in words:
            index = words.index(flag)
            return words[:index] + words[index + 2 :]
    if "push" not in words:
        return words
    push_index = words.index("push")
    return words[: push_index + 1] + [
        word for word in words[push_index + 1 :] if word.startswith("-")
    ]


@register_builtin_rule(wrap=git_support)
class GitPushRule(Rule):
    """Apply the ``--set-upstream`` invocation git printed."""

    name = "git_push"

    def is_match(self, command: Command) -> bool:
        return "push" in command.script and "git push --set-upstream" in command.output

    def get_new_command(self, command: Command) -> Sequence[str]:
        suggestions = _SUGGESTED_PUSH_PATTERN.findall(command.output)
        if not suggestions:
            return []
        arguments = suggestions[-1].replace("'", "\\'").strip()
        base = " ".join(_strip_push_target(command.script.split()))
        return [replace_argument(base, "push", f"push {arguments}")]


@register_builtin_rule(wrap=git_support)
class GitPushPullRule(Rule):
    """Pull the remote work first, then push again."""

    name = "git_push_pull"

    def is_match(self, command: Command) -> bool:
        output = command.output
        return (
            "push" in command.script
            and "! [rejected]" in output
            and "failed to push some refs to" in output
            and any(message in output for message in _BEHIND_MESSAGES)
        )

    def get_new_command(self, command: Command) -> Sequence[str]:
        pull = replace_argument(command.script, "push", "pull")
        return [f"{pull} && {command.script}"]


@register_builtin_rule(wrap=git_support)
class GitPushForceRule(Rule):
    """Overwrite a rejected remote with ``--force-with-lease``; opt-in only."""

    name = "git_push_force"
    priority = 900
    enabled_by_default = False

    def is_match(self, command: Command) -> bool:
        output = command.output
        return (
            "push" in command.script
            and "! [rejected]" in output
            and ("failed to push some refs to" in output or "Updates were rejected" in output)
            and "the remote contains work that you do" not in output
        )

    def get_new_command(self, command: Command) -> Sequence[str]:
        return [f"{command.script} --force-with-lease"]


@register_builtin_rule(wrap=git_support)
class GitPushWithoutCommitsRule(Rule):
    name = "git_push_without_commits"

    def is_match(self, command: Command) -> bool:
        output = command.output
        return (
            "push" in command.script
            and "src refspec" in output
            and "does not match any" in output
        )

    def get_new_command(self, command: Command) -> Sequence[str]:
        return ["git commit"]


@register_builtin_rule(wrap=git_support)
class GitPushDifferentBranchNamesRule(Rule):
    """Push to the upstream branch when its name differs from the local one."""

    name = "git_push_different_branch_names"

    def is_match(self, command: Command) -> bool:
        output = command.output
        return (
            "push" in command.script
            and any(all(marker in output for marker in markers) for markers in _BRANCH_MISMATCH_MARKERS)
        )

    def get_new_command(self, command: Command) -> Sequence[str]:
        match = _UPSTREAM_HINT_PATTERN.search(command.output)
        if match is not None:
            return [f"git push {match.group(1).strip()}"]
        return [f"{command.script} HEAD"]


__all__ = [
    "GitPushDifferentBranchNamesRule",
    "GitPushForceRule",
    "GitPushPullRule",
    "GitPushRule",
    "GitPushWithoutCommitsRule",
]

"""Git rules; each is wrapped in ``GitSupport``."""

from shellfix.rules.git import not_command, push
from shellfix.rules.git.support import GitSupport, expand_git_alias, git_support, is_git_command

__all__ = [
    "GitSupport",
    "expand_git_alias",
    "git_support",
    "is_git_command",
    "not_command",
    "push",
]

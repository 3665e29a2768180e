"""Bundled correction rules.

Importing this package registers every bundled rule in
``DEFAULT_RULE_REGISTRY``.
"""

from __future__ import annotations

from shellfix.core.rule import DEFAULT_RULE_REGISTRY, Rule
from shellfix.rules import cd, git, no_command, sudo, system, typo


def get_all_rules() -> tuple[Rule, ...]:
    """Instantiate every registered rule, in name order."""

    return DEFAULT_RULE_REGISTRY.create_all()


__all__ = [
    "cd",
    "get_all_rules",
    "git",
    "no_command",
    "sudo",
    "system",
    "typo",
]

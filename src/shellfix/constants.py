"""Stable constants shared across shellfix modules."""

from __future__ import annotations

from typing import Final

# Rule defaults.
DEFAULT_PRIORITY: Final[int] = 1000
ALL_RULES: Final[str] = "ALL"

# Shell integration protocol.
ARGUMENT_PLACEHOLDER: Final[str] = "SHELLFIX_ARGUMENT_PLACEHOLDER"
DEFAULT_ALIAS: Final[str] = "fix"
ENV_SHELL: Final[str] = "TF_SHELL"
ENV_ALIAS: Final[str] = "TF_ALIAS"
ENV_HISTORY: Final[str] = "TF_HISTORY"
ENV_SHELL_ALIASES: Final[str] = "TF_SHELL_ALIASES"

# Executables that must never be offered as a correction target.
SELF_EXECUTABLES: Final[frozenset[str]] = frozenset({"shellfix", "fix", "fuck", "thefuck", "tf"})

# Output capture.
DEFAULT_WAIT_COMMAND: Final[int] = 3
DEFAULT_WAIT_SLOW_COMMAND: Final[int] = 15
DEFAULT_SLOW_COMMANDS: Final[tuple[str, ...]] = (
    "lein",
    "react-native",
    "gradle",
    "./gradlew",
    "vagrant",
)
DEFAULT_NUM_CLOSE_MATCHES: Final[int] = 3

__all__ = [
    "ALL_RULES",
    "ARGUMENT_PLACEHOLDER",
    "DEFAULT_ALIAS",
    "DEFAULT_NUM_CLOSE_MATCHES",
    "DEFAULT_PRIORITY",
    "DEFAULT_SLOW_COMMANDS",
    "DEFAULT_WAIT_COMMAND",
    "DEFAULT_WAIT_SLOW_COMMAND",
    "ENV_ALIAS",
    "ENV_HISTORY",
    "ENV_SHELL",
    "ENV_SHELL_ALIASES",
    "SELF_EXECUTABLES",
]

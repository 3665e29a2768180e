"""Utility exports for fuzzy matching, the PATH index, and concurrency helpers."""

from shellfix.utils.concurrency import WorkerPool, run_with_timeout
from shellfix.utils.executables import (
    get_all_executables,
    get_all_matched_commands,
    program_exists,
    replace_argument,
    replace_command,
    which,
)
from shellfix.utils.fuzzy import get_close_matches, get_closest, similarity

__all__ = [
    "WorkerPool",
    "get_all_executables",
    "get_all_matched_commands",
    "get_close_matches",
    "get_closest",
    "program_exists",
    "replace_argument",
    "replace_command",
    "run_with_timeout",
    "similarity",
    "which",
]

"""
shellfix — PATH executable index and script rewriting helpers.

File: src/shellfix/utils/executables.py

Purpose
- Enumerate the programs reachable through ``PATH`` so rules can suggest the
  nearest real command for a typo.
- Provide the argument rewriting helpers shared by many rules.

Functional requirements
- The PATH scan runs at most once per process for a given exclusion set.
- The tool's own executables are never offered as corrections.
"""

from __future__ import annotations

import logging
import os
import re
import shutil
import stat
from functools import lru_cache
from pathlib import Path
from typing import TYPE_CHECKING

from shellfix.constants import SELF_EXECUTABLES
from shellfix.utils.fuzzy import get_close_matches

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

logger = logging.getLogger(__name__)


_default_excluded_prefixes: tuple[str, ...] = ()


def set_excluded_search_path_prefixes(prefixes: Iterable[str]) -> None:
    """Set the PATH prefixes skipped when no explicit exclusion is given."""

    global _default_excluded_prefixes
    _default_excluded_prefixes = tuple(sorted(set(prefixes)))


def get_all_executables(excluded_prefixes: Iterable[str] | None = None) -> tuple[str, ...]:
    """Return sorted executable names found on ``PATH``."""

    if excluded_prefixes is None:
        prefixes = _default_excluded_prefixes
    else:
        prefixes = tuple(sorted(set(excluded_prefixes)))
    return _scan_path(os.environ.get("PATH", ""), prefixes)


def clear_executables_cache() -> None:
    _scan_path.cache_clear()


@lru_cache(maxsize=8)
def _scan_path(path_env: str, excluded_prefixes: tuple[str, ...]) -> tuple[str, ...]:
    found: set[str] = set()
    for raw_dir in path_env.split(os.pathsep):
        if not raw_dir:
            continue
        if any(raw_dir.startswith(prefix) for prefix in excluded_prefixes):
            logger.debug("skipping excluded PATH entry %s", raw_dir)
            continue
        directory = Path(raw_dir)
        try:
            entries = list(directory.iterdir())
        except OSError:
            continue
        for entry in entries:
            if _is_executable_file(entry):
                found.add(entry.name)
                if os.name == "nt" and entry.suffix:
                    found.add(entry.stem)
    found.difference_update(SELF_EXECUTABLES)
    logger.debug("indexed %d executables from PATH", len(found))
    return tuple(sorted(found))


def _is_executable_file(path: Path) -> bool:
    try:
        mode = path.stat().st_mode
    except OSError:
        return False
    if not stat.S_ISREG(mode):
        return False
    if os.name == "nt":
        return path.suffix.lower() in {".exe", ".cmd", ".bat", ".com", ".ps1"}
    return bool(mode & (stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH))


def which(program: str) -> str | None:
    return shutil.which(program)


def program_exists(program: str) -> bool:
    return which(program) is not None


def replace_argument(script: str, old: str, new: str) -> str:
    """Replace ``old`` with ``new``, trying the end, the middle, then the start."""

    escaped = re.escape(old)
    replaced = re.sub(rf" {escaped}$", lambda _: f" {new}", script, count=1)
    if replaced != script:
        return replaced
    replaced = re.sub(rf" {escaped} ", lambda _: f" {new} ", script, count=1)
    if replaced != script:
        return replaced
    return re.sub(rf"^{escaped} ", lambda _: f"{new} ", script, count=1)


def replace_command(script: str, broken: str, matched: Sequence[str]) -> list[str]:
    """Swap ``broken`` for each of its closest ``matched`` alternatives."""

    candidates = get_close_matches(broken, matched, 3, 0.1)
    return [replace_argument(script, broken, candidate.strip()) for candidate in candidates]


def get_all_matched_commands(output: str, separators: Sequence[str]) -> list[str]:
    """Collect the non-empty lines that follow any ``separators`` line."""

    result: list[str] = []
    should_yield = False
    for line in output.splitlines():
        if any(separator in line for separator in separators):
            should_yield = True
        elif should_yield and line.strip():
            result.append(line.strip())
    return result


__all__ = [
    "clear_executables_cache",
    "get_all_executables",
    "get_all_matched_commands",
    "program_exists",
    "replace_argument",
    "replace_command",
    "set_excluded_search_path_prefixes",
    "which",
]

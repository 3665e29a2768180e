"""
shellfix — shell detection and alias generation.

File: src/shellfix/shells/__init__.py

Purpose
- Pick the ``Shell`` implementation for the current session and print the
  function the user evaluates in their shell startup file.

Functional requirements
- Detection order: ``TF_SHELL``, then the names of parent processes, then bash.
- The alias name defaults to ``fix`` and may be overridden with ``TF_ALIAS``.
"""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING, Final

import psutil

from shellfix.constants import DEFAULT_ALIAS, ENV_ALIAS, ENV_SHELL
from shellfix.shells.base import Shell
from shellfix.shells.bash import Bash
from shellfix.shells.fish import Fish
from shellfix.shells.powershell import PowerShell
from shellfix.shells.tcsh import Tcsh
from shellfix.shells.zsh import Zsh

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

logger = logging.getLogger(__name__)

SHELLS: Final[dict[str, Callable[[], Shell]]] = {
    "bash": Bash,
    "zsh": Zsh,
    "fish": Fish,
    "tcsh": Tcsh,
    "powershell": PowerShell,
    "pwsh": PowerShell,
}
_MAX_PARENT_DEPTH: Final[int] = 10


def get_shell_by_name(name: str) -> Shell | None:
    basename = name.strip().replace("\\", "/").rsplit("/", 1)[-1].lower()
    if basename.endswith(".exe"):
        basename = basename[: -len(".exe")]
    # Login shells show up as "-bash".
    factory = SHELLS.get(basename.lstrip("-"))
    return factory() if factory is not None else None


def detect_shell(environ: Mapping[str, str] | None = None) -> Shell:
    env_map = os.environ if environ is None else environ
    configured = env_map.get(ENV_SHELL, "")
    if configured:
        shell = get_shell_by_name(configured)
        if shell is not None:
            logger.debug("shell %s taken from %s", shell.name, ENV_SHELL)
            return shell
        logger.warning("unsupported %s value %r", ENV_SHELL, configured)

    shell = _detect_from_parent_processes()
    if shell is not None:
        return shell

    logger.debug("falling back to bash")
    return Bash()


def generate_alias(
    environ: Mapping[str, str] | None = None,
    *,
    instant_mode: bool = False,
    alter_history: bool = True,
) -> str:
    """Return the shell source defining the correction function."""

    env_map = os.environ if environ is None else environ
    alias_name = env_map.get(ENV_ALIAS, "").strip() or DEFAULT_ALIAS
    return detect_shell(env_map).app_alias(
        alias_name, instant_mode=instant_mode, alter_history=alter_history
    )


def _detect_from_parent_processes() -> Shell | None:
    try:
        process: psutil.Process | None = psutil.Process(os.getpid())
        depth = 0
        while process is not None and depth < _MAX_PARENT_DEPTH:
            shell = get_shell_by_name(process.name())
            if shell is not None:
                logger.debug("shell %s detected from process %d", shell.name, process.pid)
                return shell
            process = process.parent()
            depth += 1
    except psutil.Error as exc:
        logger.debug("process tree inspection failed: %s", exc)
    return None


__all__ = [
    "Bash",
    "Fish",
    "PowerShell",
    "SHELLS",
    "Shell",
    "Tcsh",
    "Zsh",
    "detect_shell",
    "generate_alias",
    "get_shell_by_name",
]

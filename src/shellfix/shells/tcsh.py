"""Tcsh integration.

tcsh has no builtin that appends an arbitrary line to the history list, so
``alter_history`` and ``instant_mode`` are accepted and ignored.
"""

from __future__ import annotations

from shellfix.constants import ARGUMENT_PLACEHOLDER
from shellfix.shells.base import Shell


class Tcsh(Shell):
    name = "tcsh"

    def app_alias(
        self, alias_name: str, instant_mode: bool = False, alter_history: bool = True
    ) -> str:
        # ``history -h 2`` lists the failed command, then the alias invocation.
        return (
            f"alias {alias_name} 'setenv TF_SHELL tcsh && setenv TF_ALIAS {alias_name}"
            " && setenv PYTHONIOENCODING utf-8"
            " && set failed_cmd=`history -h 2 | head -n 1`"
            f" && eval `shellfix ${{failed_cmd}} {ARGUMENT_PLACEHOLDER}`'\n"
        )

    def parse_alias(self, line: str) -> tuple[str, str] | None:
        # ``alias`` in tcsh prints ``name<TAB>value``.
        name, separator, value = line.partition("\t")
        if not separator or not name.strip():
            return None
        value = value.strip()
        if value.startswith("(") and value.endswith(")"):
            value = value[1:-1]
        return name.strip(), value


__all__ = ["Tcsh"]

"""Zsh integration."""

from __future__ import annotations

from shellfix.constants import ARGUMENT_PLACEHOLDER
from shellfix.shells.base import USER_COMMAND_MARK, USER_COMMAND_MARK_ERASE, Shell


class Zsh(Shell):
    name = "zsh"

    def app_alias(
        self, alias_name: str, instant_mode: bool = False, alter_history: bool = True
    ) -> str:
        record = "    test -n \"$TF_CMD\" && print -s $TF_CMD;\n" if alter_history else ""
        function = f"""{alias_name} () {{
    TF_PYTHONIOENCODING=$PYTHONIOENCODING;
    export TF_SHELL=zsh;
    export TF_ALIAS={alias_name};
    TF_SHELL_ALIASES=$(alias);
    export TF_SHELL_ALIASES;
    TF_HISTORY="$(fc -ln -10)";
    export TF_HISTORY;
    export PYTHONIOENCODING=utf-8;
    TF_CMD=$(
        shellfix {ARGUMENT_PLACEHOLDER} $@
    ) && eval $TF_CMD;
    unset TF_HISTORY;
    export PYTHONIOENCODING=$TF_PYTHONIOENCODING;
{record}}}
"""
        if instant_mode:
            # %{ %} keeps zsh from counting the mark in the prompt width.
            mark = f"%{{{USER_COMMAND_MARK}{USER_COMMAND_MARK_ERASE}%}}"
            return f'export PS1="{mark}$PS1";\n{function}'
        return function

    def script_from_history(self, line: str) -> str:
        # Extended history lines look like ": 1700000000:0;git status".
        if line.startswith(":") and ";" in line:
            return line.split(";", 1)[1]
        return line


__all__ = ["Zsh"]

"""Bash integration."""

from __future__ import annotations

from shellfix.constants import ARGUMENT_PLACEHOLDER
from shellfix.shells.base import USER_COMMAND_MARK, USER_COMMAND_MARK_ERASE, Shell


class Bash(Shell):
    name = "bash"

    def app_alias(
        self, alias_name: str, instant_mode: bool = False, alter_history: bool = True
    ) -> str:
        record = "    history -s $TF_CMD;\n" if alter_history else ""
        function = f"""function {alias_name} () {{
    TF_PYTHONIOENCODING=$PYTHONIOENCODING;
    export TF_SHELL=bash;
    export TF_ALIAS={alias_name};
    export TF_SHELL_ALIASES=$(alias);
    export TF_HISTORY=$(fc -ln -10);
    export PYTHONIOENCODING=utf-8;
    TF_CMD=$(
        shellfix {ARGUMENT_PLACEHOLDER} "$@"
    ) && eval "$TF_CMD";
    unset TF_HISTORY;
    export PYTHONIOENCODING=$TF_PYTHONIOENCODING;
{record}}}
"""
        if instant_mode:
            return f'export PS1="{USER_COMMAND_MARK}{USER_COMMAND_MARK_ERASE}$PS1";\n{function}'
        return function


__all__ = ["Bash"]

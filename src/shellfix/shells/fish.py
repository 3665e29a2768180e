"""Fish integration.

Fish has no ``fc``; the function passes the previous command as arguments
before the placeholder instead of exporting ``TF_HISTORY``.
"""

from __future__ import annotations

from shellfix.constants import ARGUMENT_PLACEHOLDER
from shellfix.shells.base import Shell


class Fish(Shell):
    name = "fish"
    and_separator = "; and "
    or_separator = "; or "

    def app_alias(
        self, alias_name: str, instant_mode: bool = False, alter_history: bool = True
    ) -> str:
        record = (
            "        builtin history delete --exact --case-sensitive -- $failed_command\n"
            "        builtin history merge\n"
            if alter_history
            else ""
        )
        return f"""function {alias_name} -d "Correct your previous console command"
    set -l failed_command $history[1]
    env TF_SHELL=fish TF_ALIAS={alias_name} PYTHONIOENCODING=utf-8 shellfix $failed_command {ARGUMENT_PLACEHOLDER} $argv | read -l corrected_command
    if [ "$corrected_command" != "" ]
        eval $corrected_command
{record}    end
end
"""

    def parse_alias(self, line: str) -> tuple[str, str] | None:
        # ``alias`` in fish prints ``alias name 'value'``.
        stripped = line.strip()
        if stripped.startswith("alias ") and "=" not in stripped.split(" ", 2)[1]:
            parts = stripped.split(" ", 2)
            if len(parts) < 3:
                return None
            value = parts[2].strip()
            if len(value) >= 2 and value[0] == value[-1] and value[0] in {"'", '"'}:
                value = value[1:-1]
            return parts[1], value
        return super().parse_alias(line)


__all__ = ["Fish"]

"""PowerShell integration.

The function reads the failed command from ``Get-History`` and passes it as a
single argument before the placeholder. PowerShell chains commands with the
``-and``/``-or`` operators, so every operand is wrapped in parentheses.
"""

from __future__ import annotations

from shellfix.constants import ARGUMENT_PLACEHOLDER
from shellfix.shells.base import Shell


class PowerShell(Shell):
    name = "powershell"

    def app_alias(
        self, alias_name: str, instant_mode: bool = False, alter_history: bool = True
    ) -> str:
        record = (
            "            [Microsoft.PowerShell.PSConsoleReadLine]::AddToHistory($corrected);\n"
            if alter_history
            else ""
        )
        return f"""function {alias_name} {{
    $env:TF_SHELL = "powershell";
    $env:TF_ALIAS = "{alias_name}";
    $env:PYTHONIOENCODING = "utf-8";
    $failed = (Get-History -Count 1).CommandLine;
    if (-not [string]::IsNullOrWhiteSpace($failed)) {{
        $corrected = $(shellfix "$failed" {ARGUMENT_PLACEHOLDER} $args);
        if (-not [string]::IsNullOrWhiteSpace($corrected)) {{
            Invoke-Expression "$corrected";
{record}        }}
    }}
    [Console]::ResetColor();
}}
"""

    def and_(self, *commands: str) -> str:
        return " -and ".join(f"({command})" for command in commands)

    def or_(self, *commands: str) -> str:
        return " -or ".join(f"({command})" for command in commands)


__all__ = ["PowerShell"]

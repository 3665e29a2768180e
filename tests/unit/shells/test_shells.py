"""
shellfix — unit tests for shell integration

File: tests/unit/shells/test_shells.py

Purpose
- Validate shell detection, generated functions, history and alias parsing,
  and command chaining per shell.
"""

from __future__ import annotations

import psutil
import pytest

import shellfix.shells as shells_module
from shellfix.constants import ARGUMENT_PLACEHOLDER
from shellfix.shells import (
    Bash,
    Fish,
    PowerShell,
    Tcsh,
    Zsh,
    detect_shell,
    generate_alias,
    get_shell_by_name,
)
from shellfix.shells.base import USER_COMMAND_MARK

pytestmark = [pytest.mark.unit]


class TestDetection:
    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("bash", Bash),
            ("/usr/bin/zsh", Zsh),
            ("-bash", Bash),
            ("FISH.EXE", Fish),
            ("-tcsh", Tcsh),
            ("pwsh", PowerShell),
            ("C:\\Windows\\System32\\WindowsPowerShell\\v1.0\\powershell.exe", PowerShell),
        ],
    )
    def test_get_shell_by_name(self, name: str, expected: type) -> None:
        assert isinstance(get_shell_by_name(name), expected)

    def test_unknown_shell_name(self) -> None:
        assert get_shell_by_name("ksh") is None

    def test_tf_shell_takes_precedence(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(shells_module, "_detect_from_parent_processes", lambda: Bash())

        assert isinstance(detect_shell({"TF_SHELL": "fish"}), Fish)

    def test_parent_process_detection(self, monkeypatch: pytest.MonkeyPatch) -> None:
        class _FakeProcess:
            def __init__(self, name: str, parent: _FakeProcess | None, pid: int) -> None:
                self._name = name
                self._parent = parent
                self.pid = pid

            def name(self) -> str:
                return self._name

            def parent(self) -> _FakeProcess | None:
                return self._parent

        chain = _FakeProcess("python3", _FakeProcess("zsh", None, 2), 1)
        monkeypatch.setattr(psutil, "Process", lambda pid: chain)

        assert isinstance(detect_shell({}), Zsh)

    def test_falls_back_to_bash(self, monkeypatch: pytest.MonkeyPatch) -> None:
        def _fail(pid: int) -> object:
            raise psutil.NoSuchProcess(pid)

        monkeypatch.setattr(psutil, "Process", _fail)

        assert isinstance(detect_shell({"TF_SHELL": "ksh"}), Bash)


class TestAliases:
    def test_bash_function_exports_protocol_variables(self) -> None:
        source = Bash().app_alias("fix")

        assert source.startswith("function fix () {")
        assert "export TF_ALIAS=fix;" in source
        assert "TF_HISTORY=$(fc -ln -10)" in source
        assert f'shellfix {ARGUMENT_PLACEHOLDER} "$@"' in source
        assert "history -s $TF_CMD;" in source

    def test_alter_history_can_be_disabled(self) -> None:
        assert "history -s" not in Bash().app_alias("fix", alter_history=False)
        assert "print -s" not in Zsh().app_alias("fix", alter_history=False)
        assert "history merge" not in Fish().app_alias("fix", alter_history=False)

    def test_instant_mode_marks_prompt(self) -> None:
        assert Bash().app_alias("fix", instant_mode=True).startswith(
            f'export PS1="{USER_COMMAND_MARK}'
        )
        assert "%{" + USER_COMMAND_MARK in Zsh().app_alias("fix", instant_mode=True)
        assert USER_COMMAND_MARK not in Zsh().app_alias("fix")

    def test_fish_passes_failed_command_before_placeholder(self) -> None:
        source = Fish().app_alias("oops")

        assert source.startswith('function oops -d "Correct your previous console command"')
        assert f"shellfix $failed_command {ARGUMENT_PLACEHOLDER} $argv" in source

    def test_powershell_passes_failed_command_as_one_argument(self) -> None:
        source = PowerShell().app_alias("fix")

        assert source.startswith("function fix {")
        assert '$env:TF_ALIAS = "fix";' in source
        assert f'shellfix "$failed" {ARGUMENT_PLACEHOLDER} $args' in source
        assert "AddToHistory" in source
        assert "AddToHistory" not in PowerShell().app_alias("fix", alter_history=False)

    def test_tcsh_alias_reads_previous_history_entry(self) -> None:
        source = Tcsh().app_alias("fix")

        assert source.startswith("alias fix 'setenv TF_SHELL tcsh && setenv TF_ALIAS fix")
        assert "set failed_cmd=`history -h 2 | head -n 1`" in source
        assert f"eval `shellfix ${{failed_cmd}} {ARGUMENT_PLACEHOLDER}`" in source
        assert source.endswith("'\n")

    def test_generate_alias_uses_tf_alias(self) -> None:
        source = generate_alias({"TF_SHELL": "zsh", "TF_ALIAS": "oops"})

        assert source.startswith("oops () {")

    def test_generate_alias_default_name(self) -> None:
        assert generate_alias({"TF_SHELL": "bash"}).startswith("function fix () {")


class TestHistory:
    def test_history_skips_blank_lines_and_applies_limit(self) -> None:
        environ = {"TF_HISTORY": "ls\n\n  git stats  \ncd..\n"}

        assert Bash().get_history(environ) == ["ls", "git stats", "cd.."]
        assert Bash().get_history(environ, history_limit=2) == ["git stats", "cd.."]
        assert Bash().get_history(environ, history_limit=0) == []

    def test_zsh_extended_history_lines(self) -> None:
        environ = {"TF_HISTORY": ": 1700000000:0;git stats\nls"}

        assert Zsh().get_history(environ) == ["git stats", "ls"]


class TestShellAliases:
    def test_bash_alias_output(self) -> None:
        environ = {"TF_SHELL_ALIASES": "alias ll='ls -alF'\nalias g=git\nnot an alias"}

        assert Bash().get_aliases(environ) == {"ll": "ls -alF", "g": "git"}

    def test_zsh_alias_output(self) -> None:
        environ = {"TF_SHELL_ALIASES": "gst='git status'\nl=ls"}

        assert Zsh().get_aliases(environ) == {"gst": "git status", "l": "ls"}

    def test_tcsh_alias_output(self) -> None:
        assert Tcsh().parse_alias("ll\tls -l") == ("ll", "ls -l")
        assert Tcsh().parse_alias("g\t(git)") == ("g", "git")
        assert Tcsh().parse_alias("no tab here") is None

    def test_fish_alias_output(self) -> None:
        assert Fish().parse_alias("alias gco 'git checkout'") == ("gco", "git checkout")

    def test_expand_aliases_only_replaces_program(self) -> None:
        aliases = {"g": "git", "ll": "ls -alF"}

        assert Bash().expand_aliases("g stats", aliases) == "git stats"
        assert Bash().expand_aliases("ll", aliases) == "ls -alF"
        assert Bash().expand_aliases("echo g", aliases) == "echo g"


class TestChaining:
    def test_posix_separators(self) -> None:
        assert Bash().and_("git add .", "git commit") == "git add . && git commit"
        assert Zsh().or_("make", "fix") == "make || fix"

    def test_fish_separators(self) -> None:
        assert Fish().and_("git pull", "git push") == "git pull; and git push"
        assert Fish().or_("make", "fix") == "make; or fix"

    def test_powershell_wraps_operands(self) -> None:
        assert PowerShell().and_("git add .", "git commit") == "(git add .) -and (git commit)"
        assert PowerShell().or_("make", "fix", "echo") == "(make) -or (fix) -or (echo)"

    def test_tcsh_uses_posix_separators(self) -> None:
        assert Tcsh().and_("cd ..", "ls") == "cd .. && ls"
        assert Tcsh().or_("make", "fix") == "make || fix"

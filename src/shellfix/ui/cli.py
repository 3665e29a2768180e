"""
shellfix — command-line interface.

File: src/shellfix/ui/cli.py

Purpose
- Parse arguments, load settings, and run the fix workflow: resolve the failed
  script, re-run it to capture output, rank corrections, let the user choose,
  then print or execute the chosen one.

Functional requirements
- Alias mode (``SHELLFIX_ARGUMENT_PLACEHOLDER`` in argv): arguments after the
  placeholder are options for this tool, arguments before it are the command.
  The chosen script goes to stdout for the shell function to evaluate, unless
  it carries a side effect; those are executed here like in direct mode.
- Direct mode: the chosen correction is executed in a subshell.
- Every other message goes to stderr.
"""

from __future__ import annotations

import argparse
import os
import sys
from dataclasses import dataclass
from typing import TYPE_CHECKING

from shellfix import __version__
from shellfix.config import load_settings
from shellfix.constants import ARGUMENT_PLACEHOLDER, DEFAULT_ALIAS, ENV_ALIAS
from shellfix.core.command import Command
from shellfix.core.corrector import get_corrected_commands
from shellfix.main import ExitCode
from shellfix.observability import setup_logging
from shellfix.output import capture_command
from shellfix.rules import get_all_rules
from shellfix.shells import detect_shell, generate_alias
from shellfix.ui.render import CLIRenderer, create_renderer
from shellfix.ui.selector import select_correction
from shellfix.utils.executables import set_excluded_search_path_prefixes

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from shellfix.config import Settings
    from shellfix.core.corrected import CorrectedCommand
    from shellfix.shells import Shell

LOG_DIR_ENV = "SHELLFIX_LOG_DIR"


@dataclass(frozen=True, slots=True)
class CLIError(RuntimeError):
    """Typed CLI failure with an explicit process exit code."""

    message: str
    exit_code: int = int(ExitCode.NO_CORRECTION)

    def __str__(self) -> str:
        return self.message


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the fix workflow and its helpers."""

    parser = argparse.ArgumentParser(
        prog="shellfix",
        description=(
            "shellfix — correct the previous console command.\n\n"
            "Common workflows:\n"
            '  eval "$(shellfix --alias)"   Define the `fix` shell function\n'
            "  fix                          Correct the last command\n"
            "  shellfix git stats           Correct and run a given command\n"
            "  shellfix --list-rules        Show rules and their priorities\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("-v", "--version", action="version", version=f"shellfix {__version__}")
    parser.add_argument(
        "-a",
        "--alias",
        nargs="?",
        const="",
        default=None,
        metavar="NAME",
        help="Print the shell function definition (default name: $TF_ALIAS or `fix`).",
    )
    parser.add_argument(
        "-l", "--list-rules", action="store_true", help="List rules with priority and state."
    )
    parser.add_argument(
        "-y", "--yes", action="store_true", help="Run the best correction without confirmation."
    )
    parser.add_argument(
        "-r",
        "--repeat",
        action="store_true",
        help="Correct the corrected command again if it fails.",
    )
    parser.add_argument("-d", "--debug", action="store_true", help="Enable debug logging.")
    parser.add_argument(
        "--enable-experimental-instant-mode",
        dest="instant_mode",
        action="store_true",
        help="Read command output from the terminal log instead of re-running it.",
    )
    parser.add_argument(
        "--force-command",
        default=None,
        metavar="SCRIPT",
        help="Correct SCRIPT instead of the last command.",
    )
    parser.add_argument(
        "--config",
        dest="config_path",
        default=None,
        help="Path to settings TOML (default: $XDG_CONFIG_HOME/shellfix/settings.toml).",
    )
    parser.add_argument("--no-color", action="store_true", help="Disable colored output.")
    parser.add_argument(
        "command",
        nargs=argparse.REMAINDER,
        help="Command to correct; defaults to the last entry of $TF_HISTORY.",
    )
    return parser


def prepare_arguments(argv: Sequence[str]) -> list[str]:
    """Move options passed after the placeholder in front of the command.

    ``fix -y`` expands to ``shellfix <failed> PLACEHOLDER -y``; argparse needs
    ``-y -- <failed>``.
    """

    arguments = list(argv)
    if ARGUMENT_PLACEHOLDER not in arguments:
        return arguments
    index = arguments.index(ARGUMENT_PLACEHOLDER)
    command = arguments[:index]
    options = arguments[index + 1 :]
    if command:
        return [*options, "--", *command]
    return options


def run_cli(
    argv: Sequence[str] | None = None,
    *,
    environ: Mapping[str, str] | None = None,
) -> int:
    """Parse argv, run the requested workflow, and return the process exit code."""

    raw_arguments = list(argv) if argv is not None else sys.argv[1:]
    env_map = dict(os.environ if environ is None else environ)
    args = build_parser().parse_args(prepare_arguments(raw_arguments))
    alias_mode = ARGUMENT_PLACEHOLDER in raw_arguments

    setup_logging(debug=args.debug, log_dir=env_map.get(LOG_DIR_ENV) or None)
    settings = load_settings(
        args.config_path, environ=env_map, cli_overrides=_cli_overrides(args)
    )
    if settings.debug and not args.debug:
        setup_logging(debug=True, log_dir=env_map.get(LOG_DIR_ENV) or None)
    set_excluded_search_path_prefixes(settings.excluded_search_path_prefixes)
    renderer = create_renderer(no_color=settings.no_colors)

    try:
        if args.alias is not None:
            return _cmd_alias(args.alias, settings, env_map)
        if args.list_rules:
            return _cmd_list_rules(settings)
        return _cmd_fix(args, settings, env_map, renderer, alias_mode=alias_mode)
    except CLIError as exc:
        renderer.error(f"error: {exc}")
        return exc.exit_code


# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------


def _cmd_alias(alias_name: str, settings: Settings, environ: dict[str, str]) -> int:
    if alias_name:
        environ = {**environ, ENV_ALIAS: alias_name}
    print(
        generate_alias(
            environ,
            instant_mode=settings.instant_mode,
            alter_history=settings.alter_history,
        )
    )
    return int(ExitCode.SUCCESS)


def _cmd_list_rules(settings: Settings) -> int:
    rows = [
        [
            rule.name,
            str(settings.get_rule_priority(rule.name, rule.priority)),
            "yes"
            if settings.is_rule_enabled(rule.name, enabled_by_default=rule.enabled_by_default)
            else "no",
        ]
        for rule in sorted(get_all_rules(), key=lambda item: item.name)
    ]
    create_renderer(no_color=settings.no_colors, stream=sys.stdout).table(
        ["rule", "priority", "enabled"], rows
    )
    return int(ExitCode.SUCCESS)


def _cmd_fix(
    args: argparse.Namespace,
    settings: Settings,
    environ: dict[str, str],
    renderer: CLIRenderer,
    *,
    alias_mode: bool,
) -> int:
    shell = detect_shell(environ)
    script = _resolve_script(args, shell, settings, environ)
    expanded = shell.expand_aliases(script, shell.get_aliases(environ))
    command = capture_command(expanded, settings, environ=environ)

    corrections = get_corrected_commands(command, settings)
    if not corrections:
        renderer.error(f"No corrections available for: {script}")
        return int(ExitCode.NO_CORRECTION)

    chosen = _choose(corrections, settings)
    if chosen is None:
        renderer.text("Aborted")
        return int(ExitCode.NO_CORRECTION)

    # The shell evaluates printed scripts after this process exits, so a side
    # effect could not wait for their outcome; such corrections run here.
    if alias_mode and chosen.side_effect is None:
        output = chosen.script
        if args.repeat:
            output = shell.or_(output, environ.get(ENV_ALIAS, "").strip() or DEFAULT_ALIAS)
        renderer.correction(chosen.script)
        print(output)
        return int(ExitCode.SUCCESS)

    renderer.correction(chosen.script, side_effect=chosen.side_effect is not None)
    chosen.run(command, settings, environ=environ)
    return int(ExitCode.SUCCESS)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _cli_overrides(args: argparse.Namespace) -> dict[str, object]:
    overrides: dict[str, object] = {}
    if args.yes:
        overrides["require_confirmation"] = False
    if args.debug:
        overrides["debug"] = True
    if args.instant_mode:
        overrides["instant_mode"] = True
    if args.no_color:
        overrides["no_colors"] = True
    return overrides


def _resolve_script(
    args: argparse.Namespace,
    shell: Shell,
    settings: Settings,
    environ: Mapping[str, str],
) -> str:
    if args.force_command:
        return str(args.force_command).strip()

    command_args = list(args.command)
    if command_args and command_args[0] == "--":
        command_args = command_args[1:]
    # A single argument is a whole script, which is how fish passes it.
    if len(command_args) == 1 and command_args[0].strip():
        return command_args[0].strip()
    if command_args:
        return Command.from_raw_script(command_args).script

    # The history ends with the alias invocation itself.
    alias_name = environ.get(ENV_ALIAS, "").strip() or DEFAULT_ALIAS
    for entry in reversed(shell.get_history(environ, history_limit=settings.history_limit)):
        if entry != alias_name and not entry.startswith(f"{alias_name} "):
            return entry
    raise CLIError("nothing to correct: no command given and the history is empty")


def _choose(
    corrections: Sequence[CorrectedCommand],
    settings: Settings,
) -> CorrectedCommand | None:
    if not settings.require_confirmation:
        return corrections[0]
    return select_correction(corrections)


__all__ = ["CLIError", "build_parser", "prepare_arguments", "run_cli"]

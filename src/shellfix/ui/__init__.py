"""UI package exports for the CLI, rendering, and the correction selector."""

from shellfix.ui.cli import CLIError, build_parser, prepare_arguments, run_cli
from shellfix.ui.render import CLIRenderer, create_renderer
from shellfix.ui.selector import CorrectionSelector, select_correction

__all__ = [
    "CLIError",
    "CLIRenderer",
    "CorrectionSelector",
    "build_parser",
    "create_renderer",
    "prepare_arguments",
    "run_cli",
    "select_correction",
]

"""Output rendering for the shellfix CLI.

File: src/shellfix/ui/render.py

Purpose
- Keep every human-facing message on stderr so stdout carries only the
  corrected script the shell function evaluates.
- Respect the NO_COLOR environment variable and the --no-color flag.
"""

from __future__ import annotations

import os
import sys
from typing import TYPE_CHECKING, Final, TextIO

if TYPE_CHECKING:
    from collections.abc import Sequence

_RESET: Final[str] = "\x1b[0m"
_BOLD: Final[str] = "\x1b[1m"
_RED: Final[str] = "\x1b[31m"


def _color_allowed(no_color_flag: bool, stream: TextIO) -> bool:
    if no_color_flag:
        return False
    if os.environ.get("NO_COLOR", ""):
        return False
    return hasattr(stream, "isatty") and stream.isatty()


class CLIRenderer:
    """Plain-text renderer writing to stderr, with optional ANSI color."""

    def __init__(self, *, no_color: bool = False, stream: TextIO | None = None) -> None:
        self._stream = stream if stream is not None else sys.stderr
        self._color = _color_allowed(no_color, self._stream)

    @property
    def color(self) -> bool:
        return self._color

    def _write(self, line: str) -> None:
        print(line, file=self._stream)

    def _style(self, text: str, *codes: str) -> str:
        if not self._color:
            return text
        return f"{''.join(codes)}{text}{_RESET}"

    def text(self, line: str) -> None:
        self._write(line)

    def error(self, text: str) -> None:
        self._write(self._style(text, _RED))

    def correction(self, script: str, *, side_effect: bool = False) -> None:
        """Echo the chosen correction before it runs."""

        suffix = " (+side effect)" if side_effect else ""
        self._write(self._style(script, _BOLD) + suffix)

    def table(self, headers: Sequence[str], rows: Sequence[Sequence[str]]) -> None:
        """Print a left-aligned ASCII table."""

        if not rows:
            return
        widths = [len(header) for header in headers]
        for row in rows:
            for index, cell in enumerate(row[: len(headers)]):
                widths[index] = max(widths[index], len(cell))

        def _pad(cells: Sequence[str]) -> str:
            return "  ".join(
                (cells[index] if index < len(cells) else "").ljust(width)
                for index, width in enumerate(widths)
            ).rstrip()

        self._write(self._style(_pad(headers), _BOLD))
        self._write("  ".join("-" * width for width in widths))
        for row in rows:
            self._write(_pad(row))


def create_renderer(*, no_color: bool = False, stream: TextIO | None = None) -> CLIRenderer:
    return CLIRenderer(no_color=no_color, stream=stream)


__all__ = ["CLIRenderer", "create_renderer"]

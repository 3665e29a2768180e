"""Interactive correction selector built on Textual.

File: src/shellfix/ui/selector.py

Purpose
- Let the user pick one of the ranked corrections: Up/Down or k/j move and
  wrap around, Enter confirms, Escape or Ctrl+C aborts.

Functional requirements
- Without an interactive stdin the first correction is chosen without prompting.
- The app runs inline and draws on stderr, so it works inside ``$(...)``.
"""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.widgets import Static

if TYPE_CHECKING:
    from collections.abc import Sequence

    from shellfix.core.corrected import CorrectedCommand

SELECTOR_HINT = "[enter/↑/↓/ctrl+c]"


class CorrectionSelector(App[int | None]):
    """Return the index of the chosen correction, or ``None`` when aborted."""

    DEFAULT_CSS = """
    CorrectionSelector {
        height: auto;
    }
    #corrections {
        height: auto;
    }
    .correction {
        padding: 0 1;
    }
    .correction.-selected {
        background: $accent;
        text-style: bold;
    }
    #hint {
        color: $text-muted;
        padding: 0 1;
    }
    """

    BINDINGS = [
        Binding("up", "previous", "Previous", show=False),
        Binding("k", "previous", "Previous", show=False),
        Binding("down", "next", "Next", show=False),
        Binding("j", "next", "Next", show=False),
        Binding("enter", "select", "Run", priority=True),
        Binding("escape", "abort", "Abort"),
        Binding("ctrl+c", "abort", "Abort", priority=True),
    ]

    def __init__(self, scripts: Sequence[str]) -> None:
        if not scripts:
            raise ValueError("at least one correction is required")
        super().__init__()
        self._scripts = tuple(scripts)
        self.index = 0

    def compose(self) -> ComposeResult:
        with Vertical(id="corrections"):
            for position, script in enumerate(self._scripts):
                classes = "correction -selected" if position == self.index else "correction"
                yield Static(script, markup=False, classes=classes, id=f"correction-{position}")
        yield Static(SELECTOR_HINT, markup=False, id="hint")

    def _move(self, step: int) -> None:
        self.query_one(f"#correction-{self.index}", Static).remove_class("-selected")
        self.index = (self.index + step) % len(self._scripts)
        self.query_one(f"#correction-{self.index}", Static).add_class("-selected")

    def action_previous(self) -> None:
        self._move(-1)

    def action_next(self) -> None:
        self._move(1)

    def action_select(self) -> None:
        self.exit(self.index)

    def action_abort(self) -> None:
        self.exit(None)


def select_correction(corrections: Sequence[CorrectedCommand]) -> CorrectedCommand | None:
    """Prompt for a correction; non-interactive sessions get the first one."""

    if not corrections:
        return None
    if not sys.stdin.isatty():
        return corrections[0]
    app = CorrectionSelector([corrected.script for corrected in corrections])
    chosen = app.run(inline=True)
    if chosen is None:
        return None
    return corrections[chosen]


__all__ = ["CorrectionSelector", "SELECTOR_HINT", "select_correction"]

"""Unit tests for CLI output rendering."""

from __future__ import annotations

import io

import pytest

from shellfix.ui.render import CLIRenderer, create_renderer

pytestmark = [pytest.mark.unit]


class _TtyBuffer(io.StringIO):
    def isatty(self) -> bool:
        return True


def test_plain_stream_gets_no_color(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("NO_COLOR", raising=False)
    stream = io.StringIO()
    renderer = create_renderer(stream=stream)

    renderer.error("boom")

    assert renderer.color is False
    assert stream.getvalue() == "boom\n"


def test_tty_stream_is_colored(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("NO_COLOR", raising=False)
    stream = _TtyBuffer()
    renderer = CLIRenderer(stream=stream)

    renderer.error("boom")

    assert renderer.color is True
    assert stream.getvalue() == "\x1b[31mboom\x1b[0m\n"


@pytest.mark.parametrize("via_env", [True, False])
def test_color_can_be_disabled(monkeypatch: pytest.MonkeyPatch, via_env: bool) -> None:
    if via_env:
        monkeypatch.setenv("NO_COLOR", "1")
    else:
        monkeypatch.delenv("NO_COLOR", raising=False)

    renderer = CLIRenderer(no_color=not via_env, stream=_TtyBuffer())

    assert renderer.color is False


def test_correction_marks_side_effect() -> None:
    stream = io.StringIO()
    renderer = CLIRenderer(no_color=True, stream=stream)

    renderer.correction("git push --force-with-lease")
    renderer.correction("unzip a.zip -d a", side_effect=True)

    assert stream.getvalue().splitlines() == [
        "git push --force-with-lease",
        "unzip a.zip -d a (+side effect)",
    ]


def test_table_aligns_columns() -> None:
    stream = io.StringIO()
    renderer = CLIRenderer(no_color=True, stream=stream)

    renderer.table(["rule", "priority"], [["sudo", "1000"], ["git_push_force", "900"]])

    assert stream.getvalue().splitlines() == [
        "rule            priority",
        "--------------  --------",
        "sudo            1000",
        "git_push_force  900",
    ]


def test_empty_table_prints_nothing() -> None:
    stream = io.StringIO()

    CLIRenderer(no_color=True, stream=stream).table(["rule"], [])

    assert stream.getvalue() == ""


def test_defaults_to_stderr(capsys: pytest.CaptureFixture[str]) -> None:
    create_renderer(no_color=True).text("hello")

    captured = capsys.readouterr()
    assert captured.out == ""
    assert captured.err == "hello\n"

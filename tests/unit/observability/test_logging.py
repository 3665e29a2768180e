"""
shellfix — unit tests for logging setup

File: tests/unit/observability/test_logging.py

Purpose
- Validate the stderr threshold, the JSON-lines file sink with redaction and
  correlation metadata, and queue shutdown behavior.
"""

from __future__ import annotations

import io
import json
import logging
import sys
import threading
from typing import TYPE_CHECKING
from uuid import uuid4

import pytest

from shellfix.observability.logging import (
    correlation_scope,
    get_active_logging_handle,
    get_correlation_context,
    redact,
    setup_logging,
    shutdown_logging,
)

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path

pytestmark = [pytest.mark.unit]


@pytest.fixture(autouse=True)
def _cleanup_logging() -> Iterator[None]:
    yield
    shutdown_logging()


def _logger_name() -> str:
    return f"shellfix.tests.logging.{uuid4().hex}"


def _read_json_lines(path: Path) -> list[dict[str, object]]:
    lines = path.read_text(encoding="utf-8").splitlines()
    return [json.loads(line) for line in lines]


def test_json_sink_redacts_secrets_and_keeps_correlation(tmp_path: Path) -> None:
    logger_name = _logger_name()
    handle = setup_logging(log_dir=tmp_path, logger_name=logger_name)
    logger = logging.getLogger(logger_name)

    with correlation_scope(rule="git_push"):
        logger.debug(
            "re-running with token=tok-FAKE",
            extra={"password": "hunter2", "script": "git push"},
        )
    shutdown_logging(handle)

    assert handle.log_path == tmp_path / "shellfix.jsonl"
    parsed = _read_json_lines(handle.log_path)
    assert len(parsed) == 1
    event = parsed[0]
    assert event["level"] == "DEBUG"
    assert event["logger"] == logger_name
    assert event["rule"] == "git_push"
    assert event["fields"] == {"password": "***REDACTED***", "script": "git push"}

    line = handle.log_path.read_text(encoding="utf-8")
    assert "tok-FAKE" not in line
    assert "hunter2" not in line


def test_stderr_threshold_depends_on_debug(capsys: pytest.CaptureFixture[str]) -> None:
    logger_name = _logger_name()
    handle = setup_logging(debug=False, logger_name=logger_name)
    logger = logging.getLogger(logger_name)
    logger.debug("hidden detail")
    logger.warning("visible problem")
    shutdown_logging(handle)

    captured = capsys.readouterr().err
    assert "hidden detail" not in captured
    assert f"shellfix: WARNING {logger_name}: visible problem" in captured


def test_debug_mode_emits_debug_records(capsys: pytest.CaptureFixture[str]) -> None:
    logger_name = _logger_name()
    handle = setup_logging(debug=True, logger_name=logger_name)
    logging.getLogger(logger_name).debug("matching rules")
    shutdown_logging(handle)

    assert "matching rules" in capsys.readouterr().err


def test_multithreaded_logging_produces_valid_json_lines(tmp_path: Path) -> None:
    logger_name = _logger_name()
    handle = setup_logging(log_dir=tmp_path, logger_name=logger_name)
    logger = logging.getLogger(logger_name)

    def worker(thread_idx: int) -> None:
        with correlation_scope(rule=f"rule_{thread_idx}"):
            for index in range(20):
                logger.debug("thread=%d index=%d", thread_idx, index)

    threads = [threading.Thread(target=worker, args=(idx,)) for idx in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    shutdown_logging(handle)

    assert handle.log_path is not None
    parsed = _read_json_lines(handle.log_path)
    assert len(parsed) == 80
    for event in parsed:
        thread_idx = str(event["message"]).split()[0].split("=")[1]
        assert event["rule"] == f"rule_{thread_idx}"


def test_setup_replaces_previous_handle_and_shutdown_is_idempotent(tmp_path: Path) -> None:
    first = setup_logging(log_dir=tmp_path / "first", logger_name=_logger_name())
    second = setup_logging(log_dir=tmp_path / "second", logger_name=_logger_name())

    assert first.is_shutdown
    assert get_active_logging_handle() is second

    shutdown_logging()
    shutdown_logging()
    assert second.is_shutdown
    assert get_active_logging_handle() is None


def test_setup_survives_a_closed_stderr(monkeypatch: pytest.MonkeyPatch) -> None:
    stale = io.StringIO()
    monkeypatch.setattr(sys, "stderr", stale)
    first = setup_logging(logger_name=_logger_name())
    stale.close()
    monkeypatch.setattr(sys, "stderr", io.StringIO())

    second = setup_logging(logger_name=_logger_name())

    assert first.is_shutdown
    assert get_active_logging_handle() is second


def test_correlation_scope_nests_and_resets() -> None:
    with correlation_scope(rule="sudo"):
        with correlation_scope(script="apt install vim", rule=None):
            assert get_correlation_context() == {"script": "apt install vim"}
        assert get_correlation_context() == {"rule": "sudo"}
    assert get_correlation_context() == {}

    with pytest.raises(ValueError, match="correlation key"), correlation_scope(**{" ": "x"}):
        pass


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("GITHUB_TOKEN=ghp_abc git push", "GITHUB_TOKEN=***REDACTED*** git push"),
        (
            "curl -H 'Authorization: Bearer abc.def' api",
            "curl -H 'Authorization: ***REDACTED*** ***REDACTED***' api",
        ),
        ("mysql --password=hunter2 db", "mysql --password=***REDACTED*** db"),
        ("git push origin main", "git push origin main"),
    ],
)
def test_redact_masks_credentials_in_scripts(text: str, expected: str) -> None:
    assert redact(text) == expected

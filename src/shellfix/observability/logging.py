"""
shellfix — logging setup.

File: src/shellfix/observability/logging.py

Purpose
- Diagnostics for a short-lived CLI process: warnings (or everything, with
  ``--debug``) on stderr, and optionally a JSON-lines trace file for
  post-mortem inspection of which rules ran and what they proposed.

What should be included in this file
- ``setup_logging`` / ``shutdown_logging`` and the ``LoggingHandle`` they manage.
- ``correlation_scope`` binding fields such as ``rule`` to every record
  emitted inside it, including records emitted from worker threads.
- Redaction of credentials that failed commands commonly carry
  (``TOKEN=...`` assignments, ``Authorization: Bearer ...`` headers,
  ``--password=...`` flags).

Functional requirements
- Records are handed to a ``QueueListener`` so rule threads never block on I/O.
- stdout is never written to; it belongs to the corrected script.
- Calling ``setup_logging`` again replaces the previous handle.
"""

from __future__ import annotations

import atexit
import contextvars
import json
import logging
import logging.handlers
import queue
import re
import threading
from collections.abc import Iterator, Mapping
from contextlib import contextmanager, suppress
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import Final

LOG_FILENAME: Final[str] = "shellfix.jsonl"
REDACTED: Final[str] = "***REDACTED***"

_ROOT_LOGGER_NAME: Final[str] = "shellfix"
_STDERR_FORMAT: Final[str] = "shellfix: %(levelname)s %(name)s: %(message)s"

_SECRET_WORDS: Final[str] = r"api[_-]?key|token|password|passwd|secret|authorization"
_SECRET_ASSIGNMENT: Final[re.Pattern[str]] = re.compile(
    rf"(?i)(\b(?:[A-Z0-9_]*?_)?(?:{_SECRET_WORDS})\b\s*[:=]\s*)([^\s,;'\"]+)"
)
_SECRET_FLAG: Final[re.Pattern[str]] = re.compile(rf"(?i)(--(?:{_SECRET_WORDS})[= ])(\S+)")
_BEARER: Final[re.Pattern[str]] = re.compile(r"(?i)(\bbearer\s+)[A-Za-z0-9._~+/-]+=*")

_RECORD_ATTRIBUTES: Final[frozenset[str]] = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None))
) | {"message", "asctime", "correlation"}

_CORRELATION: contextvars.ContextVar[tuple[tuple[str, str], ...]] = contextvars.ContextVar(
    "shellfix_correlation", default=()
)

_handle_lock = threading.Lock()
_active_handle: LoggingHandle | None = None
_atexit_registered = False


def redact(text: str) -> str:
    """Mask credential values inside ``text``; the key names stay readable."""

    text = _BEARER.sub(lambda match: match.group(1) + REDACTED, text)
    text = _SECRET_FLAG.sub(lambda match: match.group(1) + REDACTED, text)
    return _SECRET_ASSIGNMENT.sub(lambda match: match.group(1) + REDACTED, text)


def _redact_extra(key: str, value: object) -> object:
    if re.search(_SECRET_WORDS, key, flags=re.IGNORECASE):
        return REDACTED
    if isinstance(value, str):
        return redact(value)
    if isinstance(value, Path):
        return str(value)
    return value


class _ContextQueueHandler(logging.handlers.QueueHandler):
    """Copy the caller's correlation fields onto the record before queueing."""

    def prepare(self, record: logging.LogRecord) -> logging.LogRecord:
        fields = get_correlation_context()
        if fields:
            record.correlation = fields
        return super().prepare(record)


class _JsonLineFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=UTC)
        line: dict[str, object] = {
            "timestamp": created.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": redact(record.getMessage()),
        }
        correlation = getattr(record, "correlation", None)
        if isinstance(correlation, Mapping):
            line.update(sorted(correlation.items()))

        extras = {
            key: _redact_extra(key, value)
            for key, value in vars(record).items()
            if key not in _RECORD_ATTRIBUTES and not key.startswith("_")
        }
        if extras:
            line["fields"] = extras
        # QueueHandler.prepare already rendered the traceback into exc_text.
        if record.exc_info is not None:
            line["exception"] = redact(self.formatException(record.exc_info))
        elif record.exc_text:
            line["exception"] = redact(record.exc_text)
        return json.dumps(line, sort_keys=True, ensure_ascii=False, default=repr)


@dataclass(slots=True, eq=False)
class LoggingHandle:
    """The queue listener feeding stderr and the optional trace file."""

    logger: logging.Logger
    log_path: Path | None
    queue_handler: logging.Handler
    listener: logging.handlers.QueueListener
    sinks: tuple[logging.Handler, ...]
    _closed: bool = field(default=False, init=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)

    @property
    def is_shutdown(self) -> bool:
        return self._closed

    def shutdown(self) -> None:
        """Drain queued records, then detach and close every handler."""

        with self._lock:
            if self._closed:
                return
            self.listener.stop()
            self.logger.removeHandler(self.queue_handler)
            self.queue_handler.close()
            for sink in self.sinks:
                # A captured or redirected stderr may already be closed.
                with suppress(ValueError):
                    sink.flush()
                with suppress(ValueError):
                    sink.close()
            self._closed = True


def setup_logging(
    debug: bool = False,
    *,
    log_dir: Path | str | None = None,
    logger_name: str = _ROOT_LOGGER_NAME,
) -> LoggingHandle:
    """Configure ``logger_name`` and return the active handle.

    Parameters
    ----------
    debug:
        Lower the stderr threshold from WARNING to DEBUG.
    log_dir:
        When given, every record is also written as JSON to
        ``<log_dir>/shellfix.jsonl``.
    logger_name:
        Logger to configure; module loggers below it propagate into it.
    """

    global _active_handle

    shutdown_logging()

    stderr_sink = logging.StreamHandler()
    stderr_sink.setLevel(logging.DEBUG if debug else logging.WARNING)
    stderr_sink.setFormatter(logging.Formatter(_STDERR_FORMAT))
    sinks: list[logging.Handler] = [stderr_sink]

    log_path: Path | None = None
    if log_dir is not None:
        log_path = Path(log_dir) / LOG_FILENAME
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_sink = logging.FileHandler(log_path, encoding="utf-8")
        file_sink.setLevel(logging.DEBUG)
        file_sink.setFormatter(_JsonLineFormatter())
        sinks.append(file_sink)

    logger = logging.getLogger(logger_name)
    logger.setLevel(logging.DEBUG if debug or log_path is not None else logging.WARNING)
    logger.propagate = False
    for stale in list(logger.handlers):
        logger.removeHandler(stale)
        stale.close()

    records: queue.SimpleQueue[logging.LogRecord] = queue.SimpleQueue()
    queue_handler = _ContextQueueHandler(records)
    listener = logging.handlers.QueueListener(records, *sinks, respect_handler_level=True)
    listener.start()
    logger.addHandler(queue_handler)

    handle = LoggingHandle(
        logger=logger,
        log_path=log_path,
        queue_handler=queue_handler,
        listener=listener,
        sinks=tuple(sinks),
    )
    with _handle_lock:
        _active_handle = handle
    _ensure_atexit_shutdown()
    return handle


def shutdown_logging(handle: LoggingHandle | None = None) -> None:
    """Shut down ``handle`` (default: the active one); safe to call repeatedly."""

    global _active_handle

    with _handle_lock:
        target = handle if handle is not None else _active_handle
        if target is None:
            return
        if _active_handle is target:
            _active_handle = None
    target.shutdown()


def get_active_logging_handle() -> LoggingHandle | None:
    with _handle_lock:
        return _active_handle


def get_correlation_context() -> dict[str, str]:
    return dict(_CORRELATION.get())


@contextmanager
def correlation_scope(**fields: str | None) -> Iterator[None]:
    """Bind ``fields`` to records logged inside the block; ``None`` unbinds a key."""

    merged = get_correlation_context()
    for key, value in fields.items():
        if not key.strip():
            raise ValueError("correlation key must not be empty")
        if value is None:
            merged.pop(key, None)
        else:
            merged[key] = str(value)
    token = _CORRELATION.set(tuple(merged.items()))
    try:
        yield
    finally:
        _CORRELATION.reset(token)


def _ensure_atexit_shutdown() -> None:
    global _atexit_registered
    if not _atexit_registered:
        atexit.register(shutdown_logging)
        _atexit_registered = True


__all__ = [
    "LOG_FILENAME",
    "LoggingHandle",
    "REDACTED",
    "correlation_scope",
    "get_active_logging_handle",
    "get_correlation_context",
    "redact",
    "setup_logging",
    "shutdown_logging",
]

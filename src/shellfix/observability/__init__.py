"""Observability exports."""

from shellfix.observability.logging import (
    LoggingHandle,
    correlation_scope,
    get_correlation_context,
    setup_logging,
    shutdown_logging,
)

__all__ = [
    "LoggingHandle",
    "correlation_scope",
    "get_correlation_context",
    "setup_logging",
    "shutdown_logging",
]

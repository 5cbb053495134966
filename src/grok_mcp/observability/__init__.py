"""Observability: structured logging and request metrics."""

from .logging import (
    BoundLogger,
    ConsoleRenderer,
    JsonRenderer,
    LogEntry,
    LogRenderer,
    NoOpRenderer,
    configure_logging,
    get_logger,
    log_context,
)
from .metrics import LatencySummary, MemoryMetricsBackend, MetricsBackend

__all__ = [
    # Logging
    "BoundLogger", "ConsoleRenderer", "JsonRenderer", "LogEntry", "LogRenderer", "NoOpRenderer",
    "configure_logging", "get_logger", "log_context",
    # Metrics
    "LatencySummary", "MemoryMetricsBackend", "MetricsBackend",
]

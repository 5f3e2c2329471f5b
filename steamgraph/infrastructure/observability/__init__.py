"""Observability and logging facades."""

from .logging import (
    LogContext,
    configure_logging,
    get_logger,
    log_context,
    log_exception,
)
from .metrics import (
    Timer,
    format_prometheus,
    get_counter_value,
    get_metrics_summary,
    increment_counter,
    observe_histogram,
    record_api_request,
    record_sync_feed,
    reset_metrics,
)

__all__ = [
    # Logging
    "LogContext",
    "configure_logging",
    "get_logger",
    "log_context",
    "log_exception",
    # Metrics
    "Timer",
    "format_prometheus",
    "get_counter_value",
    "get_metrics_summary",
    "increment_counter",
    "observe_histogram",
    "record_api_request",
    "record_sync_feed",
    "reset_metrics",
]

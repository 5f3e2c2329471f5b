"""Simple in-process metrics collection for Steamgraph.

This module provides lightweight counters and histograms for tracking sync
health without external dependencies. Metrics are stored in memory and are
exported via the ``/metrics`` endpoint or logged at the end of a pass.
"""

from __future__ import annotations

import threading
import time
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Mapping

LabelKey = tuple[tuple[str, str | None], ...]


def _labels_to_key(labels: Mapping[str, str | None] | None) -> LabelKey:
    if labels is None:
        return ()
    return tuple(sorted(labels.items()))


# ---------------------------------------------------------------------------
# Metric storage
# ---------------------------------------------------------------------------


@dataclass
class Counter:
    """A monotonically increasing counter."""

    name: str
    help_text: str = ""
    _values: dict[LabelKey, float] = field(
        default_factory=lambda: defaultdict(float)
    )
    _lock: threading.Lock = field(default_factory=threading.Lock)

    def inc(
        self, value: float = 1.0, labels: Mapping[str, str | None] | None = None
    ) -> None:
        """Increment the counter by the given value."""
        key = _labels_to_key(labels)
        with self._lock:
            self._values[key] += value

    def get(self, labels: Mapping[str, str | None] | None = None) -> float:
        """Get the current counter value."""
        key = _labels_to_key(labels)
        with self._lock:
            return self._values.get(key, 0.0)


@dataclass
class Histogram:
    """A histogram keeping raw observations per label set."""

    name: str
    help_text: str = ""
    _observations: dict[LabelKey, list[float]] = field(
        default_factory=lambda: defaultdict(list)
    )
    _lock: threading.Lock = field(default_factory=threading.Lock)

    def observe(
        self, value: float, labels: Mapping[str, str | None] | None = None
    ) -> None:
        """Record an observation."""
        key = _labels_to_key(labels)
        with self._lock:
            self._observations[key].append(value)

    def get_stats(
        self, labels: Mapping[str, str | None] | None = None
    ) -> dict[str, float]:
        """Get summary statistics for the histogram."""
        key = _labels_to_key(labels)
        with self._lock:
            values = list(self._observations.get(key, []))
        if not values:
            return {"count": 0, "sum": 0.0, "avg": 0.0}
        return {
            "count": len(values),
            "sum": sum(values),
            "avg": sum(values) / len(values),
        }


# ---------------------------------------------------------------------------
# Global metric registry
# ---------------------------------------------------------------------------


class MetricRegistry:
    """Global registry for all metrics."""

    def __init__(self) -> None:
        self._counters: dict[str, Counter] = {}
        self._histograms: dict[str, Histogram] = {}
        self._lock = threading.Lock()

    def counter(self, name: str, help_text: str = "") -> Counter:
        """Get or create a counter."""
        with self._lock:
            if name not in self._counters:
                self._counters[name] = Counter(name=name, help_text=help_text)
            return self._counters[name]

    def histogram(self, name: str, help_text: str = "") -> Histogram:
        """Get or create a histogram."""
        with self._lock:
            if name not in self._histograms:
                self._histograms[name] = Histogram(name=name, help_text=help_text)
            return self._histograms[name]

    def all_counters(self) -> dict[str, Counter]:
        with self._lock:
            return dict(self._counters)

    def all_histograms(self) -> dict[str, Histogram]:
        with self._lock:
            return dict(self._histograms)

    def clear(self) -> None:
        with self._lock:
            self._counters.clear()
            self._histograms.clear()


# Default global registry
_registry = MetricRegistry()


# ---------------------------------------------------------------------------
# Convenience functions
# ---------------------------------------------------------------------------


def increment_counter(
    name: str,
    value: float = 1.0,
    labels: Mapping[str, str | None] | None = None,
    help_text: str = "",
) -> None:
    """Increment a counter by name, creating it if needed."""
    _registry.counter(name, help_text).inc(value, labels)


def observe_histogram(
    name: str,
    value: float,
    labels: Mapping[str, str | None] | None = None,
    help_text: str = "",
) -> None:
    """Record an observation in a histogram, creating it if needed."""
    _registry.histogram(name, help_text).observe(value, labels)


def get_counter_value(
    name: str, labels: Mapping[str, str | None] | None = None
) -> float:
    return _registry.counter(name).get(labels)


def reset_metrics() -> None:
    """Drop every registered metric (used by tests)."""
    _registry.clear()


class Timer:
    """Context manager for timing operations and recording to a histogram."""

    def __init__(
        self,
        histogram_name: str,
        labels: Mapping[str, str | None] | None = None,
        help_text: str = "",
    ) -> None:
        self.histogram_name = histogram_name
        self.labels = labels
        self.help_text = help_text
        self._start: float = 0.0
        self.elapsed: float = 0.0

    def __enter__(self) -> "Timer":
        self._start = time.perf_counter()
        return self

    def __exit__(self, *args: object) -> None:
        self.elapsed = time.perf_counter() - self._start
        observe_histogram(self.histogram_name, self.elapsed, self.labels, self.help_text)


# ---------------------------------------------------------------------------
# Predefined metrics for Steamgraph
# ---------------------------------------------------------------------------

STEAM_REQUESTS = "steam_api_requests_total"
STEAM_REQUEST_DURATION = "steam_api_request_duration_seconds"

SYNC_FEEDS = "sync_feeds_total"
SYNC_FEED_DURATION = "sync_feed_duration_seconds"
SYNC_ITEMS_WRITTEN = "sync_items_written_total"


def record_api_request(endpoint: str, status: int | None, duration: float) -> None:
    """Record a Steam API request with its outcome and duration."""
    labels = {"endpoint": endpoint, "status": str(status) if status else "error"}
    increment_counter(STEAM_REQUESTS, labels=labels, help_text="Total Steam API requests")
    observe_histogram(
        STEAM_REQUEST_DURATION,
        duration,
        labels={"endpoint": endpoint},
        help_text="Steam API request duration in seconds",
    )


def record_sync_feed(feed: str, status: str, duration: float, items_written: int) -> None:
    """Record the outcome of one feed within a sync pass."""
    increment_counter(
        SYNC_FEEDS,
        labels={"feed": feed, "status": status},
        help_text="Total feed syncs by outcome",
    )
    observe_histogram(
        SYNC_FEED_DURATION,
        duration,
        labels={"feed": feed},
        help_text="Feed sync duration in seconds",
    )
    if items_written:
        increment_counter(
            SYNC_ITEMS_WRITTEN,
            value=float(items_written),
            labels={"feed": feed},
            help_text="Total rows upserted by sync",
        )


# ---------------------------------------------------------------------------
# Export utilities
# ---------------------------------------------------------------------------


def _label_str(key: LabelKey) -> str:
    return ",".join(f"{k}={v}" for k, v in key) if key else "default"


def get_metrics_summary() -> dict[str, object]:
    """Return a summary of all metrics for logging or API response."""
    counters: dict[str, dict[str, float]] = {}
    histograms: dict[str, dict[str, dict[str, float]]] = {}

    for name, counter in _registry.all_counters().items():
        with counter._lock:
            items = list(counter._values.items())
        counters[name] = {_label_str(key): value for key, value in items}

    for name, histogram in _registry.all_histograms().items():
        with histogram._lock:
            keys = list(histogram._observations)
        histograms[name] = {
            _label_str(key): histogram.get_stats(dict(key) if key else None)
            for key in keys
        }

    return {"counters": counters, "histograms": histograms}


def format_prometheus() -> str:
    """Format metrics in Prometheus text exposition format."""
    lines: list[str] = []

    for name, counter in _registry.all_counters().items():
        if counter.help_text:
            lines.append(f"# HELP {name} {counter.help_text}")
        lines.append(f"# TYPE {name} counter")
        with counter._lock:
            items = list(counter._values.items())
        for key, value in items:
            if key:
                label_str = ",".join(f'{k}="{v}"' for k, v in key)
                lines.append(f"{name}{{{label_str}}} {value}")
            else:
                lines.append(f"{name} {value}")

    for name, histogram in _registry.all_histograms().items():
        if histogram.help_text:
            lines.append(f"# HELP {name} {histogram.help_text}")
        lines.append(f"# TYPE {name} summary")
        with histogram._lock:
            keys = list(histogram._observations)
        for key in keys:
            stats = histogram.get_stats(dict(key) if key else None)
            if key:
                label_str = ",".join(f'{k}="{v}"' for k, v in key)
                lines.append(f"{name}_count{{{label_str}}} {stats['count']}")
                lines.append(f"{name}_sum{{{label_str}}} {stats['sum']}")
            else:
                lines.append(f"{name}_count {stats['count']}")
                lines.append(f"{name}_sum {stats['sum']}")

    return "\n".join(lines)

"""Metrics backends for request counters and latency.

The pipeline talks to a `MetricsBackend`; any statsd-like client with
`increment` and `timing` fits. `MemoryMetricsBackend` keeps everything in
process so the health tool can report it.

Example:
    >>> backend = MemoryMetricsBackend()
    >>> backend.increment("grok_mcp.requests_total", tags={"tool": "grok_ask"})
    >>> backend.render()
    'grok_mcp_requests_total{tool="grok_ask"} 1'
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

MetricKey = tuple[str, tuple[tuple[str, str], ...]]


@runtime_checkable
class MetricsBackend(Protocol):
    """Protocol for metrics collection backends."""

    def increment(self, metric: str, value: int = 1, tags: dict[str, str] | None = None) -> None: ...
    def timing(self, metric: str, value_ms: float, tags: dict[str, str] | None = None) -> None: ...


@dataclass(slots=True)
class LatencySummary:
    """Running count/sum/min/max of observed durations (milliseconds)."""

    count: int = 0
    total: float = 0.0
    min: float = float("inf")
    max: float = 0.0

    def observe(self, value_ms: float) -> None:
        self.count += 1
        self.total += value_ms
        self.min = value_ms if value_ms < self.min else self.min
        self.max = value_ms if value_ms > self.max else self.max

    @property
    def mean(self) -> float:
        return self.total / self.count if self.count else 0.0

    def to_dict(self) -> dict[str, float | int]:
        return {
            "count": self.count,
            "sum": round(self.total, 3),
            "min": round(self.min, 3) if self.count else 0.0,
            "max": round(self.max, 3),
            "mean": round(self.mean, 3),
        }


@dataclass(slots=True)
class MemoryMetricsBackend:
    """In-process counters and latency summaries.

    Values only grow for the lifetime of the backend. Thread-safe.
    """

    counters: dict[MetricKey, int] = field(default_factory=dict)
    timings: dict[MetricKey, LatencySummary] = field(default_factory=dict)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def increment(self, metric: str, value: int = 1, tags: dict[str, str] | None = None) -> None:
        key = _key(metric, tags)
        with self._lock:
            self.counters[key] = self.counters.get(key, 0) + value

    def timing(self, metric: str, value_ms: float, tags: dict[str, str] | None = None) -> None:
        key = _key(metric, tags)
        with self._lock:
            self.timings.setdefault(key, LatencySummary()).observe(value_ms)

    def count(self, metric: str, **tags: str) -> int:
        """Current counter value (0 if never incremented)."""
        with self._lock:
            return self.counters.get(_key(metric, tags), 0)

    def summary(self, metric: str, **tags: str) -> LatencySummary | None:
        with self._lock:
            return self.timings.get(_key(metric, tags))

    def snapshot(self) -> dict[str, dict[str, object]]:
        """Plain-data copy: {"counters": {series: n}, "timings": {series: summary}}."""
        with self._lock:
            return {
                "counters": {_series(k): v for k, v in sorted(self.counters.items())},
                "timings": {_series(k): s.to_dict() for k, s in sorted(self.timings.items())},
            }

    def render(self) -> str:
        """Text exposition, one series per line."""
        lines: list[str] = []
        with self._lock:
            for k, v in sorted(self.counters.items()):
                lines.append(f"{_series(k)} {v}")
            for k, s in sorted(self.timings.items()):
                name, tags = k
                for stat, val in (("count", s.count), ("sum", round(s.total, 3))):
                    lines.append(f"{_series((f'{name}_{stat}', tags))} {val}")
        return "\n".join(lines)


def _key(metric: str, tags: dict[str, str] | None) -> MetricKey:
    return metric, tuple(sorted((tags or {}).items()))


def _series(key: MetricKey) -> str:
    name, tags = key
    name = name.replace(".", "_")
    if not tags:
        return name
    return name + "{" + ",".join(f'{k}="{v}"' for k, v in tags) + "}"

"""
Capability metrics: per-capability call counters and latency windows.

Updated by the HTTP host around registry calls; the registry itself records
nothing.
"""

import logging
from collections import deque
from dataclasses import dataclass, field
from threading import Lock
from typing import Any

logger = logging.getLogger("rahl.metrics")

LATENCY_WINDOW = 1000


@dataclass
class CapabilityCounter:
    name: str
    description: str
    value: int = 0
    per_capability: dict[str, int] = field(default_factory=dict)

    def inc(self, capability: str, value: int = 1):
        self.value += value
        self.per_capability[capability] = self.per_capability.get(capability, 0) + value


@dataclass
class LatencyWindow:
    """Most recent execution times for each capability, in seconds."""
    name: str
    description: str
    windows: dict[str, deque] = field(default_factory=dict)
    totals: dict[str, float] = field(default_factory=dict)
    count: int = 0

    def observe(self, capability: str, seconds: float):
        window = self.windows.setdefault(capability, deque(maxlen=LATENCY_WINDOW))
        window.append(seconds)
        self.totals[capability] = self.totals.get(capability, 0.0) + seconds
        self.count += 1

    def percentile(self, p: float, capability: str | None = None) -> float:
        if capability is None:
            samples = sorted(s for w in self.windows.values() for s in w)
        else:
            samples = sorted(self.windows.get(capability, ()))
        if not samples:
            return 0.0
        return samples[min(int(len(samples) * p), len(samples) - 1)]

    def by_capability(self) -> dict[str, dict[str, float]]:
        return {
            name: {"p50": self.percentile(0.5, name), "p95": self.percentile(0.95, name), "total": self.totals[name]}
            for name in self.windows
        }


class CapabilityMetrics:
    """Thread-safe metrics collector."""

    def __init__(self):
        self._lock = Lock()
        self.calls = CapabilityCounter("rahl_capability_calls_total", "Capability executions")
        self.failures = CapabilityCounter("rahl_capability_failures_total", "Capability executions that raised")
        self.not_found = CapabilityCounter("rahl_capability_not_found_total", "Requests for unknown capabilities")
        self.detections = CapabilityCounter("rahl_detections_total", "Detection results by capability")
        self.latency = LatencyWindow("rahl_capability_duration_seconds", "Capability execution time")

    def record_call(self, capability: str, seconds: float):
        with self._lock:
            self.calls.inc(capability)
            self.latency.observe(capability, seconds)

    def record_failure(self, capability: str):
        with self._lock:
            self.failures.inc(capability)

    def record_not_found(self, capability: str):
        with self._lock:
            self.not_found.inc(capability)

    def record_detection(self, capability: str | None):
        with self._lock:
            self.detections.inc(capability or "none")

    def get_summary(self) -> dict[str, Any]:
        with self._lock:
            return {
                "calls": self.calls.value,
                "failures": self.failures.value,
                "not_found": self.not_found.value,
                "detections": dict(self.detections.per_capability),
                "calls_by_capability": dict(self.calls.per_capability),
                "duration_p50": self.latency.percentile(0.5),
                "duration_p95": self.latency.percentile(0.95),
                "duration_by_capability": self.latency.by_capability(),
            }


_metrics: CapabilityMetrics | None = None


def get_metrics() -> CapabilityMetrics:
    global _metrics
    if _metrics is None:
        _metrics = CapabilityMetrics()
    return _metrics

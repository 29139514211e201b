"""
BrandColor Metrics Collection
In-process counters and stage timings for color resolution.
"""
import time
from collections import defaultdict, Counter
from contextlib import contextmanager
from threading import Lock
from typing import Dict, List, Optional

import numpy as np

RESOLUTIONS_TOTAL = "brand_resolutions_total"
RESOLUTIONS_EMPTY = "brand_resolutions_empty_total"
SOURCE_PREFIX = "brand_color_source_total"
FAILURE_PREFIX = "brand_failed_total"


class MetricsCollector:
    """Thread-safe counters and timing samples, keyed by metric name."""

    def __init__(self):
        self._lock = Lock()
        self._counters: Dict[str, int] = Counter()
        self._timings: Dict[str, List[float]] = defaultdict(list)
        self._start_time = time.time()

    def increment(self, name: str, amount: int = 1):
        with self._lock:
            self._counters[name] += amount

    def increment_resolution_count(self):
        self.increment(RESOLUTIONS_TOTAL)

    def increment_empty_count(self):
        """Count a resolution that produced neither color."""
        self.increment(RESOLUTIONS_EMPTY)

    def increment_source_count(self, source: str):
        """Count a color supplied by ``source`` (meta, favicon or derived)."""
        self.increment(f"{SOURCE_PREFIX}_{source}")

    def increment_failure_count(self, error_type: str):
        self.increment(f"{FAILURE_PREFIX}_{error_type}")

    def record_timing(self, operation: str, duration_ms: float):
        with self._lock:
            self._timings[f"{operation}_duration_ms"].append(duration_ms)

    @contextmanager
    def timed(self, operation: str):
        """Record the wall time of the enclosed block under ``operation``."""
        start_time = time.time()
        try:
            yield
        finally:
            self.record_timing(operation, (time.time() - start_time) * 1000)

    def get_counters(self) -> Dict[str, int]:
        with self._lock:
            return dict(self._counters)

    def get_timing_stats(self) -> Dict[str, Dict[str, float]]:
        """Count, mean, min, max, p50 and p95 per timed operation."""
        with self._lock:
            samples = {name: np.asarray(values) for name, values in self._timings.items() if values}

        stats = {}
        for name, values in samples.items():
            p50, p95 = np.percentile(values, [50, 95])
            stats[name] = {
                "count": int(values.size),
                "mean": float(values.mean()),
                "min": float(values.min()),
                "max": float(values.max()),
                "p50": float(p50),
                "p95": float(p95)
            }
        return stats

    def get_summary(self) -> Dict[str, object]:
        return {
            "uptime_seconds": time.time() - self._start_time,
            "counters": self.get_counters(),
            "timing_stats": self.get_timing_stats()
        }

    def reset(self):
        with self._lock:
            self._counters.clear()
            self._timings.clear()
            self._start_time = time.time()


# Global metrics instance
_metrics: Optional[MetricsCollector] = None


def get_metrics() -> MetricsCollector:
    """Get or create global metrics collector."""
    global _metrics
    if _metrics is None:
        _metrics = MetricsCollector()
    return _metrics


def reset_metrics():
    """Reset global metrics (for testing)."""
    global _metrics
    if _metrics is not None:
        _metrics.reset()

"""
Container metrics.

Tracks how many beans were created, how many circular references were served
from early references, which creations failed and how long creation took.
"""

import threading
import time
from typing import Dict, List, Optional, Any
from dataclasses import dataclass, field
from collections import defaultdict


BEANS_CREATED = 'beans_created'
CIRCULAR_REFERENCES = 'circular_references_resolved'
BEAN_CREATION = 'bean_creation'


@dataclass
class Metric:
    """Single metric value."""
    name: str
    value: float
    timestamp: float = field(default_factory=time.time)
    tags: Dict[str, str] = field(default_factory=dict)


class MetricsCollector:
    """
    Collects counters, timings and errors.

    Safe to share between threads; every update takes an internal lock.
    """

    def __init__(self, enabled: bool = True):
        self.enabled = enabled
        self.counters: Dict[str, int] = defaultdict(int)
        self.timings: Dict[str, List[float]] = defaultdict(list)
        self.errors: Dict[str, int] = defaultdict(int)
        self.metrics: List[Metric] = []
        self._lock = threading.Lock()

    def increment(self, name: str, value: int = 1, tags: Optional[Dict[str, str]] = None):
        """
        Increment a counter metric.

        Args:
            name: Metric name
            value: Increment value
            tags: Optional tags
        """
        if not self.enabled:
            return
        with self._lock:
            self.counters[name] += value
            self.metrics.append(Metric(name=f"{name}_count", value=value, tags=tags or {}))

    def record_timing(self, name: str, duration: float, tags: Optional[Dict[str, str]] = None):
        """
        Record a timing metric.

        Args:
            name: Metric name
            duration: Duration in seconds
            tags: Optional tags
        """
        if not self.enabled:
            return
        with self._lock:
            self.timings[name].append(duration)
            self.metrics.append(Metric(name=f"{name}_duration", value=duration, tags=tags or {}))

    def record_error(self, name: str, error_type: str = "unknown"):
        """
        Record an error.

        Args:
            name: Operation name (for the container, the bean name)
            error_type: Type of error
        """
        if not self.enabled:
            return
        with self._lock:
            self.errors[f"{name}:{error_type}"] += 1
        self.increment(f"{name}_errors", tags={"error_type": error_type})

    def get_counter(self, name: str) -> int:
        return self.counters.get(name, 0)

    def get_avg_timing(self, name: str) -> Optional[float]:
        """Get average timing for a metric."""
        timings = self.timings.get(name, [])
        if not timings:
            return None
        return sum(timings) / len(timings)

    def timings_by_tag(self, name: str, tag: str) -> Dict[str, float]:
        """
        Total duration of a timing metric grouped by one of its tags.

        `timings_by_tag(BEAN_CREATION, 'bean')` gives the creation time of each
        bean; a bean's time includes the creation of the dependencies it pulled in.
        """
        totals: Dict[str, float] = defaultdict(float)
        with self._lock:
            for metric in self.metrics:
                if metric.name == f"{name}_duration" and tag in metric.tags:
                    totals[metric.tags[tag]] += metric.value
        return dict(totals)

    def get_error_count(self, name: str) -> int:
        """Get error count for an operation."""
        return sum(count for key, count in self.errors.items() if key.startswith(f"{name}:"))

    def get_summary(self) -> Dict[str, Any]:
        """Get summary of all metrics."""
        with self._lock:
            return {
                'counters': dict(self.counters),
                'avg_timings': {
                    name: sum(values) / len(values)
                    for name, values in self.timings.items() if values
                },
                'errors': dict(self.errors),
                'total_metrics': len(self.metrics)
            }

    def reset(self):
        """Reset all metrics."""
        with self._lock:
            self.counters.clear()
            self.timings.clear()
            self.errors.clear()
            self.metrics.clear()


class Timer:
    """
    Context manager for timing operations.

    Usage:
        with Timer(BEAN_CREATION, collector, tags={'bean': name}):
            # do work
    """

    def __init__(self, name: str, collector: Optional[MetricsCollector] = None, tags: Optional[Dict[str, str]] = None):
        self.name = name
        self.collector = collector
        self.tags = tags or {}
        self.start_time: Optional[float] = None

    def __enter__(self):
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Stop timing; only successful blocks are recorded."""
        if self.start_time is not None and self.collector and exc_type is None:
            self.collector.record_timing(self.name, self.elapsed(), self.tags)
        return False

    def elapsed(self) -> float:
        """Get elapsed time."""
        if self.start_time is not None:
            return time.perf_counter() - self.start_time
        return 0.0

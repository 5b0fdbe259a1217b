"""Span helper and bounded timing samples for slow operations."""
from __future__ import annotations

import time
from collections import defaultdict, deque
from contextlib import contextmanager
from typing import Deque, Dict, Iterator, Optional

from pydantic import BaseModel

MAX_SAMPLES = 100


class TimingStats(BaseModel):
    avg: float
    min: float
    max: float
    count: int


class PerformanceMonitor:
    """Keeps the most recent duration samples per operation."""

    def __init__(self, max_samples: int = MAX_SAMPLES):
        self.max_samples = max_samples
        self._samples: Dict[str, Deque[float]] = defaultdict(lambda: deque(maxlen=self.max_samples))

    def record(self, operation: str, ms: float) -> None:
        self._samples[operation].append(ms)

    def stats(self, operation: str) -> Optional[TimingStats]:
        values = self._samples.get(operation)
        if not values:
            return None
        return TimingStats(
            avg=sum(values) / len(values),
            min=min(values),
            max=max(values),
            count=len(values),
        )

    def snapshot(self) -> Dict[str, TimingStats]:
        out: Dict[str, TimingStats] = {}
        for name in list(self._samples):
            stats = self.stats(name)
            if stats is not None:
                out[name] = stats
        return out

    def clear(self) -> None:
        self._samples.clear()


@contextmanager
def span(monitor: Optional[PerformanceMonitor], name: str) -> Iterator[None]:
    start = time.perf_counter()
    try:
        yield
    finally:
        if monitor is not None:
            monitor.record(name, (time.perf_counter() - start) * 1000)


__all__ = ["MAX_SAMPLES", "PerformanceMonitor", "TimingStats", "span"]

"""Observability utilities for the interview simulator."""
from .logger import log_event
from .tracing import PerformanceMonitor, TimingStats, span

__all__ = ["PerformanceMonitor", "TimingStats", "log_event", "span"]

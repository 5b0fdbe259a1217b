"""Countdown helpers; remaining time is always derived from wall-clock timestamps."""
from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import Optional

from config.settings import settings


def as_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def time_remaining(start_time: Optional[datetime], duration_seconds: int, now: Optional[datetime] = None) -> int:
    """Seconds left of ``duration_seconds`` counted from ``start_time``, rounded up, never negative."""

    if start_time is None:
        return duration_seconds
    current = as_utc(now) if now else utcnow()
    elapsed = (current - as_utc(start_time)).total_seconds()
    return max(0, math.ceil(duration_seconds - elapsed))


def follow_up_remaining(started_at: Optional[datetime], now: Optional[datetime] = None) -> int:
    return time_remaining(started_at, settings.FOLLOW_UP_SECONDS, now)


def format_clock(seconds: int) -> str:
    """Render ``seconds`` as ``m:ss``."""

    seconds = max(0, int(seconds))
    return f"{seconds // 60}:{seconds % 60:02d}"


__all__ = ["as_utc", "follow_up_remaining", "format_clock", "time_remaining", "utcnow"]

from __future__ import annotations  # Client-side rate limiting and response caching

import hashlib
import time
from collections import deque
from dataclasses import dataclass
from typing import Any, Callable, Deque, Dict, Iterable, Optional

Clock = Callable[[], float]

WINDOW_S = 60.0


class RateLimiter:  # Rolling-window cap on outbound calls, shared by all routes
    def __init__(self, max_calls: int = 10, window_s: float = WINDOW_S, clock: Optional[Clock] = None):
        if max_calls < 1:
            raise ValueError("max_calls must be at least 1")
        self.max_calls = max_calls
        self.window_s = window_s
        self._clock = clock or time.monotonic
        self._stamps: Deque[float] = deque()

    def _evict(self, now: float) -> None:
        cutoff = now - self.window_s
        while self._stamps and self._stamps[0] <= cutoff:
            self._stamps.popleft()

    def try_acquire(self) -> bool:  # Record a call when under the cap
        now = self._clock()
        self._evict(now)
        if len(self._stamps) >= self.max_calls:
            return False
        self._stamps.append(now)
        return True

    def remaining(self) -> int:
        self._evict(self._clock())
        return self.max_calls - len(self._stamps)

    def reset(self) -> None:
        self._stamps.clear()


@dataclass
class _CacheEntry:
    data: Any
    stored_at: float
    ttl_s: float


class ResponseCache:  # TTL cache with bounded capacity
    def __init__(
        self,
        max_size: int = 50,
        ttl_s: float = 300.0,
        keep_after_trim: int = 40,
        clock: Optional[Clock] = None,
    ):
        self.max_size = max_size
        self.ttl_s = ttl_s
        self.keep_after_trim = min(keep_after_trim, max_size)
        self._clock = clock or time.monotonic
        self._entries: Dict[str, _CacheEntry] = {}

    @staticmethod
    def make_key(*parts: Iterable[str] | str) -> str:  # Stable digest over ordered parts
        digest = hashlib.sha256()
        for part in parts:
            text = part if isinstance(part, str) else "\x1f".join(part)
            digest.update(text.encode("utf-8"))
            digest.update(b"\x1e")
        return digest.hexdigest()

    def get(self, key: str) -> Any:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() > entry.stored_at + entry.ttl_s:
            del self._entries[key]
            return None
        return entry.data

    def set(self, key: str, data: Any, ttl_s: Optional[float] = None) -> None:
        if key not in self._entries and len(self._entries) >= self.max_size:
            self.cleanup()
        self._entries[key] = _CacheEntry(data=data, stored_at=self._clock(), ttl_s=ttl_s or self.ttl_s)

    def pop(self, key: str) -> Any:
        entry = self._entries.pop(key, None)
        return entry.data if entry else None

    def cleanup(self) -> None:  # Drop expired entries, then the oldest beyond the trim mark
        now = self._clock()
        for key in [k for k, e in self._entries.items() if now > e.stored_at + e.ttl_s]:
            del self._entries[key]
        if len(self._entries) >= self.max_size:
            ordered = sorted(self._entries.items(), key=lambda item: item[1].stored_at)
            for key, _ in ordered[: len(ordered) - self.keep_after_trim]:
                del self._entries[key]

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


__all__ = ["Clock", "RateLimiter", "ResponseCache", "WINDOW_S"]

"""Sliding-window rate limiting for chat messages.

The store is injected rather than held in module scope, so a single process
can use the in-memory store while a multi-instance deployment swaps in a
shared one behind the same protocol.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
import math
import threading
import time
from typing import Protocol, runtime_checkable


@runtime_checkable
class RateLimitStore(Protocol):
    """Counter store keyed by caller identity."""

    def check_and_record(self, key: str, window_ms: int, max_count: int) -> bool:  # pragma: no cover - Protocol only
        """Record an event for ``key`` and return True if it is within the limit."""


@runtime_checkable
class RateLimitInspector(Protocol):
    """Optional read-only view a store may offer for reporting."""

    def remaining(self, key: str, window_ms: int, max_count: int) -> int:  # pragma: no cover - Protocol only
        """Return how many more events fit in the current window."""

    def reset_in_ms(self, key: str, window_ms: int) -> float:  # pragma: no cover - Protocol only
        """Return milliseconds until the window frees a slot."""


def _monotonic_ms() -> float:
    return time.monotonic() * 1000.0


class InMemoryRateLimitStore:
    """Per-process store keeping recent event timestamps per key."""

    def __init__(self, clock: Callable[[], float] = _monotonic_ms) -> None:
        self._clock = clock
        self._events: dict[str, list[float]] = {}
        self._lock = threading.Lock()

    def _recent(self, key: str, window_ms: int, now: float) -> list[float]:
        """Events of ``key`` inside the window; idle keys are dropped."""
        recent = [stamp for stamp in self._events.get(key, []) if now - stamp < window_ms]
        if not recent:
            self._events.pop(key, None)
        return recent

    def _prune(self, window_ms: int, now: float) -> None:
        idle = [key for key, stamps in self._events.items() if not stamps or now - stamps[-1] >= window_ms]
        for key in idle:
            del self._events[key]

    def check_and_record(self, key: str, window_ms: int, max_count: int) -> bool:
        with self._lock:
            now = self._clock()
            self._prune(window_ms, now)
            recent = self._recent(key, window_ms, now)
            if len(recent) >= max_count:
                if recent:
                    self._events[key] = recent
                return False
            recent.append(now)
            self._events[key] = recent
            return True

    def tracked_keys(self) -> int:
        """Number of keys holding events."""
        with self._lock:
            return len(self._events)

    def remaining(self, key: str, window_ms: int, max_count: int) -> int:
        with self._lock:
            recent = self._recent(key, window_ms, self._clock())
        return max(max_count - len(recent), 0)

    def reset_in_ms(self, key: str, window_ms: int) -> float:
        """Milliseconds until the oldest event in the window expires."""
        with self._lock:
            now = self._clock()
            recent = self._recent(key, window_ms, now)
        if not recent:
            return 0.0
        return max(window_ms - (now - recent[0]), 0.0)

    def reset(self, key: str | None = None) -> None:
        with self._lock:
            if key is None:
                self._events.clear()
            else:
                self._events.pop(key, None)


@dataclass(frozen=True)
class RateLimitDecision:
    allowed: bool
    remaining: int
    limit: int
    window_ms: int
    reset_ms: float

    def to_meta(self) -> dict[str, float | int]:
        return {
            "remaining": self.remaining,
            "limit": self.limit,
            "windowMs": self.window_ms,
            "resetMs": self.reset_ms,
        }


class RateLimitExceededError(RuntimeError):
    """Raised when a user sends more messages than the window allows."""

    def __init__(self, decision: RateLimitDecision) -> None:
        self.decision = decision
        self.limit = decision.limit
        self.window_ms = decision.window_ms
        self.reset_ms = decision.reset_ms
        seconds = max(math.ceil(decision.reset_ms / 1000), 0)
        super().__init__(
            f"Rate limit reached: {decision.limit}/{round(decision.window_ms / 1000)}s. Try again in {seconds}s."
        )


class RateLimiter:
    """Applies one window/limit policy on top of a store."""

    def __init__(self, store: RateLimitStore, *, window_ms: int, max_count: int) -> None:
        self.store = store
        self.window_ms = window_ms
        self.max_count = max_count

    def check(self, key: str) -> RateLimitDecision:
        allowed = self.store.check_and_record(key, self.window_ms, self.max_count)
        remaining = 0
        reset_ms = 0.0
        if isinstance(self.store, RateLimitInspector):
            remaining = self.store.remaining(key, self.window_ms, self.max_count)
            reset_ms = self.store.reset_in_ms(key, self.window_ms)
        return RateLimitDecision(
            allowed=allowed,
            remaining=remaining,
            limit=self.max_count,
            window_ms=self.window_ms,
            reset_ms=reset_ms,
        )

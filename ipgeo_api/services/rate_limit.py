"""Fixed-window request rate limiting.

Counters live in a ``CounterStore``. ``InMemoryCounterStore`` keeps them in
process memory, which is only correct for a single-instance deployment; a
multi-instance deployment needs a shared store implementing the same
interface.
"""

import logging
import math
import threading
import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WindowState:
    """Request count of one key inside its current window."""

    count: int
    reset_at: float


@dataclass(frozen=True)
class RateLimitResult:
    """Outcome of counting one request."""

    allowed: bool
    limit: int
    remaining: int
    reset_after: int  # seconds until the window resets


class CounterStore(ABC):
    """Storage for per-key request counters."""

    @abstractmethod
    def increment(self, key: str, window_seconds: float, now: float) -> WindowState:
        """Count one request for key and return the updated window."""

    @abstractmethod
    def sweep(self, now: float) -> int:
        """Drop windows that ended before now. Returns the number dropped."""

    @abstractmethod
    def reset(self) -> None:
        """Forget all counters."""


class InMemoryCounterStore(CounterStore):
    """Thread-safe counters held in a dict.

    Expired windows are swept every ``sweep_interval`` increments so that
    clients which stop sending requests do not accumulate.
    """

    def __init__(self, sweep_interval: int = 1000) -> None:
        self._windows: dict[str, WindowState] = {}
        self._lock = threading.Lock()
        self._sweep_interval = sweep_interval
        self._since_sweep = 0

    def __len__(self) -> int:
        return len(self._windows)

    def increment(self, key: str, window_seconds: float, now: float) -> WindowState:
        with self._lock:
            self._since_sweep += 1
            if self._since_sweep >= self._sweep_interval:
                self._sweep_locked(now)

            current = self._windows.get(key)
            if current is None or current.reset_at <= now:
                current = WindowState(count=1, reset_at=now + window_seconds)
            else:
                current = WindowState(count=current.count + 1, reset_at=current.reset_at)
            self._windows[key] = current
            return current

    def sweep(self, now: float) -> int:
        with self._lock:
            return self._sweep_locked(now)

    def reset(self) -> None:
        with self._lock:
            self._windows.clear()
            self._since_sweep = 0

    def _sweep_locked(self, now: float) -> int:
        expired = [key for key, state in self._windows.items() if state.reset_at <= now]
        for key in expired:
            del self._windows[key]
        self._since_sweep = 0
        if expired:
            logger.debug(f"Swept {len(expired)} expired rate-limit windows")
        return len(expired)


class RateLimiter:
    """Bounds the number of requests per client within a time window."""

    def __init__(
        self,
        name: str,
        max_requests: int,
        window_seconds: float,
        store: CounterStore | None = None,
        clock: Callable[[], float] = time.monotonic,
        message: str | None = None,
    ) -> None:
        if max_requests < 1:
            raise ValueError("max_requests must be positive")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")

        self.name = name
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.message = message
        self.store = store if store is not None else InMemoryCounterStore()
        self._clock = clock

    def hit(self, client_id: str) -> RateLimitResult:
        """Count a request from client_id and decide whether it may proceed."""
        now = self._clock()
        state = self.store.increment(f"{self.name}:{client_id}", self.window_seconds, now)
        return RateLimitResult(
            allowed=state.count <= self.max_requests,
            limit=self.max_requests,
            remaining=max(self.max_requests - state.count, 0),
            reset_after=max(math.ceil(state.reset_at - now), 0),
        )

"""
Rate Limiting Module.

Per-client request limiting for the HTTP API using a sliding window.
Requests over the limit are rejected immediately; callers never wait.

Usage:
    limiter = ClientRateLimiter(window_ms=60000, limit=100)

    try:
        limiter.acquire("10.0.0.1")
    except RateLimitExceededError as e:
        ...  # respond 429, Retry-After: e.retry_after
"""

import threading
import time
from collections import deque
from dataclasses import dataclass
from typing import Deque, Dict


@dataclass
class RateLimitStats:
    """Statistics for rate limiting."""
    total_requests: int = 0
    rejected_requests: int = 0
    tracked_clients: int = 0


class RateLimitExceededError(Exception):
    """Raised when a client exceeds its request allowance."""

    def __init__(self, client: str, current: int, limit: int, retry_after: float):
        self.client = client
        self.current = current
        self.limit = limit
        self.retry_after = retry_after
        super().__init__(
            f"Rate limit exceeded for {client}: {current}/{limit} "
            f"(retry after {retry_after:.1f}s)"
        )


class ClientRateLimiter:
    """
    Thread-safe rate limiter using a sliding window per client.

    Each client gets its own window of request timestamps. Clients whose
    window has emptied are forgotten, at the latest one window after their
    last request.
    """

    def __init__(self, window_ms: int = 60000, limit: int = 100):
        """
        Initialize rate limiter.

        Args:
            window_ms: Length of the sliding window in milliseconds
            limit: Maximum requests per client within one window
        """
        self.window_seconds = window_ms / 1000.0
        self.limit = limit

        self._windows: Dict[str, Deque[float]] = {}
        self._lock = threading.Lock()
        self._stats = RateLimitStats()
        self._last_sweep = time.monotonic()

    def _clean_window(self, window: Deque[float], now: float) -> None:
        """Remove entries older than the window from a client's timestamps."""
        cutoff = now - self.window_seconds
        while window and window[0] <= cutoff:
            window.popleft()

    def _sweep(self, now: float) -> None:
        """Drop every client with no requests left in its window."""
        for client in list(self._windows):
            window = self._windows[client]
            self._clean_window(window, now)
            if not window:
                del self._windows[client]
        self._last_sweep = now

    def _retry_after(self, window: Deque[float], now: float) -> float:
        """Seconds until the oldest request leaves the window."""
        if not window:
            return 0.0
        return max(0.0, window[0] + self.window_seconds - now)

    def acquire(self, client: str) -> None:
        """
        Record a request for the client.

        Raises:
            RateLimitExceededError: If the client already used its allowance
        """
        with self._lock:
            now = time.monotonic()
            if now - self._last_sweep >= self.window_seconds:
                self._sweep(now)

            window = self._windows.setdefault(client, deque())
            self._clean_window(window, now)

            if len(window) >= self.limit:
                self._stats.rejected_requests += 1
                raise RateLimitExceededError(
                    client, len(window), self.limit, self._retry_after(window, now)
                )

            window.append(now)
            self._stats.total_requests += 1

    def get_stats(self) -> RateLimitStats:
        """Get rate limiting statistics."""
        with self._lock:
            return RateLimitStats(
                total_requests=self._stats.total_requests,
                rejected_requests=self._stats.rejected_requests,
                tracked_clients=len(self._windows),
            )

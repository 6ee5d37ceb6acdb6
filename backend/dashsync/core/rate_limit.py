"""In-memory sliding-window rate limiter for sync writes.

The limiter instance lives on ``app.state.rate_limiter`` (created in the
application lifespan). Usage as a FastAPI dependency:

    from dashsync.core.rate_limit import RateLimiter

    @router.post("/{domain}/sync")
    async def save_snapshot(
        request: Request,
        _rl: None = Depends(RateLimiter(max_calls=60, window_seconds=60, key="sync")),
    ):
        ...
"""

import time
from collections import OrderedDict
from threading import Lock

from fastapi import HTTPException, Request, status


class SlidingWindowLimiter:
    """Thread-safe sliding window rate counter with a bounded key set.

    At most ``max_keys`` clients are tracked; the least recently seen key is
    evicted when a new one arrives.
    """

    def __init__(self, max_keys: int = 10_000, clock=time.monotonic) -> None:
        if max_keys < 1:
            raise ValueError("max_keys must be at least 1")
        self.max_keys = max_keys
        self._clock = clock
        self._windows: OrderedDict[str, list[float]] = OrderedDict()
        self._lock = Lock()

    def __len__(self) -> int:
        return len(self._windows)

    def __contains__(self, key: str) -> bool:
        return key in self._windows

    def is_allowed(self, key: str, max_calls: int, window_seconds: float) -> bool:
        now = self._clock()
        cutoff = now - window_seconds
        with self._lock:
            # Remove expired entries
            timestamps = [t for t in self._windows.pop(key, []) if t > cutoff]
            self._windows[key] = timestamps
            while len(self._windows) > self.max_keys:
                self._windows.popitem(last=False)
            if len(timestamps) >= max_calls:
                return False
            timestamps.append(now)
            return True

    def clear(self, key: str) -> None:
        with self._lock:
            self._windows.pop(key, None)


class RateLimiter:
    """FastAPI dependency that enforces per-client rate limits.

    Parameters:
        max_calls: Maximum number of calls within the window.
        window_seconds: Sliding window duration in seconds.
        key: A string prefix to namespace this limiter (e.g. "sync").
    """

    def __init__(self, max_calls: int, window_seconds: int = 60, key: str = "default") -> None:
        self.max_calls = max_calls
        self.window_seconds = window_seconds
        self.key = key

    async def __call__(self, request: Request) -> None:
        limiter: SlidingWindowLimiter = request.app.state.rate_limiter
        rate_key = f"{self.key}:{self._get_ip(request)}"

        if not limiter.is_allowed(rate_key, self.max_calls, self.window_seconds):
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail=f"Rate limit exceeded. Maximum {self.max_calls} requests per {self.window_seconds} seconds.",
            )

    @staticmethod
    def _get_ip(request: Request) -> str:
        forwarded = request.headers.get("X-Forwarded-For")
        if forwarded:
            # Use the rightmost (last) IP, which is set by the trusted reverse proxy.
            return forwarded.split(",")[-1].strip()
        if request.client:
            return request.client.host
        return "unknown"

"""Tests for the bounded sliding-window limiter."""

from dashsync.core.rate_limit import SlidingWindowLimiter


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def test_allows_up_to_the_limit():
    limiter = SlidingWindowLimiter(clock=FakeClock())

    results = [limiter.is_allowed("ip", max_calls=3, window_seconds=60) for _ in range(4)]

    assert results == [True, True, True, False]


def test_window_slides():
    clock = FakeClock()
    limiter = SlidingWindowLimiter(clock=clock)
    for _ in range(2):
        limiter.is_allowed("ip", max_calls=2, window_seconds=10)

    clock.now += 11

    assert limiter.is_allowed("ip", max_calls=2, window_seconds=10)


def test_keys_are_independent():
    limiter = SlidingWindowLimiter(clock=FakeClock())
    limiter.is_allowed("a", max_calls=1, window_seconds=60)

    assert not limiter.is_allowed("a", max_calls=1, window_seconds=60)
    assert limiter.is_allowed("b", max_calls=1, window_seconds=60)


def test_least_recently_seen_key_evicted():
    limiter = SlidingWindowLimiter(max_keys=2, clock=FakeClock())
    limiter.is_allowed("a", 5, 60)
    limiter.is_allowed("b", 5, 60)
    limiter.is_allowed("a", 5, 60)

    limiter.is_allowed("c", 5, 60)

    assert len(limiter) == 2
    assert "b" not in limiter
    assert "a" in limiter and "c" in limiter


def test_clear():
    limiter = SlidingWindowLimiter(clock=FakeClock())
    limiter.is_allowed("a", 1, 60)

    limiter.clear("a")

    assert limiter.is_allowed("a", 1, 60)

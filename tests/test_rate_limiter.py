from episode_recognizer.core.config import RateLimitConfig
from episode_recognizer.services.rate_limiter import AIApiRateLimiter


def _limiter(clock, **overrides):
    options = dict(enabled=True, max_calls_per_minute=20, max_calls_per_hour=200, min_interval_seconds=0)
    options.update(overrides)
    return AIApiRateLimiter(RateLimitConfig(**options), clock=clock, sleep=clock.advance)


def test_disabled_always_allows(clock):
    limiter = _limiter(clock, enabled=False, max_calls_per_minute=0)
    assert all(limiter.request_permission("test") for _ in range(5))


def test_min_interval(clock):
    limiter = _limiter(clock, min_interval_seconds=1.0)
    assert limiter.request_permission("test") is True
    assert limiter.request_permission("test") is False
    clock.advance(1.0)
    assert limiter.request_permission("test") is True


def test_minute_window(clock):
    limiter = _limiter(clock, max_calls_per_minute=2)
    assert limiter.request_permission("test") is True
    assert limiter.request_permission("test") is True
    assert limiter.request_permission("test") is False
    clock.advance(60)
    assert limiter.request_permission("test") is True


def test_hour_window(clock):
    limiter = _limiter(clock, max_calls_per_minute=100, max_calls_per_hour=3)
    for _ in range(3):
        assert limiter.request_permission("test") is True
    assert limiter.request_permission("test") is False
    clock.advance(60 * 60)
    assert limiter.request_permission("test") is True


def test_wait_for_permission(clock):
    limiter = _limiter(clock, min_interval_seconds=1.0)
    assert limiter.request_permission("test") is True
    assert limiter.wait_for_permission("test", max_wait=5) is True
    assert limiter.total_calls == 2


def test_wait_for_permission_times_out(clock):
    limiter = _limiter(clock, max_calls_per_minute=1, min_interval_seconds=0.5)
    assert limiter.request_permission("test") is True
    assert limiter.wait_for_permission("test", max_wait=2) is False


def test_statistics_and_reset(clock):
    limiter = _limiter(clock)
    limiter.request_permission("test")
    limiter.request_permission("test")
    assert limiter.statistics() == (
        "AI API Stats - Total: 2, Last minute: 2/20, Last hour: 2/200, Rate limit: ON"
    )
    limiter.reset()
    assert limiter.statistics() == (
        "AI API Stats - Total: 0, Last minute: 0/20, Last hour: 0/200, Rate limit: ON"
    )

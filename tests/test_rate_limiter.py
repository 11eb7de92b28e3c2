import time

import redis

from carrierhub import rate_limiter
from carrierhub.rate_limiter import check_rate_limit, reset_memory_cache


def setup_function():
    reset_memory_cache()


def test_allows_up_to_limit_then_blocks():
    results = [check_rate_limit("test:1.2.3.4", limit=3, window_seconds=60) for _ in range(4)]

    assert [allowed for allowed, _, _ in results] == [True, True, True, False]
    assert results[2][1] == 3
    assert 0 < results[3][2] <= 60


def test_keys_are_independent():
    assert check_rate_limit("test:a", limit=1, window_seconds=60)[0]
    assert not check_rate_limit("test:a", limit=1, window_seconds=60)[0]
    assert check_rate_limit("test:b", limit=1, window_seconds=60)[0]


def test_window_resets_after_expiry(monkeypatch):
    now = time.time()
    monkeypatch.setattr(rate_limiter.time, "time", lambda: now)
    check_rate_limit("test:reset", limit=1, window_seconds=10)
    assert not check_rate_limit("test:reset", limit=1, window_seconds=10)[0]

    monkeypatch.setattr(rate_limiter.time, "time", lambda: now + 11)
    assert check_rate_limit("test:reset", limit=1, window_seconds=10)[0]


def test_no_redis_client_without_configuration():
    assert rate_limiter.redis_configured() is False
    assert rate_limiter.get_redis_client() is None


class FakeRedis:
    def __init__(self, count=None, ttl=-2):
        self.store = {}
        self.count = count
        self.ttl_value = ttl

    def get(self, key):
        return self.count

    def ttl(self, key):
        return self.ttl_value

    def set(self, key, value, ex=None):
        self.store[key] = (value, ex)


def test_window_loaded_from_shared_counter():
    shared = FakeRedis(count="5", ttl=30)

    allowed, count, ttl = check_rate_limit("test:shared", limit=5, window_seconds=60, client=shared)

    assert not allowed
    assert count == 5
    assert 0 < ttl <= 30


def test_counts_synced_to_shared_store():
    shared = FakeRedis()

    check_rate_limit("test:sync", limit=5, window_seconds=60, client=shared)

    assert shared.store["test:sync"] == (1, 60)


def test_redis_connect_retried_after_interval(monkeypatch):
    attempts = []

    def _failing_from_url(url, **kwargs):
        attempts.append(url)
        raise redis.ConnectionError("connection refused")

    now = time.time()
    monkeypatch.setenv("REDIS_URL", "redis://localhost:6399/0")
    monkeypatch.setattr(rate_limiter, "redis_client", None)
    monkeypatch.setattr(rate_limiter, "_redis_retry_at", 0.0)
    monkeypatch.setattr(rate_limiter.redis, "from_url", _failing_from_url)
    monkeypatch.setattr(rate_limiter.time, "time", lambda: now)

    assert rate_limiter.get_redis_client() is None
    assert rate_limiter.get_redis_client() is None
    assert len(attempts) == 1

    monkeypatch.setattr(rate_limiter.time, "time", lambda: now + rate_limiter.REDIS_RETRY_INTERVAL + 1)
    assert rate_limiter.get_redis_client() is None
    assert len(attempts) == 2

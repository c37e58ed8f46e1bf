from starlette.requests import Request

from fence_quote.services.rate_limit import FixedWindowRateLimiter, get_client_id

from tests.conftest import FakeClock


def _request(headers=None, client=("203.0.113.9", 51000)):
    raw_headers = [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()]
    scope = {
        "type": "http",
        "method": "POST",
        "path": "/api/lead",
        "headers": raw_headers,
        "client": client,
    }
    return Request(scope)


def test_requests_beyond_limit_are_refused():
    limiter = FixedWindowRateLimiter(max_requests=8, clock=FakeClock())
    results = [limiter.admit("1.2.3.4") for _ in range(9)]
    assert results == [True] * 8 + [False]


def test_new_window_after_reset():
    clock = FakeClock()
    limiter = FixedWindowRateLimiter(max_requests=2, window_seconds=600, clock=clock)
    assert limiter.admit("k")
    assert limiter.admit("k")
    assert not limiter.admit("k")
    assert not limiter.admit("k")

    # Still inside the window at exactly reset_at
    clock.advance(600)
    assert not limiter.admit("k")

    clock.advance(0.001)
    assert limiter.admit("k")
    assert limiter.stats("k")["current_count"] == 1


def test_keys_are_independent():
    limiter = FixedWindowRateLimiter(max_requests=1, clock=FakeClock())
    assert limiter.admit("a")
    assert not limiter.admit("a")
    assert limiter.admit("b")


def test_missing_key_uses_unknown():
    limiter = FixedWindowRateLimiter(max_requests=1, clock=FakeClock())
    assert limiter.admit(None)
    assert not limiter.admit("")
    assert limiter.stats("unknown")["current_count"] == 2


def test_sweep_only_after_threshold():
    clock = FakeClock()
    limiter = FixedWindowRateLimiter(max_requests=5, window_seconds=10, sweep_threshold=3, clock=clock)
    for key in ("a", "b", "c"):
        limiter.admit(key)
    clock.advance(11)

    # Table is at the threshold, not over it: nothing is purged.
    limiter.admit("d")
    assert len(limiter) == 4

    limiter.admit("e")
    assert len(limiter) == 2


def test_stats():
    clock = FakeClock()
    limiter = FixedWindowRateLimiter(max_requests=3, window_seconds=600, clock=clock)
    assert limiter.stats("k")["remaining"] == 3

    limiter.admit("k")
    clock.advance(100)
    limiter.admit("k")
    stats = limiter.stats("k")
    assert stats["current_count"] == 2
    assert stats["remaining"] == 1
    assert stats["reset_in"] == 500

    limiter.reset()
    assert len(limiter) == 0


def test_client_id_prefers_forwarded_for():
    request = _request({"X-Forwarded-For": "198.51.100.1, 10.0.0.1", "X-Real-IP": "198.51.100.2"})
    assert get_client_id(request) == "198.51.100.1"


def test_client_id_falls_back_to_real_ip_then_peer():
    assert get_client_id(_request({"X-Real-IP": " 198.51.100.2 "})) == "198.51.100.2"
    assert get_client_id(_request({"X-Forwarded-For": " "})) == "203.0.113.9"
    assert get_client_id(_request(client=None)) == "unknown"

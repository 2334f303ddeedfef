"""Tests for the per-client limiter and the HTTP guards around it."""

import pytest

from smartbrain import create_app, db
from smartbrain.config import settings
from smartbrain.services.rate_limiter import InMemoryRateLimiter


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


class TestInMemoryRateLimiter:
    """Sliding window behaviour."""

    def test_allows_up_to_limit(self):
        limiter = InMemoryRateLimiter(max_requests=3, window_seconds=60, clock=FakeClock())
        results = [limiter.check("10.0.0.1") for _ in range(3)]
        assert all(result.allowed for result in results)
        assert [result.remaining for result in results] == [2, 1, 0]

    def test_rejects_at_limit_plus_one(self):
        clock = FakeClock()
        limiter = InMemoryRateLimiter(max_requests=2, window_seconds=60, clock=clock)
        limiter.check("10.0.0.1")
        clock.now += 10
        limiter.check("10.0.0.1")

        result = limiter.check("10.0.0.1")
        assert result.allowed is False
        assert result.retry_after == pytest.approx(50)

    def test_allows_after_window_expires(self):
        clock = FakeClock()
        limiter = InMemoryRateLimiter(max_requests=1, window_seconds=60, clock=clock)
        assert limiter.check("10.0.0.1").allowed
        assert not limiter.check("10.0.0.1").allowed

        clock.now += 60.5
        assert limiter.check("10.0.0.1").allowed

    def test_key_isolation(self):
        limiter = InMemoryRateLimiter(max_requests=1, window_seconds=60, clock=FakeClock())
        assert limiter.check("10.0.0.1").allowed
        assert limiter.check("10.0.0.2").allowed
        assert not limiter.check("10.0.0.1").allowed

    def test_sweep_keeps_current_key(self):
        clock = FakeClock()
        limiter = InMemoryRateLimiter(max_requests=1, window_seconds=1, clock=clock)
        for i in range(InMemoryRateLimiter._SWEEP_INTERVAL - 1):
            limiter.check(f"client-{i}")
        clock.now += 5

        # This check triggers the sweep of every stale bucket
        assert limiter.check("fresh").allowed
        assert not limiter.check("fresh").allowed

    def test_reset(self):
        limiter = InMemoryRateLimiter(max_requests=1, window_seconds=60, clock=FakeClock())
        limiter.check("10.0.0.1")
        limiter.reset()
        assert limiter.check("10.0.0.1").allowed


class TightLimitConfig(settings.TestingConfig):
    RATE_LIMIT_MAX_REQUESTS = 2


@pytest.fixture
def tight_client(detector):
    app = create_app(TightLimitConfig, detector=detector)
    with app.app_context():
        db.create_all()
        client = app.test_client()
        client.environ_base['HTTP_ORIGIN'] = 'http://localhost:3000'
        yield client
        db.session.remove()
        db.drop_all()


def test_http_limiter_returns_429(tight_client):
    assert tight_client.get('/').status_code == 200
    assert tight_client.get('/').status_code == 200

    response = tight_client.get('/')
    assert response.status_code == 429
    assert response.json == {"error": "Too many requests, please try again later."}
    assert int(response.headers['Retry-After']) > 0


def test_request_without_origin_is_forbidden(app):
    response = app.test_client().get('/')
    assert response.status_code == 403
    assert response.json == {"error": "Forbidden: Invalid origin"}


def test_unknown_origin_is_forbidden(app):
    response = app.test_client().get('/', headers={'Origin': 'https://evil.example'})
    assert response.status_code == 403


def test_allowed_referer_passes(app):
    response = app.test_client().get('/', headers={'Referer': 'http://localhost:3000/signin'})
    assert response.status_code == 200


def test_security_headers(client):
    response = client.get('/')
    assert response.headers['X-Content-Type-Options'] == 'nosniff'
    assert response.headers['Cross-Origin-Resource-Policy'] == 'cross-origin'


def test_cors_header_for_allowed_origin(client):
    response = client.get('/')
    assert response.headers['Access-Control-Allow-Origin'] == 'http://localhost:3000'

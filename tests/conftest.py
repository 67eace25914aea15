"""Pytest configuration and shared fixtures."""

from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from fastapi.testclient import TestClient

from spotify_kiosk.config import Settings
from spotify_kiosk.core.app_factory import create_app
from spotify_kiosk.core.middleware import limiter
from spotify_kiosk.dependencies import get_http_client
from spotify_kiosk.state_managers import TokenCache


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_response(status_code: int, body=None) -> MagicMock:
    """Build a mock httpx.Response with the given status and JSON body."""
    response = MagicMock(spec=httpx.Response)
    response.status_code = status_code
    response.json = MagicMock(return_value=body)
    return response


def token_response(access_token: str = "access-token", expires_in: int = 3600, **extra) -> MagicMock:
    """Mock successful token exchange response."""
    return make_response(200, {"access_token": access_token, "token_type": "Bearer", "expires_in": expires_in, **extra})


@pytest.fixture(autouse=True)
def reset_rate_limits():
    """Start every test with empty rate limit counters."""
    limiter.reset()
    yield
    limiter.reset()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def token_cache(clock):
    return TokenCache(safety_margin_seconds=600, clock=clock)


@pytest.fixture
def mock_http_client():
    """Mock httpx.AsyncClient for Spotify calls."""
    mock_client = AsyncMock(spec=httpx.AsyncClient)
    mock_client.get = AsyncMock()
    mock_client.post = AsyncMock()
    mock_client.aclose = AsyncMock()
    return mock_client


@pytest.fixture
def mock_settings():
    """Settings instance with test values and no .env lookup."""
    return Settings(
        _env_file=None,
        api_host="127.0.0.1",
        api_port=3000,
        spotify_client_id="test-client-id",
        spotify_client_secret="test-client-secret",
        spotify_refresh_token="test-refresh-token",
        log_level="DEBUG",
    )


@pytest.fixture
def test_app(mock_settings, mock_http_client):
    """Kiosk app wired to the mock Spotify client."""
    app = create_app(mock_settings)
    app.dependency_overrides[get_http_client] = lambda: mock_http_client
    return app


@pytest.fixture
def test_client(test_app):
    """FastAPI test client with lifespan context."""
    with TestClient(test_app) as client:
        yield client


@pytest.fixture
def track_item():
    """Spotify track object."""
    return {
        "id": "4uLU6hMCjMI75M1A2tKUQC",
        "name": "Test Song",
        "artists": [{"name": "Test Artist"}, {"name": "Guest Artist"}],
        "album": {
            "name": "Test Album",
            "images": [
                {"url": "https://i.scdn.co/image/large", "width": 640, "height": 640},
                {"url": "https://i.scdn.co/image/medium", "width": 300, "height": 300},
                {"url": "https://i.scdn.co/image/small", "width": 64, "height": 64},
            ],
        },
        "duration_ms": 240000,
        "uri": "spotify:track:4uLU6hMCjMI75M1A2tKUQC",
    }


@pytest.fixture
def currently_playing_payload(track_item):
    """Spotify currently-playing response."""
    return {
        "timestamp": 1700000000000,
        "is_playing": True,
        "progress_ms": 60000,
        "currently_playing_type": "track",
        "item": track_item,
    }


@pytest.fixture
def recently_played_payload():
    """Spotify recently-played response with one entry."""
    return {
        "items": [
            {
                "played_at": "2026-10-18T21:04:11.000Z",
                "track": {
                    "id": "7ouMYWpwJ422jRcDASZB7P",
                    "name": "Last Song",
                    "artists": [{"name": "Earlier Artist"}],
                    "album": {
                        "name": "Earlier Album",
                        "images": [{"url": "https://i.scdn.co/image/earlier", "width": 640, "height": 640}],
                    },
                    "duration_ms": 185000,
                },
            }
        ],
        "limit": 1,
    }

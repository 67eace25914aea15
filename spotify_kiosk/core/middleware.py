"""Middleware configuration."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import Limiter
from slowapi.util import get_remote_address

from spotify_kiosk.config import Settings
from spotify_kiosk.logging_config import get_logger, log_with_context

logger = get_logger(__name__)

# Shared by every rate-limited route; the limit itself is read per request
limiter = Limiter(key_func=get_remote_address)
_rate_limit = Settings.model_fields["rate_limit"].default


def current_rate_limit() -> str:
    """Per-IP limit configured by the most recent setup_middleware() call."""
    return _rate_limit


def setup_middleware(app: FastAPI, settings: Settings) -> Limiter:
    """Configure all middleware for the application.

    Args:
        app: FastAPI application instance
        settings: Application settings

    Returns:
        Limiter instance for rate limiting
    """
    global _rate_limit

    # The kiosk page may be opened from any host on the local network
    log_with_context(
        logger,
        "info",
        "Configuring open CORS middleware",
        event_type="security_config",
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    # Routes opt in with @limiter.limit(current_rate_limit)
    _rate_limit = settings.rate_limit
    app.state.limiter = limiter
    log_with_context(
        logger,
        "info",
        "Configuring rate limiting",
        event_type="security_config",
        rate_limit=settings.rate_limit,
    )

    @app.middleware("http")
    async def count_requests(request, call_next):
        """Count total requests for the readiness endpoint."""
        app.state.request_count += 1
        response = await call_next(request)
        return response

    return limiter

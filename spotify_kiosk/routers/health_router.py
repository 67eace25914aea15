"""Health endpoints."""

import time
from datetime import UTC, datetime

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from spotify_kiosk import __version__
from spotify_kiosk.config import Settings
from spotify_kiosk.core.middleware import current_rate_limit, limiter
from spotify_kiosk.dependencies import get_app_settings, get_token_cache
from spotify_kiosk.models import DetailedHealthResponse, HealthResponse
from spotify_kiosk.state_managers import TokenCache

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
@limiter.limit(current_rate_limit)
async def health_check(request: Request):
    """Basic liveness check.

    For the state of the Spotify credentials, use `/health/ready`.
    """
    return HealthResponse(status="ok", version=__version__)


@router.get("/health/ready", response_model=DetailedHealthResponse)
@limiter.limit(current_rate_limit)
async def readiness_check(
    request: Request,
    token_cache: TokenCache = Depends(get_token_cache),
    settings: Settings = Depends(get_app_settings),
):
    """Readiness probe - can the kiosk API serve playback data?

    Does not call Spotify; reports whether credentials are configured and
    whether an access token is currently cached.

    **Returns:**
    - 200: Credentials configured
    - 503: Credentials missing
    """
    checks = {
        "spotify_credentials": "ok" if settings.spotify_configured else "not_configured",
        "access_token": "cached" if await token_cache.peek() else "empty",
        "token_refreshes": str(token_cache.refresh_count),
        "uptime_seconds": str(int(time.time() - request.app.state.startup_time)),
        "requests": str(request.app.state.request_count),
    }
    healthy = settings.spotify_configured

    return JSONResponse(
        status_code=200 if healthy else 503,
        content=DetailedHealthResponse(
            status="healthy" if healthy else "unhealthy",
            version=__version__,
            timestamp=datetime.now(UTC),
            checks=checks,
        ).model_dump(mode="json"),
    )

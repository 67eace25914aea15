"""Kiosk API routes proxying Spotify playback queries."""

import httpx
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from spotify_kiosk.config import Settings
from spotify_kiosk.core.middleware import current_rate_limit, limiter
from spotify_kiosk.dependencies import get_app_settings, get_http_client, get_token_cache
from spotify_kiosk.exceptions import KioskException
from spotify_kiosk.logging_config import get_logger, log_with_context
from spotify_kiosk.middleware.error_handlers import error_response
from spotify_kiosk.models import ErrorResponse, TokenResponse
from spotify_kiosk.services import spotify_service
from spotify_kiosk.state_managers import TokenCache

router = APIRouter()
logger = get_logger(__name__)

ERROR_RESPONSES = {500: {"model": ErrorResponse, "description": "Spotify token exchange or API call failed"}}


def _log_route_failure(route: str, exc: KioskException) -> None:
    log_with_context(
        logger,
        "warning",
        "Spotify proxy call failed",
        route=route,
        error_code=exc.code.value,
        error_message=exc.message,
        event_type="proxy_error",
    )


@router.get(
    "/token",
    response_model=TokenResponse,
    summary="Get Spotify access token",
    description="Returns the cached Spotify access token, exchanging the refresh token if it expired.",
    responses=ERROR_RESPONSES,
)
@limiter.limit(current_rate_limit)
async def get_token(
    request: Request,
    client: httpx.AsyncClient = Depends(get_http_client),
    token_cache: TokenCache = Depends(get_token_cache),
    settings: Settings = Depends(get_app_settings),
):
    """Issue the current Spotify access token (for diagnostics/direct API calls)."""
    try:
        credential = await spotify_service.get_access_token(client, token_cache, settings)
    except KioskException as e:
        _log_route_failure("token", e)
        return error_response(e)
    return TokenResponse(access_token=credential.access_token)


@router.get(
    "/currently-playing",
    summary="Get currently playing track",
    description="""
    Spotify `currently-playing` payload, passed through unchanged.

    Returns `null` when Spotify reports that nothing is playing (204).
    """,
    responses=ERROR_RESPONSES,
)
@limiter.limit(current_rate_limit)
async def currently_playing(
    request: Request,
    client: httpx.AsyncClient = Depends(get_http_client),
    token_cache: TokenCache = Depends(get_token_cache),
    settings: Settings = Depends(get_app_settings),
):
    """Proxy the currently-playing query."""
    try:
        data = await spotify_service.fetch_currently_playing(client, token_cache, settings)
    except KioskException as e:
        _log_route_failure("currently-playing", e)
        return error_response(e)
    return JSONResponse(content=data)


@router.get(
    "/recently-played",
    summary="Get last played track",
    description="Spotify `recently-played` payload limited to one entry, passed through unchanged.",
    responses=ERROR_RESPONSES,
)
@limiter.limit(current_rate_limit)
async def recently_played(
    request: Request,
    client: httpx.AsyncClient = Depends(get_http_client),
    token_cache: TokenCache = Depends(get_token_cache),
    settings: Settings = Depends(get_app_settings),
):
    """Proxy the recently-played query."""
    try:
        data = await spotify_service.fetch_recently_played(client, token_cache, settings, limit=1)
    except KioskException as e:
        _log_route_failure("recently-played", e)
        return error_response(e)
    return JSONResponse(content=data)

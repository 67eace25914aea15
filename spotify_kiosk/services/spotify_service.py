"""Spotify Web API service: token exchange and read-only playback queries."""

from typing import Any

import httpx

from spotify_kiosk.config import Settings, get_settings
from spotify_kiosk.exceptions import AuthError, ErrorCode, TransportError, UpstreamError
from spotify_kiosk.logging_config import get_logger, log_with_context
from spotify_kiosk.models import Credential
from spotify_kiosk.state_managers import TokenCache, TokenGrant

logger = get_logger(__name__)

CURRENTLY_PLAYING_PATH = "/v1/me/player/currently-playing"
RECENTLY_PLAYED_PATH = "/v1/me/player/recently-played"


async def exchange_refresh_token(
    client: httpx.AsyncClient,
    settings: Settings,
    refresh_secret: str | None = None,
) -> TokenGrant:
    """
    Exchange the long-lived refresh token for a new access token.

    Args:
        client: Shared HTTP client from dependency injection.
        settings: Settings instance with client credentials.
        refresh_secret: Rotated refresh token to use instead of the configured one.

    Returns:
        Tuple of access token, lifetime in seconds and rotated refresh token (or None).

    Raises:
        AuthError: Credentials missing or the exchange was rejected.
        TransportError: Spotify accounts service unreachable.
    """
    refresh_token = refresh_secret or settings.spotify_refresh_token
    if not (settings.spotify_client_id and settings.spotify_client_secret and refresh_token):
        raise AuthError("Spotify credentials not configured", code=ErrorCode.AUTH_NOT_CONFIGURED)

    try:
        response = await client.post(
            settings.token_url,
            auth=(settings.spotify_client_id, settings.spotify_client_secret),
            data={"grant_type": "refresh_token", "refresh_token": refresh_token},
            timeout=settings.upstream_timeout_seconds,
        )
    except httpx.HTTPError as e:
        raise TransportError(f"Spotify accounts service unreachable: {e}") from e

    if response.status_code != 200:
        log_with_context(
            logger,
            "error",
            "Spotify token exchange rejected",
            status_code=response.status_code,
            event_type="token_exchange_rejected",
        )
        raise AuthError(
            f"Failed to get access token: {response.status_code}",
            details={"status_code": response.status_code},
        )

    try:
        data = response.json()
        return data["access_token"], int(data.get("expires_in", 3600)), data.get("refresh_token")
    except (KeyError, TypeError, ValueError) as e:
        raise AuthError(f"Invalid Spotify auth response: {e}") from e


async def get_access_token(
    client: httpx.AsyncClient,
    token_cache: TokenCache,
    settings: Settings | None = None,
) -> Credential:
    """
    Get a valid Spotify access token, exchanging the refresh token when needed.

    Args:
        client: Shared HTTP client from dependency injection.
        token_cache: Token cache from app state.
        settings: Settings instance (defaults to singleton)

    Returns:
        Cached or freshly exchanged Credential.
    """
    if settings is None:
        settings = get_settings()

    async def refresh() -> TokenGrant:
        return await exchange_refresh_token(client, settings, token_cache.refresh_secret)

    return await token_cache.get_token(refresh)


async def _authorized_get(
    client: httpx.AsyncClient,
    credential: Credential,
    url: str,
    params: dict[str, Any] | None,
    settings: Settings,
) -> httpx.Response:
    try:
        return await client.get(
            url,
            headers={"Authorization": f"Bearer {credential.access_token}"},
            params=params,
            timeout=settings.upstream_timeout_seconds,
        )
    except httpx.HTTPError as e:
        raise TransportError(f"Spotify API unreachable: {e}") from e


async def _spotify_get(
    client: httpx.AsyncClient,
    token_cache: TokenCache,
    settings: Settings,
    path: str,
    params: dict[str, Any] | None = None,
) -> dict[str, Any] | None:
    """
    GET a Spotify Web API resource, recovering once from an expired token.

    Returns:
        Decoded JSON body, or None on 204 No Content.

    Raises:
        UpstreamError: Any status other than 200/204, or a second 401.
    """
    url = settings.api_url(path)

    credential = await get_access_token(client, token_cache, settings)
    response = await _authorized_get(client, credential, url, params, settings)

    if response.status_code == 401:
        log_with_context(
            logger,
            "warning",
            "Spotify rejected access token, refreshing once",
            path=path,
            event_type="upstream_unauthorized",
        )
        await token_cache.invalidate(credential.access_token)
        credential = await get_access_token(client, token_cache, settings)
        response = await _authorized_get(client, credential, url, params, settings)

        if response.status_code == 401:
            await token_cache.invalidate(credential.access_token)
            raise UpstreamError(
                "Spotify API error: 401",
                code=ErrorCode.UPSTREAM_UNAUTHORIZED,
                details={"status_code": 401, "path": path},
            )

    if response.status_code == 204:
        return None

    if response.status_code != 200:
        raise UpstreamError(
            f"Spotify API error: {response.status_code}",
            details={"status_code": response.status_code, "path": path},
        )

    try:
        return response.json()
    except ValueError as e:
        raise UpstreamError(
            f"Invalid Spotify API response: {e}",
            code=ErrorCode.UPSTREAM_INVALID_RESPONSE,
            details={"path": path},
        ) from e


async def fetch_currently_playing(
    client: httpx.AsyncClient,
    token_cache: TokenCache,
    settings: Settings | None = None,
) -> dict[str, Any] | None:
    """
    Get the track currently playing on the account.

    Args:
        client: Shared HTTP client from dependency injection.
        token_cache: Token cache from app state.
        settings: Settings instance (defaults to singleton)

    Returns:
        Spotify currently-playing payload, or None when nothing is playing.
    """
    if settings is None:
        settings = get_settings()
    return await _spotify_get(client, token_cache, settings, CURRENTLY_PLAYING_PATH)


async def fetch_recently_played(
    client: httpx.AsyncClient,
    token_cache: TokenCache,
    settings: Settings | None = None,
    limit: int = 1,
) -> dict[str, Any]:
    """
    Get the most recently played tracks on the account.

    Args:
        client: Shared HTTP client from dependency injection.
        token_cache: Token cache from app state.
        settings: Settings instance (defaults to singleton)
        limit: Number of history entries to request.

    Returns:
        Spotify recently-played payload (``{"items": []}`` if Spotify sent no body).
    """
    if settings is None:
        settings = get_settings()
    data = await _spotify_get(client, token_cache, settings, RECENTLY_PLAYED_PATH, params={"limit": limit})
    return data if data is not None else {"items": []}

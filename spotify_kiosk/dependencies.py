"""FastAPI dependencies for dependency injection."""

import httpx
from fastapi import Request

from spotify_kiosk.config import Settings
from spotify_kiosk.state_managers import TokenCache


async def get_http_client(request: Request) -> httpx.AsyncClient:
    """
    Get the shared HTTP client from app state.

    Args:
        request: The FastAPI request object.

    Returns:
        The shared AsyncClient instance.

    Raises:
        RuntimeError: If HTTP client is not initialized.
    """
    client: httpx.AsyncClient | None = getattr(request.app.state, "http_client", None)

    if client is None:
        raise RuntimeError("HTTP client not initialized. This should never happen.")

    return client


async def get_token_cache(request: Request) -> TokenCache:
    """
    Get the Spotify token cache from app state.

    Raises:
        RuntimeError: If the token cache is not initialized.
    """
    token_cache: TokenCache | None = getattr(request.app.state, "token_cache", None)

    if token_cache is None:
        raise RuntimeError("Token cache not initialized.")

    return token_cache


async def get_app_settings(request: Request) -> Settings:
    """Get the Settings the application was created with."""
    return request.app.state.settings

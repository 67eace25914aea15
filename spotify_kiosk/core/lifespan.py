"""Application lifespan management."""

import time
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from typing import Any

import httpx
from fastapi import FastAPI

from spotify_kiosk import __version__
from spotify_kiosk.logging_config import get_logger, log_with_context
from spotify_kiosk.redaction import redact_sensitive_data
from spotify_kiosk.state_managers import TokenCache

logger = get_logger(__name__)


async def log_request(request: httpx.Request) -> None:
    """Event hook to log requests with redacted sensitive data."""
    log_with_context(
        logger,
        "debug",
        "HTTP Request",
        method=request.method,
        url=redact_sensitive_data(str(request.url)),
        event_type="http_request",
    )


async def log_response(response: httpx.Response) -> None:
    """Event hook to log responses with redacted sensitive data."""
    log_with_context(
        logger,
        "debug",
        "HTTP Response",
        status_code=response.status_code,
        url=redact_sensitive_data(str(response.request.url)),
        event_type="http_response",
    )


def create_http_client(timeout_seconds: float) -> httpx.AsyncClient:
    """Create the shared outbound client used for every Spotify call.

    Args:
        timeout_seconds: Read timeout for a single Spotify call
    """
    event_hooks: dict[str, list[Callable[..., Any]]] = {
        "request": [log_request],
        "response": [log_response],
    }
    return httpx.AsyncClient(
        timeout=httpx.Timeout(
            connect=5.0,  # Connection establishment timeout
            read=timeout_seconds,
            write=5.0,
            pool=5.0,
        ),
        limits=httpx.Limits(
            max_keepalive_connections=5,
            max_connections=10,
            keepalive_expiry=30.0,
        ),
        event_hooks=event_hooks,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application lifespan - startup and shutdown events.

    Exceptions after yield are re-raised so cleanup still runs and the
    failure reaches the server.
    """
    settings = app.state.settings
    app.state.startup_time = time.time()

    log_with_context(
        logger,
        "info",
        "Starting Spotify Kiosk application",
        version=__version__,
        host=settings.api_host,
        port=settings.api_port,
        event_type="app_startup",
    )
    settings.warn_if_unconfigured()

    client = create_http_client(settings.upstream_timeout_seconds)
    app.state.http_client = client

    app.state.token_cache = TokenCache(safety_margin_seconds=settings.token_safety_margin_seconds)
    await app.state.token_cache.initialize()
    log_with_context(
        logger,
        "info",
        "HTTP client and token cache initialized",
        event_type="state_managers_ready",
    )

    try:
        yield
    except Exception as e:
        log_with_context(
            logger,
            "error",
            "Application error during lifespan",
            error=str(e),
            error_type=type(e).__name__,
            event_type="app_error",
        )
        raise
    finally:
        log_with_context(
            logger,
            "info",
            "Shutting down Spotify Kiosk application",
            event_type="app_shutdown",
        )
        await app.state.token_cache.cleanup()
        await client.aclose()
        log_with_context(
            logger,
            "info",
            "HTTP client closed",
            event_type="http_client_cleanup",
        )

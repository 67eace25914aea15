"""Application factory for creating and configuring the FastAPI app."""

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from spotify_kiosk import __version__
from spotify_kiosk.config import Settings, get_settings
from spotify_kiosk.core.lifespan import lifespan
from spotify_kiosk.core.middleware import setup_middleware
from spotify_kiosk.exceptions import ConfigurationError
from spotify_kiosk.middleware.error_handlers import register_error_handlers
from spotify_kiosk.routers import health_router, spotify_router


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Settings to run with (defaults to the singleton)

    Returns:
        Configured FastAPI application instance

    Raises:
        ConfigurationError: If a configured static directory does not exist
    """
    if settings is None:
        settings = get_settings()

    app = FastAPI(
        title="Spotify Kiosk API",
        description="""
        🎵 **Spotify Kiosk** - Now-playing proxy for a kiosk display

        ## Endpoints
        - `/api/token` - Current Spotify access token (diagnostics)
        - `/api/currently-playing` - Spotify currently-playing passthrough (`null` when idle)
        - `/api/recently-played` - Last played track passthrough

        ## 📊 Health
        - `/health` - Liveness
        - `/health/ready` - Readiness (Spotify credentials configured)

        Endpoints are unauthenticated; run the kiosk on a trusted network.
        """,
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.request_count = 0

    setup_middleware(app, settings)
    register_error_handlers(app)

    app.include_router(health_router.router, tags=["health"])
    app.include_router(spotify_router.router, prefix="/api", tags=["spotify"])

    # Kiosk assets go last so they never shadow the API routes
    if settings.static_dir is not None:
        if not settings.static_dir.is_dir():
            raise ConfigurationError(
                f"Static directory does not exist: {settings.static_dir}",
                details={"static_dir": str(settings.static_dir)},
            )
        app.mount("/", StaticFiles(directory=settings.static_dir, html=True), name="static")

    return app

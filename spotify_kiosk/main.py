"""Main FastAPI application entry point."""

from pathlib import Path

from dotenv import load_dotenv

from spotify_kiosk.config import get_settings
from spotify_kiosk.core.app_factory import create_app
from spotify_kiosk.logging_config import setup_logging

# Load environment variables from .env file
load_dotenv(Path(__file__).parent.parent / ".env")

settings = get_settings()

# Configure structured logging (JSON to file + console)
setup_logging(settings.log_level, settings.log_dir)

app = create_app(settings)


def run() -> None:
    """Run the kiosk API with uvicorn."""
    import uvicorn

    uvicorn.run(app, host=settings.api_host, port=settings.api_port)


if __name__ == "__main__":
    run()

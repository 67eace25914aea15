from pathlib import Path

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from spotify_kiosk.logging_config import get_logger, log_with_context

logger = get_logger(__name__)

BASE_DIR = Path(__file__).resolve().parent.parent  # spotify-kiosk/


class Settings(BaseSettings):
    """Application settings with validation.

    Spotify credentials are optional at load time so the server can still start
    (and report itself as not ready) on a freshly provisioned kiosk. All secrets
    must be provided via environment variables or .env file.
    """

    # API server settings
    api_host: str = Field(default="0.0.0.0", min_length=1, description="Interface the kiosk API binds to")
    api_port: int = Field(
        default=3000,
        ge=1,
        le=65535,
        validation_alias=AliasChoices("api_port", "port"),
        description="Port the kiosk API listens on (API_PORT or PORT)",
    )

    # Spotify credentials
    spotify_client_id: str = Field(default="", description="Spotify application client ID")
    spotify_client_secret: str = Field(default="", description="Spotify application client secret")
    spotify_refresh_token: str = Field(default="", description="Long-lived Spotify refresh token")

    # Spotify endpoints
    spotify_accounts_url: str = Field(default="https://accounts.spotify.com", pattern=r"^https?://")
    spotify_api_url: str = Field(default="https://api.spotify.com", pattern=r"^https?://")

    # Token cache and upstream calls
    token_safety_margin_seconds: int = Field(default=600, ge=0, description="Seconds shaved off token lifetime")
    upstream_timeout_seconds: float = Field(default=10.0, gt=0, description="Timeout for each Spotify call")

    rate_limit: str = Field(default="120/minute", description="Per-IP rate limit for the kiosk API")

    static_dir: Path | None = Field(default=None, description="Directory of kiosk assets served at /")

    log_level: str = Field(default="INFO")
    log_dir: Path = Field(default=BASE_DIR / "logs")

    model_config = SettingsConfigDict(
        env_file=Path(BASE_DIR / ".env"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
        validate_default=True,
    )

    @property
    def spotify_configured(self) -> bool:
        """Whether all three Spotify credentials are present."""
        return bool(self.spotify_client_id and self.spotify_client_secret and self.spotify_refresh_token)

    @property
    def token_url(self) -> str:
        return f"{self.spotify_accounts_url.rstrip('/')}/api/token"

    def api_url(self, path: str) -> str:
        """Build an absolute Spotify Web API URL for the given path."""
        return f"{self.spotify_api_url.rstrip('/')}/{path.lstrip('/')}"

    @field_validator("api_host", mode="after")
    @classmethod
    def validate_api_host(cls, v: str) -> str:
        """Ensure api_host is not empty or whitespace."""
        v = v.strip()
        if not v:
            raise ValueError("api_host cannot be empty")
        return v

    @field_validator("spotify_client_id", "spotify_client_secret", "spotify_refresh_token", mode="after")
    @classmethod
    def strip_credentials(cls, v: str) -> str:
        """Strip stray whitespace copied along with secrets."""
        return v.strip()

    @field_validator("log_level", mode="after")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensure log_level is a standard logging level name."""
        v = v.strip().upper()
        if v not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"log_level must be a standard logging level, got {v!r}")
        return v

    def warn_if_unconfigured(self) -> None:
        """Log a warning when any Spotify credential is missing."""
        missing = [
            name
            for name, value in (
                ("SPOTIFY_CLIENT_ID", self.spotify_client_id),
                ("SPOTIFY_CLIENT_SECRET", self.spotify_client_secret),
                ("SPOTIFY_REFRESH_TOKEN", self.spotify_refresh_token),
            )
            if not value
        ]
        if missing:
            log_with_context(
                logger,
                "warning",
                "Spotify credentials not configured",
                missing=missing,
                event_type="config_credentials_missing",
            )
        else:
            log_with_context(logger, "info", "Spotify credentials loaded", event_type="config_credentials_loaded")


# Singleton settings instance (cached for performance)
_settings_instance: Settings | None = None


def get_settings() -> Settings:
    """Get singleton Settings instance for dependency injection.

    Returns:
        Cached Settings instance
    """
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance

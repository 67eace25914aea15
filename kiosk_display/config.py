from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parent.parent  # spotify-kiosk/


class DisplaySettings(BaseSettings):
    api_base_url: str = Field(default="http://127.0.0.1:3000", pattern=r"^https?://")
    poll_interval_seconds: float = Field(default=2.0, gt=0)
    progress_tick_seconds: float = Field(default=0.5, gt=0)
    request_timeout_seconds: float = Field(default=5.0, gt=0)
    # Ask for the last played track when nothing is playing and nothing is remembered
    recent_fallback: bool = True
    page_title: str = "Now Playing"
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="KIOSK_",
        env_file=BASE_DIR / ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


display_settings = DisplaySettings()

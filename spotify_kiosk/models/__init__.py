"""Spotify Kiosk models"""

from spotify_kiosk.models.base_models import DetailedHealthResponse, ErrorResponse, HealthResponse, TokenResponse
from spotify_kiosk.models.playback import Credential, PlaybackKind, PlaybackSnapshot, TrackInfo

__all__ = [
    "Credential",
    "DetailedHealthResponse",
    "ErrorResponse",
    "HealthResponse",
    "PlaybackKind",
    "PlaybackSnapshot",
    "TokenResponse",
    "TrackInfo",
]

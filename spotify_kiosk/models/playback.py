"""Pydantic models for Spotify playback data.

The kiosk API passes Spotify payloads through unchanged; these models are the
typed view of those payloads used by the token cache and the display client.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Credential(BaseModel):
    """Bearer token with the instant (on the cache's clock) it stops being used."""

    model_config = ConfigDict(frozen=True)

    access_token: str = Field(min_length=1)
    expires_at: float

    def is_valid(self, now: float) -> bool:
        return now < self.expires_at


class TrackInfo(BaseModel):
    """Track metadata needed to render the kiosk."""

    model_config = ConfigDict(frozen=True)

    id: str | None = None
    name: str
    artists: tuple[str, ...] = ()
    album: str = ""
    artwork_urls: tuple[str, ...] = Field(default=(), description="Artwork URLs, largest first")
    duration_ms: int = Field(default=0, ge=0)

    @property
    def artist_line(self) -> str:
        return ", ".join(self.artists)

    @property
    def artwork_url(self) -> str:
        """Largest artwork URL, or an empty string when the track has none."""
        return self.artwork_urls[0] if self.artwork_urls else ""

    @classmethod
    def from_item(cls, item: dict[str, Any]) -> "TrackInfo":
        """Create TrackInfo from a Spotify track (or episode) object.

        Args:
            item: The ``item`` of a currently-playing payload or the ``track``
                of a recently-played entry

        Returns:
            TrackInfo with artwork ordered by descending width
        """
        # Episodes carry a show instead of an album
        album = item.get("album") or item.get("show") or {}
        images = album.get("images") or item.get("images") or []
        images = sorted(images, key=lambda image: image.get("width") or 0, reverse=True)

        return cls(
            id=item.get("id"),
            name=item.get("name") or "",
            artists=tuple(artist["name"] for artist in item.get("artists") or [] if artist.get("name")),
            album=album.get("name") or "",
            artwork_urls=tuple(image["url"] for image in images if image.get("url")),
            duration_ms=item.get("duration_ms") or 0,
        )

    @classmethod
    def from_recently_played(cls, data: dict[str, Any] | None) -> "TrackInfo | None":
        """Return the most recent track of a recently-played payload, if any."""
        items = (data or {}).get("items") or []
        if not items or not items[0].get("track"):
            return None
        return cls.from_item(items[0]["track"])


class PlaybackKind(str, Enum):
    """What one poll of the kiosk API found out."""

    NO_DATA = "no_data"
    PLAYING = "playing"
    NOT_PLAYING = "not_playing"


class PlaybackSnapshot(BaseModel):
    """One poll's worth of playback data."""

    model_config = ConfigDict(frozen=True)

    kind: PlaybackKind = PlaybackKind.NO_DATA
    track: TrackInfo | None = None
    progress_ms: int = Field(default=0, ge=0)

    @model_validator(mode="after")
    def check_track_present(self) -> "PlaybackSnapshot":
        """Ensure only NO_DATA snapshots come without a track."""
        if self.kind != PlaybackKind.NO_DATA and self.track is None:
            raise ValueError(f"{self.kind.value} snapshot requires a track")
        return self

    @property
    def is_playing(self) -> bool:
        return self.kind == PlaybackKind.PLAYING

    @property
    def has_track(self) -> bool:
        return self.track is not None

    @classmethod
    def empty(cls) -> "PlaybackSnapshot":
        return cls()

    @classmethod
    def playing(cls, track: TrackInfo, progress_ms: int = 0) -> "PlaybackSnapshot":
        return cls(kind=PlaybackKind.PLAYING, track=track, progress_ms=max(progress_ms, 0))

    @classmethod
    def not_playing(cls, track: TrackInfo) -> "PlaybackSnapshot":
        return cls(kind=PlaybackKind.NOT_PLAYING, track=track, progress_ms=track.duration_ms)

    @classmethod
    def from_currently_playing(cls, data: dict[str, Any] | None) -> "PlaybackSnapshot":
        """Create a snapshot from a currently-playing payload.

        Args:
            data: Spotify currently-playing JSON, or None when Spotify answered 204

        Returns:
            PLAYING or NOT_PLAYING snapshot when the payload carries an item,
            NO_DATA otherwise (nothing playing, ads, private session)
        """
        if not data or not data.get("item"):
            return cls.empty()

        track = TrackInfo.from_item(data["item"])
        if data.get("is_playing"):
            return cls.playing(track, data.get("progress_ms") or 0)
        return cls.not_playing(track)

    @classmethod
    def from_recently_played(cls, data: dict[str, Any] | None) -> "PlaybackSnapshot":
        """Create a NOT_PLAYING snapshot from a recently-played payload."""
        track = TrackInfo.from_recently_played(data)
        if track is None:
            return cls.empty()
        return cls.not_playing(track)

"""Display state machine reconciling polled snapshots into what the kiosk shows.

Every poll result goes through DisplayReconciler.apply() (or apply_error() when
the poll failed). The reconciler remembers the last track it saw so that idle
polls keep showing it instead of blanking the screen, and only swaps the
artwork when its URL actually changes.
"""

import time
from collections.abc import Callable
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from spotify_kiosk.logging_config import get_logger, log_with_context
from spotify_kiosk.models import PlaybackSnapshot, TrackInfo

logger = get_logger(__name__)

PLACEHOLDER_TITLE = "No Track Playing"
PLACEHOLDER_TEXT = "—"


class DisplayStatus(str, Enum):
    """Status indicator shown on the kiosk."""

    PLAYING = "playing"
    PAUSED = "paused"
    ERROR = "error"
    EMPTY = "empty"


STATUS_TEXT = {
    DisplayStatus.PLAYING: "Playing",
    DisplayStatus.PAUSED: "Paused",
    DisplayStatus.EMPTY: "Paused",
    DisplayStatus.ERROR: "Connection Error",
}


def format_time(ms: int) -> str:
    """Format milliseconds as m:ss."""
    total_seconds = max(int(ms), 0) // 1000
    return f"{total_seconds // 60}:{total_seconds % 60:02d}"


def progress_percent(progress_ms: int, duration_ms: int) -> float:
    """Percentage of the track played, 0 for tracks without a duration."""
    if duration_ms <= 0:
        return 0.0
    return min(max(progress_ms / duration_ms * 100, 0.0), 100.0)


class DisplayState(BaseModel):
    """Everything currently rendered on the kiosk."""

    model_config = ConfigDict(frozen=True)

    status: DisplayStatus = DisplayStatus.EMPTY
    track: TrackInfo | None = None
    artwork_url: str = ""
    progress_ms: int = 0
    duration_ms: int = 0
    progress_percent: float = Field(default=0.0, ge=0, le=100)

    @property
    def title(self) -> str:
        return self.track.name if self.track else PLACEHOLDER_TITLE

    @property
    def artist_line(self) -> str:
        return self.track.artist_line if self.track else PLACEHOLDER_TEXT

    @property
    def album(self) -> str:
        return self.track.album if self.track else PLACEHOLDER_TEXT

    @property
    def elapsed_text(self) -> str:
        return format_time(self.progress_ms)

    @property
    def total_text(self) -> str:
        return format_time(self.duration_ms)

    @property
    def status_text(self) -> str:
        return STATUS_TEXT[self.status]


class DisplayReconciler:
    """Owns the kiosk's DisplayState and the remembered last-known track.

    Args:
        clock: Monotonic clock used to extrapolate progress between polls
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._state = DisplayState()
        self._last_known: TrackInfo | None = None
        # Progress reported by the last PLAYING poll and when it arrived
        self._anchor_progress_ms = 0
        self._anchor_at: float | None = None
        self._artwork_url = ""
        self.artwork_reloads = 0

    @property
    def state(self) -> DisplayState:
        return self._state

    @property
    def last_known_track(self) -> TrackInfo | None:
        return self._last_known

    def apply(self, snapshot: PlaybackSnapshot | None) -> DisplayState:
        """Reconcile one poll result with what is on screen.

        Args:
            snapshot: Result of the poll; None is treated as "no data"

        Returns:
            The new DisplayState
        """
        if snapshot is None:
            snapshot = PlaybackSnapshot.empty()

        if snapshot.is_playing:
            self._state = self._playing(snapshot)
        elif snapshot.track is not None or self._last_known is not None:
            self._state = self._paused(snapshot.track)
        else:
            self._anchor_at = None
            self._state = DisplayState(status=DisplayStatus.EMPTY, artwork_url=self._swap_artwork(""))

        return self._state

    def apply_error(self, error: Exception | None = None) -> DisplayState:
        """Flag a failed poll without touching the rendered track."""
        if self._state.status != DisplayStatus.ERROR:
            log_with_context(
                logger,
                "warning",
                "Display lost connection to kiosk API",
                error=str(error) if error else None,
                event_type="display_error",
            )
        self._anchor_at = None
        self._state = self._state.model_copy(update={"status": DisplayStatus.ERROR})
        return self._state

    def tick(self) -> DisplayState:
        """Advance the progress bar by the wall time elapsed since the last playing poll.

        Only a PLAYING state moves; progress stops at the track duration.
        """
        if self._state.status != DisplayStatus.PLAYING or self._anchor_at is None:
            return self._state

        elapsed_ms = int((self._clock() - self._anchor_at) * 1000)
        progress_ms = self._anchor_progress_ms + max(elapsed_ms, 0)
        duration_ms = self._state.duration_ms
        if duration_ms > 0:
            progress_ms = min(progress_ms, duration_ms)

        self._state = self._state.model_copy(
            update={
                "progress_ms": progress_ms,
                "progress_percent": progress_percent(progress_ms, duration_ms),
            }
        )
        return self._state

    def _playing(self, snapshot: PlaybackSnapshot) -> DisplayState:
        track = snapshot.track
        self._last_known = track

        duration_ms = track.duration_ms
        progress_ms = snapshot.progress_ms
        if duration_ms > 0:
            progress_ms = min(progress_ms, duration_ms)

        self._anchor_progress_ms = progress_ms
        self._anchor_at = self._clock()

        return DisplayState(
            status=DisplayStatus.PLAYING,
            track=track,
            artwork_url=self._swap_artwork(track.artwork_url),
            progress_ms=progress_ms,
            duration_ms=duration_ms,
            progress_percent=progress_percent(progress_ms, duration_ms),
        )

    def _paused(self, track: TrackInfo | None) -> DisplayState:
        if track is not None:
            self._last_known = track
        else:
            track = self._last_known

        self._anchor_at = None
        # A paused track without artwork keeps whatever is showing
        artwork_url = self._swap_artwork(track.artwork_url) if track.artwork_url else self._artwork_url

        return DisplayState(
            status=DisplayStatus.PAUSED,
            track=track,
            artwork_url=artwork_url,
            progress_ms=track.duration_ms,
            duration_ms=track.duration_ms,
            progress_percent=100.0,
        )

    def _swap_artwork(self, url: str) -> str:
        if url != self._artwork_url:
            self._artwork_url = url
            self.artwork_reloads += 1
        return self._artwork_url

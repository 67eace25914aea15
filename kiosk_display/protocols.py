"""Protocol definitions for dependency injection."""

from typing import Protocol

from spotify_kiosk.models import PlaybackSnapshot


class PlaybackSource(Protocol):
    """Where the display gets its playback snapshots from.

    Implementations raise TransportError when the source cannot be reached
    or answers with an error.
    """

    def get_currently_playing(self) -> PlaybackSnapshot:
        """Snapshot of the current playback (NO_DATA when idle)."""
        ...

    def get_recently_played(self) -> PlaybackSnapshot:
        """NOT_PLAYING snapshot of the last played track (NO_DATA when history is empty)."""
        ...

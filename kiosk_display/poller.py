"""Poll loop glue between the kiosk API and the reconciler."""

import threading

from kiosk_display.protocols import PlaybackSource
from kiosk_display.reconciler import DisplayReconciler, DisplayState
from spotify_kiosk.exceptions import TransportError
from spotify_kiosk.logging_config import get_logger, log_with_context
from spotify_kiosk.models import PlaybackSnapshot

logger = get_logger(__name__)


class DisplayPoller:
    """Runs one poll per call and feeds the result to the reconciler.

    Polls never overlap: a poll requested while another is still waiting on
    the API is skipped and the current state is returned.

    Args:
        source: Where snapshots come from (normally KioskApiClient)
        reconciler: Reconciler owning the display state
        recent_fallback: Ask for the last played track when nothing is playing
            and no track is remembered yet
    """

    def __init__(self, source: PlaybackSource, reconciler: DisplayReconciler, recent_fallback: bool = True):
        self._source = source
        self._reconciler = reconciler
        self._recent_fallback = recent_fallback
        self._in_flight = threading.Lock()

    @property
    def reconciler(self) -> DisplayReconciler:
        return self._reconciler

    def poll(self) -> DisplayState:
        """Fetch a snapshot and reconcile it; failures only flag the ERROR status."""
        if not self._in_flight.acquire(blocking=False):
            log_with_context(logger, "debug", "Previous poll still running, skipping", event_type="poll_skipped")
            return self._reconciler.state

        try:
            try:
                snapshot = self._fetch_snapshot()
            except TransportError as e:
                return self._reconciler.apply_error(e)
            return self._reconciler.apply(snapshot)
        finally:
            self._in_flight.release()

    def tick(self) -> DisplayState:
        """Cosmetic refresh between polls."""
        return self._reconciler.tick()

    def _fetch_snapshot(self) -> PlaybackSnapshot:
        snapshot = self._source.get_currently_playing()
        if snapshot.has_track or not self._recent_fallback or self._reconciler.last_known_track is not None:
            return snapshot

        try:
            return self._source.get_recently_played()
        except TransportError as e:
            log_with_context(
                logger,
                "warning",
                "Recently played fallback failed",
                error=e.message,
                event_type="recent_fallback_error",
            )
            return snapshot

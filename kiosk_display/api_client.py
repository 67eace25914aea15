"""Synchronous client for the kiosk API."""

from typing import Any

import httpx

from spotify_kiosk.exceptions import TransportError
from spotify_kiosk.logging_config import get_logger, log_with_context
from spotify_kiosk.models import PlaybackSnapshot

logger = get_logger(__name__)


class KioskApiClient:
    """Fetches playback snapshots from the kiosk API.

    Every failure (unreachable API, 500 from the proxy, malformed body) is
    raised as TransportError so the display only has one failure to handle.
    """

    def __init__(self, base_url: str, timeout: float = 5.0, transport: httpx.BaseTransport | None = None):
        # trust_env=False bypasses proxies for the local API
        self._client = httpx.Client(base_url=base_url, timeout=timeout, trust_env=False, transport=transport)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "KioskApiClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def get_currently_playing(self) -> PlaybackSnapshot:
        data = self._get_json("/api/currently-playing")
        return self._parse(PlaybackSnapshot.from_currently_playing, data)

    def get_recently_played(self) -> PlaybackSnapshot:
        data = self._get_json("/api/recently-played")
        return self._parse(PlaybackSnapshot.from_recently_played, data)

    def _get_json(self, path: str) -> Any:
        """GET a kiosk API path and decode its JSON body (None for 204 or null)."""
        try:
            response = self._client.get(path)
        except httpx.HTTPError as e:
            raise TransportError(f"Kiosk API unreachable: {e}", details={"path": path}) from e

        if response.status_code == 204:
            return None

        if response.status_code != 200:
            log_with_context(
                logger,
                "warning",
                "Kiosk API returned an error",
                path=path,
                status_code=response.status_code,
                event_type="kiosk_api_error",
            )
            raise TransportError(
                f"Kiosk API error: {response.status_code}",
                details={"path": path, "status_code": response.status_code},
            )

        try:
            return response.json()
        except ValueError as e:
            raise TransportError(f"Kiosk API sent invalid JSON: {e}", details={"path": path}) from e

    @staticmethod
    def _parse(parser, data: Any) -> PlaybackSnapshot:
        try:
            return parser(data)
        except (AttributeError, TypeError, ValueError) as e:
            raise TransportError(f"Unexpected kiosk API payload: {e}") from e

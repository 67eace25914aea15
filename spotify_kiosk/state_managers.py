"""State managers for handling application-wide mutable state.

This module provides task-safe state management using asyncio.Lock
for async operations. All state managers inherit from StateManager ABC.
"""

import asyncio
import time
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable

from spotify_kiosk.logging_config import get_logger, log_with_context
from spotify_kiosk.models import Credential

logger = get_logger(__name__)

# (access_token, expires_in seconds, rotated refresh token or None)
TokenGrant = tuple[str, int, str | None]


class StateManager(ABC):
    """Base class for all state managers.

    State managers provide task-safe access to mutable application state.
    All subclasses must implement lifecycle methods.
    """

    @abstractmethod
    async def initialize(self) -> None:
        """Initialize the state manager (called during app startup)."""
        pass

    @abstractmethod
    async def cleanup(self) -> None:
        """Cleanup resources (called during app shutdown)."""
        pass


class TokenCache(StateManager):
    """Holds the single Spotify access token with expiry and coalesced refresh.

    Only one refresh exchange runs at a time. Callers that find the slot empty
    while a refresh is in flight wait for it and reuse its result instead of
    starting their own exchange.
    """

    def __init__(self, safety_margin_seconds: int = 600, clock: Callable[[], float] = time.monotonic):
        """Initialize the token cache.

        Args:
            safety_margin_seconds: Seconds subtracted from the provider's token lifetime
            clock: Monotonic clock used for expiry (injectable for tests)
        """
        self._credential: Credential | None = None
        self._refresh_secret: str | None = None
        self._safety_margin = safety_margin_seconds
        self._clock = clock
        self._lock = asyncio.Lock()
        self._refresh_lock = asyncio.Lock()
        self.refresh_count = 0

    async def initialize(self) -> None:
        """Initialize the token cache."""
        # Nothing to load, tokens are never persisted
        pass

    async def cleanup(self) -> None:
        """Forget the cached token and any rotated refresh secret."""
        async with self._lock:
            self._credential = None
            self._refresh_secret = None

    @property
    def refresh_secret(self) -> str | None:
        """Refresh secret handed out by Spotify during a previous exchange, if any."""
        return self._refresh_secret

    async def peek(self) -> Credential | None:
        """Get the cached credential if set and not expired.

        Returns:
            Credential or None if expired/not set
        """
        async with self._lock:
            if self._credential and self._credential.is_valid(self._clock()):
                return self._credential
            return None

    async def set_token(self, access_token: str, expires_in: int, refresh_secret: str | None = None) -> Credential:
        """Store a new access token.

        Args:
            access_token: The access token string
            expires_in: Lifetime reported by Spotify in seconds
            refresh_secret: Rotated refresh token, if Spotify sent one

        Returns:
            The stored Credential
        """
        if expires_in > self._safety_margin:
            lifetime = expires_in - self._safety_margin
        else:
            # Short-lived token: still keep it for half its life
            lifetime = expires_in / 2

        async with self._lock:
            self._credential = Credential(access_token=access_token, expires_at=self._clock() + lifetime)
            if refresh_secret:
                self._refresh_secret = refresh_secret
            return self._credential

    async def invalidate(self, access_token: str | None = None) -> None:
        """Drop the cached credential.

        Args:
            access_token: Only drop the credential if it is still this token, so a
                late 401 does not discard a token another request just refreshed
        """
        async with self._lock:
            if self._credential is None:
                return
            if access_token is not None and self._credential.access_token != access_token:
                return
            self._credential = None

        log_with_context(logger, "info", "Spotify access token invalidated", event_type="token_invalidated")

    async def get_token(self, refresh: Callable[[], Awaitable[TokenGrant]]) -> Credential:
        """Return the cached credential, refreshing it when absent or expired.

        Args:
            refresh: Coroutine function performing the exchange

        Returns:
            A valid Credential

        Raises:
            Whatever ``refresh`` raises; the slot is left empty in that case.
        """
        credential = await self.peek()
        if credential:
            return credential

        async with self._refresh_lock:
            # Another caller may have refreshed while we waited
            credential = await self.peek()
            if credential:
                return credential

            access_token, expires_in, refresh_secret = await refresh()
            self.refresh_count += 1
            credential = await self.set_token(access_token, expires_in, refresh_secret)

        log_with_context(
            logger,
            "info",
            "Spotify access token refreshed",
            expires_in=expires_in,
            refresh_count=self.refresh_count,
            event_type="token_refreshed",
        )
        return credential

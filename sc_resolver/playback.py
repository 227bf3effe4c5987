"""
Now-playing guard for stream resolution.

Resolution can finish after the listener has already moved on to another
track. ``PlaybackSession`` remembers the most recent request and drops
results that arrive for anything else.
"""

import logging
from typing import Awaitable, Callable, Hashable, Optional

logger = logging.getLogger(__name__)


class PlaybackSession:
    """Tracks the current request and discards stale resolutions."""

    def __init__(self) -> None:
        self._current: Optional[Hashable] = None

    @property
    def current(self) -> Optional[Hashable]:
        return self._current

    def clear(self) -> None:
        self._current = None

    async def resolve_for(
        self,
        track_key: Hashable,
        resolve: Callable[[], Awaitable[Optional[str]]],
    ) -> Optional[str]:
        """
        Resolve a stream for ``track_key`` and keep it only if still current.

        Args:
            track_key: Identity of the requested track
            resolve: Zero-argument coroutine factory performing the resolution

        Returns:
            The resolved URL, or None if resolution failed or another track
            was requested meanwhile
        """
        self._current = track_key
        url = await resolve()
        if self._current != track_key:
            logger.info(f"Ignoring resolved stream for previous track {track_key}")
            return None
        return url

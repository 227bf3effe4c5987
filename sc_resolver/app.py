"""
SC Resolver Application.

Wires the credential, search and resolution components together and
guards the caller-facing operations.
"""

import logging
from typing import Optional

from sc_resolver.auth import ClientIdAcquirer, TokenStore
from sc_resolver.config import Config
from sc_resolver.http import PlatformHttp
from sc_resolver.resolve import HydrationExtractor, StreamResolver, TrackDescriptor
from sc_resolver.search import SearchClient

logger = logging.getLogger(__name__)


class SoundCloudResolver:
    """
    Caller-facing SoundCloud resolver.

    Components:
    - Credentials (TokenStore, ClientIdAcquirer)
    - Search and listing (SearchClient)
    - Stream resolution (StreamResolver, HydrationExtractor)

    None of the public operations raise: failures come back as an empty
    list or None.

    Usage:
        resolver = SoundCloudResolver(load_config(...))
        tracks = await resolver.search("radiohead")
        url = await resolver.resolve_track(tracks[0])
    """

    def __init__(self, config: Config, http: Optional[PlatformHttp] = None):
        """
        Initialize resolver.

        Args:
            config: Validated configuration
            http: Request helper override (defaults to one built from config)
        """
        self._config = config
        self._http = http or PlatformHttp(
            timeout=config.http.timeout,
            user_agent=config.http.user_agent,
        )
        sc = config.soundcloud
        self.tokens = TokenStore(self._http, sc.client_id, sc.client_secret)
        self.client_ids = ClientIdAcquirer(
            self._http,
            configured_id=sc.client_id,
            fallback_id=sc.fallback_client_id,
        )
        self.hydration = HydrationExtractor(self._http, self.client_ids)
        self.streams = StreamResolver(self._http, self.tokens, self.client_ids, self.hydration)
        self.searcher = SearchClient(self._http, self.tokens, self.client_ids)

    async def search(self, query: str) -> list[TrackDescriptor]:
        """Search tracks, most played first."""
        try:
            return await self.searcher.search(query)
        except Exception as e:
            logger.exception(f"SoundCloud search error: {e}")
            return []

    async def get_artist_tracks(self, artist_name: str) -> list[TrackDescriptor]:
        """List tracks of the best-matching artist, most played first."""
        try:
            return await self.searcher.get_artist_tracks(artist_name)
        except Exception as e:
            logger.exception(f"SoundCloud artist tracks error: {e}")
            return []

    async def resolve_stream_url(
        self,
        transcoding_url: str,
        permalink_url: Optional[str] = None,
        *,
        artist: Optional[str] = None,
        title: Optional[str] = None,
    ) -> Optional[str]:
        """Resolve a transcoding endpoint to a playable media URL, or None."""
        try:
            return await self.streams.resolve_stream_url(
                transcoding_url, permalink_url, artist=artist, title=title
            )
        except Exception as e:
            logger.exception(f"Error resolving stream URL: {e}")
            return None

    async def resolve_track(self, track: TrackDescriptor) -> Optional[str]:
        """Resolve the best transcoding of a track."""
        try:
            endpoint = track.stream_endpoint()
            if endpoint is None:
                logger.warning(f"Track {track.id} has no transcodings")
                return None
            return await self.streams.resolve_stream_url(
                endpoint,
                track.permalink_url or None,
                artist=track.artist,
                title=track.title,
            )
        except Exception as e:
            logger.exception(f"Error resolving track: {e}")
            return None

"""
Stream resolution from a track's public page.

The permalink page embeds a ``window.__sc_hydration`` snapshot that the web
player needs to render, so it keeps working when the formal API rejects
our client id. When the snapshot lacks transcodings (restricted or
partially hydrated tracks), the track is recovered through the resolve
endpoint and, failing that, a search on the permalink's slugs.
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional

from sc_resolver import scrape
from sc_resolver.auth.client_id import ClientIdAcquirer
from sc_resolver.http import (
    API_BASE,
    PlatformHttp,
    has_query_param,
    with_query_params,
    without_query_param,
)
from sc_resolver.resolve.media import fetch_media_url
from sc_resolver.resolve.models import TrackDescriptor, parse_tracks
from sc_resolver.resolve.permalink import query_from_permalink
from sc_resolver.resolve.strategies import Strategy, first_success

logger = logging.getLogger(__name__)

SEARCH_FALLBACK_LIMIT = 5


@dataclass
class HydrationContext:
    """State shared by the track recovery steps."""

    permalink_url: str
    client_id: Optional[str] = None
    # Client id the most recent resolve attempt used
    tried_client_id: Optional[str] = None


class HydrationExtractor:
    """Resolves a media URL from a permalink page."""

    def __init__(self, http: PlatformHttp, client_ids: ClientIdAcquirer):
        """
        Initialize extractor.

        Args:
            http: Request helper
            client_ids: Client id source for scraping and the fallback id
        """
        self._http = http
        self._client_ids = client_ids
        self.recovery_strategies: list[Strategy[HydrationContext, TrackDescriptor]] = [
            Strategy("resolve", self._resolve_with_known_id),
            Strategy("resolve_fresh_id", self._resolve_with_fresh_id),
            Strategy("search", self._search_by_permalink),
        ]

    async def resolve_via_hydration(self, permalink_url: str) -> Optional[str]:
        """
        Resolve a playable media URL for a permalink.

        Args:
            permalink_url: Public track page URL

        Returns:
            Signed media URL, or None if no transcoding could be resolved
        """
        logger.info(f"Attempting hydration fallback for {permalink_url}")
        ctx = HydrationContext(permalink_url=permalink_url)

        track = await self._read_page(ctx)
        if track is None:
            logger.info("Hydration incomplete, recovering track via API")
            track = await first_success(self.recovery_strategies, ctx, label="hydration")
        if track is None:
            logger.warning(f"No track data recovered for {permalink_url}")
            return None

        if not ctx.client_id:
            ctx.client_id = (
                await self._client_ids.scrape_client_id() or self._client_ids.fallback_client_id
            )

        return await self._resolve_transcodings(track, ctx.client_id)

    async def _read_page(self, ctx: HydrationContext) -> Optional[TrackDescriptor]:
        """Fetch the permalink page and read its hydration snapshot."""
        resp = await self._http.get(ctx.permalink_url)
        if resp is None or not resp.ok:
            logger.debug(f"Permalink page unavailable: {resp.status if resp else 'no response'}")
            return None

        entries = scrape.extract_hydration(resp.text)
        if entries is None:
            logger.debug("No hydration blob on permalink page")
            return None

        ctx.client_id = scrape.hydration_client_id(entries)
        return TrackDescriptor.from_api(scrape.find_hydratable(entries, "sound"))

    async def _resolve(self, ctx: HydrationContext, client_id: str) -> Optional[TrackDescriptor]:
        ctx.tried_client_id = client_id
        resp = await self._http.get(
            f"{API_BASE}/resolve",
            params={"url": ctx.permalink_url, "client_id": client_id},
        )
        if resp is None or not resp.ok:
            logger.warning(f"API resolve failed ({resp.status if resp else 'no response'})")
            return None
        return TrackDescriptor.from_api(resp.json())

    async def _resolve_with_known_id(self, ctx: HydrationContext) -> Optional[TrackDescriptor]:
        if not ctx.client_id:
            ctx.client_id = await self._client_ids.public_client_id()
        return await self._resolve(ctx, ctx.client_id)

    async def _resolve_with_fresh_id(self, ctx: HydrationContext) -> Optional[TrackDescriptor]:
        fresh_id = await self._client_ids.scrape_client_id()
        if not fresh_id or fresh_id == ctx.tried_client_id:
            return None
        ctx.client_id = fresh_id
        return await self._resolve(ctx, fresh_id)

    async def _search_by_permalink(self, ctx: HydrationContext) -> Optional[TrackDescriptor]:
        query = query_from_permalink(ctx.permalink_url)
        if not query:
            return None
        client_id = ctx.client_id or self._client_ids.fallback_client_id
        logger.info(f"Resolve failed, searching for '{query}'")
        resp = await self._http.get(
            f"{API_BASE}/search/tracks",
            params={"q": query, "client_id": client_id, "limit": SEARCH_FALLBACK_LIMIT},
        )
        if resp is None or not resp.ok:
            return None

        data = resp.json()
        tracks = parse_tracks(data.get("collection") if isinstance(data, dict) else None)
        for track in tracks:
            if track.permalink_url == ctx.permalink_url:
                return track
        if tracks:
            logger.info("Using first search result as fallback")
            return tracks[0]
        return None

    async def _resolve_transcodings(self, track: TrackDescriptor, client_id: str) -> Optional[str]:
        """Try each transcoding in preference order until one yields a media URL."""
        for transcoding in track.ranked_transcodings():
            params: dict[str, Any] = {"client_id": client_id}
            if track.track_authorization:
                params["track_authorization"] = track.track_authorization
            endpoint = with_query_params(transcoding.url, params)

            logger.debug(f"Testing transcoding {transcoding.protocol} ({transcoding.mime_type})")
            media_url = await fetch_media_url(self._http, endpoint)
            if media_url:
                logger.info(f"Stream resolved via hydration ({transcoding.protocol})")
                return media_url

            if has_query_param(endpoint, "track_authorization"):
                logger.debug("Retrying without track_authorization")
                media_url = await fetch_media_url(
                    self._http, without_query_param(endpoint, "track_authorization")
                )
                if media_url:
                    logger.info("Stream resolved via hydration without track authorization")
                    return media_url

        return None

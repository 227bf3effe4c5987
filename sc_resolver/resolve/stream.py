"""
Stream URL resolution for a transcoding endpoint.

Strategy chain, first success wins:
1. authenticated: OAuth access token, endpoint as given
2. public: fallback client id, no Authorization header
3. strip_authorization: public, without track_authorization
4. hydration: recover the stream from the track's permalink page
"""

import logging
from dataclasses import dataclass
from typing import Optional

from sc_resolver.auth.client_id import ClientIdAcquirer
from sc_resolver.auth.token_store import TokenStore
from sc_resolver.http import (
    PlatformHttp,
    has_query_param,
    redact_url,
    with_query_param,
    without_query_param,
)
from sc_resolver.resolve.hydration import HydrationExtractor
from sc_resolver.resolve.media import fetch_media_url
from sc_resolver.resolve.permalink import synthesize_permalink
from sc_resolver.resolve.strategies import Strategy, first_success

logger = logging.getLogger(__name__)


@dataclass
class StreamContext:
    """One resolution attempt."""

    transcoding_url: str
    permalink_url: Optional[str] = None


class StreamResolver:
    """Turns a transcoding endpoint into a directly playable media URL."""

    def __init__(
        self,
        http: PlatformHttp,
        tokens: TokenStore,
        client_ids: ClientIdAcquirer,
        hydration: HydrationExtractor,
    ):
        self._http = http
        self._tokens = tokens
        self._client_ids = client_ids
        self._hydration = hydration
        self.strategies: list[Strategy[StreamContext, str]] = [
            Strategy("authenticated", self._authenticated),
            Strategy("public", self._public),
            Strategy("strip_authorization", self._strip_authorization),
            Strategy("hydration", self._hydration_fallback),
        ]

    async def resolve_stream_url(
        self,
        transcoding_url: str,
        permalink_url: Optional[str] = None,
        *,
        artist: Optional[str] = None,
        title: Optional[str] = None,
    ) -> Optional[str]:
        """
        Resolve a transcoding endpoint to a media URL.

        Args:
            transcoding_url: Transcoding endpoint (may carry track_authorization)
            permalink_url: Track page, used by the hydration fallback
            artist: Used with title to guess a permalink when none is given
            title: Used with artist to guess a permalink when none is given

        Returns:
            Media URL, or None if the track is currently unplayable
        """
        if not permalink_url:
            permalink_url = synthesize_permalink(artist, title)
            if permalink_url:
                logger.debug(f"Generated fallback permalink: {permalink_url}")

        ctx = StreamContext(transcoding_url=transcoding_url, permalink_url=permalink_url)
        url = await first_success(self.strategies, ctx, label="stream")
        if url:
            logger.info(f"Stream resolved for {redact_url(transcoding_url)}")
        else:
            logger.error(f"Could not resolve stream for {redact_url(transcoding_url)}")
        return url

    def _public_url(self, ctx: StreamContext) -> str:
        return with_query_param(ctx.transcoding_url, "client_id", self._client_ids.fallback_client_id)

    async def _authenticated(self, ctx: StreamContext) -> Optional[str]:
        token = await self._tokens.get_token()
        if token is None:
            return None
        return await fetch_media_url(
            self._http, ctx.transcoding_url, headers={"Authorization": token.authorization}
        )

    async def _public(self, ctx: StreamContext) -> Optional[str]:
        return await fetch_media_url(self._http, self._public_url(ctx))

    async def _strip_authorization(self, ctx: StreamContext) -> Optional[str]:
        url = self._public_url(ctx)
        if not has_query_param(url, "track_authorization"):
            return None
        return await fetch_media_url(self._http, without_query_param(url, "track_authorization"))

    async def _hydration_fallback(self, ctx: StreamContext) -> Optional[str]:
        if not ctx.permalink_url:
            logger.warning("No permalink URL available for hydration fallback")
            return None
        return await self._hydration.resolve_via_hydration(ctx.permalink_url)

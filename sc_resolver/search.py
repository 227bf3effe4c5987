"""
Track search and artist listing.

Requests use the access token when one is available. Anonymous requests
carry a client id and rotate through the client id tiers on rejection:
configured (or fallback) id, then a freshly scraped id, then the fallback
id, each at most once.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from sc_resolver.auth.client_id import ClientIdAcquirer
from sc_resolver.auth.token_store import TokenStore
from sc_resolver.http import API_BASE, PlatformHttp
from sc_resolver.resolve.models import TrackDescriptor, parse_tracks
from sc_resolver.resolve.strategies import Strategy, first_success

logger = logging.getLogger(__name__)

SEARCH_LIMIT = 50
ARTIST_TRACKS_LIMIT = 50


@dataclass
class ApiRequest:
    """An anonymous API call being retried across client ids."""

    url: str
    params: dict[str, Any]
    initial_client_id: str
    tried: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class ApiResult:
    """Decoded body and the client id that obtained it (None if via token)."""

    data: Any
    client_id: Optional[str] = None


class SearchClient:
    """Query wrappers for the search and listing endpoints."""

    def __init__(self, http: PlatformHttp, tokens: TokenStore, client_ids: ClientIdAcquirer):
        self._http = http
        self._tokens = tokens
        self._client_ids = client_ids
        self.client_id_strategies: list[Strategy[ApiRequest, ApiResult]] = [
            Strategy("initial_id", self._with_initial_id),
            Strategy("scraped_id", self._with_scraped_id),
            Strategy("fallback_id", self._with_fallback_id),
        ]

    async def search(self, query: str) -> list[TrackDescriptor]:
        """
        Search tracks.

        Args:
            query: Free-text query

        Returns:
            Tracks sorted by play count, most played first; empty on failure
        """
        if not query.strip():
            return []

        result = await self._get(
            f"{API_BASE}/search/tracks", {"q": query, "limit": SEARCH_LIMIT}
        )
        if result is None:
            logger.error(f"SoundCloud search failed for '{query}'")
            return []
        return _sorted_tracks(result.data)

    async def get_artist_tracks(self, artist_name: str) -> list[TrackDescriptor]:
        """
        List an artist's tracks.

        Looks the artist up by name (top user match), then lists that
        user's tracks.

        Args:
            artist_name: Artist display name

        Returns:
            Tracks sorted by play count; empty if the artist is not found
        """
        if not artist_name.strip():
            return []

        users = await self._get(f"{API_BASE}/search/users", {"q": artist_name, "limit": 1})
        if users is None:
            logger.error(f"SoundCloud user search failed for '{artist_name}'")
            return []

        user_id = _first_user_id(users.data)
        if user_id is None:
            logger.info(f"No SoundCloud user found for '{artist_name}'")
            return []

        tracks = await self._get(
            f"{API_BASE}/users/{user_id}/tracks",
            {"limit": ARTIST_TRACKS_LIMIT},
            client_id=users.client_id,
        )
        if tracks is None:
            logger.error(f"Could not list tracks for SoundCloud user {user_id}")
            return []
        return _sorted_tracks(tracks.data)

    async def _get(
        self, url: str, params: dict[str, Any], client_id: Optional[str] = None
    ) -> Optional[ApiResult]:
        token = await self._tokens.get_token()
        if token is not None:
            resp = await self._http.get(
                url, params=params, headers={"Authorization": token.authorization}
            )
            if resp is None or not resp.ok:
                return None
            return ApiResult(data=resp.json())

        initial = (
            client_id
            or self._client_ids.configured_client_id()
            or self._client_ids.fallback_client_id
        )
        request = ApiRequest(url=url, params=params, initial_client_id=initial)
        return await first_success(self.client_id_strategies, request, label="search")

    async def _attempt(self, request: ApiRequest, client_id: str) -> Optional[ApiResult]:
        if client_id in request.tried:
            return None
        request.tried.append(client_id)
        resp = await self._http.get(request.url, params={**request.params, "client_id": client_id})
        if resp is None or not resp.ok:
            return None
        return ApiResult(data=resp.json(), client_id=client_id)

    async def _with_initial_id(self, request: ApiRequest) -> Optional[ApiResult]:
        return await self._attempt(request, request.initial_client_id)

    async def _with_scraped_id(self, request: ApiRequest) -> Optional[ApiResult]:
        logger.warning("SoundCloud request rejected, trying scraped client id...")
        scraped = await self._client_ids.scrape_client_id()
        if not scraped:
            return None
        return await self._attempt(request, scraped)

    async def _with_fallback_id(self, request: ApiRequest) -> Optional[ApiResult]:
        fallback = self._client_ids.fallback_client_id
        if fallback in request.tried:
            return None
        logger.warning("Trying fallback SoundCloud client id")
        return await self._attempt(request, fallback)


def _collection(data: Any) -> Any:
    return data.get("collection") if isinstance(data, dict) else None


def _first_user_id(data: Any) -> Optional[int]:
    users = _collection(data)
    if not isinstance(users, list) or not users or not isinstance(users[0], dict):
        return None
    try:
        return int(users[0]["id"])
    except (KeyError, TypeError, ValueError):
        return None


def _sorted_tracks(data: Any) -> list[TrackDescriptor]:
    tracks = parse_tracks(_collection(data))
    return sorted(tracks, key=lambda t: t.playback_count, reverse=True)

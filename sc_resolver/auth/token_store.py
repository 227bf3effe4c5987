"""
Credential store for the client-credentials access token.
"""

import asyncio
import logging
import time
from typing import Callable, Optional

from sc_resolver.auth.tokens import AccessToken
from sc_resolver.http import TOKEN_URL, PlatformHttp

logger = logging.getLogger(__name__)


class TokenStore:
    """
    Holds a single cached access token and refills it on demand.

    A missing client id/secret pair is not an error: ``get_token()`` returns
    None and callers operate anonymously.
    """

    def __init__(
        self,
        http: PlatformHttp,
        client_id: str = "",
        client_secret: str = "",
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize token store.

        Args:
            http: Request helper
            client_id: Application client id for the exchange
            client_secret: Application client secret for the exchange
            clock: Source of the current time (epoch seconds)
        """
        self._http = http
        self._client_id = client_id
        self._client_secret = client_secret
        self._clock = clock
        self._token: Optional[AccessToken] = None
        self._lock = asyncio.Lock()

    @property
    def is_configured(self) -> bool:
        return bool(self._client_id and self._client_secret)

    @property
    def cached(self) -> Optional[AccessToken]:
        """Currently cached token, valid or not."""
        return self._token

    async def get_token(self) -> Optional[AccessToken]:
        """
        Get a valid access token.

        Returns:
            Cached token if still valid, a freshly exchanged one otherwise,
            or None if unconfigured or the exchange failed
        """
        token = self._token
        if token and token.is_valid(self._clock()):
            return token

        async with self._lock:
            # Another task may have refilled while we waited
            token = self._token
            if token and token.is_valid(self._clock()):
                return token
            return await self._exchange()

    async def refresh(self) -> Optional[AccessToken]:
        """Force a new exchange, replacing the cached token on success."""
        async with self._lock:
            return await self._exchange()

    def invalidate(self) -> None:
        """Drop the cached token."""
        self._token = None

    async def _exchange(self) -> Optional[AccessToken]:
        if not self.is_configured:
            logger.debug("SoundCloud client id or secret missing, operating anonymously")
            return None

        logger.info("Fetching SoundCloud access token...")
        resp = await self._http.post_form(
            TOKEN_URL,
            data={
                "grant_type": "client_credentials",
                "client_id": self._client_id,
                "client_secret": self._client_secret,
            },
            headers={"Accept": "application/json; charset=utf-8"},
        )
        if resp is None:
            return None
        if not resp.ok:
            logger.error(f"SoundCloud auth failed: {resp.status} {resp.text[:200]}")
            return None

        token = AccessToken.from_exchange(resp.json(), now=self._clock())
        if token is None:
            logger.error("SoundCloud auth response carried no access token")
            return None

        self._token = token
        logger.info("SoundCloud token acquired successfully")
        return token

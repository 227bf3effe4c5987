"""
SoundCloud public client id acquisition.

Anonymous API calls need a ``client_id`` that the platform rotates without
notice. Tiers, tried in order:

1. The configured client id
2. A client id scraped from the web player's asset bundles
3. ``FALLBACK_CLIENT_ID``
"""

import logging
from typing import Optional

from sc_resolver import scrape
from sc_resolver.http import SITE_ORIGIN, PlatformHttp

logger = logging.getLogger(__name__)

# Escape hatch for when dynamic discovery is broken. Known to work as of 2025;
# the platform can revoke it at any time. Override with
# soundcloud.fallback_client_id rather than editing this value.
FALLBACK_CLIENT_ID = "CkCiIyf14rHi27fhk7HxhPOzc85okfSJ"


class ClientIdAcquirer:
    """Finds a usable public client id."""

    def __init__(
        self,
        http: PlatformHttp,
        configured_id: str = "",
        fallback_id: str = FALLBACK_CLIENT_ID,
    ):
        """
        Initialize acquirer.

        Args:
            http: Request helper
            configured_id: Client id from configuration (tier 1)
            fallback_id: Last-resort client id (tier 3)
        """
        self._http = http
        self._configured_id = configured_id
        self._fallback_id = fallback_id or FALLBACK_CLIENT_ID

    @property
    def fallback_client_id(self) -> str:
        return self._fallback_id

    def configured_client_id(self) -> Optional[str]:
        return self._configured_id or None

    async def public_client_id(self) -> str:
        """Best available client id: configured, else scraped, else fallback."""
        configured = self.configured_client_id()
        if configured:
            return configured
        scraped = await self.scrape_client_id()
        if scraped:
            return scraped
        logger.warning("Using fallback SoundCloud client id")
        return self._fallback_id

    async def scrape_client_id(self) -> Optional[str]:
        """
        Scrape a fresh client id from the SoundCloud homepage.

        Fetches the homepage, then each referenced player bundle in turn
        until one contains a client id literal.

        Returns:
            Client id, or None if nothing matched or a request failed
        """
        home_url = f"{SITE_ORIGIN}/"
        resp = await self._http.get(home_url)
        if resp is None or not resp.ok:
            logger.warning("Error scraping client id: homepage unavailable")
            return None

        script_urls = scrape.extract_script_urls(resp.text, home_url)
        logger.debug(f"Found {len(script_urls)} candidate scripts")

        for script_url in script_urls:
            script = await self._http.get(script_url)
            if script is None or not script.ok:
                continue
            client_id = scrape.extract_client_id(script.text)
            if client_id:
                logger.info("Scraped fresh SoundCloud client id")
                logger.debug(f"Client id found in {script_url}")
                return client_id

        logger.warning("No client id found in player scripts")
        return None

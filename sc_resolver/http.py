"""
Outbound HTTP for the SoundCloud surfaces.

Every request gets its own short-lived session and a bounded timeout.
Transport failures are logged and reported as ``None`` so callers can move
on to their next fallback.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Optional
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import aiohttp

logger = logging.getLogger(__name__)

SITE_ORIGIN = "https://soundcloud.com"
API_BASE = "https://api-v2.soundcloud.com"
TOKEN_URL = "https://secure.soundcloud.com/oauth/token"

DEFAULT_TIMEOUT = 12.0

# Desktop Chrome; the edge rejects script-like agents
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


@dataclass(frozen=True)
class HttpResponse:
    """Status and body of a completed request."""

    status: int
    text: str
    url: str = ""

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def json(self) -> Any:
        """Decoded JSON body, or None if the body is not JSON."""
        try:
            return json.loads(self.text)
        except ValueError:
            return None


class PlatformHttp:
    """Request helper carrying the headers SoundCloud's edge expects."""

    def __init__(self, timeout: float = DEFAULT_TIMEOUT, user_agent: str = DEFAULT_USER_AGENT):
        """
        Initialize request helper.

        Args:
            timeout: Total per-request timeout in seconds
            user_agent: Browser user agent sent with page and API requests
        """
        self.timeout = timeout
        self.user_agent = user_agent

    def browser_headers(self) -> dict[str, str]:
        """Headers the web player itself sends."""
        return {
            "User-Agent": self.user_agent,
            "Referer": f"{SITE_ORIGIN}/",
            "Origin": SITE_ORIGIN,
        }

    async def get(
        self,
        url: str,
        params: Optional[dict[str, Any]] = None,
        headers: Optional[dict[str, str]] = None,
        browser: bool = True,
    ) -> Optional[HttpResponse]:
        """
        GET a URL.

        Args:
            url: Target URL (may already carry a query string)
            params: Extra query parameters
            headers: Extra headers, merged over the browser headers
            browser: Send the User-Agent/Referer/Origin triple

        Returns:
            HttpResponse, or None on transport failure
        """
        merged = self.browser_headers() if browser else {}
        if headers:
            merged.update(headers)
        if params:
            url = with_query_params(url, params)
        return await self._request("GET", url, headers=merged)

    async def post_form(
        self,
        url: str,
        data: dict[str, str],
        headers: Optional[dict[str, str]] = None,
    ) -> Optional[HttpResponse]:
        """POST a form-encoded body. No browser headers are attached."""
        merged = {"Content-Type": "application/x-www-form-urlencoded"}
        if headers:
            merged.update(headers)
        return await self._request("POST", url, headers=merged, data=data)

    async def _request(
        self,
        method: str,
        url: str,
        headers: dict[str, str],
        data: Optional[dict[str, str]] = None,
    ) -> Optional[HttpResponse]:
        timeout = aiohttp.ClientTimeout(total=self.timeout)
        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.request(method, url, headers=headers, data=data) as resp:
                    text = await resp.text(errors="replace")
                    if resp.status >= 400:
                        logger.debug(f"{method} {redact_url(url)} -> {resp.status}")
                    return HttpResponse(status=resp.status, text=text, url=str(resp.url))
        except Exception as e:
            logger.warning(f"{method} {redact_url(url)} failed: {type(e).__name__}: {e}")
        return None


def redact_url(url: str) -> str:
    """Drop the query string for logging."""
    return url.split("?", 1)[0]


def with_query_params(url: str, params: dict[str, Any]) -> str:
    """Set (or replace) query parameters on a URL, keeping the others in order."""
    parts = urlsplit(url)
    query = [(k, v) for k, v in parse_qsl(parts.query, keep_blank_values=True) if k not in params]
    query.extend((k, str(v)) for k, v in params.items() if v is not None)
    return urlunsplit(parts._replace(query=urlencode(query)))


def with_query_param(url: str, key: str, value: str) -> str:
    """Set (or replace) a single query parameter."""
    return with_query_params(url, {key: value})


def without_query_param(url: str, key: str) -> str:
    """Remove every occurrence of a query parameter."""
    parts = urlsplit(url)
    query = [(k, v) for k, v in parse_qsl(parts.query, keep_blank_values=True) if k != key]
    return urlunsplit(parts._replace(query=urlencode(query)))


def has_query_param(url: str, key: str) -> bool:
    """Check whether a URL carries a query parameter."""
    return any(k == key for k, _ in parse_qsl(urlsplit(url).query, keep_blank_values=True))

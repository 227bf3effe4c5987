"""Transcoding endpoint calls."""

import logging
from typing import Optional

from sc_resolver.http import PlatformHttp, redact_url

logger = logging.getLogger(__name__)


async def fetch_media_url(
    http: PlatformHttp,
    endpoint: str,
    headers: Optional[dict[str, str]] = None,
) -> Optional[str]:
    """
    Exchange a transcoding endpoint for its signed media URL.

    Args:
        http: Request helper
        endpoint: Transcoding endpoint with its query parameters attached
        headers: Extra headers (e.g. Authorization)

    Returns:
        Media URL, or None if the call failed or the payload had no URL
    """
    resp = await http.get(endpoint, headers=headers)
    if resp is None:
        return None
    if not resp.ok:
        logger.debug(f"Transcoding {redact_url(endpoint)} rejected: {resp.status}")
        return None

    data = resp.json()
    url = data.get("url") if isinstance(data, dict) else None
    if not url or not isinstance(url, str):
        logger.debug(f"Transcoding {redact_url(endpoint)} returned no media URL")
        return None
    return url

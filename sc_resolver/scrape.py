"""
Text extractors for SoundCloud pages and scripts.

All pattern matching against the web player lives here. Every extractor
returns None (or an empty list) when nothing matches; none of them raise.
"""

import json
import logging
import re
from typing import Any, Optional
from urllib.parse import urljoin

from bs4 import BeautifulSoup

logger = logging.getLogger(__name__)

# Paths under sndcdn.com that host the web player's bundles
ASSET_PATH_MARKERS = ("sndcdn.com/assets/", "sndcdn.com/app")

# The platform has shipped both spellings
CLIENT_ID_PATTERNS = [
    re.compile(r'client_id:"([a-zA-Z0-9]{32})"'),
    re.compile(r"client_id=([a-zA-Z0-9]{32})"),
]

HYDRATION_PATTERN = re.compile(r"window\.__sc_hydration\s*=\s*")


def is_asset_script(url: str) -> bool:
    """Check if a script URL points at the player's asset host."""
    return any(marker in url for marker in ASSET_PATH_MARKERS)


def extract_script_urls(html: str, base_url: str) -> list[str]:
    """
    Collect player bundle URLs referenced by ``<script src>`` tags.

    Args:
        html: Page source
        base_url: URL the page was fetched from, for relative sources

    Returns:
        Absolute script URLs in page order, without duplicates
    """
    try:
        soup = BeautifulSoup(html, "html.parser")
    except Exception as e:
        logger.debug(f"Could not parse page: {e}")
        return []

    scripts: list[str] = []
    for script in soup.find_all("script", src=True):
        src = str(script["src"])
        if not src or src.startswith("data:"):
            continue
        url = urljoin(base_url, src)
        if is_asset_script(url):
            scripts.append(url)

    return list(dict.fromkeys(scripts))


def extract_client_id(js_content: str) -> Optional[str]:
    """Find an embedded client_id literal in a script body."""
    for pattern in CLIENT_ID_PATTERNS:
        match = pattern.search(js_content)
        if match:
            return match.group(1)
    return None


def extract_hydration(html: str) -> Optional[list[Any]]:
    """
    Decode the ``window.__sc_hydration = [...]`` array from a page.

    Returns:
        The decoded list, or None if absent or malformed
    """
    match = HYDRATION_PATTERN.search(html)
    if not match:
        return None

    try:
        data, _ = json.JSONDecoder().raw_decode(html, match.end())
    except ValueError as e:
        logger.debug(f"Malformed hydration blob: {e}")
        return None

    if not isinstance(data, list):
        return None
    return data


def find_hydratable(entries: list[Any], kind: str) -> Optional[dict[str, Any]]:
    """Return the ``data`` of the first hydration entry tagged ``kind``."""
    for entry in entries:
        if isinstance(entry, dict) and entry.get("hydratable") == kind:
            data = entry.get("data")
            return data if isinstance(data, dict) else None
    return None


def hydration_client_id(entries: list[Any]) -> Optional[str]:
    """Client id carried by the ``apiClient`` hydration entry."""
    api_client = find_hydratable(entries, "apiClient")
    if not api_client:
        return None
    value = api_client.get("client_id") or api_client.get("id")
    return str(value) if value else None

"""Permalink helpers."""

import re
from typing import Optional
from urllib.parse import urlsplit

from sc_resolver.http import SITE_ORIGIN


def slugify(text: str) -> str:
    """Lowercase and replace whitespace runs with hyphens."""
    return re.sub(r"\s+", "-", text.strip().lower())


def synthesize_permalink(artist: Optional[str], title: Optional[str]) -> Optional[str]:
    """Guess a track's permalink from its artist and title."""
    if not artist or not title or not artist.strip() or not title.strip():
        return None
    return f"{SITE_ORIGIN}/{slugify(artist)}/{slugify(title)}"


def query_from_permalink(permalink_url: str) -> str:
    """
    Derive a search query from a permalink.

    ``https://soundcloud.com/some-artist/a-track`` -> ``"some artist a track"``
    """
    path = urlsplit(permalink_url).path if "://" in permalink_url else permalink_url
    segments = [s for s in path.split("/") if s]
    return " ".join(segments[-2:]).replace("-", " ")

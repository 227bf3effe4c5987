"""Scripted HTTP fake and SoundCloud payload builders for tests."""

import json
from dataclasses import dataclass
from typing import Any, Callable, Optional, Union

from sc_resolver.http import HttpResponse, PlatformHttp

SCRAPED_ID = "S" * 32
STALE_ID = "X" * 32
FALLBACK_ID = "F" * 32

Reply = Optional[tuple[int, Any]]


@dataclass
class RecordedCall:
    method: str
    url: str
    headers: dict[str, str]
    data: Optional[dict[str, str]] = None


class FakeHttp(PlatformHttp):
    """
    PlatformHttp with scripted replies.

    Routes match on a URL substring (or predicate), first registered wins.
    Each route replays its replies in order, repeating the last one. A reply
    of None simulates a transport failure. Unmatched URLs get a 404.
    """

    def __init__(self) -> None:
        super().__init__(timeout=1.0, user_agent="TestAgent/1.0")
        self.routes: list[tuple[Callable[[str], bool], list[Reply]]] = []
        self.calls: list[RecordedCall] = []

    def route(self, match: Union[str, Callable[[str], bool]], *replies: Reply) -> "FakeHttp":
        matcher = match if callable(match) else (lambda url, s=match: s in url)
        self.routes.append((matcher, list(replies)))
        return self

    def urls(self, substring: str = "") -> list[str]:
        return [c.url for c in self.calls if substring in c.url]

    async def _request(
        self,
        method: str,
        url: str,
        headers: dict[str, str],
        data: Optional[dict[str, str]] = None,
    ) -> Optional[HttpResponse]:
        self.calls.append(RecordedCall(method, url, dict(headers), data))
        for matcher, replies in self.routes:
            if not matcher(url):
                continue
            reply = replies.pop(0) if len(replies) > 1 else replies[0]
            if reply is None:
                return None
            status, body = reply
            text = body if isinstance(body, str) else json.dumps(body)
            return HttpResponse(status=status, text=text, url=url)
        return HttpResponse(status=404, text="", url=url)


def transcoding(
    protocol: str, mime_type: str, url: Optional[str] = None
) -> dict[str, Any]:
    """Build a transcoding payload."""
    return {
        "url": url or f"https://api-v2.soundcloud.com/media/soundcloud:tracks:1/x/stream/{protocol}",
        "preset": "mp3_1_0",
        "format": {"protocol": protocol, "mime_type": mime_type},
    }


def track_payload(
    track_id: int = 1,
    title: str = "Test Track",
    username: str = "Test Artist",
    playback_count: int = 0,
    permalink_url: str = "https://soundcloud.com/test-artist/test-track",
    transcodings: Optional[list[dict[str, Any]]] = None,
    track_authorization: Optional[str] = None,
) -> dict[str, Any]:
    """Build a SoundCloud track payload."""
    payload: dict[str, Any] = {
        "id": track_id,
        "title": title,
        "user": {"username": username, "avatar_url": ""},
        "duration": 215000,
        "artwork_url": "https://i1.sndcdn.com/artworks-000-large.jpg",
        "permalink_url": permalink_url,
        "playback_count": playback_count,
        "media": {
            "transcodings": transcodings
            if transcodings is not None
            else [transcoding("hls", "audio/mpeg")]
        },
    }
    if track_authorization:
        payload["track_authorization"] = track_authorization
    return payload


def homepage(*script_urls: str) -> str:
    """Build a homepage referencing the given scripts."""
    tags = "\n".join(f'<script crossorigin src="{u}"></script>' for u in script_urls)
    return f"<!DOCTYPE html><html><head></head><body>{tags}</body></html>"


def hydration_page(entries: list[Any]) -> str:
    """Build a permalink page embedding a hydration blob."""
    return (
        "<html><body><script>window.__sc_hydration = "
        f"{json.dumps(entries)};</script></body></html>"
    )


def route_scrape(fake: FakeHttp, client_id: Optional[str] = SCRAPED_ID) -> None:
    """Script the homepage + asset pair the client id scraper reads."""
    script = "https://a-v2.sndcdn.com/assets/49-abc.js"
    fake.route(lambda url: url == "https://soundcloud.com/", (200, homepage(script)))
    body = f'({{client_id:"{client_id}",env:"production"}})' if client_id else "var x=1;"
    fake.route(script, (200, body))

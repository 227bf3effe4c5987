"""
Track and transcoding descriptors built from SoundCloud API payloads.
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional, Sequence

from sc_resolver.http import with_query_param

logger = logging.getLogger(__name__)


class TranscodingScore:
    """Preference scores for delivery variants (higher is better)."""

    HLS_MP3 = 3
    HLS_OPUS = 2
    PROGRESSIVE = 1
    OTHER = 0


@dataclass(frozen=True)
class Transcoding:
    """One delivery variant of a track, resolved through its own endpoint."""

    url: str
    protocol: str = ""
    mime_type: str = ""
    preset: str = ""

    @property
    def score(self) -> int:
        if self.protocol == "hls" and "mpeg" in self.mime_type:
            return TranscodingScore.HLS_MP3
        if self.protocol == "hls" and "opus" in self.mime_type:
            return TranscodingScore.HLS_OPUS
        if self.protocol == "progressive":
            return TranscodingScore.PROGRESSIVE
        return TranscodingScore.OTHER

    @classmethod
    def from_api(cls, payload: Any) -> Optional["Transcoding"]:
        if not isinstance(payload, dict):
            return None
        url = payload.get("url")
        if not url or not isinstance(url, str):
            return None
        fmt = payload.get("format")
        if not isinstance(fmt, dict):
            fmt = {}
        return cls(
            url=url,
            protocol=str(fmt.get("protocol") or ""),
            mime_type=str(fmt.get("mime_type") or ""),
            preset=str(payload.get("preset") or ""),
        )


def rank_transcodings(transcodings: Sequence[Transcoding]) -> list[Transcoding]:
    """Order transcodings by descending preference, keeping API order on ties."""
    return sorted(transcodings, key=lambda t: t.score, reverse=True)


@dataclass(frozen=True)
class TrackDescriptor:
    """A playable SoundCloud track as returned by search, listing or hydration."""

    id: int
    title: str
    artist: str
    duration: float  # Seconds
    permalink_url: str
    transcodings: tuple[Transcoding, ...]
    artwork_url: Optional[str] = None
    track_authorization: Optional[str] = None
    playback_count: int = 0

    @classmethod
    def from_api(cls, payload: Any) -> Optional["TrackDescriptor"]:
        """
        Build from a SoundCloud track payload.

        Returns:
            Descriptor, or None if the payload has no id or no usable
            transcoding
        """
        if not isinstance(payload, dict):
            return None

        try:
            track_id = int(payload["id"])
        except (KeyError, TypeError, ValueError):
            return None

        media = payload.get("media")
        raw_transcodings = media.get("transcodings") if isinstance(media, dict) else None
        if not isinstance(raw_transcodings, list):
            return None
        transcodings = tuple(
            t for t in (Transcoding.from_api(raw) for raw in raw_transcodings) if t is not None
        )
        if not transcodings:
            return None

        user = payload.get("user")
        artist = user.get("username", "") if isinstance(user, dict) else ""

        try:
            duration = float(payload.get("duration") or 0) / 1000.0
        except (TypeError, ValueError):
            duration = 0.0

        try:
            playback_count = int(payload.get("playback_count") or 0)
        except (TypeError, ValueError):
            playback_count = 0

        return cls(
            id=track_id,
            title=str(payload.get("title") or ""),
            artist=str(artist or ""),
            duration=duration,
            permalink_url=str(payload.get("permalink_url") or ""),
            transcodings=transcodings,
            artwork_url=payload.get("artwork_url") or None,
            track_authorization=payload.get("track_authorization") or None,
            playback_count=playback_count,
        )

    def ranked_transcodings(self) -> list[Transcoding]:
        return rank_transcodings(self.transcodings)

    def stream_endpoint(self) -> Optional[str]:
        """Best transcoding endpoint, with the track authorization attached."""
        ranked = self.ranked_transcodings()
        if not ranked:
            return None
        url = ranked[0].url
        if self.track_authorization:
            url = with_query_param(url, "track_authorization", self.track_authorization)
        return url

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "title": self.title,
            "artist": self.artist,
            "duration": self.duration,
            "artwork_url": self.artwork_url,
            "permalink_url": self.permalink_url,
            "playback_count": self.playback_count,
            "stream_endpoint": self.stream_endpoint(),
            "transcodings": [
                {"url": t.url, "protocol": t.protocol, "mime_type": t.mime_type}
                for t in self.transcodings
            ],
        }


def parse_tracks(collection: Any) -> list[TrackDescriptor]:
    """Build descriptors from an API ``collection``, skipping unusable entries."""
    if not isinstance(collection, list):
        return []
    tracks = []
    for item in collection:
        track = TrackDescriptor.from_api(item)
        if track is None:
            logger.debug("Skipping track payload without usable transcodings")
            continue
        tracks.append(track)
    return tracks

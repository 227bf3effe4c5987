"""Tests for the SoundCloudResolver facade."""

from unittest.mock import AsyncMock

import pytest

from helpers import FALLBACK_ID, FakeHttp, track_payload, transcoding
from sc_resolver import Config, SoundCloudResolver, TrackDescriptor
from sc_resolver.config import SoundCloudConfig


@pytest.fixture
def config() -> Config:
    return Config(soundcloud=SoundCloudConfig(fallback_client_id=FALLBACK_ID))


@pytest.fixture
def resolver(config: Config, fake_http: FakeHttp) -> SoundCloudResolver:
    return SoundCloudResolver(config, http=fake_http)


class TestWiring:
    """Tests for component construction."""

    def test_http_from_config(self) -> None:
        config = Config()
        config.http.timeout = 5.0
        config.http.user_agent = "Agent/2"

        resolver = SoundCloudResolver(config)

        assert resolver.tokens.is_configured is False
        assert resolver.client_ids.fallback_client_id == config.soundcloud.fallback_client_id
        http = resolver.streams._http
        assert http.timeout == 5.0
        assert http.user_agent == "Agent/2"

    def test_credentials_passed_through(self) -> None:
        config = Config(
            soundcloud=SoundCloudConfig(client_id="a" * 32, client_secret="secret")
        )

        resolver = SoundCloudResolver(config)

        assert resolver.tokens.is_configured is True
        assert resolver.client_ids.configured_client_id() == "a" * 32


class TestNeverRaises:
    """Tests that caller-facing operations swallow unexpected errors."""

    @pytest.mark.asyncio
    async def test_search(self, resolver: SoundCloudResolver) -> None:
        resolver.searcher.search = AsyncMock(side_effect=RuntimeError("boom"))  # type: ignore[method-assign]
        assert await resolver.search("x") == []

    @pytest.mark.asyncio
    async def test_artist_tracks(self, resolver: SoundCloudResolver) -> None:
        resolver.searcher.get_artist_tracks = AsyncMock(side_effect=KeyError("id"))  # type: ignore[method-assign]
        assert await resolver.get_artist_tracks("x") == []

    @pytest.mark.asyncio
    async def test_resolve_stream_url(self, resolver: SoundCloudResolver) -> None:
        resolver.streams.resolve_stream_url = AsyncMock(side_effect=ValueError("bad"))  # type: ignore[method-assign]
        assert await resolver.resolve_stream_url("https://x.test/e") is None

    @pytest.mark.asyncio
    async def test_resolve_track_without_transcodings(
        self, resolver: SoundCloudResolver, fake_http: FakeHttp
    ) -> None:
        """Test a hand-built track with no transcodings resolves to None."""
        track = TrackDescriptor(
            id=1,
            title="Test Track",
            artist="Test Artist",
            duration=1.0,
            permalink_url="https://soundcloud.com/test-artist/test-track",
            transcodings=(),
        )

        assert await resolver.resolve_track(track) is None
        assert fake_http.calls == []

    @pytest.mark.asyncio
    async def test_resolve_track_error(self, resolver: SoundCloudResolver) -> None:
        track = TrackDescriptor.from_api(track_payload())
        assert track is not None
        resolver.streams.resolve_stream_url = AsyncMock(side_effect=RuntimeError("boom"))  # type: ignore[method-assign]

        assert await resolver.resolve_track(track) is None


class TestOperations:
    """End-to-end tests over the scripted HTTP fake."""

    @pytest.mark.asyncio
    async def test_search(self, resolver: SoundCloudResolver, fake_http: FakeHttp) -> None:
        fake_http.route(
            "/search/tracks",
            (200, {"collection": [track_payload(track_id=1, playback_count=1), track_payload(track_id=2, playback_count=9)]}),
        )

        tracks = await resolver.search("lofi")

        assert [t.id for t in tracks] == [2, 1]
        assert f"client_id={FALLBACK_ID}" in fake_http.urls("/search/tracks")[0]

    @pytest.mark.asyncio
    async def test_resolve_track(self, resolver: SoundCloudResolver, fake_http: FakeHttp) -> None:
        endpoint = "https://api-v2.soundcloud.com/media/soundcloud:tracks:1/x/stream/hls"
        track = TrackDescriptor.from_api(
            track_payload(
                transcodings=[
                    transcoding("progressive", "audio/mpeg"),
                    transcoding("hls", "audio/mpeg", url=endpoint),
                ],
                track_authorization="ta",
            )
        )
        assert track is not None
        fake_http.route(endpoint, (200, {"url": "https://media.test/best.m3u8"}))

        assert await resolver.resolve_track(track) == "https://media.test/best.m3u8"
        assert fake_http.urls() == [
            f"{endpoint}?track_authorization=ta&client_id={FALLBACK_ID}"
        ]

    @pytest.mark.asyncio
    async def test_resolve_track_passes_permalink_and_names(
        self, resolver: SoundCloudResolver
    ) -> None:
        track = TrackDescriptor.from_api(track_payload())
        assert track is not None
        resolver.streams.resolve_stream_url = AsyncMock(return_value="https://media.test/x")  # type: ignore[method-assign]

        await resolver.resolve_track(track)

        resolver.streams.resolve_stream_url.assert_awaited_once_with(
            track.stream_endpoint(),
            "https://soundcloud.com/test-artist/test-track",
            artist="Test Artist",
            title="Test Track",
        )

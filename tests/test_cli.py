"""Tests for the command-line entry point."""

import json
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

from helpers import track_payload
from sc_resolver.cli import (
    EXIT_CONFIG_ERROR,
    EXIT_NOT_FOUND,
    EXIT_SUCCESS,
    build_parser,
    format_duration,
    main,
)
from sc_resolver.resolve import TrackDescriptor


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for var in (
        "SOUNDCLOUD_CLIENT_ID",
        "SOUNDCLOUD_CLIENT_SECRET",
        "SCRESOLVER_FALLBACK_CLIENT_ID",
        "SCRESOLVER_HTTP_TIMEOUT",
        "SCRESOLVER_USER_AGENT",
        "SCRESOLVER_LOG_LEVEL",
    ):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def no_config(tmp_path: Path) -> list[str]:
    return ["--config", str(tmp_path / "missing.yaml")]


def sample_tracks() -> list[TrackDescriptor]:
    tracks = [TrackDescriptor.from_api(track_payload(track_id=i, playback_count=i)) for i in (1, 2)]
    return [t for t in tracks if t is not None]


class TestParser:
    """Tests for argument parsing."""

    def test_stream_options(self) -> None:
        args = build_parser().parse_args(
            ["stream", "https://x.test/e", "--artist", "A", "--title", "T"]
        )
        assert args.command == "stream"
        assert args.endpoint == "https://x.test/e"
        assert args.permalink is None
        assert args.artist == "A"
        assert args.title == "T"

    def test_command_required(self) -> None:
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    def test_format_duration(self) -> None:
        assert format_duration(215.0) == "3:35"
        assert format_duration(59.9) == "0:59"


class TestMain:
    """Tests for main()."""

    def test_config_error(self, no_config: list[str]) -> None:
        assert main([*no_config, "--timeout", "0", "search", "x"]) == EXIT_CONFIG_ERROR

    def test_search_json(self, no_config: list[str], capsys: pytest.CaptureFixture[str]) -> None:
        with patch(
            "sc_resolver.cli.SoundCloudResolver.search",
            new=AsyncMock(return_value=sample_tracks()),
        ):
            code = main([*no_config, "--json", "search", "lofi"])

        assert code == EXIT_SUCCESS
        out = json.loads(capsys.readouterr().out)
        assert out["count"] == 2
        assert out["tracks"][0]["title"] == "Test Track"

    def test_search_text(self, no_config: list[str], capsys: pytest.CaptureFixture[str]) -> None:
        with patch(
            "sc_resolver.cli.SoundCloudResolver.search",
            new=AsyncMock(return_value=sample_tracks()),
        ):
            assert main([*no_config, "search", "lofi"]) == EXIT_SUCCESS

        out = capsys.readouterr().out
        assert "Found 2 track(s)" in out
        assert "Test Artist - Test Track [3:35]" in out

    def test_artist_not_found(self, no_config: list[str]) -> None:
        with patch(
            "sc_resolver.cli.SoundCloudResolver.get_artist_tracks",
            new=AsyncMock(return_value=[]),
        ):
            assert main([*no_config, "artist", "Nobody"]) == EXIT_NOT_FOUND

    def test_stream(self, no_config: list[str], capsys: pytest.CaptureFixture[str]) -> None:
        mock = AsyncMock(return_value="https://media.test/a.m3u8")
        with patch("sc_resolver.cli.SoundCloudResolver.resolve_stream_url", new=mock):
            code = main(
                [*no_config, "stream", "https://x.test/e", "--permalink", "https://soundcloud.com/a/b"]
            )

        assert code == EXIT_SUCCESS
        assert capsys.readouterr().out.strip() == "https://media.test/a.m3u8"
        mock.assert_awaited_once_with(
            "https://x.test/e", "https://soundcloud.com/a/b", artist=None, title=None
        )

    def test_stream_unplayable(
        self, no_config: list[str], capsys: pytest.CaptureFixture[str]
    ) -> None:
        with patch(
            "sc_resolver.cli.SoundCloudResolver.resolve_stream_url",
            new=AsyncMock(return_value=None),
        ):
            code = main([*no_config, "--json", "stream", "https://x.test/e"])

        assert code == EXIT_NOT_FOUND
        assert json.loads(capsys.readouterr().out) == {"url": None}

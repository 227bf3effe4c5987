"""
SC Resolver CLI entry point.

Search SoundCloud, list an artist's tracks, or resolve a stream URL.
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Optional

from sc_resolver import __version__
from sc_resolver.app import SoundCloudResolver
from sc_resolver.config import Config, ConfigError, load_config, set_nested
from sc_resolver.resolve import TrackDescriptor

logger = logging.getLogger(__name__)

# Exit codes
EXIT_SUCCESS = 0
EXIT_CONFIG_ERROR = 1
EXIT_NOT_FOUND = 2


def setup_logging(level: str = "info") -> None:
    """Configure logging to stderr (stdout carries command output)."""
    log_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
        force=True,
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="sc-resolver",
        description="Resolve SoundCloud tracks to playable stream URLs",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  sc-resolver search "radiohead"
  sc-resolver artist "Bonobo" --json
  sc-resolver stream "https://api-v2.soundcloud.com/media/.../stream/hls" \\
      --permalink https://soundcloud.com/artist/track

Environment Variables:
  SOUNDCLOUD_CLIENT_ID, SOUNDCLOUD_CLIENT_SECRET, SCRESOLVER_FALLBACK_CLIENT_ID
  SCRESOLVER_HTTP_TIMEOUT, SCRESOLVER_USER_AGENT, SCRESOLVER_LOG_LEVEL
""",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=Path("./config.yaml"),
        metavar="PATH",
        help="Path to config file (default: ./config.yaml)",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        dest="json_output",
        help="Output as JSON",
    )

    # Credentials
    auth_group = parser.add_argument_group("Credentials")
    auth_group.add_argument(
        "--client-id",
        metavar="TEXT",
        help="SoundCloud client id",
    )
    auth_group.add_argument(
        "--client-secret",
        metavar="TEXT",
        help="SoundCloud client secret (enables OAuth token exchange)",
    )

    # HTTP
    parser.add_argument(
        "--timeout",
        type=float,
        metavar="SECONDS",
        help="Per-request timeout in seconds (default: 12)",
    )

    # Logging
    parser.add_argument(
        "--log-level",
        choices=["debug", "info", "warning", "error"],
        metavar="LEVEL",
        help="Log level: debug, info, warning, error",
    )

    commands = parser.add_subparsers(dest="command", required=True)

    search = commands.add_parser("search", help="Search tracks")
    search.add_argument("query", help="Search query")

    artist = commands.add_parser("artist", help="List an artist's tracks")
    artist.add_argument("name", help="Artist name")

    stream = commands.add_parser("stream", help="Resolve a transcoding endpoint")
    stream.add_argument("endpoint", help="Transcoding endpoint URL")
    stream.add_argument("--permalink", metavar="URL", help="Track permalink for hydration fallback")
    stream.add_argument("--artist", metavar="TEXT", help="Artist, to guess a permalink")
    stream.add_argument("--title", metavar="TEXT", help="Title, to guess a permalink")

    return parser


def args_to_dict(args: argparse.Namespace) -> dict:
    """Convert argparse namespace to nested config dict."""
    result: dict = {}

    mappings = {
        "client_id": ("soundcloud", "client_id"),
        "client_secret": ("soundcloud", "client_secret"),
        "timeout": ("http", "timeout"),
        "log_level": ("logging", "level"),
    }

    for arg_name, path in mappings.items():
        value = getattr(args, arg_name, None)
        if value is None:
            continue
        set_nested(result, path, value)

    return result


def format_duration(seconds: float) -> str:
    """Format seconds as m:ss."""
    total = int(seconds)
    return f"{total // 60}:{total % 60:02d}"


def print_tracks(tracks: list[TrackDescriptor], json_output: bool) -> None:
    """Print a track list."""
    if json_output:
        print(json.dumps({"tracks": [t.to_dict() for t in tracks], "count": len(tracks)}, indent=2))
        return

    print(f"\nFound {len(tracks)} track(s):\n")
    for t in tracks:
        print(f"  {t.artist} - {t.title} [{format_duration(t.duration)}]")
        print(f"    Plays: {t.playback_count}")
        print(f"    Permalink: {t.permalink_url}")
        print()


async def run_command(args: argparse.Namespace, config: Config) -> int:
    """
    Run a subcommand.

    Returns:
        Exit code
    """
    resolver = SoundCloudResolver(config)

    if args.command == "stream":
        url: Optional[str] = await resolver.resolve_stream_url(
            args.endpoint, args.permalink, artist=args.artist, title=args.title
        )
        if args.json_output:
            print(json.dumps({"url": url}, indent=2))
        elif url:
            print(url)
        else:
            print("Track is currently unplayable.")
        return EXIT_SUCCESS if url else EXIT_NOT_FOUND

    if args.command == "artist":
        tracks = await resolver.get_artist_tracks(args.name)
    else:
        tracks = await resolver.search(args.query)

    print_tracks(tracks, args.json_output)
    return EXIT_SUCCESS if tracks else EXIT_NOT_FOUND


def main(argv: Optional[list[str]] = None) -> int:
    """
    Main entry point.

    Returns:
        Exit code: 0=success, 1=config error, 2=nothing found
    """
    args = build_parser().parse_args(argv)

    setup_logging("info")

    try:
        config = load_config(args.config, args_to_dict(args))
    except ConfigError as e:
        logger.error(f"Configuration error: {e}")
        return EXIT_CONFIG_ERROR

    setup_logging(config.logging.level)

    try:
        return asyncio.run(run_command(args, config))
    except KeyboardInterrupt:
        logger.info("Interrupted")
        return EXIT_SUCCESS


if __name__ == "__main__":
    sys.exit(main())

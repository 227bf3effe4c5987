"""
SC Resolver - SoundCloud stream URL resolver.

Turns SoundCloud track references into short-lived playable stream URLs.
"""

__version__ = "0.1.0"

from .app import SoundCloudResolver
from .config import Config, ConfigError, load_config
from .playback import PlaybackSession
from .resolve import TrackDescriptor, Transcoding

__all__ = [
    "__version__",
    "SoundCloudResolver",
    "Config",
    "ConfigError",
    "load_config",
    "PlaybackSession",
    "TrackDescriptor",
    "Transcoding",
]

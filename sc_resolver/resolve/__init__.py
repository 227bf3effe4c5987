"""
Stream resolution module.

Track descriptors, the stream strategy chain and the hydration fallback.
"""

from .hydration import HydrationExtractor
from .models import TrackDescriptor, Transcoding, TranscodingScore, rank_transcodings
from .permalink import query_from_permalink, synthesize_permalink
from .stream import StreamResolver
from .strategies import Strategy, first_success

__all__ = [
    "HydrationExtractor",
    "TrackDescriptor",
    "Transcoding",
    "TranscodingScore",
    "rank_transcodings",
    "query_from_permalink",
    "synthesize_permalink",
    "StreamResolver",
    "Strategy",
    "first_success",
]

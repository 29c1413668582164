"""Audio delivery: Range header parsing and lazy file streaming."""

from .range_parser import ByteRange, parse_range
from .streamer import AUDIO_MEDIA_TYPE, CHUNK_SIZE, iter_file_chunks, stream_file

__all__ = [
    "AUDIO_MEDIA_TYPE",
    "ByteRange",
    "CHUNK_SIZE",
    "iter_file_chunks",
    "parse_range",
    "stream_file",
]

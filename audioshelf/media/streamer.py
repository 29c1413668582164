"""Stream audio files from disk with optional byte-range support."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator, Optional, Union

from fastapi import status
from fastapi.responses import StreamingResponse

from ..errors import NotFound
from .range_parser import parse_range

logger = logging.getLogger(__name__)

# The catalog does not track per-file MIME types; every file is served as MPEG audio.
AUDIO_MEDIA_TYPE = "audio/mpeg"
CHUNK_SIZE = 1 << 16


def iter_file_chunks(path: Path, start: int, end: int, chunk_size: int = CHUNK_SIZE) -> Iterator[bytes]:
    """Yield chunks from ``path`` between ``start`` and ``end`` (inclusive).

    The file handle lives inside the generator, so it is closed when the body
    is exhausted, when reading fails, and when the server closes the generator
    after a client disconnect.
    """

    total = max(end - start + 1, 0)
    if total <= 0:
        return

    with path.open("rb") as stream:
        stream.seek(start)
        remaining = total
        while remaining > 0:
            chunk = stream.read(min(chunk_size, remaining))
            if not chunk:
                break
            remaining -= len(chunk)
            yield chunk


def stream_file(path: Union[str, Path], range_header: Optional[str] = None) -> StreamingResponse:
    """Return a 200 or 206 streaming response for the audio file at ``path``.

    Raises :class:`NotFound` when ``path`` is not a file on disk. An unusable
    ``Range`` header falls back to the full payload.
    """

    resolved_path = Path(path)
    try:
        stat_result = resolved_path.stat()
    except OSError as exc:
        raise NotFound("file") from exc
    if not resolved_path.is_file():
        raise NotFound("file")

    file_size = int(stat_result.st_size)
    byte_range = parse_range(range_header)
    bounds = byte_range.resolve(file_size) if byte_range is not None else None

    if range_header and bounds is None:
        logger.debug(
            "Ignoring unusable Range header",
            extra={"event": "media.range.ignored", "range": range_header},
        )

    if bounds is not None:
        start, end = bounds
        status_code = status.HTTP_206_PARTIAL_CONTENT
        headers = {
            "Content-Range": f"bytes {start}-{end}/{file_size}",
            "Accept-Ranges": "bytes",
        }
    else:
        start = 0
        end = file_size - 1
        status_code = status.HTTP_200_OK
        headers = {"Accept-Ranges": "bytes"}

    headers["Content-Length"] = str(max(end - start + 1, 0))

    return StreamingResponse(
        iter_file_chunks(resolved_path, start, end),
        status_code=status_code,
        media_type=AUDIO_MEDIA_TYPE,
        headers=headers,
    )

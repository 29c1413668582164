"""Single-range ``Range`` header parsing."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

_RANGE_PATTERN = re.compile(r"^bytes=(\d+)-(\d*)$")


@dataclass(frozen=True)
class ByteRange:
    """Inclusive byte interval; ``end`` is ``None`` for open-ended requests."""

    start: int
    end: Optional[int] = None

    def resolve(self, file_size: int) -> Optional[tuple[int, int]]:
        """Return concrete ``(start, end)`` bounds for ``file_size``.

        ``None`` means the range cannot be served from this file and the
        caller should send the full payload instead.
        """

        if file_size <= 0 or self.start >= file_size:
            return None
        end = file_size - 1 if self.end is None else min(self.end, file_size - 1)
        return self.start, end


def parse_range(header_value: Optional[str]) -> Optional[ByteRange]:
    """Parse ``bytes=<start>-[<end>]``.

    Only the single-range form is accepted. Multi-range values, suffix ranges
    (``bytes=-500``), reversed bounds and anything else malformed return
    ``None``; callers degrade to a full-content response rather than a 4xx.
    """

    if not header_value:
        return None
    match = _RANGE_PATTERN.match(header_value.strip())
    if match is None:
        return None

    start = int(match.group(1))
    end_token = match.group(2)
    if not end_token:
        return ByteRange(start=start)

    end = int(end_token)
    if end < start:
        return None
    return ByteRange(start=start, end=end)

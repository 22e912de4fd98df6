"""Map flat-text offsets back to segments."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from ..extraction.extractor import Extraction
from ..extraction.segments import Segment
from .models import Located

__all__ = ["locate", "locate_in"]

LOGGER = logging.getLogger(__name__)


def locate(extraction: Extraction, offset: int, length: int) -> Located | None:
    """Return the segment containing flat offset ``offset``, or ``None`` when out of range."""

    return locate_in(extraction.segments, extraction.flat_text, extraction.trim_delta, offset, length)


def locate_in(
    segments: Sequence[Segment],
    flat_text: str,
    trim_delta: int,
    offset: int,
    length: int,
) -> Located | None:
    """Explicit-argument form of :func:`locate`."""

    if offset < 0 or length < 0 or offset >= len(flat_text):
        LOGGER.debug("Offset %s (length %s) outside flat text of %s chars", offset, length, len(flat_text))
        return None
    raw_offset = offset + trim_delta
    for segment in segments:
        if segment.span.contains(raw_offset):
            return Located(segment=segment, local_offset=raw_offset - segment.start)
    LOGGER.debug("Offset %s falls on a separator", offset)
    return None

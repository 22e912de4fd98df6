"""Apply a replacement to the live source behind a segment."""

from __future__ import annotations

import logging
from collections.abc import MutableMapping
from typing import Any

from ..core.ranges import TextRange
from ..extraction.segments import PlainFieldRef, RichTextRef, Segment, TitleRef
from ..richtext.walker import locate_text
from .models import Located

__all__ = ["apply", "apply_located", "splice"]

LOGGER = logging.getLogger(__name__)


def splice(value: str, start: int, length: int, replacement: str) -> str:
    return value[:start] + replacement + value[start + length :]


def apply_located(
    document: MutableMapping[str, Any],
    located: Located,
    length: int,
    replacement: str,
) -> str | None:
    return apply(document, located.segment, located.local_offset, length, replacement)


def apply(
    document: MutableMapping[str, Any],
    segment: Segment,
    local_offset: int,
    length: int,
    replacement: str,
) -> str | None:
    """Splice ``replacement`` into the source of ``segment``.

    Returns the top-level field to persist, or ``None`` (with no mutation)
    when the span does not fit inside a single live string.
    """

    if local_offset < 0 or length < 0:
        return None
    source = segment.source
    if isinstance(source, TitleRef):
        return _apply_to_mapping(document, "title", local_offset, length, replacement, source.top_field)
    if isinstance(source, PlainFieldRef):
        return _apply_to_mapping(source.parent, source.key, local_offset, length, replacement, source.top_field)
    if isinstance(source, RichTextRef):
        return _apply_to_rich_text(source, local_offset, length, replacement)
    LOGGER.debug("Unsupported source reference %r", source)
    return None


def _apply_to_mapping(
    owner: MutableMapping[str, Any],
    key: str,
    local_offset: int,
    length: int,
    replacement: str,
    top_field: str,
) -> str | None:
    current = owner.get(key)
    if not isinstance(current, str) or not TextRange(0, len(current)).covers(local_offset, length):
        LOGGER.debug("Field %s no longer holds the expected string", key)
        return None
    owner[key] = splice(current, local_offset, length, replacement)
    return top_field


def _apply_to_rich_text(source: RichTextRef, local_offset: int, length: int, replacement: str) -> str | None:
    position = source.lead + local_offset
    hit = locate_text(source.node, position)
    if hit is None:
        LOGGER.debug("No text node at position %s in %s", position, source.top_field)
        return None
    text_node, node_start = hit
    if not text_node.splice(position - node_start, length, replacement):
        LOGGER.debug("Span of %s chars at %s crosses a text node boundary", length, position)
        return None
    return source.top_field

"""Single traversal turning a document tree into flat text plus segments.

Both the checking path and the fixing path call :func:`extract`. Offsets
reported against ``Extraction.flat_text`` are only meaningful for segments
produced by this same function over the same document snapshot.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, MutableMapping
from dataclasses import dataclass, field
from typing import Any, Callable

from ..core.ranges import TextRange
from ..richtext.nodes import DEFAULT_MAX_DEPTH, is_rich_text, parse
from ..richtext.walker import render
from .keys import PLAIN_TEXT_KEYS, SKIP_KEYS, looks_like_prose
from .segments import PlainFieldRef, RichTextRef, Segment, TitleRef

__all__ = ["Extraction", "ExtractionConfig", "extract"]

LOGGER = logging.getLogger(__name__)
SEPARATOR = "\n"


@dataclass(slots=True, frozen=True)
class ExtractionConfig:
    """Field names and bounds used by :func:`extract`."""

    hero_field: str = "hero"
    hero_key: str = "richText"
    blocks_field: str = "layout"
    rich_text_max_depth: int = DEFAULT_MAX_DEPTH
    block_max_depth: int = 10
    skip_keys: frozenset[str] = SKIP_KEYS
    plain_text_keys: frozenset[str] = PLAIN_TEXT_KEYS


@dataclass(slots=True)
class Extraction:
    """Flat text of a document and the segments it was joined from.

    Attributes:
        flat_text: Segments joined by ``\\n`` and stripped; the text sent to checkers.
        segments: Non-empty segments in traversal order.
        trim_delta: Characters stripped from the front of the join.
        joined: The join before stripping; segment ``start`` values index it.
    """

    flat_text: str
    segments: tuple[Segment, ...] = ()
    trim_delta: int = 0
    joined: str = ""

    @property
    def is_empty(self) -> bool:
        return not self.flat_text

    def texts(self) -> list[str]:
        return [segment.text for segment in self.segments]

    def flat_range(self, segment: Segment) -> TextRange:
        """Return ``segment``'s span in ``flat_text`` coordinates."""

        return segment.span.shift(-self.trim_delta)


def extract(
    document: Any,
    content_field: str = "content",
    *,
    config: ExtractionConfig | None = None,
) -> Extraction:
    """Walk ``document`` and return its :class:`Extraction`.

    Order: title, hero rich text, the ``content_field`` rich text, then each
    block under ``config.blocks_field``. Never raises on unexpected shapes.
    """

    cfg = config or ExtractionConfig()
    collector = _SegmentCollector(cfg)
    if isinstance(document, Mapping):
        collector.guarded("title", lambda: collector.add_title(document))
        collector.guarded(cfg.hero_field, lambda: collector.add_hero(document))
        collector.guarded(content_field, lambda: collector.add_content(document, content_field))
        collector.guarded(cfg.blocks_field, lambda: collector.add_blocks(document))
    return _build_extraction(collector.segments)


def _build_extraction(segments: list[Segment]) -> Extraction:
    position = 0
    for segment in segments:
        segment.start = position
        position += len(segment.text) + len(SEPARATOR)
    joined = SEPARATOR.join(segment.text for segment in segments)
    stripped_front = joined.lstrip()
    trim_delta = len(joined) - len(stripped_front)
    return Extraction(
        flat_text=stripped_front.rstrip(),
        segments=tuple(segments),
        trim_delta=trim_delta,
        joined=joined,
    )


class _SegmentCollector:
    def __init__(self, config: ExtractionConfig) -> None:
        self._config = config
        self._visited: set[int] = set()
        self.segments: list[Segment] = []

    def guarded(self, label: str, action: Callable[[], None]) -> None:
        try:
            action()
        except Exception:  # pragma: no cover - malformed trees only
            LOGGER.warning("Skipping field %s during extraction", label, exc_info=True)

    def add_title(self, document: Mapping[str, Any]) -> None:
        title = document.get("title")
        if isinstance(title, str) and title:
            self.segments.append(Segment(text=title, source=TitleRef()))

    def add_hero(self, document: Mapping[str, Any]) -> None:
        hero = document.get(self._config.hero_field)
        if not isinstance(hero, Mapping):
            return
        rich_text = hero.get(self._config.hero_key)
        if isinstance(rich_text, (Mapping, list)):
            self.add_rich_text(rich_text, self._config.hero_field)

    def add_content(self, document: Mapping[str, Any], content_field: str) -> None:
        value = document.get(content_field)
        if is_rich_text(value):
            self.add_rich_text(value, content_field)

    def add_blocks(self, document: Mapping[str, Any]) -> None:
        blocks = document.get(self._config.blocks_field)
        if not isinstance(blocks, list):
            return
        for block in blocks:
            self._collect_block(block, 0)

    def add_rich_text(self, value: Any, top_field: str) -> None:
        node = parse(value, self._config.rich_text_max_depth)
        rendered = render(node)
        text = rendered.strip()
        if not text:
            return
        lead = len(rendered) - len(rendered.lstrip())
        self.segments.append(Segment(text=text, source=RichTextRef(top_field=top_field, node=node, lead=lead)))

    def _collect_block(self, obj: Any, depth: int) -> None:
        if depth > self._config.block_max_depth:
            return
        if not isinstance(obj, (MutableMapping, list)) or not obj:
            return
        if id(obj) in self._visited:
            return
        self._visited.add(id(obj))

        if isinstance(obj, list):
            for item in obj:
                self._collect_block(item, depth + 1)
            return

        top_field = self._config.blocks_field
        for key, value in list(obj.items()):
            if key in self._config.skip_keys:
                continue
            if is_rich_text(value):
                self.add_rich_text(value, top_field)
                continue
            if key in self._config.plain_text_keys and isinstance(value, str) and looks_like_prose(value):
                self.segments.append(
                    Segment(text=value, source=PlainFieldRef(parent=obj, key=key, top_field=top_field))
                )
            if isinstance(value, (Mapping, list)):
                self._collect_block(value, depth + 1)

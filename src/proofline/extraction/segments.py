"""Segments of flat text and the source references they map back to."""

from __future__ import annotations

from collections.abc import MutableMapping
from dataclasses import dataclass
from typing import Any, Union

from ..core.ranges import TextRange
from ..richtext.nodes import RichTextNode

__all__ = ["PlainFieldRef", "RichTextRef", "Segment", "SourceRef", "TitleRef"]


@dataclass(slots=True, frozen=True)
class TitleRef:
    """The document's top-level ``title`` string."""

    @property
    def top_field(self) -> str:
        return "title"


@dataclass(slots=True, eq=False)
class RichTextRef:
    """A parsed rich-text subtree owned by ``top_field``.

    ``lead`` counts the whitespace stripped from the front of the rendered
    text, so segment-local offsets map to ``lead + offset`` in the tree.
    """

    top_field: str
    node: RichTextNode
    lead: int = 0


@dataclass(slots=True, eq=False)
class PlainFieldRef:
    """A scalar string stored at ``parent[key]`` somewhere under ``top_field``."""

    parent: MutableMapping[str, Any]
    key: str
    top_field: str


SourceRef = Union[TitleRef, RichTextRef, PlainFieldRef]


@dataclass(slots=True, eq=False)
class Segment:
    """A contiguous span of the joined text and where it came from."""

    text: str
    source: SourceRef
    start: int = 0

    @property
    def end(self) -> int:
        return self.start + len(self.text)

    @property
    def span(self) -> TextRange:
        return TextRange(self.start, self.end)

    @property
    def top_field(self) -> str:
        return self.source.top_field

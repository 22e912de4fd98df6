"""Plain-text rendering of parsed rich-text trees.

Rendering and locating share one traversal (:func:`_emit`), so the position
counter used to find a text node is the same one that produced the text.
"""

from __future__ import annotations

import re
from typing import Any, Iterator

from .nodes import DEFAULT_MAX_DEPTH, BlockNode, ContainerNode, RichTextNode, TextNode, parse

__all__ = [
    "count_words",
    "extract_rich_text",
    "iter_text_spans",
    "locate_text",
    "render",
    "walk",
]

_WHITESPACE_RE = re.compile(r"\s+")


def _emit(node: RichTextNode) -> Iterator[tuple[TextNode | None, str]]:
    if isinstance(node, TextNode):
        yield node, node.text
    elif isinstance(node, BlockNode):
        for child in node.children:
            yield from _emit(child)
        yield None, "\n"
    elif isinstance(node, ContainerNode):
        for child in node.children:
            yield from _emit(child)


def render(node: RichTextNode) -> str:
    """Return the plain text contributed by ``node``."""

    return "".join(piece for _, piece in _emit(node))


def walk(value: Any, max_depth: int = DEFAULT_MAX_DEPTH) -> str:
    """Parse raw rich-text JSON and render it in one call."""

    return render(parse(value, max_depth))


def extract_rich_text(value: Any, max_depth: int = DEFAULT_MAX_DEPTH) -> str:
    """Render ``value`` and strip surrounding whitespace."""

    return walk(value, max_depth).strip()


def iter_text_spans(node: RichTextNode) -> Iterator[tuple[TextNode, int]]:
    """Yield each text node with its start position in the rendered text."""

    position = 0
    for text_node, piece in _emit(node):
        if text_node is not None:
            yield text_node, position
        position += len(piece)


def locate_text(node: RichTextNode, position: int) -> tuple[TextNode, int] | None:
    """Return the text node whose span contains ``position`` and its start."""

    if position < 0:
        return None
    for text_node, start in iter_text_spans(node):
        if start <= position < start + len(text_node.text):
            return text_node, start
    return None


def count_words(text: str) -> int:
    """Count whitespace-separated words."""

    return len([word for word in _WHITESPACE_RE.split(text or "") if word])

"""Tagged node variants for rich-text (Lexical-style) JSON trees.

Raw JSON is classified exactly once, in :func:`parse`. Everything downstream
(rendering, locating, splicing) dispatches on the resulting node classes and
never re-inspects the raw mappings, except for the live ``text`` value held
by :class:`TextNode`.
"""

from __future__ import annotations

from collections.abc import Mapping, MutableMapping
from dataclasses import dataclass
from typing import Any, Union

from ..core.errors import ErrorCode
from ..core.ranges import TextRange

__all__ = [
    "BLOCK_TYPES",
    "DEFAULT_MAX_DEPTH",
    "SKIP_TYPES",
    "BlockNode",
    "ContainerNode",
    "RichTextNode",
    "SkipNode",
    "TextNode",
    "is_rich_text",
    "parse",
]

DEFAULT_MAX_DEPTH = 50

# Node types whose content is not natural language.
SKIP_TYPES: frozenset[str] = frozenset({"code", "code-block", "codeBlock"})

# Node types followed by exactly one line break.
BLOCK_TYPES: frozenset[str] = frozenset({"paragraph", "heading", "listitem"})


@dataclass(slots=True, eq=False)
class TextNode:
    """Leaf carrying literal text; ``source`` is the live mapping it came from."""

    source: MutableMapping[str, Any]

    @property
    def text(self) -> str:
        value = self.source.get("text")
        return value if isinstance(value, str) else ""

    def splice(self, start: int, length: int, replacement: str) -> bool:
        """Replace ``length`` characters at ``start`` inside the live text."""

        current = self.source.get("text")
        if not isinstance(current, str):
            return False
        if not TextRange(0, len(current)).covers(start, length):
            return False
        try:
            self.source["text"] = current[:start] + replacement + current[start + length :]
        except TypeError:
            return False
        return True


@dataclass(slots=True, eq=False)
class BlockNode:
    """Paragraph, heading or list item: children followed by one ``\\n``."""

    kind: str
    children: tuple["RichTextNode", ...] = ()


@dataclass(slots=True, eq=False)
class ContainerNode:
    """Links, marks, roots and generic wrappers: children with no separator."""

    children: tuple["RichTextNode", ...] = ()


@dataclass(slots=True, frozen=True)
class SkipNode:
    """Contributes nothing; its subtree is never visited."""

    reason: str = ErrorCode.SKIPPED


RichTextNode = Union[TextNode, BlockNode, ContainerNode, SkipNode]

_SKIP = SkipNode()
_TRUNCATED = SkipNode(reason=ErrorCode.DEPTH_EXCEEDED)


def is_rich_text(value: Any) -> bool:
    """Return ``True`` when ``value`` looks like a rich-text tree.

    A rich-text value is a mapping carrying a mapping ``root``, or a
    ``children`` list together with an explicit ``type``.
    """

    if not isinstance(value, Mapping):
        return False
    if isinstance(value.get("root"), Mapping):
        return True
    return isinstance(value.get("children"), list) and value.get("type") is not None


def parse(value: Any, max_depth: int = DEFAULT_MAX_DEPTH) -> RichTextNode:
    """Classify ``value`` (a node, a list of nodes or a ``{"root": ...}`` wrapper).

    Every nesting level (list item, child, root) costs one unit of the depth
    budget; subtrees beyond it become :class:`SkipNode`. Objects already on the
    current path are skipped as well, so cyclic input terminates. Never raises.
    """

    return _parse(value, 0, max_depth, set())


def _parse(value: Any, depth: int, max_depth: int, path: set[int]) -> RichTextNode:
    if depth > max_depth:
        return _TRUNCATED
    if isinstance(value, list):
        if id(value) in path:
            return _TRUNCATED
        path.add(id(value))
        try:
            return ContainerNode(tuple(_parse(item, depth + 1, max_depth, path) for item in value))
        finally:
            path.discard(id(value))
    if not isinstance(value, MutableMapping):
        return _SKIP

    node_type = value.get("type")
    if isinstance(node_type, str) and node_type in SKIP_TYPES:
        return _SKIP
    if node_type == "text" and isinstance(value.get("text"), str):
        return TextNode(value)
    if id(value) in path:
        return _TRUNCATED

    path.add(id(value))
    try:
        raw_children = value.get("children")
        children: tuple[RichTextNode, ...] = ()
        if isinstance(raw_children, list):
            children = tuple(_parse(child, depth + 1, max_depth, path) for child in raw_children)
        if node_type in BLOCK_TYPES:
            return BlockNode(kind=node_type, children=children)
        root = value.get("root")
        if isinstance(root, Mapping):
            children = children + (_parse(root, depth + 1, max_depth, path),)
        return ContainerNode(children)
    finally:
        path.discard(id(value))

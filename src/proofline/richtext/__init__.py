"""Rich-text AST parsing and traversal."""

from .nodes import (
    BLOCK_TYPES,
    DEFAULT_MAX_DEPTH,
    SKIP_TYPES,
    BlockNode,
    ContainerNode,
    RichTextNode,
    SkipNode,
    TextNode,
    is_rich_text,
    parse,
)
from .walker import (
    count_words,
    extract_rich_text,
    iter_text_spans,
    locate_text,
    render,
    walk,
)

__all__ = [
    "BLOCK_TYPES",
    "DEFAULT_MAX_DEPTH",
    "SKIP_TYPES",
    "BlockNode",
    "ContainerNode",
    "RichTextNode",
    "SkipNode",
    "TextNode",
    "count_words",
    "extract_rich_text",
    "is_rich_text",
    "iter_text_spans",
    "locate_text",
    "parse",
    "render",
    "walk",
]

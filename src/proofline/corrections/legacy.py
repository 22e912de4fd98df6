"""First-match substring replacement used when no usable offset exists.

This is the least precise path: it replaces the first occurrence found in
traversal order (title, hero, content, blocks) with no positional guidance,
so a common short word may be corrected in the wrong place.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, MutableMapping
from typing import Any

from ..extraction.extractor import ExtractionConfig
from ..richtext.nodes import is_rich_text, parse
from ..richtext.walker import iter_text_spans

__all__ = ["legacy_replace"]

LOGGER = logging.getLogger(__name__)


def legacy_replace(
    document: MutableMapping[str, Any],
    original: str,
    replacement: str,
    content_field: str = "content",
    *,
    config: ExtractionConfig | None = None,
) -> str | None:
    """Replace the first occurrence of ``original`` and return the modified top field."""

    if not original:
        return None
    cfg = config or ExtractionConfig()

    title = document.get("title")
    if isinstance(title, str) and original in title:
        document["title"] = title.replace(original, replacement, 1)
        return "title"

    hero = document.get(cfg.hero_field)
    if isinstance(hero, Mapping):
        rich_text = hero.get(cfg.hero_key)
        if isinstance(rich_text, (Mapping, list)) and _replace_in_rich_text(rich_text, original, replacement, cfg):
            return cfg.hero_field

    content = document.get(content_field)
    if is_rich_text(content) and _replace_in_rich_text(content, original, replacement, cfg):
        return content_field

    blocks = document.get(cfg.blocks_field)
    if isinstance(blocks, list):
        visited: set[int] = set()
        for block in blocks:
            if _replace_in_block(block, original, replacement, cfg, visited, 0):
                return cfg.blocks_field

    LOGGER.debug("Legacy search found no occurrence of %r", original)
    return None


def _replace_in_rich_text(value: Any, original: str, replacement: str, cfg: ExtractionConfig) -> bool:
    for text_node, _ in iter_text_spans(parse(value, cfg.rich_text_max_depth)):
        index = text_node.text.find(original)
        if index >= 0:
            return text_node.splice(index, len(original), replacement)
    return False


def _replace_in_block(
    obj: Any,
    original: str,
    replacement: str,
    cfg: ExtractionConfig,
    visited: set[int],
    depth: int,
) -> bool:
    if depth > cfg.block_max_depth or not isinstance(obj, (MutableMapping, list)):
        return False
    if id(obj) in visited:
        return False
    visited.add(id(obj))

    if isinstance(obj, list):
        return any(_replace_in_block(item, original, replacement, cfg, visited, depth + 1) for item in obj)

    for key, value in list(obj.items()):
        if key in cfg.skip_keys:
            continue
        if is_rich_text(value):
            if _replace_in_rich_text(value, original, replacement, cfg):
                return True
            continue
        if key in cfg.plain_text_keys and isinstance(value, str) and original in value:
            obj[key] = value.replace(original, replacement, 1)
            return True
        if isinstance(value, (Mapping, list)) and _replace_in_block(
            value, original, replacement, cfg, visited, depth + 1
        ):
            return True
    return False

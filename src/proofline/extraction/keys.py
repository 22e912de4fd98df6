"""Key allow/deny lists and prose guards for block traversal."""

from __future__ import annotations

import re

__all__ = ["PLAIN_TEXT_KEYS", "SKIP_KEYS", "looks_like_prose"]

# Structural or non-content keys: ids, ordering, discriminators, media,
# relationships, timestamps.
SKIP_KEYS: frozenset[str] = frozenset(
    {
        "id",
        "_order",
        "_parent_id",
        "_path",
        "_locale",
        "_uuid",
        "blockType",
        "blockName",
        "icon",
        "color",
        "link",
        "link_url",
        "enable_link",
        "image",
        "media",
        "form",
        "form_id",
        "rating",
        "size",
        "position",
        "relationTo",
        "value",
        "updatedAt",
        "createdAt",
        "_status",
        "slug",
        "meta",
        "publishedAt",
        "populatedAuthors",
    }
)

# Scalar keys that carry natural language worth checking.
PLAIN_TEXT_KEYS: frozenset[str] = frozenset(
    {
        "title",
        "description",
        "heading",
        "subheading",
        "subtitle",
        "quote",
        "author",
        "role",
        "label",
        "link_label",
        "block_name",
        "caption",
        "alt",
        "text",
        "summary",
        "excerpt",
    }
)

_MIN_PROSE_LENGTH = 2
_MAX_PROSE_LENGTH = 5_000
_TOKEN_PREFIX_RE = re.compile(
    r"^(?:https?:|/|#|\d{4}-\d{2}|[0-9a-f-]{36}|data:|mailto:)",
    re.IGNORECASE,
)
_OBJECT_RE = re.compile(r"\{.*\}")
_ARRAY_RE = re.compile(r"\[.*\]")


def looks_like_prose(value: str) -> bool:
    """Reject URLs, paths, anchors, dates, UUIDs, data/mailto URIs and JSON blobs."""

    if not isinstance(value, str):
        return False
    if not _MIN_PROSE_LENGTH < len(value) < _MAX_PROSE_LENGTH:
        return False
    if _TOKEN_PREFIX_RE.match(value):
        return False
    if _OBJECT_RE.fullmatch(value) or _ARRAY_RE.fullmatch(value):
        return False
    return True

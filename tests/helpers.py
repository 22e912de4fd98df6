"""Shared builders for rich-text trees and sample documents.

Import from here instead of spelling out nested node dictionaries in each test
module::

    from tests.helpers import paragraph, root, text
"""

from __future__ import annotations

from typing import Any


def text(value: str, **extra: Any) -> dict[str, Any]:
    return {"type": "text", "text": value, **extra}


def paragraph(*children: dict[str, Any]) -> dict[str, Any]:
    return {"type": "paragraph", "children": list(children)}


def heading(*children: dict[str, Any], tag: str = "h2") -> dict[str, Any]:
    return {"type": "heading", "tag": tag, "children": list(children)}


def list_item(*children: dict[str, Any]) -> dict[str, Any]:
    return {"type": "listitem", "children": list(children)}


def link(*children: dict[str, Any], url: str = "https://example.com") -> dict[str, Any]:
    return {"type": "link", "fields": {"url": url}, "children": list(children)}


def code(source: str, node_type: str = "code") -> dict[str, Any]:
    return {"type": node_type, "children": [text(source)]}


def root(*children: dict[str, Any]) -> dict[str, Any]:
    return {"root": {"type": "root", "children": list(children)}}


def wrapped(node: dict[str, Any], levels: int, key: str = "children") -> dict[str, Any]:
    """Nest ``node`` under ``levels`` wrapper objects linked through ``key``."""

    for _ in range(levels):
        node = {"type": "wrapper", key: [node]} if key == "children" else {key: node}
    return node


def innermost(node: dict[str, Any], key: str = "children") -> dict[str, Any]:
    """Follow ``key`` (first child for lists) down to the last object."""

    while True:
        child = node.get(key)
        if isinstance(child, list):
            child = child[0] if child else None
        if not isinstance(child, dict):
            return node
        node = child


def simple_document(title: str = "Titre", body: str = "Ceci est une test.") -> dict[str, Any]:
    """Title plus a single-paragraph ``content`` field."""

    return {"title": title, "content": root(paragraph(text(body)))}


def content_text(document: dict[str, Any], index: int = 0, child: int = 0) -> str:
    """Return the text of ``child`` inside the ``index``-th top-level content node."""

    return document["content"]["root"]["children"][index]["children"][child]["text"]


def rich_document() -> dict[str, Any]:
    """A document exercising every traversal source."""

    return {
        "id": "doc-1",
        "slug": "mon-article",
        "title": "Mon titre",
        "hero": {"richText": root(paragraph(text("Accroche du héros")))},
        "content": root(
            heading(text("Introduction")),
            paragraph(text("Premier paragraphe.")),
            code("print('une erreur')"),
        ),
        "layout": [
            {
                "blockType": "cta",
                "id": "block-1",
                "heading": "Appel à l'action",
                "link": {"url": "https://example.com", "label": "Cliquez ici"},
                "richText": root(paragraph(text("Texte du bloc"))),
            },
            {
                "blockType": "columns",
                "columns": [
                    {"richText": root(paragraph(text("Colonne un")))},
                    {"caption": "https://example.com/image.png"},
                ],
            },
        ],
        "meta": {"title": "Titre SEO", "description": "Description SEO du document"},
    }


RICH_DOCUMENT_TEXTS = [
    "Mon titre",
    "Accroche du héros",
    "Introduction\nPremier paragraphe.",
    "Appel à l'action",
    "Texte du bloc",
    "Colonne un",
]

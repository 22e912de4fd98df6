"""Tests for splicing replacements into segment sources."""

from __future__ import annotations

import copy

from proofline.corrections import apply, apply_located, locate
from proofline.extraction import extract
from tests.helpers import content_text, paragraph, rich_document, root, simple_document, text


def test_apply_to_rich_text_segment() -> None:
    document = simple_document()
    segment = extract(document).segments[1]

    modified = apply(document, segment, 9, 3, "un")

    assert modified == "content"
    assert content_text(document) == "Ceci est un test."


def test_apply_preserves_other_node_attributes() -> None:
    document = {"content": root(paragraph(text("une faute", format=1, style="color: red")))}
    segment = extract(document).segments[0]

    assert apply(document, segment, 0, 3, "la") == "content"

    node = document["content"]["root"]["children"][0]["children"][0]
    assert node == {"type": "text", "text": "la faute", "format": 1, "style": "color: red"}


def test_apply_accounts_for_stripped_leading_whitespace() -> None:
    document = {"content": root(paragraph(text("  Bonjour monde")))}
    segment = extract(document).segments[0]

    assert segment.text == "Bonjour monde"
    assert apply(document, segment, 8, 5, "Monde") == "content"
    assert content_text(document) == "  Bonjour Monde"


def test_apply_targets_the_right_text_node() -> None:
    document = {"content": root(paragraph(text("Un "), text("mot", format=1), text(" faux")))}
    segment = extract(document).segments[0]

    assert apply(document, segment, 7, 4, "juste") == "content"

    children = document["content"]["root"]["children"][0]["children"]
    assert [child["text"] for child in children] == ["Un ", "mot", " juste"]


def test_span_crossing_text_nodes_fails_without_mutation() -> None:
    document = {"content": root(paragraph(text("Bon"), text("jour")))}
    before = copy.deepcopy(document)
    segment = extract(document).segments[0]

    assert apply(document, segment, 1, 4, "X") is None
    assert document == before


def test_apply_to_title() -> None:
    document = simple_document(title="Un titrre")
    segment = extract(document).segments[0]

    assert apply(document, segment, 3, 6, "titre") == "title"
    assert document["title"] == "Un titre"


def test_apply_to_plain_block_field_reports_top_field() -> None:
    document = rich_document()
    extraction = extract(document)
    segment = extraction.segments[3]

    assert apply(document, segment, 0, 5, "Appel") == "layout"
    assert document["layout"][0]["heading"] == "Appel à l'action"

    assert apply(document, segment, 8, 8, "l'achat") == "layout"
    assert document["layout"][0]["heading"] == "Appel à l'achat"


def test_span_past_end_of_string_fails() -> None:
    document = simple_document()
    segment = extract(document).segments[0]

    assert apply(document, segment, 3, 100, "x") is None
    assert document["title"] == "Titre"


def test_field_replaced_after_extraction_fails() -> None:
    document = simple_document()
    segment = extract(document).segments[0]
    document["title"] = None

    assert apply(document, segment, 0, 1, "x") is None


def test_negative_arguments_fail() -> None:
    document = simple_document()
    segment = extract(document).segments[0]

    assert apply(document, segment, -1, 1, "x") is None
    assert apply(document, segment, 0, -1, "x") is None


def test_apply_located_uses_mapper_output() -> None:
    document = simple_document()
    located = locate(extract(document), 15, 3)
    assert located is not None

    assert apply_located(document, located, 3, "un") == "content"
    assert content_text(document) == "Ceci est un test."

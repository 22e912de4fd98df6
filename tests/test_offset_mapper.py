"""Tests for mapping flat-text offsets back to segments."""

from __future__ import annotations

from proofline.corrections import locate, locate_in
from proofline.extraction import extract
from tests.helpers import rich_document, simple_document


def test_offset_maps_into_content_segment() -> None:
    extraction = extract(simple_document())

    located = locate(extraction, 15, 3)

    assert located is not None
    assert located.segment.top_field == "content"
    assert located.local_offset == 9
    assert located.segment.text[9:12] == "une"


def test_every_character_maps_back_to_its_segment() -> None:
    extraction = extract(rich_document())

    for segment in extraction.segments:
        flat_start = extraction.flat_range(segment).start
        for index in range(len(segment.text)):
            located = locate(extraction, flat_start + index, 1)
            assert located is not None
            assert located.segment is segment
            assert located.local_offset == index


def test_separator_offsets_are_unmapped() -> None:
    extraction = extract(simple_document())

    assert extraction.flat_text[5] == "\n"
    assert locate(extraction, 5, 1) is None


def test_out_of_range_offsets_are_unmapped() -> None:
    extraction = extract(simple_document())

    assert locate(extraction, len(extraction.flat_text), 1) is None
    assert locate(extraction, -1, 1) is None
    assert locate(extraction, 0, -2) is None


def test_trim_delta_is_added_before_walking() -> None:
    extraction = extract({"title": "   Bonjour"})

    located = locate(extraction, 0, 7)

    assert located is not None
    assert located.local_offset == 3
    assert located.segment.text[3:] == "Bonjour"


def test_locate_in_with_explicit_arguments() -> None:
    extraction = extract(simple_document())

    located = locate_in(extraction.segments, extraction.flat_text, extraction.trim_delta, 0, 5)

    assert located is not None
    assert located.segment.top_field == "title"
    assert located.local_offset == 0


def test_empty_extraction_maps_nothing() -> None:
    assert locate(extract({}), 0, 0) is None

"""Tests for the store-backed fix service."""

from __future__ import annotations

import pytest

from proofline.corrections import FixService
from proofline.services import DocumentNotFoundError, DocumentStore, InMemoryDocumentStore, Settings
from tests.helpers import content_text, innermost, paragraph, root, simple_document, text, wrapped


@pytest.fixture
def store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore({"doc-1": simple_document()})


def test_store_satisfies_protocol(store: InMemoryDocumentStore) -> None:
    assert isinstance(store, DocumentStore)


def test_fix_saves_only_modified_field(store: InMemoryDocumentStore) -> None:
    service = FixService(store)

    result = service.fix("doc-1", {"original": "une", "replacement": "un", "offset": 15, "length": 3})

    assert result.to_dict() == {"applied": True, "modifiedField": "content", "method": "offset"}
    assert len(store.saved) == 1
    doc_id, fields = store.saved[0]
    assert doc_id == "doc-1"
    assert list(fields) == ["content"]
    reloaded = store.load("doc-1")
    assert content_text(reloaded) == "Ceci est un test."
    assert reloaded["title"] == "Titre"


def test_not_found_saves_nothing(store: InMemoryDocumentStore) -> None:
    result = FixService(store).fix("doc-1", {"original": "absent", "replacement": "x"})

    assert not result.applied
    assert store.saved == []


def test_unknown_document_raises(store: InMemoryDocumentStore) -> None:
    with pytest.raises(DocumentNotFoundError):
        FixService(store).fix("missing", {"original": "une", "replacement": "un"})


def test_settings_content_field_is_used() -> None:
    store = InMemoryDocumentStore({"doc-2": {"body": root(paragraph(text("une faute")))}})
    service = FixService(store, Settings(content_field="body"))

    result = service.fix("doc-2", {"original": "une", "replacement": "un", "offset": 0, "length": 3})

    assert result.modified_field == "body"
    assert store.saved[0][1]["body"]["root"]["children"][0]["children"][0]["text"] == "un faute"


def test_store_hands_out_copies(store: InMemoryDocumentStore) -> None:
    loaded = store.load("doc-1")
    loaded["title"] = "Modifié"

    assert store.load("doc-1")["title"] == "Titre"
    assert store.ids() == ["doc-1"]


def test_fix_stored_document_with_deep_subtree() -> None:
    document = {
        "title": "Titre une",
        "content": root(paragraph(text("une faute")), wrapped(text("une cachée"), 1000)),
    }
    store = InMemoryDocumentStore({"deep": document})

    result = FixService(store).fix("deep", {"original": "une", "replacement": "un", "offset": 10, "length": 3})

    assert result.to_dict() == {"applied": True, "modifiedField": "content", "method": "offset"}
    reloaded = store.load("deep")
    assert content_text(reloaded) == "un faute"
    assert innermost(reloaded["content"]["root"]["children"][1])["text"] == "une cachée"
    assert content_text(document) == "une faute"


def test_fix_stored_document_with_cycle() -> None:
    node = paragraph(text("une faute"))
    node["children"].append(node)
    store = InMemoryDocumentStore({"loop": {"title": "Titre", "content": root(node)}})

    result = FixService(store).fix("loop", {"original": "faute", "replacement": "fautes"})

    assert result.to_dict() == {"applied": True, "modifiedField": "content", "method": "legacy"}
    saved = store.saved[0][1]["content"]["root"]["children"][0]
    assert saved["children"][0]["text"] == "une fautes"
    assert saved["children"][1] is saved
    assert node["children"][0]["text"] == "une faute"

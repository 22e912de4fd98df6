"""Persistence contract for documents and an in-memory implementation."""

from __future__ import annotations

import logging
import threading
from typing import Any, Mapping, Protocol, runtime_checkable

from ..core.tree import clone_tree

__all__ = ["DocumentNotFoundError", "DocumentStore", "InMemoryDocumentStore"]

LOGGER = logging.getLogger(__name__)


class DocumentNotFoundError(KeyError):
    """Raised when a document id is unknown to the store."""


@runtime_checkable
class DocumentStore(Protocol):
    """Loads whole documents and saves individual top-level fields.

    ``load`` must return the same shape every time for an unchanged document;
    offsets computed at check time are only valid against that shape.
    """

    def load(self, doc_id: str) -> dict[str, Any]:
        ...

    def save_fields(self, doc_id: str, fields: Mapping[str, Any]) -> None:
        ...


class InMemoryDocumentStore:
    """Dictionary-backed store that hands out copies."""

    def __init__(self, documents: Mapping[str, Mapping[str, Any]] | None = None) -> None:
        self._documents: dict[str, dict[str, Any]] = {}
        self._lock = threading.RLock()
        self.saved: list[tuple[str, dict[str, Any]]] = []
        for doc_id, document in (documents or {}).items():
            self.put(doc_id, document)

    def put(self, doc_id: str, document: Mapping[str, Any]) -> None:
        with self._lock:
            self._documents[str(doc_id)] = clone_tree(dict(document))

    def ids(self) -> list[str]:
        with self._lock:
            return list(self._documents)

    def load(self, doc_id: str) -> dict[str, Any]:
        with self._lock:
            try:
                return clone_tree(self._documents[str(doc_id)])
            except KeyError as exc:
                raise DocumentNotFoundError(doc_id) from exc

    def save_fields(self, doc_id: str, fields: Mapping[str, Any]) -> None:
        with self._lock:
            document = self._documents.get(str(doc_id))
            if document is None:
                raise DocumentNotFoundError(doc_id)
            payload = clone_tree(dict(fields))
            document.update(payload)
            self.saved.append((str(doc_id), payload))
        LOGGER.debug("Saved fields %s for document %s", sorted(fields), doc_id)

"""Load, fix and partially save a stored document."""

from __future__ import annotations

import logging
from typing import Any, Mapping

from ..services.documents import DocumentStore
from ..services.settings import Settings
from .fixer import fix_document
from .models import CorrectionRequest, CorrectionResult

__all__ = ["FixService"]

LOGGER = logging.getLogger(__name__)


class FixService:
    """Applies one correction per call against a :class:`DocumentStore`.

    The document is fetched exactly once per request; only the top-level
    field reported by the applier is written back.
    """

    def __init__(self, store: DocumentStore, settings: Settings | None = None) -> None:
        self._store = store
        self._settings = settings or Settings()

    def fix(self, doc_id: str, request: CorrectionRequest | Mapping[str, Any]) -> CorrectionResult:
        if not isinstance(request, CorrectionRequest):
            request = CorrectionRequest.from_payload(request)
        document = self._store.load(doc_id)
        outcome = fix_document(
            document,
            request,
            content_field=self._settings.content_field,
            config=self._settings.extraction_config(),
        )
        changed = outcome.changed_fields
        if changed:
            self._store.save_fields(doc_id, changed)
            LOGGER.info("Document %s: saved %s after %s fix", doc_id, sorted(changed), outcome.result.method)
        else:
            LOGGER.info("Document %s: could not locate %r", doc_id, request.original)
        return outcome.result

"""Entry point applying one correction to a cloned document."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from ..core.tree import clone_tree
from ..extraction.extractor import ExtractionConfig, extract
from .applier import apply_located
from .legacy import legacy_replace
from .mapper import locate
from .models import CorrectionRequest, CorrectionResult, FixOutcome
from .reconciler import reconcile

__all__ = ["fix_document"]

LOGGER = logging.getLogger(__name__)


def fix_document(
    document: Mapping[str, Any],
    request: CorrectionRequest | Mapping[str, Any],
    *,
    content_field: str = "content",
    config: ExtractionConfig | None = None,
) -> FixOutcome:
    """Apply ``request`` to a copy of ``document``.

    With offsets, the text at ``offset`` is verified against ``original``
    first; a mismatch (or a failed lookup) hands over to the reconciler.
    Without offsets only the legacy substring search runs. ``document`` itself
    is never mutated.
    """

    if not isinstance(request, CorrectionRequest):
        request = CorrectionRequest.from_payload(request)
    field_name = request.field or content_field
    clone: dict[str, Any] = clone_tree(dict(document))

    if not request.has_offset:
        modified = legacy_replace(clone, request.original, request.replacement, field_name, config=config)
        result = (
            CorrectionResult(applied=True, modified_field=modified, method="legacy")
            if modified is not None
            else CorrectionResult.not_found("legacy")
        )
        return FixOutcome(document=clone, result=result)

    offset, length = request.offset or 0, request.length or 0
    extraction = extract(clone, field_name, config=config)
    actual = extraction.flat_text[offset : offset + length]
    if actual == request.original:
        located = locate(extraction, offset, length)
        if located is not None:
            modified = apply_located(clone, located, length, request.replacement)
            if modified is not None:
                LOGGER.info("Applied %r at offset %s in %s", request.original, request.offset, modified)
                return FixOutcome(
                    document=clone,
                    result=CorrectionResult(applied=True, modified_field=modified, method="offset"),
                )
        LOGGER.warning("Offset %s verified but could not be mapped; reconciling", request.offset)
    else:
        LOGGER.warning(
            "Text mismatch at offset %s: expected %r, found %r",
            request.offset,
            request.original,
            actual,
        )

    result = reconcile(clone, extraction, request, content_field=field_name, config=config)
    if not result.applied:
        LOGGER.warning("Could not locate %r anywhere in the document", request.original)
    return FixOutcome(document=clone, result=result)

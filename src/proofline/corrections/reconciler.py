"""Drift-tolerant retry when the text at a reported offset has changed."""

from __future__ import annotations

import logging
from collections.abc import MutableMapping
from typing import Any

from ..extraction.extractor import Extraction, ExtractionConfig
from .applier import apply_located
from .legacy import legacy_replace
from .mapper import locate
from .models import CorrectionRequest, CorrectionResult

__all__ = ["find_occurrences", "nearest_occurrences", "reconcile"]

LOGGER = logging.getLogger(__name__)


def find_occurrences(text: str, needle: str) -> list[int]:
    """Return every start index of ``needle`` in ``text``, overlapping matches included."""

    if not needle:
        return []
    indexes: list[int] = []
    index = text.find(needle)
    while index >= 0:
        indexes.append(index)
        index = text.find(needle, index + 1)
    return indexes


def nearest_occurrences(text: str, needle: str, offset: int) -> list[int]:
    """Occurrences ordered by distance to ``offset``; ties go to the lower index."""

    return sorted(find_occurrences(text, needle), key=lambda index: (abs(index - offset), index))


def reconcile(
    document: MutableMapping[str, Any],
    extraction: Extraction,
    request: CorrectionRequest,
    *,
    content_field: str = "content",
    config: ExtractionConfig | None = None,
) -> CorrectionResult:
    """Retry at the nearest occurrence of ``request.original``, then fall back to legacy search.

    At most one mutation happens: every attempt before the successful one
    leaves the document untouched.
    """

    needle = request.original
    anchor = request.offset if request.offset is not None else 0
    for index in nearest_occurrences(extraction.flat_text, needle, anchor):
        located = locate(extraction, index, len(needle))
        if located is None:
            continue
        modified = apply_located(document, located, len(needle), request.replacement)
        if modified is not None:
            LOGGER.info(
                "Reconciled %r from offset %s to %s in %s",
                needle,
                request.offset,
                index,
                modified,
            )
            return CorrectionResult(applied=True, modified_field=modified, method="search")

    modified = legacy_replace(document, needle, request.replacement, content_field, config=config)
    if modified is not None:
        LOGGER.info("Applied %r via legacy substring search in %s", needle, modified)
        return CorrectionResult(applied=True, modified_field=modified, method="legacy")
    return CorrectionResult.not_found("legacy")

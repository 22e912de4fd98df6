"""Offset mapping, correction application and drift reconciliation."""

from .applier import apply, apply_located
from .fixer import fix_document
from .legacy import legacy_replace
from .mapper import locate, locate_in
from .models import CorrectionRequest, CorrectionResult, FixOutcome, Located
from .reconciler import find_occurrences, nearest_occurrences, reconcile
from .service import FixService

__all__ = [
    "CorrectionRequest",
    "CorrectionResult",
    "FixOutcome",
    "FixService",
    "Located",
    "apply",
    "apply_located",
    "find_occurrences",
    "fix_document",
    "legacy_replace",
    "locate",
    "locate_in",
    "nearest_occurrences",
    "reconcile",
]

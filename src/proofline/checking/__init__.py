"""Checking-service clients, filtering, scoring and batch scans."""

from .allowlist import AllowListCache, AllowListStats
from .batch import BatchFailure, BatchProgress, BatchResult, BatchScanner, BatchState, BatchSummary
from .checker import DocumentChecker, TextChecker
from .filters import FilterConfig, calculate_score, filter_false_positives
from .languagetool import CheckerSettings, LanguageToolClient, parse_matches
from .models import CheckReport, IgnoredIssue, Issue
from .semantic import SemanticChecker, SemanticSettings

__all__ = [
    "AllowListCache",
    "AllowListStats",
    "BatchFailure",
    "BatchProgress",
    "BatchResult",
    "BatchScanner",
    "BatchState",
    "BatchSummary",
    "CheckReport",
    "CheckerSettings",
    "DocumentChecker",
    "FilterConfig",
    "IgnoredIssue",
    "Issue",
    "LanguageToolClient",
    "SemanticChecker",
    "SemanticSettings",
    "TextChecker",
    "calculate_score",
    "filter_false_positives",
    "parse_matches",
]

"""False-positive filtering and document scoring."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Iterable

from .models import IgnoredIssue, Issue

__all__ = [
    "DEFAULT_SKIP_CATEGORIES",
    "DEFAULT_SKIP_RULES",
    "FilterConfig",
    "calculate_score",
    "filter_false_positives",
]

# Common false positives for web content.
DEFAULT_SKIP_RULES: frozenset[str] = frozenset(
    {"WHITESPACE_RULE", "COMMA_PARENTHESIS_WHITESPACE", "UNPAIRED_BRACKETS"}
)
DEFAULT_SKIP_CATEGORIES: frozenset[str] = frozenset({"TYPOGRAPHY"})


@dataclass(slots=True, frozen=True)
class FilterConfig:
    skip_rules: tuple[str, ...] = ()
    skip_categories: tuple[str, ...] = ()
    custom_dictionary: tuple[str, ...] = ()

    @classmethod
    def from_settings(cls, settings: Any) -> FilterConfig:
        return cls(
            skip_rules=tuple(settings.skip_rules or ()),
            skip_categories=tuple(settings.skip_categories or ()),
            custom_dictionary=tuple(settings.custom_dictionary or ()),
        )


def filter_false_positives(
    issues: Iterable[Issue],
    config: FilterConfig | None = None,
    *,
    allow_words: Iterable[str] = (),
    ignored: Iterable[Any] = (),
) -> list[Issue]:
    """Drop premium, skipped, allow-listed, trivial and user-ignored issues."""

    cfg = config or FilterConfig()
    skip_rules = DEFAULT_SKIP_RULES | set(cfg.skip_rules)
    skip_categories = DEFAULT_SKIP_CATEGORIES | set(cfg.skip_categories)
    dictionary = {word.lower() for word in (*cfg.custom_dictionary, *allow_words) if word}
    dismissed = [entry for entry in (IgnoredIssue.from_value(value) for value in ignored) if entry]

    kept: list[Issue] = []
    for issue in issues:
        if issue.is_premium:
            continue
        if issue.rule_id in skip_rules or issue.category in skip_categories:
            continue
        if issue.original and issue.original.lower() in dictionary:
            continue
        # single characters are mostly punctuation noise
        if issue.original and len(issue.original) <= 1 and issue.category != "GRAMMAR":
            continue
        if any(entry.matches(issue) for entry in dismissed):
            continue
        kept.append(issue)
    return kept


def calculate_score(word_count: int, issue_count: int) -> int:
    """Score 0-100; about one issue per 100 words scores 90."""

    if word_count <= 0 or issue_count <= 0:
        return 100
    issues_per_hundred_words = (issue_count / word_count) * 100
    score = math.floor(100 - issues_per_hundred_words * 10 + 0.5)
    return max(0, min(100, score))

"""Issue and report records exchanged with checking services."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Literal, Mapping

from ..extraction.extractor import Extraction

__all__ = ["CheckReport", "IgnoredIssue", "Issue", "IssueSource"]

IssueSource = Literal["languagetool", "ai"]


@dataclass(slots=True, frozen=True)
class Issue:
    """One problem reported against the exact text that was submitted.

    ``offset`` and ``length`` are Python string indices into that text.
    """

    rule_id: str
    category: str
    message: str
    offset: int
    length: int
    original: str
    replacements: tuple[str, ...] = ()
    context: str = ""
    context_offset: int = 0
    source: IssueSource = "languagetool"
    is_premium: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "ruleId": self.rule_id,
            "category": self.category,
            "message": self.message,
            "context": self.context,
            "contextOffset": self.context_offset,
            "offset": self.offset,
            "length": self.length,
            "original": self.original,
            "replacements": list(self.replacements),
            "source": self.source,
            "isPremium": self.is_premium,
        }


@dataclass(slots=True, frozen=True)
class IgnoredIssue:
    """A ``(rule_id, original)`` pair a user chose to dismiss."""

    rule_id: str
    original: str

    @classmethod
    def from_value(cls, value: Any) -> IgnoredIssue | None:
        if isinstance(value, IgnoredIssue):
            return value
        if isinstance(value, Mapping):
            rule_id = value.get("ruleId", value.get("rule_id"))
            original = value.get("original")
        elif isinstance(value, (tuple, list)) and len(value) == 2:
            rule_id, original = value
        else:
            return None
        if not isinstance(rule_id, str) or not isinstance(original, str):
            return None
        return cls(rule_id=rule_id, original=original)

    def matches(self, issue: Issue) -> bool:
        return issue.rule_id == self.rule_id and issue.original == self.original


@dataclass(slots=True)
class CheckReport:
    """Issues for one document together with the extraction they refer to."""

    extraction: Extraction
    issues: list[Issue] = field(default_factory=list)
    word_count: int = 0
    score: int = 100
    language: str = ""
    checked_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def issue_count(self) -> int:
        return len(self.issues)

    def to_dict(self) -> dict[str, Any]:
        return {
            "score": self.score,
            "issueCount": self.issue_count,
            "wordCount": self.word_count,
            "language": self.language,
            "issues": [issue.to_dict() for issue in self.issues],
            "lastChecked": self.checked_at.isoformat(),
        }

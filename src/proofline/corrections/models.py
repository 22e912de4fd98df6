"""Request/result value objects for applying corrections."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Literal

from ..core.errors import InvalidCorrectionRequest
from ..extraction.segments import Segment

__all__ = [
    "CorrectionMethod",
    "CorrectionRequest",
    "CorrectionResult",
    "FixOutcome",
    "Located",
]

CorrectionMethod = Literal["offset", "search", "legacy"]


def _optional_int(payload: Mapping[str, Any], key: str) -> int | None:
    value = payload.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidCorrectionRequest(
            message=f"'{key}' must be an integer",
            details={"field": key, "value": repr(value)},
        )
    return value


@dataclass(slots=True, frozen=True)
class CorrectionRequest:
    """A single fix reported against flat text.

    ``offset``/``length`` are relative to the stripped flat text and are either
    both present or both absent.
    """

    original: str
    replacement: str
    offset: int | None = None
    length: int | None = None
    field: str | None = None

    @property
    def has_offset(self) -> bool:
        return self.offset is not None and self.length is not None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> CorrectionRequest:
        """Validate a JSON-style mapping and build a request."""

        if not isinstance(payload, Mapping):
            raise InvalidCorrectionRequest(message="Correction payload must be an object")
        original = payload.get("original")
        replacement = payload.get("replacement")
        if not isinstance(original, str) or not original:
            raise InvalidCorrectionRequest(
                message="'original' must be a non-empty string",
                details={"field": "original"},
            )
        if not isinstance(replacement, str):
            raise InvalidCorrectionRequest(
                message="'replacement' must be a string",
                details={"field": "replacement"},
            )
        offset = _optional_int(payload, "offset")
        length = _optional_int(payload, "length")
        if (offset is None) != (length is None):
            raise InvalidCorrectionRequest(
                message="'offset' and 'length' must be supplied together",
                details={"offset": offset, "length": length},
            )
        if offset is not None and offset < 0:
            raise InvalidCorrectionRequest(message="'offset' must not be negative", details={"offset": offset})
        if length is not None and length < 0:
            raise InvalidCorrectionRequest(message="'length' must not be negative", details={"length": length})
        field_name = payload.get("field")
        if field_name is not None and not isinstance(field_name, str):
            raise InvalidCorrectionRequest(message="'field' must be a string", details={"field": "field"})
        return cls(
            original=original,
            replacement=replacement,
            offset=offset,
            length=length,
            field=field_name or None,
        )


@dataclass(slots=True, frozen=True)
class CorrectionResult:
    """Outcome of one correction request."""

    applied: bool
    modified_field: str | None
    method: CorrectionMethod

    def to_dict(self) -> dict[str, Any]:
        return {
            "applied": self.applied,
            "modifiedField": self.modified_field,
            "method": self.method,
        }

    @classmethod
    def not_found(cls, method: CorrectionMethod) -> CorrectionResult:
        return cls(applied=False, modified_field=None, method=method)


@dataclass(slots=True, frozen=True)
class Located:
    """A segment plus the offset inside its text that a flat offset maps to."""

    segment: Segment
    local_offset: int


@dataclass(slots=True)
class FixOutcome:
    """The cloned, possibly mutated document and the result for its request."""

    document: dict[str, Any]
    result: CorrectionResult

    @property
    def changed_fields(self) -> dict[str, Any]:
        """Return the subset of the document the persistence layer must save."""

        name = self.result.modified_field
        if not self.result.applied or name is None:
            return {}
        return {name: self.document.get(name)}

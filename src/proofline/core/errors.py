"""Error taxonomy for extraction, correction and checking.

Traversal anomalies (skipped nodes, depth truncation, offsets out of range,
verification mismatches) are absorbed where they happen and never raise. The
codes below still name them so results and log records can refer to them.
Only invalid input, checker failures and batch misuse surface as exceptions.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar


class ErrorCode:
    """Constants for error and outcome codes."""

    # Absorbed while walking or mapping
    SKIPPED = "skipped"
    DEPTH_EXCEEDED = "depth_exceeded"
    OUT_OF_RANGE = "out_of_range"
    VERIFICATION_MISMATCH = "verification_mismatch"

    # Reported to callers
    NOT_FOUND = "not_found"

    # Raised
    INVALID_REQUEST = "invalid_request"
    CHECKER_UNAVAILABLE = "checker_unavailable"
    BATCH_RUNNING = "batch_running"


@dataclass
class ProoflineError(Exception):
    """Base exception with consistent JSON serialization.

    Attributes:
        error_code: Machine-readable error identifier.
        message: Human-readable error description.
        details: Additional structured error information.
    """

    error_code: str
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    severity: ClassVar[str] = "error"

    def __post_init__(self) -> None:
        Exception.__init__(self, self.message)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "error": self.error_code,
            "message": self.message,
        }
        if self.details:
            result["details"] = dict(self.details)
        return result

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message}"


@dataclass
class InvalidCorrectionRequest(ProoflineError):
    """Raised when a correction payload is missing fields or has bad types."""

    error_code: str = field(default=ErrorCode.INVALID_REQUEST)
    message: str = field(default="Correction request is invalid")
    details: dict[str, Any] = field(default_factory=dict)


@dataclass
class CheckerError(ProoflineError):
    """Raised when the checking service cannot be reached or answers with an error."""

    error_code: str = field(default=ErrorCode.CHECKER_UNAVAILABLE)
    message: str = field(default="Checking service request failed")
    details: dict[str, Any] = field(default_factory=dict)
    status_code: int | None = field(default=None)

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.status_code is not None:
            result["status_code"] = self.status_code
        return result


@dataclass
class BatchAlreadyRunning(ProoflineError):
    """Raised when a batch scan is started while another live run is in progress."""

    error_code: str = field(default=ErrorCode.BATCH_RUNNING)
    message: str = field(default="A batch scan is already running")
    details: dict[str, Any] = field(default_factory=dict)

    severity: ClassVar[str] = "warning"

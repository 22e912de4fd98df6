"""Core value types shared by extraction, correction and checking."""

from .errors import (
    BatchAlreadyRunning,
    CheckerError,
    ErrorCode,
    InvalidCorrectionRequest,
    ProoflineError,
)
from .ranges import TextRange
from .tree import clone_tree

__all__ = [
    "BatchAlreadyRunning",
    "CheckerError",
    "ErrorCode",
    "InvalidCorrectionRequest",
    "ProoflineError",
    "TextRange",
    "clone_tree",
]

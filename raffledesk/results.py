from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class OperationResult:
    """Uniform outcome of every mutation entry point.

    Attributes
    ----------
    success : bool
        Whether the operation completed.
    message : str
        User-facing text describing the outcome.
    data : Any, optional
        Operation-specific payload (a camel-cased record, export bytes ...).
    """

    success: bool
    message: str
    data: Optional[Any] = None

    @classmethod
    def ok(cls, message: str, data: Optional[Any] = None) -> "OperationResult":
        return cls(True, message, data)

    @classmethod
    def fail(cls, message: str) -> "OperationResult":
        return cls(False, message)

"""Result value returned by directory, filesystem and rename step operations."""
from __future__ import annotations
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class OpResult:
    """Outcome of a single mutation attempt.

    Attributes:
        ok: Whether the operation took effect (or was a no-op by inspection)
        message: Human readable detail, usually the tool's stderr
        status_code: Underlying exit status or errno, when there is one
    """

    ok: bool
    message: str = ""
    status_code: Optional[int] = None

    @classmethod
    def success(cls, message: str = "") -> "OpResult":
        return cls(True, message, 0)

    @classmethod
    def failure(cls, message: str, status_code: Optional[int] = None) -> "OpResult":
        return cls(False, message, status_code)

    def describe(self) -> str:
        if self.status_code is None:
            return self.message or "unknown error"
        return f"{self.message or 'error'} (status {self.status_code})"

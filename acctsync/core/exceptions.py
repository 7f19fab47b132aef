"""Exceptions raised by the rename workflow."""
from __future__ import annotations
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .results import OpResult


class RenameError(Exception):
    """Base exception for all account rename failures."""
    pass


class DirectoryReadError(RenameError):
    """Reading an attribute from the local directory failed.

    Attributes:
        record_key: Record that was read
        attribute: Attribute that was requested
        status_code: Exit status of the directory tool
    """

    def __init__(self, record_key: str, attribute: str, status_code: int, message: str = ""):
        self.record_key = record_key
        self.attribute = attribute
        self.status_code = status_code
        super().__init__(f"[{status_code}] read {attribute} of {record_key}: {message}".rstrip(": "))


class HomeCollisionError(RenameError):
    """Destination home directory already exists."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Home directory {path} already exists")


class StepCommitError(RenameError):
    """A forward action of a rename step failed."""

    def __init__(self, step: str, result: "OpResult"):
        self.step = step
        self.result = result
        super().__init__(f"{step} failed: {result.describe()}")


class CompensationError(RenameError):
    """A compensating action failed; the account is left in a mixed state."""

    def __init__(self, step: str, result: "OpResult"):
        self.step = step
        self.result = result
        super().__init__(f"Reverting {step} failed: {result.describe()}")


class PendingRecoveryError(RenameError):
    """A previous run left a recovery journal that has not been cleared."""

    def __init__(self, journal_path: str):
        self.journal_path = journal_path
        super().__init__(f"Unresolved recovery journal at {journal_path}")

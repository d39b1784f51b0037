"""
Outcome types for watchlist operations.

Store and directory calls report their outcome explicitly instead of
raising, so each operation's fallback is a visible branch at the call site.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Generic, Optional, TypeVar

T = TypeVar('T')

INVALID_DATA = "Invalid data"
USER_NOT_FOUND = "User not found"
UPDATE_FAILED = "Failed to update watchlist"


class Outcome(str, Enum):
    """How a lookup or store call ended."""
    OK = "ok"
    NOT_FOUND = "not_found"
    STORE_ERROR = "store_error"


@dataclass(frozen=True)
class Result(Generic[T]):
    """Value plus outcome; ``value`` is only meaningful for ``Outcome.OK``."""
    outcome: Outcome
    value: Optional[T] = None
    reason: Optional[str] = None

    @classmethod
    def ok(cls, value: T) -> "Result[T]":
        return cls(Outcome.OK, value)

    @classmethod
    def not_found(cls, reason: Optional[str] = None) -> "Result[T]":
        return cls(Outcome.NOT_FOUND, reason=reason)

    @classmethod
    def store_error(cls, reason: Optional[str] = None) -> "Result[T]":
        return cls(Outcome.STORE_ERROR, reason=reason)

    @property
    def is_ok(self) -> bool:
        return self.outcome == Outcome.OK


@dataclass(frozen=True)
class ToggleResult:
    """Result of a watchlist toggle."""
    success: bool
    added: Optional[bool] = None
    error: Optional[str] = None

    @classmethod
    def succeeded(cls, added: bool) -> "ToggleResult":
        return cls(success=True, added=added)

    @classmethod
    def failed(cls, error: str) -> "ToggleResult":
        return cls(success=False, error=error)

    def to_dict(self) -> Dict[str, Any]:
        """Wire shape: absent fields are omitted."""
        data: Dict[str, Any] = {"success": self.success}
        if self.added is not None:
            data["added"] = self.added
        if self.error is not None:
            data["error"] = self.error
        return data

"""
Validation Results

Every validator in shortbox.core returns a ValidationResult instead of
raising on bad input. Handlers branch on `ok` and only then read `value`.

Design Decisions:
- Frozen dataclass: results are passed around, never mutated
- `value` raises on a failed result, so a rejected input can't leak into the store
- `kind` classifies the failure for logging and status code mapping
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, Optional, TypeVar

T = TypeVar("T")


class ErrorKind(Enum):
    """Why a value was rejected."""
    TYPE = "type"          # not the expected shape (e.g. URL is not a string)
    FORMAT = "format"      # length, charset or pattern rule
    POLICY = "policy"      # well-formed but refused (reserved, blocked, scheme)
    RESOURCE = "resource"  # body too large, unreadable, undecodable


@dataclass(frozen=True)
class ValidationResult(Generic[T]):
    """
    Tagged outcome of a validation.

    Use the `success` / `failure` constructors rather than building one
    directly.
    """
    ok: bool
    error: Optional[str] = None
    kind: Optional[ErrorKind] = None
    _value: Any = field(default=None, repr=False)

    @classmethod
    def success(cls, value: T) -> "ValidationResult[T]":
        return cls(ok=True, _value=value)

    @classmethod
    def failure(cls, reason: str, kind: ErrorKind) -> "ValidationResult[T]":
        return cls(ok=False, error=reason, kind=kind)

    @property
    def value(self) -> T:
        """
        The validated value.

        Raises:
            ValueError: If the result is a failure
        """
        if not self.ok:
            raise ValueError(f"Rejected value has no usable result: {self.error}")
        return self._value

    def __bool__(self) -> bool:
        return self.ok

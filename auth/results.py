"""
Result values returned by the credential store and the session guard.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

from auth.errors import AuthError

T = TypeVar("T")


@dataclass
class Result(Generic[T]):
    """Outcome of an operation that can fail with a taxonomy error.

    Example:
        result = await store.find_by_id(user_id)
        if not result.success:
            raise result.error
        user = result.value
    """

    success: bool
    value: Optional[T] = None
    error: Optional[AuthError] = None

    @classmethod
    def ok(cls, value: T) -> "Result[T]":
        return cls(success=True, value=value)

    @classmethod
    def fail(cls, error: AuthError) -> "Result[T]":
        return cls(success=False, error=error)

    def unwrap(self) -> T:
        """Return the value, or raise the carried error."""
        if not self.success:
            raise self.error
        return self.value

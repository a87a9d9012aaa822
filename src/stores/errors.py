from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class StoreError(Exception):
    """
    Base for business failures reported by the stores.
    Carried inside a Result rather than raised; the message is user-facing.
    """

    @property
    def message(self) -> str:
        return str(self)


class ValidationError(StoreError):
    """Missing or malformed input, e.g. empty fields or a short password."""


class ConflictError(StoreError):
    """Username or email already registered."""


class NotFoundError(StoreError):
    """No account matches the given identifier or email."""


class AuthError(StoreError):
    """Wrong password, or an operation that needs a session ran without one."""


@dataclass(frozen=True)
class Result(Generic[T]):
    success: bool
    value: Optional[T] = None
    error: Optional[StoreError] = None

    @classmethod
    def ok(cls, value: Optional[T] = None) -> Result[T]:
        return cls(success=True, value=value)

    @classmethod
    def fail(cls, error: StoreError) -> Result[T]:
        return cls(success=False, error=error)

    def __bool__(self) -> bool:
        return self.success

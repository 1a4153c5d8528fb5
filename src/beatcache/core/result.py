"""Explicit success/failure results for tier calls.

Every store, file storage and origin call returns either ``Ok(value)`` or
``Failure(reason, detail)``. Callers branch on the result type instead of
relying on ``None`` meaning several different things.

Example:
    result = await store.get_by_id(42)
    if isinstance(result, Ok):
        beatmap = result.value
    elif result.reason is FailureReason.PERSISTENCE:
        ...
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar, Union

T = TypeVar("T")


class FailureReason(str, Enum):
    """Why a tier call did not produce a value."""

    NOT_FOUND = "not_found"
    UNAVAILABLE = "unavailable"
    PERSISTENCE = "persistence"


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """Successful tier call."""

    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True, slots=True)
class Failure:
    """Failed tier call."""

    reason: FailureReason
    detail: str = ""

    @property
    def ok(self) -> bool:
        return False

    @classmethod
    def not_found(cls, detail: str = "") -> Failure:
        return cls(FailureReason.NOT_FOUND, detail)

    @classmethod
    def unavailable(cls, detail: str = "") -> Failure:
        return cls(FailureReason.UNAVAILABLE, detail)

    @classmethod
    def persistence(cls, detail: str = "") -> Failure:
        return cls(FailureReason.PERSISTENCE, detail)


Result = Union[Ok[T], Failure]


def value_or_none(result: Result[T]) -> T | None:
    """Collapse a result to its value, or ``None`` on any failure."""
    if isinstance(result, Ok):
        return result.value
    return None

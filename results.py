from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

T = TypeVar("T")


class ErrorKind(str, Enum):
    NOT_FOUND = "not_found"
    VALIDATION = "validation"
    AUTHORIZATION = "authorization"
    TRANSPORT = "transport"


@dataclass(frozen=True)
class RecordError:
    kind: ErrorKind
    message: str = ""


@dataclass(frozen=True)
class Result(Generic[T]):
    """
    Outcome of a store call. Exactly one of value/error is meaningful:
    check ``ok`` first. ``value`` may legitimately be None (update/delete).
    """
    value: T | None = None
    error: RecordError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T | None = None) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, kind: ErrorKind, message: str = "") -> "Result[T]":
        return cls(error=RecordError(kind, message))

    def message_or(self, fallback: str) -> str:
        # backend message verbatim when present
        if self.error and self.error.message:
            return self.error.message
        return fallback

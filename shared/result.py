"""Result values returned across the decoder's public surface."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar


T = TypeVar("T")
E = TypeVar("E")


@dataclass(frozen=True, slots=True)
class Result(Generic[T, E]):
    """Discriminated union capturing either a success value or an error.

    Success values may themselves be falsy (``0`` bytes skipped), so callers
    should branch on :meth:`is_err` rather than on ``value``.
    """

    value: Optional[T] = None
    error: Optional[E] = None

    @classmethod
    def ok(cls, value: T) -> "Result[T, E]":
        return cls(value=value)

    @classmethod
    def err(cls, error: E) -> "Result[T, E]":
        if error is None:
            raise ValueError("Error results need an error value.")
        return cls(error=error)

    def is_ok(self) -> bool:
        return self.error is None

    def is_err(self) -> bool:
        return self.error is not None

    def unwrap(self) -> T:
        if self.error is not None:
            raise RuntimeError(f"Tried to unwrap error result: {self.error}")
        return self.value  # type: ignore[return-value]

    def unwrap_error(self) -> E:
        if self.error is None:
            raise RuntimeError(f"Tried to unwrap the error of a success result: {self.value!r}")
        return self.error


__all__ = ["Result"]

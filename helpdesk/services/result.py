from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


@dataclass
class Result(Generic[T]):
    ok: bool
    value: Optional[T] = None
    error: Optional[str] = None
    error_code: Optional[str] = None

    @staticmethod
    def success(value: T) -> "Result[T]":
        return Result(ok=True, value=value)

    @staticmethod
    def failure(error: str, code: str = "unknown") -> "Result[T]":
        return Result(ok=False, error=error, error_code=code)

    @staticmethod
    def skipped(reason: str) -> "Result[T]":
        """Operation intentionally not performed (feature disabled)."""
        return Result(ok=False, error=reason, error_code="skipped")

    @property
    def is_skipped(self) -> bool:
        return not self.ok and self.error_code == "skipped"

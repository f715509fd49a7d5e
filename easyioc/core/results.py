"""
Result objects for functional error handling.

Lets loops that must keep going (like component scanning) treat a failed
step as a value instead of an exception.
"""

from typing import Optional, Generic, TypeVar
from dataclasses import dataclass

T = TypeVar('T')


@dataclass
class Result(Generic[T]):
    """Outcome of a single step: a value, or an error message and its exception."""

    success: bool
    value: Optional[T] = None
    error: Optional[str] = None
    exception: Optional[BaseException] = None

    @classmethod
    def success_result(cls, value: T) -> 'Result[T]':
        """Create a success result."""
        return cls(success=True, value=value)

    @classmethod
    def failure_result(cls, error: str, exception: Optional[BaseException] = None) -> 'Result[T]':
        """Create a failure result, optionally keeping the exception that caused it."""
        return cls(success=False, error=error, exception=exception)

    def is_success(self) -> bool:
        return self.success

    def is_failure(self) -> bool:
        return not self.success

    def get_value(self) -> T:
        """Get the value, raising error if failure."""
        if not self.success:
            raise ValueError(f"Result is a failure: {self.error}")
        return self.value

    def get_error(self) -> Optional[str]:
        return self.error

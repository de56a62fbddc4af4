"""
Type system for the Optician Marketplace
Rust-inspired Result pattern and the structured error carried by service failures.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

# Type variables for generic Result
T = TypeVar("T")  # Success type
E = TypeVar("E")  # Error type

# ===============================================================================
# RESULT TYPES
# ===============================================================================


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Success result containing a value"""

    value: T

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        """Get the success value"""
        return self.value

    def unwrap_or(self, default: T) -> T:
        """Get the success value (ignores default)"""
        return self.value

    def map(self, func: Callable[[T], Any]) -> Result[Any, Any]:
        """Transform the success value"""
        return Ok(func(self.value))

    def and_then(self, func: Callable[[T], Result[Any, Any]]) -> Result[Any, Any]:
        """Chain operations that can fail"""
        return func(self.value)

    def unwrap_err(self) -> Any:
        """Raises an exception since this is success, not error - provides consistent API"""
        raise ValueError(f"Called unwrap_err on Ok: {self.value}")


@dataclass(frozen=True)
class Err(Generic[E]):
    """Error result containing an error value"""

    error: E

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self) -> Any:
        """Raises an exception - use unwrap_or() for safe access"""
        raise ValueError(f"Called unwrap on Err: {self.error}")

    def unwrap_or(self, default: T) -> T:
        """Get the default value since this is an error"""
        return default

    def map(self, func: Callable[[Any], Any]) -> Result[Any, E]:
        """No-op for error results"""
        return self

    def and_then(self, func: Callable[[Any], Result[Any, Any]]) -> Result[Any, E]:
        """No-op for error results - return self"""
        return self

    def unwrap_err(self) -> E:
        """Get the error value"""
        return self.error


# Result type alias
Result = Ok[T] | Err[E]

# ===============================================================================
# SERVICE ERRORS
# ===============================================================================


class ErrorCode:
    """Stable machine-readable codes carried by ServiceError"""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    INSUFFICIENT_POINTS = "INSUFFICIENT_POINTS"
    PRODUCT_UNAVAILABLE = "PRODUCT_UNAVAILABLE"
    PRODUCT_NOT_FOUND = "PRODUCT_NOT_FOUND"
    INSUFFICIENT_STOCK = "INSUFFICIENT_STOCK"
    ALREADY_PROCESSED = "ALREADY_PROCESSED"
    NOT_FOUND = "NOT_FOUND"
    FORBIDDEN = "FORBIDDEN"
    UNEXPECTED_ERROR = "UNEXPECTED_ERROR"

    NOT_FOUND_CODES = frozenset({PRODUCT_NOT_FOUND, NOT_FOUND})


@dataclass(frozen=True)
class ServiceError:
    """🚨 Business failure returned by service operations"""

    code: str
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        return self.message

    @property
    def is_not_found(self) -> bool:
        return self.code in ErrorCode.NOT_FOUND_CODES

    @classmethod
    def validation(cls, message: str, **details: Any) -> ServiceError:
        return cls(ErrorCode.VALIDATION_ERROR, message, details)

    @classmethod
    def not_found(cls, message: str, **details: Any) -> ServiceError:
        return cls(ErrorCode.NOT_FOUND, message, details)

    @classmethod
    def already_processed(cls, message: str = "Request already processed", **details: Any) -> ServiceError:
        return cls(ErrorCode.ALREADY_PROCESSED, message, details)

    @classmethod
    def unexpected(cls, message: str = "An unexpected error occurred") -> ServiceError:
        return cls(ErrorCode.UNEXPECTED_ERROR, message)


class ServiceAbort(Exception):  # noqa: N818
    """
    Raised inside an atomic block to roll it back.
    Carries the ServiceError the caller converts to Err once outside the transaction.
    """

    def __init__(self, error: ServiceError) -> None:
        super().__init__(error.message)
        self.error = error

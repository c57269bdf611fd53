"""Pool error classes.

Each error carries a numeric ErrorCode. Codes 100-105 are the pool's
stable result codes; 106-108 cover re-initialization and arithmetic bounds.
"""

from enum import IntEnum


class ErrorCode(IntEnum):
    """Numeric result codes for rejected pool operations."""

    OWNER_ONLY = 100
    NOT_FOUND = 101
    INSUFFICIENT_BALANCE = 102
    INVALID_AMOUNT = 103
    SLIPPAGE_EXCEEDED = 104
    NOT_INITIALIZED = 105
    ALREADY_INITIALIZED = 106
    OVERFLOW = 107
    UNDERFLOW = 108

    @property
    def kind(self) -> str:
        """Snake-case name used in logs and API responses."""
        return self.name.lower()


class PoolError(Exception):
    """Base error for pool operations.

    Raised before any state is written; a caller that catches it observes
    the pool exactly as it was before the call.
    """

    code: ErrorCode

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.code.kind)

    @property
    def kind(self) -> str:
        return self.code.kind


class OwnerOnlyError(PoolError):
    """Error 100: caller is not the pool owner."""

    code = ErrorCode.OWNER_ONLY


class NotFoundError(PoolError):
    """Error 101: the paired quote asset has not been set."""

    code = ErrorCode.NOT_FOUND


class InsufficientBalanceError(PoolError):
    """Error 102: the pool or the caller cannot cover an amount."""

    code = ErrorCode.INSUFFICIENT_BALANCE


class InvalidAmountError(PoolError):
    """Error 103: zero, out-of-range or ratio-violating input."""

    code = ErrorCode.INVALID_AMOUNT


class SlippageExceededError(PoolError):
    """Error 104: computed output is below the caller's minimum."""

    code = ErrorCode.SLIPPAGE_EXCEEDED


class NotInitializedError(PoolError):
    """Error 105: pool has not been initialized."""

    code = ErrorCode.NOT_INITIALIZED


class AlreadyInitializedError(PoolError):
    """Error 106: pool was already initialized."""

    code = ErrorCode.ALREADY_INITIALIZED


class ArithmeticOverflowError(PoolError):
    """Error 107: an intermediate exceeded the uint128 range."""

    code = ErrorCode.OVERFLOW


class ArithmeticUnderflowError(PoolError):
    """Error 108: an intermediate would have gone negative."""

    code = ErrorCode.UNDERFLOW


__all__ = [
    "ErrorCode",
    "PoolError",
    "OwnerOnlyError",
    "NotFoundError",
    "InsufficientBalanceError",
    "InvalidAmountError",
    "SlippageExceededError",
    "NotInitializedError",
    "AlreadyInitializedError",
    "ArithmeticOverflowError",
    "ArithmeticUnderflowError",
]

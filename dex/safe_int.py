"""Checked integer wrapper for pool arithmetic.

This module provides SafeInt, a lightweight wrapper that makes arithmetic
on reserves and amounts fail loudly instead of producing invalid values:
- Division by zero raises DivisionByZero
- Subtraction below zero raises Underflow
- Results above the uint128 maximum raise Overflow

Every intermediate is checked, not only the final value, so a computation
that would wrap on a fixed-width machine fails at the step that overflows.

Usage pattern:
    from dex.safe_int import SafeInt, S

    def calculate(a: int, b: int, c: int) -> int:
        # Wrap at entry
        sa, sb, sc = S(a), S(b), S(c)

        # Natural arithmetic - automatically checked
        result = (sa * sb) // sc  # Raises if sc == 0 or sa * sb > UINT128_MAX
        remainder = sa - sb       # Raises if sb > sa

        # Unwrap at exit
        return result.value
"""

from __future__ import annotations

UINT128_MAX = 2**128 - 1


class SafeIntError(ArithmeticError):
    """Base class for SafeInt arithmetic errors."""

    pass


class DivisionByZero(SafeIntError):
    """Division by zero."""

    pass


class Underflow(SafeIntError):
    """Result would be negative."""

    pass


class Overflow(SafeIntError):
    """Result exceeds the uint128 maximum."""

    pass


def _check(value: int, expr: str) -> int:
    if value < 0:
        raise Underflow(f"Underflow: {expr} = {value}")
    if value > UINT128_MAX:
        raise Overflow(f"Overflow: {expr} exceeds uint128 max")
    return value


class SafeInt:
    """Unsigned 128-bit integer with checked arithmetic.

    Wraps a non-negative integer and provides arithmetic operators that
    raise descriptive errors instead of producing out-of-range results.

    Attributes:
        value: The underlying integer value (read-only)
    """

    __slots__ = ("_value",)
    _value: int

    def __init__(self, value: int | SafeInt) -> None:
        """Create a SafeInt from an integer or another SafeInt.

        Args:
            value: Integer value to wrap, or SafeInt to copy

        Raises:
            TypeError: If value is not an int or SafeInt (bool is rejected)
            Underflow: If value is negative
            Overflow: If value exceeds UINT128_MAX
        """
        if isinstance(value, SafeInt):
            self._value = value._value
        elif isinstance(value, int) and not isinstance(value, bool):
            self._value = _check(value, str(value))
        else:
            raise TypeError(f"SafeInt requires int, got {type(value).__name__}")

    @property
    def value(self) -> int:
        """The underlying integer value."""
        return self._value

    def __repr__(self) -> str:
        return f"SafeInt({self._value})"

    def __str__(self) -> str:
        return str(self._value)

    def __hash__(self) -> int:
        return hash(self._value)

    # --- Arithmetic operations ---

    def __add__(self, other: SafeInt | int) -> SafeInt:
        """Add two values.

        Raises:
            Overflow: If the sum exceeds UINT128_MAX
        """
        other_val = _extract_value(other)
        return SafeInt(_check(self._value + other_val, f"{self._value} + {other_val}"))

    def __radd__(self, other: int) -> SafeInt:
        return SafeInt(_check(other + self._value, f"{other} + {self._value}"))

    def __sub__(self, other: SafeInt | int) -> SafeInt:
        """Subtract other from self.

        Raises:
            Underflow: If result would be negative
        """
        other_val = _extract_value(other)
        return SafeInt(_check(self._value - other_val, f"{self._value} - {other_val}"))

    def __rsub__(self, other: int) -> SafeInt:
        return SafeInt(_check(other - self._value, f"{other} - {self._value}"))

    def __mul__(self, other: SafeInt | int) -> SafeInt:
        """Multiply two values.

        Raises:
            Overflow: If the product exceeds UINT128_MAX
        """
        other_val = _extract_value(other)
        return SafeInt(_check(self._value * other_val, f"{self._value} * {other_val}"))

    def __rmul__(self, other: int) -> SafeInt:
        return SafeInt(_check(other * self._value, f"{other} * {self._value}"))

    def __floordiv__(self, other: SafeInt | int) -> SafeInt:
        """Floor division.

        Raises:
            DivisionByZero: If other is zero
        """
        other_val = _extract_value(other)
        if other_val == 0:
            raise DivisionByZero(f"Division by zero: {self._value} // 0")
        return SafeInt(self._value // other_val)

    def __rfloordiv__(self, other: int) -> SafeInt:
        if self._value == 0:
            raise DivisionByZero(f"Division by zero: {other} // 0")
        return SafeInt(other // self._value)

    # --- Comparison operations ---

    def __eq__(self, other: object) -> bool:
        if isinstance(other, SafeInt):
            return self._value == other._value
        if isinstance(other, int):
            return self._value == other
        return NotImplemented

    def __ne__(self, other: object) -> bool:
        result = self.__eq__(other)
        if result is NotImplemented:
            return NotImplemented
        return not result

    def __lt__(self, other: SafeInt | int) -> bool:
        return self._value < _extract_value(other)

    def __le__(self, other: SafeInt | int) -> bool:
        return self._value <= _extract_value(other)

    def __gt__(self, other: SafeInt | int) -> bool:
        return self._value > _extract_value(other)

    def __ge__(self, other: SafeInt | int) -> bool:
        return self._value >= _extract_value(other)

    # --- Conversion ---

    def __int__(self) -> int:
        return self._value

    def __bool__(self) -> bool:
        """True if non-zero."""
        return self._value != 0

    def __index__(self) -> int:
        return self._value

    # --- Named operations ---

    def mul_div(self, numerator: SafeInt | int, denominator: SafeInt | int) -> SafeInt:
        """Compute floor(self * numerator / denominator) with a checked product.

        Raises:
            Overflow: If self * numerator exceeds UINT128_MAX
            DivisionByZero: If denominator is zero
        """
        return (self * numerator) // denominator


def _extract_value(x: SafeInt | int) -> int:
    """Extract integer value from SafeInt or int."""
    if isinstance(x, SafeInt):
        return x._value
    return x


def is_uint128(value: object) -> bool:
    """Check whether value is a plain int inside the uint128 range."""
    return isinstance(value, int) and not isinstance(value, bool) and 0 <= value <= UINT128_MAX


# Convenience alias for concise code
S = SafeInt

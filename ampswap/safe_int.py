"""Safe integer wrapper for arithmetic on pool amounts.

SafeInt makes the arithmetic used by the quoting engine safe by default:
- Division by zero raises DivisionByZero
- Subtraction underflow raises Underflow
- Values that do not fit a Uint128 contract field raise Uint128Overflow on
  conversion

Any of these is a broken invariant (negative reserve, empty pool priced as if
funded) and aborts the single computation that hit it.

Usage pattern:
    from ampswap.safe_int import S

    def price(amount: int, reserve_in: int, reserve_out: int) -> int:
        sa, si, so = S(amount), S(reserve_in), S(reserve_out)
        return (sa * so // (si + sa)).value
"""

from __future__ import annotations

from ampswap.constants import UINT128_MAX


class SafeIntError(ArithmeticError):
    """Base class for SafeInt arithmetic errors."""

    pass


class DivisionByZero(SafeIntError):
    """Division by zero."""

    pass


class Underflow(SafeIntError):
    """Subtraction would produce a negative result."""

    pass


class Uint128Overflow(SafeIntError):
    """Value does not fit in a Uint128."""

    pass


class SafeInt:
    """Non-negative integer with checked arithmetic.

    Python ints never overflow, so the only checks needed while computing are
    for negative results and zero divisors. The Uint128 range is enforced when
    a value leaves the engine via to_uint128().

    Attributes:
        value: The underlying integer value (read-only)
    """

    __slots__ = ("_value",)
    _value: int

    def __init__(self, value: int | SafeInt) -> None:
        if isinstance(value, SafeInt):
            self._value = value._value
        elif isinstance(value, int) and not isinstance(value, bool):
            self._value = value
        else:
            raise TypeError(f"SafeInt requires int, got {type(value).__name__}")

    @property
    def value(self) -> int:
        """The underlying integer value."""
        return self._value

    def __repr__(self) -> str:
        return f"SafeInt({self._value})"

    def __hash__(self) -> int:
        return hash(self._value)

    # --- Arithmetic operations ---

    def __add__(self, other: SafeInt | int) -> SafeInt:
        return SafeInt(self._value + _extract_value(other))

    __radd__ = __add__

    def __sub__(self, other: SafeInt | int) -> SafeInt:
        """Subtract other from self.

        Raises:
            Underflow: If result would be negative
        """
        other_val = _extract_value(other)
        result = self._value - other_val
        if result < 0:
            raise Underflow(f"Underflow: {self._value} - {other_val} = {result}")
        return SafeInt(result)

    def __rsub__(self, other: int) -> SafeInt:
        return SafeInt(other) - self

    def __mul__(self, other: SafeInt | int) -> SafeInt:
        return SafeInt(self._value * _extract_value(other))

    __rmul__ = __mul__

    def __floordiv__(self, other: SafeInt | int) -> SafeInt:
        """Integer (floor) division.

        Raises:
            DivisionByZero: If other is zero
        """
        other_val = _extract_value(other)
        if other_val == 0:
            raise DivisionByZero(f"Division by zero: {self._value} // 0")
        return SafeInt(self._value // other_val)

    def __rfloordiv__(self, other: int) -> SafeInt:
        return SafeInt(other) // self

    # --- Comparison operations ---

    def __eq__(self, other: object) -> bool:
        if isinstance(other, SafeInt):
            return self._value == other._value
        if isinstance(other, int):
            return self._value == other
        return NotImplemented

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
        return self._value != 0

    # --- Named operations ---

    def ceiling_div(self, other: SafeInt | int) -> SafeInt:
        """Ceiling division (rounds up).

        Equivalent to: (self + other - 1) // other

        Raises:
            DivisionByZero: If other is zero
        """
        other_val = _extract_value(other)
        if other_val == 0:
            raise DivisionByZero(f"Ceiling division by zero: {self._value}")
        return SafeInt((self._value + other_val - 1) // other_val)

    def abs_diff(self, other: SafeInt | int) -> SafeInt:
        """Distance between two values, never negative."""
        return SafeInt(abs(self._value - _extract_value(other)))

    def to_uint128(self) -> int:
        """Convert to int, validating Uint128 bounds.

        Raises:
            Uint128Overflow: If value is negative or exceeds 2^128-1
        """
        if self._value < 0:
            raise Uint128Overflow(f"Negative value cannot be Uint128: {self._value}")
        if self._value > UINT128_MAX:
            raise Uint128Overflow(f"Value exceeds Uint128 max: {self._value}")
        return self._value


def _extract_value(x: SafeInt | int) -> int:
    if isinstance(x, SafeInt):
        return x._value
    return x


# Convenience alias for concise code
S = SafeInt

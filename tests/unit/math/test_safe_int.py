"""Tests for SafeInt safe arithmetic wrapper."""

import pytest

from ampswap.constants import UINT128_MAX
from ampswap.safe_int import (
    DivisionByZero,
    S,
    SafeInt,
    SafeIntError,
    Uint128Overflow,
    Underflow,
)


class TestSafeIntConstruction:
    """Tests for SafeInt construction."""

    def test_from_int(self):
        """SafeInt can be constructed from int."""
        assert SafeInt(42).value == 42

    def test_from_safeint(self):
        """SafeInt can be constructed from another SafeInt."""
        assert SafeInt(SafeInt(42)).value == 42

    def test_from_invalid_type_raises(self):
        """SafeInt rejects strings, floats and bools."""
        with pytest.raises(TypeError):
            SafeInt("42")  # type: ignore
        with pytest.raises(TypeError):
            SafeInt(3.14)  # type: ignore
        with pytest.raises(TypeError):
            SafeInt(True)

    def test_alias_s(self):
        """S is an alias for SafeInt."""
        assert S is SafeInt


class TestSafeIntArithmetic:
    """Tests for checked arithmetic."""

    def test_add(self):
        assert (S(2) + S(3)).value == 5
        assert (S(2) + 3).value == 5
        assert (3 + S(2)).value == 5

    def test_sub_zero_result(self):
        assert (S(5) - 5).value == 0

    def test_sub_underflow_raises(self):
        """Negative results are a broken invariant."""
        with pytest.raises(Underflow):
            S(1) - S(2)

    def test_rsub_underflow_raises(self):
        with pytest.raises(Underflow):
            1 - S(2)

    def test_mul_large(self):
        """Products far beyond 256 bits are exact."""
        assert (S(10**40) * S(10**40)).value == 10**80

    def test_floordiv(self):
        assert (S(7) // S(2)).value == 3

    def test_floordiv_by_zero_raises(self):
        with pytest.raises(DivisionByZero):
            S(7) // 0

    def test_rfloordiv_by_zero_raises(self):
        with pytest.raises(DivisionByZero):
            7 // S(0)


class TestSafeIntComparison:
    """Tests for comparisons against SafeInt and int."""

    def test_eq(self):
        assert S(3) == S(3)
        assert S(3) == 3
        assert S(3) != 4

    def test_ordering(self):
        assert S(1) < 2
        assert S(2) <= S(2)
        assert S(3) > 2
        assert S(3) >= S(3)


class TestSafeIntConversion:
    """Tests for conversions."""

    def test_int(self):
        assert int(S(9)) == 9

    def test_bool(self):
        assert S(1)
        assert not S(0)

    def test_hash(self):
        assert hash(S(5)) == hash(5)


class TestSafeIntNamedOps:
    """Tests for named operations."""

    def test_ceiling_div(self):
        assert S(10).ceiling_div(3).value == 4
        assert S(9).ceiling_div(3).value == 3

    def test_ceiling_div_by_zero_raises(self):
        with pytest.raises(DivisionByZero):
            S(10).ceiling_div(0)

    def test_abs_diff(self):
        assert S(3).abs_diff(10).value == 7
        assert S(10).abs_diff(S(3)).value == 7


class TestSafeIntUint128:
    """Tests for Uint128 bounds checking."""

    def test_to_uint128_valid(self):
        assert S(UINT128_MAX).to_uint128() == UINT128_MAX

    def test_to_uint128_overflow_raises(self):
        with pytest.raises(Uint128Overflow):
            S(UINT128_MAX + 1).to_uint128()

    def test_to_uint128_negative_raises(self):
        with pytest.raises(Uint128Overflow):
            S(-1).to_uint128()


class TestSafeIntExceptionHierarchy:
    """Tests for exception class hierarchy."""

    def test_all_errors_are_safe_int_errors(self):
        for error in (DivisionByZero, Underflow, Uint128Overflow):
            assert issubclass(error, SafeIntError)

    def test_safe_int_error_is_arithmetic_error(self):
        assert issubclass(SafeIntError, ArithmeticError)

"""Tests for SafeInt checked arithmetic wrapper."""

import pytest

from poolmath.constants import MAX_U64
from poolmath.safe_int import (
    DivisionByZero,
    S,
    SafeInt,
    SafeIntError,
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
        """SafeInt rejects non-integers, including bool."""
        with pytest.raises(TypeError):
            SafeInt("42")  # type: ignore
        with pytest.raises(TypeError):
            SafeInt(3.14)  # type: ignore
        with pytest.raises(TypeError):
            SafeInt(True)

    def test_alias_s(self):
        """S is an alias for SafeInt."""
        assert S is SafeInt

    def test_zero_constructor(self):
        assert SafeInt.zero().value == 0


class TestSafeIntArithmetic:
    """Tests for SafeInt arithmetic operations."""

    def test_add(self):
        assert (S(10) + S(5)).value == 15
        assert (S(10) + 5).value == 15

    def test_sub(self):
        assert (S(10) - S(3)).value == 7
        assert (S(10) - 10).value == 0

    def test_sub_underflow_raises(self):
        """Subtraction below zero raises Underflow."""
        with pytest.raises(Underflow):
            S(5) - S(10)
        with pytest.raises(Underflow):
            S(5) - 6

    def test_mul(self):
        assert (S(10) * S(5)).value == 50
        assert (S(3) * 4).value == 12

    def test_mul_large(self):
        """Products beyond u128 are held exactly."""
        assert (S(MAX_U64) * S(MAX_U64) * 4).value == MAX_U64 * MAX_U64 * 4

    def test_floordiv(self):
        assert (S(10) // S(3)).value == 3
        assert (S(10) // 5).value == 2

    def test_floordiv_by_zero_raises(self):
        with pytest.raises(DivisionByZero):
            S(10) // S(0)
        with pytest.raises(DivisionByZero):
            S(10) // 0


class TestSafeIntComparison:
    """Tests for SafeInt comparison operations."""

    def test_eq(self):
        assert S(10) == S(10)
        assert S(10) == 10
        assert S(10) != S(11)

    def test_ordering(self):
        assert S(5) < S(10)
        assert S(5) <= 5
        assert S(10) > 5
        assert S(10) >= S(10)


class TestSafeIntConversion:
    """Tests for SafeInt conversion methods."""

    def test_str_and_repr(self):
        assert str(S(42)) == "42"
        assert repr(S(42)) == "SafeInt(42)"

    def test_hash(self):
        assert hash(S(42)) == hash(42)

    def test_is_u64(self):
        assert S(0).is_u64()
        assert S(MAX_U64).is_u64()
        assert not S(MAX_U64 + 1).is_u64()
        assert not S(-1).is_u64()


class TestSafeIntExceptionHierarchy:
    """Tests for exception class hierarchy."""

    def test_all_are_safeint_errors(self):
        assert issubclass(DivisionByZero, SafeIntError)
        assert issubclass(Underflow, SafeIntError)

    def test_safeint_error_is_arithmetic_error(self):
        assert issubclass(SafeIntError, ArithmeticError)

    def test_can_catch_all_with_safeint_error(self):
        for op in (lambda: S(1) - 2, lambda: S(1) // 0):
            with pytest.raises(SafeIntError):
                op()

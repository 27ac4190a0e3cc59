"""Tests for SafeInt checked uint256 arithmetic."""

import pytest

from settlement.safe_int import (
    UINT256_MAX,
    DivisionByZero,
    S,
    SafeInt,
    SafeIntError,
    Uint256Overflow,
    Underflow,
    floor_sqrt,
    to_uint256,
)


class TestSafeIntConstruction:
    """Tests for SafeInt construction."""

    def test_from_int(self):
        """SafeInt can be constructed from int."""
        assert SafeInt(42).value == 42

    def test_from_safeint(self):
        """SafeInt can be constructed from another SafeInt."""
        assert SafeInt(SafeInt(42)).value == 42

    def test_from_negative_raises(self):
        """Negative values are outside the uint256 range."""
        with pytest.raises(Uint256Overflow):
            SafeInt(-10)

    def test_from_max(self):
        """The largest uint256 is accepted, one more is not."""
        assert SafeInt(UINT256_MAX).value == UINT256_MAX
        with pytest.raises(Uint256Overflow):
            SafeInt(UINT256_MAX + 1)

    def test_from_invalid_type_raises(self):
        """SafeInt rejects invalid types, including bool."""
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
        """SafeInt.zero() creates zero value."""
        assert SafeInt.zero().value == 0


class TestSafeIntArithmetic:
    """Tests for SafeInt arithmetic operations."""

    def test_add(self):
        """Addition works with SafeInt and int on either side."""
        assert (S(10) + S(5)).value == 15
        assert (S(10) + 5).value == 15
        assert (5 + S(10)).value == 15

    def test_add_overflow_raises(self):
        """Addition past 2**256 - 1 raises instead of wrapping."""
        with pytest.raises(Uint256Overflow):
            S(UINT256_MAX) + S(1)

    def test_sub(self):
        """Subtraction with non-negative result works."""
        assert (S(10) - S(3)).value == 7
        assert (10 - S(3)).value == 7
        assert (S(5) - S(5)).value == 0

    def test_sub_underflow_raises(self):
        """Subtraction underflow raises Underflow."""
        with pytest.raises(Underflow) as exc_info:
            S(5) - S(10)
        assert "5 - 10" in str(exc_info.value)

    def test_rsub_underflow_raises(self):
        """Reverse subtraction underflow raises Underflow."""
        with pytest.raises(Underflow):
            5 - S(10)

    def test_mul(self):
        """Multiplication works correctly."""
        assert (S(6) * S(7)).value == 42
        assert (6 * S(7)).value == 42

    def test_mul_overflow_raises(self):
        """Products of two 2**128 values overflow uint256."""
        with pytest.raises(Uint256Overflow):
            S(2**128) * S(2**128)

    def test_floordiv(self):
        """Integer division rounds down."""
        assert (S(10) // S(3)).value == 3
        assert (S(2) // 3).value == 0

    def test_floordiv_by_zero_raises(self):
        """Division by zero raises DivisionByZero."""
        with pytest.raises(DivisionByZero):
            S(10) // S(0)


class TestSafeIntComparison:
    """Tests for SafeInt comparison operations."""

    def test_eq(self):
        assert S(5) == S(5)
        assert S(5) == 5
        assert S(5) != S(6)

    def test_ordering(self):
        assert S(3) < S(5)
        assert S(5) <= 5
        assert S(6) > 5
        assert S(6) >= S(6)


class TestSafeIntConversion:
    """Tests for SafeInt conversions."""

    def test_int_and_index(self):
        assert int(S(42)) == 42
        assert [0, 1, 2][S(1)] == 1

    def test_bool(self):
        assert S(1)
        assert not S(0)

    def test_str_and_repr(self):
        assert str(S(42)) == "42"
        assert repr(S(42)) == "SafeInt(42)"

    def test_hash(self):
        assert hash(S(42)) == hash(42)


class TestSafeIntNamedOps:
    """Tests for named operations."""

    def test_min(self):
        assert S(3).min(S(5)).value == 3
        assert S(5).min(3).value == 3

    def test_sqrt_floors(self):
        assert S(16).sqrt().value == 4
        assert S(17).sqrt().value == 4
        assert S(0).sqrt().value == 0

    def test_floor_sqrt_large(self):
        """floor_sqrt is exact for values far beyond float precision."""
        root = 10**38 + 7
        assert floor_sqrt(root * root) == root
        assert floor_sqrt(root * root - 1) == root - 1


class TestToUint256:
    """Tests for to_uint256 validation."""

    def test_valid(self):
        assert to_uint256(0) == 0
        assert to_uint256(UINT256_MAX) == UINT256_MAX

    def test_negative_raises(self):
        with pytest.raises(Uint256Overflow):
            to_uint256(-1)

    def test_overflow_raises(self):
        with pytest.raises(Uint256Overflow):
            to_uint256(UINT256_MAX + 1)


class TestSafeIntExceptionHierarchy:
    """Tests for exception class hierarchy."""

    def test_errors_are_safeint_errors(self):
        assert issubclass(DivisionByZero, SafeIntError)
        assert issubclass(Underflow, SafeIntError)
        assert issubclass(Uint256Overflow, SafeIntError)

    def test_safeint_error_is_arithmetic_error(self):
        assert issubclass(SafeIntError, ArithmeticError)

"""Tests for zkusd/core/fixed_point.py: witnessed division."""

import pytest
from hypothesis import given
from hypothesis import strategies as st

from zkusd.core.errors import ArithmeticFault, ErrorCode
from zkusd.core.fixed_point import U64_MAX, safe_div, verified_div


class TestVerifiedDiv:
    def test_exact(self):
        assert verified_div(10, 2) == 5

    def test_floors(self):
        assert verified_div(10, 3) == 3

    def test_zero_numerator(self):
        assert verified_div(0, 7) == 0

    def test_zero_denominator_raises(self):
        with pytest.raises(ArithmeticFault) as exc:
            verified_div(1, 0)
        assert exc.value.code is ErrorCode.DIVISION_BY_ZERO

    def test_rejects_negative(self):
        with pytest.raises(ValueError):
            verified_div(-1, 2)

    def test_rejects_bool(self):
        with pytest.raises(TypeError):
            verified_div(True, 1)

    @given(st.integers(min_value=0, max_value=U64_MAX * U64_MAX), st.integers(min_value=1, max_value=U64_MAX))
    def test_reconstruction_identity(self, n, d):
        q = verified_div(n, d)
        r = n - q * d
        assert 0 <= r < d


class TestSafeDiv:
    def test_nonzero_matches_verified(self):
        assert safe_div(99, 4) == verified_div(99, 4)

    def test_zero_denominator_is_max(self):
        assert safe_div(123, 0) == U64_MAX

    def test_zero_over_zero_is_max(self):
        assert safe_div(0, 0) == U64_MAX

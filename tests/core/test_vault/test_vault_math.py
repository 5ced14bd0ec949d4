"""Tests for zkusd/core/vault/math.py: health factor and yield split."""

from hypothesis import given
from hypothesis import strategies as st

from zkusd.core.fixed_point import U64_MAX
from zkusd.core.vault.math import (
    health_factor,
    max_allowed_debt,
    split_staking_rewards,
    usd_value,
)

ONE = 1_000_000_000


# ---------------------------------------------------------------------------
# health factor
# ---------------------------------------------------------------------------

class TestHealthFactor:
    def test_equal_collateral_and_debt(self):
        assert health_factor(ONE, ONE, ONE) == 66

    def test_double_collateral(self):
        assert health_factor(2 * ONE, ONE, ONE) == 133

    def test_exact_150_percent_boundary(self):
        assert health_factor(1_500_000_000, ONE, ONE) == 100

    def test_zero_debt_is_max(self):
        assert health_factor(ONE, 0, ONE) == U64_MAX

    def test_zero_collateral_with_debt(self):
        assert health_factor(0, ONE, ONE) == 0

    def test_saturates(self):
        assert health_factor(U64_MAX, 1, U64_MAX) == U64_MAX

    def test_price_halving_halves_value(self):
        assert health_factor(3 * ONE, ONE, ONE // 2) == 100

    @given(st.integers(min_value=0, max_value=U64_MAX), st.integers(min_value=0, max_value=U64_MAX))
    def test_zero_debt_always_max(self, collateral, price):
        assert health_factor(collateral, 0, price) == U64_MAX

    @given(
        st.integers(min_value=1, max_value=10**6),
        st.integers(min_value=1, max_value=10**6),
        st.integers(min_value=1, max_value=10**4),
        st.integers(min_value=1, max_value=1_000),
    )
    def test_scale_invariance(self, m, debt, whole_dollars, k):
        # collateral divisible by 3 and whole-dollar prices keep every division exact
        collateral = 3 * m
        price = whole_dollars * ONE
        assert health_factor(collateral, debt, price) == health_factor(k * collateral, k * debt, price)


class TestComponents:
    def test_usd_value(self):
        assert usd_value(100 * ONE, 2 * ONE) == 200 * ONE

    def test_max_allowed_debt_scaled_by_100(self):
        assert max_allowed_debt(150) == 10_000


# ---------------------------------------------------------------------------
# staking rewards
# ---------------------------------------------------------------------------

class TestSplitStakingRewards:
    def test_no_yield(self):
        assert split_staking_rewards(100, 100, 10) == (0, 0)

    def test_balance_below_collateral(self):
        assert split_staking_rewards(50, 100, 10) == (0, 0)

    def test_ten_percent_fee(self):
        assert split_staking_rewards(1_100, 1_000, 10) == (10, 90)

    def test_fee_floors(self):
        assert split_staking_rewards(1_009, 1_000, 10) == (0, 9)

    def test_full_fee(self):
        assert split_staking_rewards(1_100, 1_000, 100) == (100, 0)

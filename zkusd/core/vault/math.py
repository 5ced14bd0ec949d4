"""Pure arithmetic for the vault kernel.

Every function is stateless and operates on plain Python ints. All divisions go
through `verified_div`; only the final health-factor division uses `safe_div` so
the result is defined when debt is zero.
"""

from __future__ import annotations

from ..fixed_point import U64_MAX, UNIT_PRECISION, safe_div, verified_div

COLLATERAL_RATIO: int = 150
COLLATERAL_RATIO_PRECISION: int = 100
PROTOCOL_FEE_PRECISION: int = 100
MIN_HEALTH_FACTOR: int = 100


def usd_value(amount: int, price: int, *, unit_precision: int = UNIT_PRECISION) -> int:
    """USD value of ``amount`` collateral at ``price``: ``amount * price / 1e9``."""
    return verified_div(amount * price, unit_precision)


def max_allowed_debt(
    collateral_value: int,
    *,
    collateral_ratio: int = COLLATERAL_RATIO,
    ratio_precision: int = COLLATERAL_RATIO_PRECISION,
) -> int:
    """Largest debt the collateral value supports at the collateral ratio, x100."""
    return verified_div(collateral_value * ratio_precision, collateral_ratio) * ratio_precision


def health_factor(
    collateral_amount: int,
    debt_amount: int,
    price: int,
    *,
    unit_precision: int = UNIT_PRECISION,
    collateral_ratio: int = COLLATERAL_RATIO,
    ratio_precision: int = COLLATERAL_RATIO_PRECISION,
) -> int:
    """Normalised collateralization: >= 100 is safe, < 100 is liquidatable.

    Saturates at ``U64_MAX`` (also the zero-debt value).
    """
    value = usd_value(collateral_amount, price, unit_precision=unit_precision)
    max_debt = max_allowed_debt(value, collateral_ratio=collateral_ratio, ratio_precision=ratio_precision)
    return min(safe_div(max_debt, debt_amount), U64_MAX)


def split_staking_rewards(
    vault_balance: int,
    collateral_amount: int,
    protocol_fee: int,
    *,
    fee_precision: int = PROTOCOL_FEE_PRECISION,
) -> tuple[int, int]:
    """Split yield (balance above collateral) into ``(protocol_fee, owner_dividend)``."""
    rewards = vault_balance - collateral_amount if vault_balance > collateral_amount else 0
    fee = verified_div(rewards * protocol_fee, fee_precision)
    return fee, rewards - fee

"""Guard functions for the vault kernel.

One pure function per action. Each returns None when the action is allowed in
the given PRE-state, or the ``ErrorCode`` of the first failed check. Check order
is part of the contract: callers see the same error for the same bad input.
"""

from __future__ import annotations

from ..errors import ErrorCode
from ..fixed_point import U64_MAX
from .math import health_factor
from .state import secret_matches
from .types import ActionParams, RiskParams, StepContext, VaultState


def hf_at(collateral: int, debt: int, ctx: StepContext) -> int:
    risk: RiskParams = ctx.risk
    return health_factor(
        collateral,
        debt,
        ctx.price,
        unit_precision=risk.unit_precision,
        collateral_ratio=risk.collateral_ratio,
        ratio_precision=risk.collateral_ratio_precision,
    )


def guard_deposit_collateral(state: VaultState, params: ActionParams, ctx: StepContext) -> ErrorCode | None:
    if params.amount <= 0:
        return ErrorCode.AMOUNT_ZERO
    if not secret_matches(state, params.secret):
        return ErrorCode.INVALID_SECRET
    if state.collateral_amount + params.amount > U64_MAX:
        return ErrorCode.OVERFLOW
    return None


def guard_redeem_collateral(state: VaultState, params: ActionParams, ctx: StepContext) -> ErrorCode | None:
    if ctx.vault_balance <= 0:
        return ErrorCode.BALANCE_ZERO
    if params.amount <= 0:
        return ErrorCode.AMOUNT_ZERO
    if not secret_matches(state, params.secret):
        return ErrorCode.INVALID_SECRET
    if params.amount > state.collateral_amount:
        return ErrorCode.INSUFFICIENT_COLLATERAL
    remaining = state.collateral_amount - params.amount
    if hf_at(remaining, state.debt_amount, ctx) < ctx.risk.min_health_factor:
        return ErrorCode.HEALTH_FACTOR_TOO_LOW
    return None


def guard_mint_zkusd(state: VaultState, params: ActionParams, ctx: StepContext) -> ErrorCode | None:
    if params.amount <= 0:
        return ErrorCode.AMOUNT_ZERO
    if not secret_matches(state, params.secret):
        return ErrorCode.INVALID_SECRET
    new_debt = state.debt_amount + params.amount
    if new_debt > U64_MAX:
        return ErrorCode.OVERFLOW
    if hf_at(state.collateral_amount, new_debt, ctx) < ctx.risk.min_health_factor:
        return ErrorCode.HEALTH_FACTOR_TOO_LOW
    return None


def guard_burn_zkusd(state: VaultState, params: ActionParams, ctx: StepContext) -> ErrorCode | None:
    if params.amount <= 0:
        return ErrorCode.AMOUNT_ZERO
    if not secret_matches(state, params.secret):
        return ErrorCode.INVALID_SECRET
    if params.amount > state.debt_amount:
        return ErrorCode.AMOUNT_EXCEEDS_DEBT
    return None


def guard_liquidate(state: VaultState, params: ActionParams, ctx: StepContext) -> ErrorCode | None:
    if hf_at(state.collateral_amount, state.debt_amount, ctx) > ctx.risk.min_health_factor:
        return ErrorCode.HEALTH_FACTOR_TOO_HIGH
    return None


def guard_assert_interaction_flag(state: VaultState, params: ActionParams, ctx: StepContext) -> ErrorCode | None:
    if not state.interaction_flag:
        return ErrorCode.INTERACTION_FLAG_NOT_SET
    return None

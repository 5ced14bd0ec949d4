"""Dispatch-table engine for the vault kernel.

``step(state, params, ctx)`` is the single entry point. It:

1. Validates parameter and context domains (u64 amounts, positive price where needed).
2. Dispatches to the correct guard / update / effect functions.
3. Checks all invariants on the post-state.
4. Returns a ``StepResult`` (accepted, or rejected with an ``ErrorCode``).
"""

from __future__ import annotations

from typing import Callable, Optional

from ..errors import ErrorCode, ZkUsdError, error_for
from ..fixed_point import U64_MAX
from .effects import (
    effect_assert_interaction_flag,
    effect_burn_zkusd,
    effect_deposit_collateral,
    effect_liquidate,
    effect_mint_zkusd,
    effect_redeem_collateral,
)
from .guards import (
    guard_assert_interaction_flag,
    guard_burn_zkusd,
    guard_deposit_collateral,
    guard_liquidate,
    guard_mint_zkusd,
    guard_redeem_collateral,
)
from .invariants import check_transition
from .types import Action, ActionParams, Effect, StepContext, StepResult, VaultState
from .updates import (
    apply_assert_interaction_flag,
    apply_burn_zkusd,
    apply_deposit_collateral,
    apply_liquidate,
    apply_mint_zkusd,
    apply_redeem_collateral,
)

GuardFn = Callable[[VaultState, ActionParams, StepContext], Optional[ErrorCode]]
UpdateFn = Callable[[VaultState, ActionParams, StepContext], VaultState]
EffectFn = Callable[[VaultState, VaultState, ActionParams, StepContext], Effect]

_DISPATCH: dict[Action, tuple[GuardFn, UpdateFn, EffectFn]] = {
    Action.DEPOSIT_COLLATERAL: (
        guard_deposit_collateral, apply_deposit_collateral, effect_deposit_collateral,
    ),
    Action.REDEEM_COLLATERAL: (
        guard_redeem_collateral, apply_redeem_collateral, effect_redeem_collateral,
    ),
    Action.MINT_ZKUSD: (
        guard_mint_zkusd, apply_mint_zkusd, effect_mint_zkusd,
    ),
    Action.BURN_ZKUSD: (
        guard_burn_zkusd, apply_burn_zkusd, effect_burn_zkusd,
    ),
    Action.LIQUIDATE: (
        guard_liquidate, apply_liquidate, effect_liquidate,
    ),
    Action.ASSERT_INTERACTION_FLAG: (
        guard_assert_interaction_flag, apply_assert_interaction_flag, effect_assert_interaction_flag,
    ),
}

# Actions whose guards read the oracle price.
PRICE_ACTIONS: frozenset[Action] = frozenset(
    {Action.REDEEM_COLLATERAL, Action.MINT_ZKUSD, Action.LIQUIDATE}
)


def _is_u64(x: object) -> bool:
    return isinstance(x, int) and not isinstance(x, bool) and 0 <= x <= U64_MAX


def _validate_domains(params: ActionParams, ctx: StepContext) -> ErrorCode | None:
    """Check parameter/context domain bounds. Returns rejection code or None."""
    if not _is_u64(params.amount):
        return ErrorCode.OVERFLOW
    if not _is_u64(ctx.vault_balance) or not _is_u64(ctx.protocol_fee):
        return ErrorCode.OVERFLOW
    if ctx.protocol_fee > ctx.risk.protocol_fee_precision:
        return ErrorCode.OVERFLOW
    if params.action in PRICE_ACTIONS:
        if not _is_u64(ctx.price):
            return ErrorCode.OVERFLOW
        if ctx.price == 0:
            return ErrorCode.ORACLE_EXPIRED
    return None


def step(state: VaultState, params: ActionParams, ctx: StepContext = StepContext()) -> StepResult:
    """Execute one action against the given state.

    Returns ``StepResult`` with ``accepted=True`` on success, or ``accepted=False``
    with a ``rejection`` code. Never raises for protocol rejections.
    """
    entry = _DISPATCH.get(params.action)
    if entry is None:
        raise ValueError(f"unknown action: {params.action!r}")

    domain_err = _validate_domains(params, ctx)
    if domain_err is not None:
        return StepResult(accepted=False, rejection=domain_err)

    guard_fn, update_fn, effect_fn = entry

    try:
        rejection = guard_fn(state, params, ctx)
    except ZkUsdError as exc:
        return StepResult(accepted=False, rejection=exc.code, detail=exc.detail)
    if rejection is not None:
        return StepResult(accepted=False, rejection=rejection)

    new_state = update_fn(state, params, ctx)

    violations = check_transition(state, new_state)
    if violations:
        return StepResult(
            accepted=False,
            rejection=ErrorCode.INVARIANT_VIOLATION,
            detail=",".join(violations),
        )

    effect = effect_fn(state, new_state, params, ctx)
    return StepResult(accepted=True, state=new_state, effect=effect)


def step_or_raise(state: VaultState, params: ActionParams, ctx: StepContext = StepContext()) -> StepResult:
    """Like ``step()`` but raises the matching ``ZkUsdError`` on rejection."""
    result = step(state, params, ctx)
    if result.accepted:
        return result
    assert result.rejection is not None
    raise error_for(result.rejection, result.detail)

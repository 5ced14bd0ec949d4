"""Effect functions for the vault kernel.

Each computes the ``Effect`` of an accepted step from the PRE- and POST-state.
Events report pre-update balances; fund movements are derived here so the shell
only has to apply them.
"""

from __future__ import annotations

from .guards import hf_at
from .math import split_staking_rewards
from .types import ActionParams, Effect, Event, StepContext, VaultState


def _common(pre: VaultState, post: VaultState, ctx: StepContext) -> dict[str, int]:
    return dict(
        price=ctx.price,
        collateral_before=pre.collateral_amount,
        debt_before=pre.debt_amount,
        collateral_after=post.collateral_amount,
        debt_after=post.debt_amount,
    )


def effect_deposit_collateral(pre: VaultState, post: VaultState, params: ActionParams, ctx: StepContext) -> Effect:
    return Effect(
        event=Event.COLLATERAL_DEPOSITED,
        collateral_in=params.amount,
        **_common(pre, post, ctx),
    )


def effect_redeem_collateral(pre: VaultState, post: VaultState, params: ActionParams, ctx: StepContext) -> Effect:
    fee, dividend = split_staking_rewards(
        ctx.vault_balance,
        pre.collateral_amount,
        ctx.protocol_fee,
        fee_precision=ctx.risk.protocol_fee_precision,
    )
    return Effect(
        event=Event.COLLATERAL_REDEEMED,
        health_factor=hf_at(post.collateral_amount, post.debt_amount, ctx),
        payout_to_caller=params.amount + dividend,
        protocol_fee_paid=fee,
        **_common(pre, post, ctx),
    )


def effect_mint_zkusd(pre: VaultState, post: VaultState, params: ActionParams, ctx: StepContext) -> Effect:
    return Effect(
        event=Event.ZKUSD_MINTED,
        health_factor=hf_at(post.collateral_amount, post.debt_amount, ctx),
        zkusd_minted=params.amount,
        **_common(pre, post, ctx),
    )


def effect_burn_zkusd(pre: VaultState, post: VaultState, params: ActionParams, ctx: StepContext) -> Effect:
    return Effect(
        event=Event.ZKUSD_BURNED,
        zkusd_burned=params.amount,
        **_common(pre, post, ctx),
    )


def effect_liquidate(pre: VaultState, post: VaultState, params: ActionParams, ctx: StepContext) -> Effect:
    return Effect(
        event=Event.LIQUIDATED,
        health_factor=hf_at(pre.collateral_amount, pre.debt_amount, ctx),
        payout_to_caller=pre.collateral_amount,
        zkusd_burned=pre.debt_amount,
        **_common(pre, post, ctx),
    )


def effect_assert_interaction_flag(pre: VaultState, post: VaultState, params: ActionParams, ctx: StepContext) -> Effect:
    return Effect(event=Event.INTERACTION_CONFIRMED, **_common(pre, post, ctx))

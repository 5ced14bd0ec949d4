"""State transition functions for the vault kernel.

One pure function per action. Updates evaluate against the PRE-state and are
applied via `dataclasses.replace()` on the frozen state.
"""

from __future__ import annotations

from dataclasses import replace

from .types import ActionParams, StepContext, VaultState


def apply_deposit_collateral(state: VaultState, params: ActionParams, ctx: StepContext) -> VaultState:
    return replace(state, collateral_amount=state.collateral_amount + params.amount)


def apply_redeem_collateral(state: VaultState, params: ActionParams, ctx: StepContext) -> VaultState:
    return replace(state, collateral_amount=state.collateral_amount - params.amount)


def apply_mint_zkusd(state: VaultState, params: ActionParams, ctx: StepContext) -> VaultState:
    return replace(
        state,
        debt_amount=state.debt_amount + params.amount,
        interaction_flag=True,
    )


def apply_burn_zkusd(state: VaultState, params: ActionParams, ctx: StepContext) -> VaultState:
    return replace(state, debt_amount=state.debt_amount - params.amount)


def apply_liquidate(state: VaultState, params: ActionParams, ctx: StepContext) -> VaultState:
    return replace(state, collateral_amount=0, debt_amount=0)


def apply_assert_interaction_flag(state: VaultState, params: ActionParams, ctx: StepContext) -> VaultState:
    return replace(state, interaction_flag=False)

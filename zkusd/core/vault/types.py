"""Data types for the zkUSD vault kernel.

All types are frozen dataclasses (immutable).

Units/conventions:
- `*_amount` values are u64 with 9 decimals (1e9 == 1 MINA / 1 zkUSD).
- `price` is USD per MINA scaled by 1e9.
- `protocol_fee` is a percentage with precision 100 (e.g. 10 == 10%).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, unique

from ..errors import ErrorCode


@unique
class Action(Enum):
    DEPOSIT_COLLATERAL = "deposit_collateral"
    REDEEM_COLLATERAL = "redeem_collateral"
    MINT_ZKUSD = "mint_zkusd"
    BURN_ZKUSD = "burn_zkusd"
    LIQUIDATE = "liquidate"
    ASSERT_INTERACTION_FLAG = "assert_interaction_flag"


@unique
class Event(Enum):
    COLLATERAL_DEPOSITED = "DepositCollateral"
    COLLATERAL_REDEEMED = "RedeemCollateral"
    ZKUSD_MINTED = "MintZkUsd"
    ZKUSD_BURNED = "BurnZkUsd"
    LIQUIDATED = "Liquidate"
    INTERACTION_CONFIRMED = "InteractionConfirmed"


@dataclass(frozen=True)
class VaultState:
    """Persisted state of one vault: 2 amounts, 1 commitment, 1 flag."""

    ownership_commitment: str
    collateral_amount: int = 0
    debt_amount: int = 0
    interaction_flag: bool = False


@dataclass(frozen=True)
class ActionParams:
    """Parameters for an action. Unused fields default to 0/None."""

    action: Action
    amount: int = 0
    secret: int | bytes | None = None


@dataclass(frozen=True)
class RiskParams:
    """Fixed-point risk constants (defaults: 9 decimals, 150% ratio)."""

    unit_precision: int = 1_000_000_000
    collateral_ratio: int = 150
    collateral_ratio_precision: int = 100
    protocol_fee_precision: int = 100
    min_health_factor: int = 100

    def __post_init__(self) -> None:
        for name in self.__dataclass_fields__:
            v = getattr(self, name)
            if not isinstance(v, int) or isinstance(v, bool) or v <= 0:
                raise ValueError(f"{name} must be a positive int: {v!r}")


@dataclass(frozen=True)
class StepContext:
    """Values the shell reads from collaborators before calling ``step()``.

    `vault_balance` is the vault account's base-asset balance; anything above
    `collateral_amount` is accrued staking yield.
    """

    price: int = 0
    vault_balance: int = 0
    protocol_fee: int = 0
    risk: RiskParams = RiskParams()


@dataclass(frozen=True)
class Effect:
    """Observables and fund movements produced by an accepted step.

    `collateral_before`/`debt_before` are the pre-update balances carried by the
    domain events.
    """

    event: Event
    price: int = 0
    health_factor: int = 0
    collateral_before: int = 0
    debt_before: int = 0
    collateral_after: int = 0
    debt_after: int = 0
    collateral_in: int = 0
    payout_to_caller: int = 0
    protocol_fee_paid: int = 0
    zkusd_minted: int = 0
    zkusd_burned: int = 0


@dataclass(frozen=True)
class StepResult:
    accepted: bool
    state: VaultState | None = None
    effect: Effect | None = None
    rejection: ErrorCode | None = None
    detail: str | None = None

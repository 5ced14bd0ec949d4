"""Data types for the oracle price-aggregation kernel.

All types are frozen dataclasses (immutable).

Units/conventions:
- prices are USD per MINA scaled by 1e9 (u64),
- heights are block heights (non-negative ints),
- `action_log` is append-only; `cursor` is the settlement watermark into it.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, unique

from ..errors import ErrorCode


@unique
class OracleEvent(Enum):
    PRICE_SUBMITTED = "PriceSubmitted"
    PRICE_SETTLED = "PriceSettled"
    SETTLEMENT_NOOP = "SettlementNoop"
    FALLBACK_UPDATED = "FallbackPriceUpdated"


@unique
class FallbackSlot(Enum):
    EVEN = "even"
    ODD = "odd"


@dataclass(frozen=True)
class PriceSubmission:
    submitter: str
    price: int


@dataclass(frozen=True)
class OracleState:
    """Complete state of the singleton price feed."""

    # Action log + settlement watermark
    action_log: tuple[PriceSubmission, ...] = ()
    cursor: int = 0

    # Aggregate
    aggregated_price: int = 0
    settled_at_height: int = 0

    # Fallback slots (selected by block parity)
    fallback_price_even: int = 0
    fallback_price_odd: int = 0

    # Control parameters
    max_participants: int = 10
    price_validity_blocks: int = 10

    @property
    def pending(self) -> tuple[PriceSubmission, ...]:
        return self.action_log[self.cursor:]


@dataclass(frozen=True)
class OracleEffect:
    event: OracleEvent
    submitter: str | None = None
    price: int = 0
    consumed: int = 0
    slot: FallbackSlot | None = None


@dataclass(frozen=True)
class OracleStepResult:
    accepted: bool
    state: OracleState | None = None
    effect: OracleEffect | None = None
    rejection: ErrorCode | None = None

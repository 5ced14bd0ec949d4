"""`oracle`: pure price-aggregation kernel for the zkUSD price feed.

Public API:
- `init_oracle_state(...) -> OracleState`
- `submit_price`, `settle_price_update`, `update_fallback_price` -> OracleStepResult
- `get_price`, `get_fallback_price`, `is_fresh` (reads)
"""

from .aggregation import median_price
from .engine import (
    get_fallback_price,
    get_price,
    has_pending,
    init_oracle_state,
    is_fresh,
    read_slot,
    settle_price_update,
    step_or_raise,
    submit_price,
    update_fallback_price,
    write_slot,
)
from .invariants import check_all
from .state import state_from_dict, state_to_dict
from .types import FallbackSlot, OracleEffect, OracleEvent, OracleState, OracleStepResult, PriceSubmission

__all__ = [
    "median_price",
    "get_fallback_price",
    "get_price",
    "has_pending",
    "init_oracle_state",
    "is_fresh",
    "read_slot",
    "settle_price_update",
    "step_or_raise",
    "submit_price",
    "update_fallback_price",
    "write_slot",
    "check_all",
    "state_from_dict",
    "state_to_dict",
    "FallbackSlot",
    "OracleEffect",
    "OracleEvent",
    "OracleState",
    "OracleStepResult",
    "PriceSubmission",
]

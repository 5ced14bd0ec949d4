"""
Oracle price-aggregation kernel.

This module is pure:
- The functional core decides submissions, settlement, and price resolution.
- The imperative shell (`zkusd.integration.price_feed`) supplies the sender, the
  registry whitelist, the block height, and pays oracle fees.

Fallback slots alternate by block parity. At height `h` the writable slot is the
one matching `h`'s parity and the readable slot is the other one, so a read never
observes a write made in the same block.
"""

from __future__ import annotations

from dataclasses import replace

from ...state.whitelist import Whitelist
from ..errors import ErrorCode, OracleError, error_for
from ..fixed_point import U64_MAX
from .aggregation import median_price
from .invariants import check_all
from .types import (
    FallbackSlot,
    OracleEffect,
    OracleEvent,
    OracleState,
    OracleStepResult,
    PriceSubmission,
)


def init_oracle_state(*, max_participants: int = 10, price_validity_blocks: int = 10) -> OracleState:
    """Empty log, no aggregate, both fallback slots unset."""
    if max_participants <= 0:
        raise ValueError(f"max_participants must be positive: {max_participants}")
    if price_validity_blocks < 0:
        raise ValueError(f"price_validity_blocks must be non-negative: {price_validity_blocks}")
    return OracleState(max_participants=max_participants, price_validity_blocks=price_validity_blocks)


def _require_height(block_height: int) -> None:
    if not isinstance(block_height, int) or isinstance(block_height, bool) or block_height < 0:
        raise ValueError(f"block_height must be a non-negative int: {block_height!r}")


def _valid_price(price: object) -> bool:
    return isinstance(price, int) and not isinstance(price, bool) and 0 < price <= U64_MAX


def _accept(new_state: OracleState, effect: OracleEffect) -> OracleStepResult:
    if check_all(new_state):
        return OracleStepResult(accepted=False, rejection=ErrorCode.INVARIANT_VIOLATION)
    return OracleStepResult(accepted=True, state=new_state, effect=effect)


def step_or_raise(result: OracleStepResult) -> OracleStepResult:
    """Raise the matching ``ZkUsdError`` for a rejected result, else return it."""
    if result.accepted:
        return result
    assert result.rejection is not None
    raise error_for(result.rejection)


def has_pending(state: OracleState, submitter: str) -> bool:
    return any(s.submitter == submitter for s in state.pending)


def write_slot(block_height: int) -> FallbackSlot:
    _require_height(block_height)
    return FallbackSlot.EVEN if block_height % 2 == 0 else FallbackSlot.ODD


def read_slot(block_height: int) -> FallbackSlot:
    return write_slot(block_height + 1)


def submit_price(
    state: OracleState,
    *,
    submitter: str,
    price: int,
    whitelist_snapshot: Whitelist,
    registry_whitelist: Whitelist,
) -> OracleStepResult:
    """Append ``(submitter, price)`` to the log if every check passes."""
    if not isinstance(price, int) or isinstance(price, bool) or price <= 0:
        return OracleStepResult(accepted=False, rejection=ErrorCode.AMOUNT_ZERO)
    if price > U64_MAX:
        return OracleStepResult(accepted=False, rejection=ErrorCode.OVERFLOW)
    if submitter not in whitelist_snapshot.addresses:
        return OracleStepResult(accepted=False, rejection=ErrorCode.SENDER_NOT_WHITELISTED)
    if whitelist_snapshot != registry_whitelist:
        return OracleStepResult(accepted=False, rejection=ErrorCode.INVALID_WHITELIST)
    if has_pending(state, submitter):
        return OracleStepResult(accepted=False, rejection=ErrorCode.PENDING_ACTION_EXISTS)
    if len(state.pending) >= state.max_participants:
        return OracleStepResult(accepted=False, rejection=ErrorCode.MAX_PARTICIPANTS_EXCEEDED)

    entry = PriceSubmission(submitter=submitter, price=price)
    new_state = replace(state, action_log=state.action_log + (entry,))
    return _accept(new_state, OracleEffect(event=OracleEvent.PRICE_SUBMITTED, submitter=submitter, price=price))


def settle_price_update(state: OracleState, *, block_height: int) -> OracleStepResult:
    """Consume every entry past the cursor in one pass and publish their median.

    Settling an empty window is accepted and leaves the state unchanged.
    """
    _require_height(block_height)
    window = state.pending
    if not window:
        return OracleStepResult(
            accepted=True,
            state=state,
            effect=OracleEffect(event=OracleEvent.SETTLEMENT_NOOP, price=state.aggregated_price),
        )

    aggregate = median_price([s.price for s in window])
    new_state = replace(
        state,
        cursor=len(state.action_log),
        aggregated_price=aggregate,
        settled_at_height=block_height,
    )
    if new_state.pending:
        raise AssertionError("settlement left pending entries behind the cursor")
    return _accept(new_state, OracleEffect(event=OracleEvent.PRICE_SETTLED, price=aggregate, consumed=len(window)))


def update_fallback_price(state: OracleState, *, new_price: int, block_height: int) -> OracleStepResult:
    """Write the slot matching ``block_height``'s parity. Admin checks live in the shell."""
    if not isinstance(new_price, int) or isinstance(new_price, bool) or new_price <= 0:
        return OracleStepResult(accepted=False, rejection=ErrorCode.AMOUNT_ZERO)
    if new_price > U64_MAX:
        return OracleStepResult(accepted=False, rejection=ErrorCode.OVERFLOW)
    slot = write_slot(block_height)
    if slot is FallbackSlot.EVEN:
        new_state = replace(state, fallback_price_even=new_price)
    else:
        new_state = replace(state, fallback_price_odd=new_price)
    return _accept(new_state, OracleEffect(event=OracleEvent.FALLBACK_UPDATED, price=new_price, slot=slot))


def is_fresh(state: OracleState, block_height: int) -> bool:
    """True if the aggregate was settled within the validity window."""
    _require_height(block_height)
    if state.aggregated_price == 0:
        return False
    if state.settled_at_height > block_height:
        return False
    return (block_height - state.settled_at_height) <= state.price_validity_blocks


def get_fallback_price(state: OracleState, block_height: int) -> int:
    """The read-stable fallback slot at ``block_height`` (0 if never set)."""
    if read_slot(block_height) is FallbackSlot.EVEN:
        return state.fallback_price_even
    return state.fallback_price_odd


def get_price(state: OracleState, block_height: int) -> int:
    """Fresh aggregate, else the fallback for this height.

    Raises:
        OracleError: ``ORACLE_EXPIRED`` when neither source holds a usable price.
    """
    if is_fresh(state, block_height):
        return state.aggregated_price
    fallback = get_fallback_price(state, block_height)
    if _valid_price(fallback):
        return fallback
    raise OracleError(ErrorCode.ORACLE_EXPIRED, f"height={block_height}")

"""Invariant checkers for the oracle kernel.

Each function returns True when the invariant holds; `check_all()` returns the list
of violated invariant IDs (empty = all pass).
"""

from __future__ import annotations

from typing import Callable

from ..fixed_point import U64_MAX
from .types import OracleState


def _price_ok(p: int) -> bool:
    return 0 <= p <= U64_MAX


def inv_cursor_in_log(s: OracleState) -> bool:
    return 0 <= s.cursor <= len(s.action_log)


def inv_one_pending_per_submitter(s: OracleState) -> bool:
    submitters = [e.submitter for e in s.pending]
    return len(submitters) == len(set(submitters))


def inv_pending_bounded(s: OracleState) -> bool:
    return len(s.pending) <= s.max_participants


def inv_logged_prices_positive(s: OracleState) -> bool:
    return all(0 < e.price <= U64_MAX for e in s.action_log)


def inv_prices_u64(s: OracleState) -> bool:
    return all(_price_ok(p) for p in (s.aggregated_price, s.fallback_price_even, s.fallback_price_odd))


def inv_aggregate_set_when_settled(s: OracleState) -> bool:
    # Once anything has been consumed, an aggregate exists.
    return s.cursor == 0 or s.aggregated_price > 0


INVARIANT_REGISTRY: dict[str, Callable[[OracleState], bool]] = {
    "inv_cursor_in_log": inv_cursor_in_log,
    "inv_one_pending_per_submitter": inv_one_pending_per_submitter,
    "inv_pending_bounded": inv_pending_bounded,
    "inv_logged_prices_positive": inv_logged_prices_positive,
    "inv_prices_u64": inv_prices_u64,
    "inv_aggregate_set_when_settled": inv_aggregate_set_when_settled,
}


def check_all(state: OracleState) -> list[str]:
    return [inv_id for inv_id, check_fn in INVARIANT_REGISTRY.items() if not check_fn(state)]

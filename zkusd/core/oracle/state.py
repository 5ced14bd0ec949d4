"""Serialization for the oracle kernel state (plain dicts, JSON-safe)."""

from __future__ import annotations

from typing import Any, Mapping

from ...state.canonical import canonical_address
from .types import OracleState, PriceSubmission

_INT_FIELDS: tuple[str, ...] = (
    "cursor",
    "aggregated_price",
    "settled_at_height",
    "fallback_price_even",
    "fallback_price_odd",
    "max_participants",
    "price_validity_blocks",
)


def state_to_dict(state: OracleState) -> dict[str, Any]:
    out: dict[str, Any] = {name: getattr(state, name) for name in _INT_FIELDS}
    out["action_log"] = [[e.submitter, e.price] for e in state.action_log]
    return out


def state_from_dict(d: Mapping[str, Any]) -> OracleState:
    """Deserialize a dict to an OracleState. Raises KeyError on missing fields."""
    kwargs: dict[str, Any] = {}
    for name in _INT_FIELDS:
        val = d[name]
        if not isinstance(val, int) or isinstance(val, bool):
            raise TypeError(f"state var {name!r} must be int, got {type(val).__name__}")
        kwargs[name] = int(val)
    log = []
    for item in d["action_log"]:
        submitter, price = item
        if not isinstance(price, int) or isinstance(price, bool):
            raise TypeError("logged price must be int")
        log.append(PriceSubmission(submitter=canonical_address(submitter, name="submitter"), price=price))
    return OracleState(action_log=tuple(log), **kwargs)

"""Invariant checkers for the vault kernel.

State invariants take the post-state; transition invariants take (pre, post).
`check_all()` returns the list of violated invariant IDs (empty = all pass).
"""

from __future__ import annotations

import re
from typing import Callable

from ..fixed_point import U64_MAX
from .types import VaultState

_COMMITMENT_RE = re.compile(r"^0x[0-9a-f]{64}$")


def _is_u64(x: object) -> bool:
    return isinstance(x, int) and not isinstance(x, bool) and 0 <= x <= U64_MAX


def inv_collateral_u64(s: VaultState) -> bool:
    return _is_u64(s.collateral_amount)


def inv_debt_u64(s: VaultState) -> bool:
    return _is_u64(s.debt_amount)


def inv_commitment_well_formed(s: VaultState) -> bool:
    return isinstance(s.ownership_commitment, str) and bool(_COMMITMENT_RE.fullmatch(s.ownership_commitment))


def inv_flag_is_bool(s: VaultState) -> bool:
    return isinstance(s.interaction_flag, bool)


def inv_commitment_unchanged(pre: VaultState, post: VaultState) -> bool:
    return pre.ownership_commitment == post.ownership_commitment


INVARIANT_REGISTRY: dict[str, Callable[[VaultState], bool]] = {
    "inv_collateral_u64": inv_collateral_u64,
    "inv_debt_u64": inv_debt_u64,
    "inv_commitment_well_formed": inv_commitment_well_formed,
    "inv_flag_is_bool": inv_flag_is_bool,
}

TRANSITION_INVARIANT_REGISTRY: dict[str, Callable[[VaultState, VaultState], bool]] = {
    "inv_commitment_unchanged": inv_commitment_unchanged,
}


def check_all(state: VaultState) -> list[str]:
    """Return list of violated invariant IDs (empty = all pass)."""
    return [inv_id for inv_id, check_fn in INVARIANT_REGISTRY.items() if not check_fn(state)]


def check_transition(pre: VaultState, post: VaultState) -> list[str]:
    violations = check_all(post)
    violations.extend(
        inv_id for inv_id, check_fn in TRANSITION_INVARIANT_REGISTRY.items() if not check_fn(pre, post)
    )
    return violations

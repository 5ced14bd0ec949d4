"""`vault`: pure-Python implementation of the zkUSD collateral vault kernel.

- deterministic, integer-only transitions,
- immutable state (frozen dataclasses),
- fail-closed guards and invariant checks.

Public API:
- `initial_state(secret) -> VaultState`
- `step(state, params, ctx) -> StepResult`
- `step_or_raise(state, params, ctx) -> StepResult` (raises on rejection)
- `health_factor(collateral, debt, price) -> int`
"""

from .engine import step, step_or_raise
from .math import MIN_HEALTH_FACTOR, health_factor, max_allowed_debt, split_staking_rewards, usd_value
from .state import commitment_for_secret, initial_state, secret_matches, state_from_dict, state_to_dict
from .types import Action, ActionParams, Effect, Event, RiskParams, StepContext, StepResult, VaultState

__all__ = [
    "step",
    "step_or_raise",
    "MIN_HEALTH_FACTOR",
    "health_factor",
    "max_allowed_debt",
    "split_staking_rewards",
    "usd_value",
    "commitment_for_secret",
    "initial_state",
    "secret_matches",
    "state_from_dict",
    "state_to_dict",
    "Action",
    "ActionParams",
    "Effect",
    "Event",
    "RiskParams",
    "StepContext",
    "StepResult",
    "VaultState",
]

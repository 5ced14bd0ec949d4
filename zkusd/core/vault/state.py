"""State construction, ownership commitments, and serialization for the vault kernel.

Round-trip property (tested): `state_from_dict(state_to_dict(s)) == s` for all valid states.
"""

from __future__ import annotations

import hashlib
import hmac
from typing import Any, Mapping

from ...state.canonical import canonical_hex_fixed_allow_0x, domain_sep_bytes
from .types import VaultState

STATE_VAR_NAMES: tuple[str, ...] = tuple(VaultState.__dataclass_fields__)

# Secrets are field-sized: at most 32 bytes.
SECRET_NBYTES = 32


def _secret_bytes(secret: int | bytes) -> bytes:
    if isinstance(secret, bool):
        raise TypeError("secret must be int or bytes")
    if isinstance(secret, int):
        if secret < 0 or secret.bit_length() > 8 * SECRET_NBYTES:
            raise ValueError("secret int must fit in 32 unsigned bytes")
        return secret.to_bytes(SECRET_NBYTES, "big")
    if isinstance(secret, bytes):
        if len(secret) > SECRET_NBYTES:
            raise ValueError("secret bytes must be at most 32 bytes")
        return secret.rjust(SECRET_NBYTES, b"\x00")
    raise TypeError(f"secret must be int or bytes, got {type(secret).__name__}")


def commitment_for_secret(secret: int | bytes) -> str:
    """Hash commitment to an ownership secret (0x-prefixed sha256 hex)."""
    digest = hashlib.sha256(domain_sep_bytes("vault_ownership") + _secret_bytes(secret)).hexdigest()
    return "0x" + digest


def secret_matches(state: VaultState, secret: int | bytes | None) -> bool:
    if secret is None:
        return False
    try:
        candidate = commitment_for_secret(secret)
    except (TypeError, ValueError):
        return False
    return hmac.compare_digest(candidate, state.ownership_commitment)


def initial_state(secret: int | bytes) -> VaultState:
    """A fresh vault: zero balances, flag down, commitment to ``secret``."""
    return VaultState(ownership_commitment=commitment_for_secret(secret))


def state_to_dict(state: VaultState) -> dict[str, bool | int | str]:
    return {name: getattr(state, name) for name in STATE_VAR_NAMES}


def state_from_dict(d: Mapping[str, Any]) -> VaultState:
    """Deserialize a dict to a VaultState. Raises KeyError on missing fields."""
    commitment = canonical_hex_fixed_allow_0x(
        d["ownership_commitment"], nbytes=32, name="ownership_commitment"
    )
    flag = d["interaction_flag"]
    if not isinstance(flag, bool):
        raise TypeError("interaction_flag must be bool")
    amounts: dict[str, int] = {}
    for name in ("collateral_amount", "debt_amount"):
        val = d[name]
        if not isinstance(val, int) or isinstance(val, bool):
            raise TypeError(f"state var {name!r} must be int, got {type(val).__name__}")
        amounts[name] = int(val)
    return VaultState(ownership_commitment=commitment, interaction_flag=flag, **amounts)

"""
Nonce table for signed oracle submissions.

Tracks, per submitter address, the last accepted nonce. Nonces are strictly
sequential: the next accepted nonce is always ``last + 1``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Mapping

from .balances import Address
from .canonical import canonical_address

NONCE_MAX = 0xFFFFFFFFFFFFFFFF


@dataclass
class NonceTable:
    """Mutable mapping: submitter address -> last used nonce."""

    _last: Dict[Address, int] = field(default_factory=dict)

    def get_last(self, address: Address) -> int:
        return self._last.get(canonical_address(address), 0)

    def expected_next(self, address: Address) -> int:
        return self.get_last(address) + 1

    def set_last(self, address: Address, last_nonce: int) -> None:
        if not isinstance(last_nonce, int) or isinstance(last_nonce, bool) or last_nonce < 0:
            raise TypeError("last_nonce must be a non-negative int")
        if last_nonce > NONCE_MAX:
            raise TypeError("last_nonce must fit in u64")
        self._last[canonical_address(address)] = last_nonce

    def copy(self) -> "NonceTable":
        return NonceTable(_last=dict(self._last))

    def get_all(self) -> Mapping[Address, int]:
        return dict(self._last)

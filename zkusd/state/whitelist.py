"""
Oracle whitelist (versioned, ordered set of submitter identities).

Equality is exact-value: two whitelists match only if they hold the same
addresses in the same order. Submitters present a snapshot with each price;
a snapshot that differs from the registry copy in any way is rejected.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from .canonical import canonical_address, canonical_json_bytes, domain_sep_bytes, sha256_hex


@dataclass(frozen=True)
class Whitelist:
    addresses: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not isinstance(self.addresses, tuple):
            raise TypeError("addresses must be a tuple")
        seen: set[str] = set()
        for a in self.addresses:
            if a != canonical_address(a):
                raise ValueError(f"address must be canonical: {a!r}")
            if a in seen:
                raise ValueError(f"duplicate whitelist address: {a}")
            seen.add(a)

    @classmethod
    def of(cls, addresses: Iterable[str]) -> "Whitelist":
        return cls(addresses=tuple(canonical_address(a) for a in addresses))

    def contains(self, address: str) -> bool:
        return canonical_address(address) in self.addresses

    def __len__(self) -> int:
        return len(self.addresses)

    def digest(self) -> str:
        payload = canonical_json_bytes(list(self.addresses))
        return sha256_hex(domain_sep_bytes("oracle_whitelist") + payload)

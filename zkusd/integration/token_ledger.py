"""
zkUSD token ledger.

Minting is gated by a one-time ``MintCapability`` issued by a vault. The ledger
redeems the capability by calling back into the issuing vault's
``assert_interaction_flag(capability)``, which clears the vault's persisted
interaction flag in the same call. The vault holds at most one pending
capability, so a redeemed capability is refused on replay.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Protocol

from ..core.errors import CollateralError, ErrorCode, ProtocolStateError, ValidationError
from ..core.fixed_point import U64_MAX
from ..logging_config import get_logger
from ..state.balances import ZKUSD_ASSET, Address, Amount, BalanceTable
from ..state.canonical import canonical_address
from .chain import Chain

logger = get_logger(__name__)


@dataclass(frozen=True)
class MintCapability:
    """Single-use authorization for exactly one ``mint(recipient, amount)``."""

    vault_address: Address
    recipient: Address
    amount: Amount
    token: str


class CapabilityIssuer(Protocol):
    def assert_interaction_flag(self, capability: MintCapability) -> bool: ...


class TokenLedger(Protocol):
    def register_vault(self, vault_address: Address, issuer: CapabilityIssuer) -> None: ...

    def mint(self, recipient: Address, amount: Amount, capability: MintCapability) -> None: ...

    def burn(self, owner: Address, amount: Amount) -> None: ...


class InMemoryTokenLedger:
    def __init__(self, *, chain: Optional[Chain] = None) -> None:
        self.balances = BalanceTable()
        self._vaults: Dict[Address, CapabilityIssuer] = {}
        if chain is not None:
            chain.register(self)

    def register_vault(self, vault_address: Address, issuer: CapabilityIssuer) -> None:
        addr = canonical_address(vault_address, name="vault_address")
        if addr in self._vaults:
            raise ValueError(f"vault already registered: {addr}")
        self._vaults[addr] = issuer

    def balance_of(self, owner: Address) -> Amount:
        return self.balances.get(canonical_address(owner, name="owner"), ZKUSD_ASSET)

    def total_supply(self) -> Amount:
        return self.balances.total_supply(ZKUSD_ASSET)

    def mint(self, recipient: Address, amount: Amount, capability: MintCapability) -> None:
        dst = canonical_address(recipient, name="recipient")
        if not isinstance(capability, MintCapability):
            raise ProtocolStateError(ErrorCode.INVALID_CAPABILITY, "missing capability")
        if capability.recipient != dst or capability.amount != amount:
            raise ProtocolStateError(ErrorCode.INVALID_CAPABILITY, "capability does not cover this mint")
        issuer = self._vaults.get(capability.vault_address)
        if issuer is None:
            raise ProtocolStateError(ErrorCode.INVALID_CAPABILITY, f"unknown vault {capability.vault_address}")

        # Raises if the vault's flag is not set or the capability is not its pending one.
        issuer.assert_interaction_flag(capability)

        if self.total_supply() + amount > U64_MAX:
            raise CollateralError(ErrorCode.INSUFFICIENT_BALANCE, "zkUSD supply would exceed u64")
        self.balances.add(dst, ZKUSD_ASSET, amount)
        logger.info("Minted %d zkUSD to %s (vault %s)", amount, dst, capability.vault_address)

    def burn(self, owner: Address, amount: Amount) -> None:
        src = canonical_address(owner, name="owner")
        if not isinstance(amount, int) or isinstance(amount, bool) or amount <= 0:
            raise ValidationError(ErrorCode.AMOUNT_ZERO)
        have = self.balances.get(src, ZKUSD_ASSET)
        if have < amount:
            raise CollateralError(ErrorCode.INSUFFICIENT_BALANCE, f"{src} holds {have} zkUSD < {amount}")
        self.balances.subtract(src, ZKUSD_ASSET, amount)
        logger.info("Burned %d zkUSD from %s", amount, src)

    def transfer(self, sender: Address, receiver: Address, amount: Amount) -> None:
        src = canonical_address(sender, name="sender")
        dst = canonical_address(receiver, name="receiver")
        if not isinstance(amount, int) or isinstance(amount, bool) or amount <= 0:
            raise ValidationError(ErrorCode.AMOUNT_ZERO)
        have = self.balances.get(src, ZKUSD_ASSET)
        if have < amount:
            raise CollateralError(ErrorCode.INSUFFICIENT_BALANCE, f"{src} holds {have} zkUSD < {amount}")
        self.balances.transfer(src, dst, ZKUSD_ASSET, amount)

    # ---- chain participant --------------------------------------------

    def snapshot(self) -> BalanceTable:
        return self.balances.copy()

    def restore(self, snapshot: BalanceTable) -> None:
        self.balances = snapshot.copy()

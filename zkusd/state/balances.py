"""
Multi-asset balance tracking.

Implements BalanceTable[Address, AssetId] -> Amount for both the base asset
(MINA collateral) and the synthetic asset (zkUSD).
"""

from typing import Dict, Tuple


# Type aliases
Address = str  # BLS12-381 public key as canonical hex string
AssetId = str
Amount = int  # Non-negative integer, 9 decimals

NATIVE_ASSET = "MINA"
ZKUSD_ASSET = "zkUSD"


class BalanceTable:
    """
    Balance table mapping (address, asset) -> amount.

    Note: this class stores balances in a plain dict. Callers that hash or
    serialize balances must sort keys explicitly.
    """

    def __init__(self):
        self._balances: Dict[Tuple[Address, AssetId], Amount] = {}

    def get(self, address: Address, asset: AssetId) -> Amount:
        """Get balance for (address, asset). Returns 0 if not found."""
        return self._balances.get((address, asset), 0)

    def set(self, address: Address, asset: AssetId, amount: Amount) -> None:
        """
        Set balance for (address, asset).

        Raises:
            ValueError: If amount is negative
        """
        if amount < 0:
            raise ValueError(f"Balance cannot be negative: {amount}")
        if amount == 0:
            # Remove zero balances to keep table sparse
            self._balances.pop((address, asset), None)
        else:
            self._balances[(address, asset)] = amount

    def add(self, address: Address, asset: AssetId, delta: Amount) -> None:
        """
        Add delta to balance (negative delta subtracts).

        Raises:
            ValueError: If resulting balance would be negative
        """
        current = self.get(address, asset)
        new_balance = current + delta
        if new_balance < 0:
            raise ValueError(
                f"Insufficient balance: {current} + {delta} = {new_balance} < 0"
            )
        self.set(address, asset, new_balance)

    def subtract(self, address: Address, asset: AssetId, delta: Amount) -> None:
        if delta < 0:
            raise ValueError(f"Delta must be non-negative: {delta}")
        self.add(address, asset, -delta)

    def transfer(self, sender: Address, receiver: Address, asset: AssetId, amount: Amount) -> None:
        """Move ``amount`` of ``asset``; the sender is checked before any write."""
        if amount < 0:
            raise ValueError(f"Transfer amount must be non-negative: {amount}")
        if self.get(sender, asset) < amount:
            raise ValueError(f"Insufficient balance: {self.get(sender, asset)} < {amount}")
        self.subtract(sender, asset, amount)
        self.add(receiver, asset, amount)

    def total_supply(self, asset: AssetId) -> Amount:
        return sum(amount for (_, a), amount in self._balances.items() if a == asset)

    def copy(self) -> "BalanceTable":
        out = BalanceTable()
        out._balances = dict(self._balances)
        return out

    def get_all_balances(self) -> Dict[Tuple[Address, AssetId], Amount]:
        return dict(self._balances)

    def __repr__(self) -> str:
        return f"BalanceTable({len(self._balances)} entries)"

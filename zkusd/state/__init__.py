"""
State management for zkUSD
"""

from .balances import NATIVE_ASSET, ZKUSD_ASSET, BalanceTable
from .nonces import NonceTable
from .whitelist import Whitelist

__all__ = [
    "BalanceTable",
    "NATIVE_ASSET",
    "ZKUSD_ASSET",
    "NonceTable",
    "Whitelist",
]

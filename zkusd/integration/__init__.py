"""
Imperative shells and in-memory collaborators for the zkUSD kernels.
"""

from .chain import Chain, EmittedEvent
from .price_feed import FallbackPriceUpdated, PriceFeedOracle, PriceSettled, PriceSubmitted
from .registry import InMemoryProtocolRegistry, ProtocolRegistry
from .signatures import SignedPriceSubmission, address_from_privkey, sign_price_submission
from .token_ledger import InMemoryTokenLedger, MintCapability, TokenLedger
from .vault import (
    BurnZkUsd,
    DepositCollateral,
    Liquidate,
    MintZkUsd,
    NewVault,
    RedeemCollateral,
    VaultCollaborators,
    ZkUsdVault,
)

__all__ = [
    "Chain",
    "EmittedEvent",
    "FallbackPriceUpdated",
    "PriceFeedOracle",
    "PriceSettled",
    "PriceSubmitted",
    "InMemoryProtocolRegistry",
    "ProtocolRegistry",
    "SignedPriceSubmission",
    "address_from_privkey",
    "sign_price_submission",
    "InMemoryTokenLedger",
    "MintCapability",
    "TokenLedger",
    "BurnZkUsd",
    "DepositCollateral",
    "Liquidate",
    "MintZkUsd",
    "NewVault",
    "RedeemCollateral",
    "VaultCollaborators",
    "ZkUsdVault",
]

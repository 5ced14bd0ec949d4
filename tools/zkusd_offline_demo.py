#!/usr/bin/env python3

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from zkusd.config import ProtocolConfig, load_config
from zkusd.core.errors import ZkUsdError
from zkusd.core.vault import commitment_for_secret
from zkusd.integration import (
    Chain,
    InMemoryProtocolRegistry,
    InMemoryTokenLedger,
    PriceFeedOracle,
    VaultCollaborators,
    ZkUsdVault,
)
from zkusd.logging_config import setup_logging
from zkusd.state.whitelist import Whitelist

ONE = 1_000_000_000


def _addr(byte: int) -> str:
    return "0x" + f"{byte:02x}" * 48


def _fmt(amount: int) -> str:
    return f"{amount // ONE}.{amount % ONE:09d}"


def main() -> int:
    parser = argparse.ArgumentParser(description="Run a zkUSD vault lifecycle against in-memory collaborators.")
    parser.add_argument("--config", type=Path, default=None, help="protocol YAML (defaults built in)")
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args()

    setup_logging(logging.DEBUG if args.verbose else logging.WARNING)
    cfg = load_config(args.config) if args.config else ProtocolConfig()

    admin, treasury, oracle_addr, vault_addr = _addr(1), _addr(2), _addr(3), _addr(4)
    owner, liquidator = _addr(0x0A), _addr(0x0C)
    submitters = [_addr(0x11), _addr(0x12), _addr(0x13)]
    secret = 0xC0FFEE

    chain = Chain(block_height=100)
    registry = InMemoryProtocolRegistry(
        admin=admin,
        treasury=treasury,
        whitelist=Whitelist.of(submitters),
        protocol_fee=10,
        max_participants=cfg.max_participants,
        fee_precision=cfg.protocol_fee_precision,
        chain=chain,
    )
    ledger = InMemoryTokenLedger(chain=chain)
    oracle = PriceFeedOracle(address=oracle_addr, registry=registry, chain=chain, config=cfg)
    vault = ZkUsdVault.deploy(
        address=vault_addr,
        ownership_commitment=commitment_for_secret(secret),
        collaborators=VaultCollaborators(oracle=oracle, token_ledger=ledger, registry=registry),
        chain=chain,
        config=cfg,
    )
    chain.fund(owner, 100 * ONE)
    wl = registry.get_whitelist()

    try:
        for who, price in zip(submitters, (ONE, ONE + 20_000_000, ONE - 10_000_000)):
            oracle.submit_price(price, wl, sender=who)
        print(f"[offline-demo] settled price={_fmt(oracle.settle_price_update())}")

        vault.deposit_collateral(100 * ONE, secret, sender=owner)
        vault.mint_zkusd(liquidator, 60 * ONE, secret)
        print(
            f"[offline-demo] vault collateral={_fmt(vault.collateral_amount)} debt={_fmt(vault.debt_amount)} "
            f"health_factor={vault.get_health_factor()}"
        )

        chain.fund(vault_addr, 2 * ONE)
        vault.redeem_collateral(ONE, secret, sender=owner)
        print(
            f"[offline-demo] redeemed 1 MINA with yield: owner={_fmt(chain.balance_of(owner))} "
            f"treasury={_fmt(chain.balance_of(treasury))}"
        )

        chain.advance_blocks(1)
        for who, price in zip(submitters, (800_000_000, 820_000_000, 790_000_000)):
            oracle.submit_price(price, wl, sender=who)
        print(f"[offline-demo] price drop settled at {_fmt(oracle.settle_price_update())}")
        print(f"[offline-demo] health_factor={vault.get_health_factor()}")

        event = vault.liquidate(sender=liquidator)
    except ZkUsdError as exc:
        print(f"[offline-demo] FAIL: {exc.code.tag}: {exc}")
        return 1

    print(
        f"[offline-demo] liquidated: collateral={_fmt(event.vault_collateral_liquidated)} "
        f"debt={_fmt(event.vault_debt_repaid)} price={_fmt(event.price)}"
    )
    print(f"[offline-demo] liquidator MINA={_fmt(chain.balance_of(liquidator))} zkUSD={_fmt(ledger.balance_of(liquidator))}")
    print("[offline-demo] OK")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

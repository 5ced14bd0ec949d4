"""
Imperative shell around the vault kernel.

Each operation:
1. opens (or joins) a ``Chain.atomic()`` batch,
2. reads the persisted ``VaultState`` snapshot and, for price-dependent actions,
   the oracle price (which fails closed on emergency halt),
3. runs the pure kernel ``step()``,
4. applies fund movements and collaborator calls,
5. commits the new state with a compare-and-swap against the snapshot,
6. emits the domain event.

Any exception rolls the whole batch back.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol, Tuple

from ..config import ProtocolConfig
from ..core.errors import ErrorCode, ProtocolStateError, error_for
from ..core.vault import (
    Action,
    ActionParams,
    RiskParams,
    StepContext,
    StepResult,
    VaultState,
    health_factor,
    step,
)
from ..core.vault.engine import PRICE_ACTIONS
from ..core.vault.invariants import check_all
from ..logging_config import get_logger
from ..state.balances import Address, Amount
from ..state.canonical import (
    canonical_address,
    canonical_hex_fixed_allow_0x,
    canonical_json_bytes,
    domain_sep_bytes,
    sha256_hex,
)
from .chain import Chain
from .registry import ProtocolRegistry
from .token_ledger import MintCapability, TokenLedger

logger = get_logger(__name__)


class PriceSource(Protocol):
    def get_price(self) -> int: ...


@dataclass(frozen=True)
class VaultCollaborators:
    """The three collaborators a vault is pinned to for its whole lifetime."""

    oracle: PriceSource
    token_ledger: TokenLedger
    registry: ProtocolRegistry


# ---- domain events ------------------------------------------------------


@dataclass(frozen=True)
class NewVault:
    vault_address: Address


@dataclass(frozen=True)
class DepositCollateral:
    vault_address: Address
    amount_deposited: Amount
    vault_collateral_amount: Amount
    vault_debt_amount: Amount


@dataclass(frozen=True)
class RedeemCollateral:
    vault_address: Address
    amount_redeemed: Amount
    vault_collateral_amount: Amount
    vault_debt_amount: Amount


@dataclass(frozen=True)
class MintZkUsd:
    vault_address: Address
    amount_minted: Amount
    vault_collateral_amount: Amount
    vault_debt_amount: Amount


@dataclass(frozen=True)
class BurnZkUsd:
    vault_address: Address
    amount_burned: Amount
    vault_collateral_amount: Amount
    vault_debt_amount: Amount


@dataclass(frozen=True)
class Liquidate:
    vault_address: Address
    liquidator: Address
    vault_collateral_liquidated: Amount
    vault_debt_repaid: Amount
    price: int


_ShellSnapshot = Tuple[VaultState, Optional[MintCapability], int]


class ZkUsdVault:
    """One user vault. Construct through ``deploy``."""

    def __init__(
        self,
        *,
        address: Address,
        state: VaultState,
        collaborators: VaultCollaborators,
        chain: Chain,
        risk: RiskParams = RiskParams(),
    ) -> None:
        self.address = canonical_address(address, name="vault_address")
        self.collaborators = collaborators
        self.chain = chain
        self.risk = risk
        self._state = state
        self._pending_capability: Optional[MintCapability] = None
        self._capability_seq = 0

    @classmethod
    def deploy(
        cls,
        *,
        address: Address,
        ownership_commitment: str,
        collaborators: VaultCollaborators,
        chain: Chain,
        config: ProtocolConfig = ProtocolConfig(),
    ) -> "ZkUsdVault":
        """Create a vault with zero balances owned by whoever knows the committed secret."""
        commitment = canonical_hex_fixed_allow_0x(ownership_commitment, nbytes=32, name="ownership_commitment")
        state = VaultState(ownership_commitment=commitment)
        violations = check_all(state)
        if violations:
            raise ValueError(f"invalid initial vault state: {violations}")
        vault = cls(
            address=address,
            state=state,
            collaborators=collaborators,
            chain=chain,
            risk=config.risk_params(),
        )
        collaborators.token_ledger.register_vault(vault.address, vault)
        chain.register(vault)
        chain.emit(vault.address, NewVault(vault_address=vault.address))
        logger.info("Deployed vault %s", vault.address)
        return vault

    # ---- reads --------------------------------------------------------

    @property
    def state(self) -> VaultState:
        return self._state

    @property
    def collateral_amount(self) -> Amount:
        return self._state.collateral_amount

    @property
    def debt_amount(self) -> Amount:
        return self._state.debt_amount

    @property
    def interaction_flag(self) -> bool:
        return self._state.interaction_flag

    def get_health_factor(self) -> int:
        price = self.collaborators.oracle.get_price()
        return health_factor(
            self._state.collateral_amount,
            self._state.debt_amount,
            price,
            unit_precision=self.risk.unit_precision,
            collateral_ratio=self.risk.collateral_ratio,
            ratio_precision=self.risk.collateral_ratio_precision,
        )

    # ---- internals ----------------------------------------------------

    def _context(self, action: Action) -> StepContext:
        price = self.collaborators.oracle.get_price() if action in PRICE_ACTIONS else 0
        return StepContext(
            price=price,
            vault_balance=self.chain.balance_of(self.address),
            protocol_fee=self.collaborators.registry.get_protocol_fee(),
            risk=self.risk,
        )

    def _run(self, snapshot: VaultState, params: ActionParams) -> StepResult:
        result = step(snapshot, params, self._context(params.action))
        if not result.accepted:
            assert result.rejection is not None
            logger.warning("Vault %s %s rejected: %s", self.address, params.action.value, result.rejection.tag)
            raise error_for(result.rejection, result.detail)
        assert result.state is not None and result.effect is not None
        return result

    def _commit(self, expected: VaultState, new_state: VaultState) -> None:
        if self._state is not expected:
            raise ProtocolStateError(ErrorCode.STALE_STATE, self.address)
        self._state = new_state

    def _issue_capability(self, recipient: Address, amount: Amount) -> MintCapability:
        self._capability_seq += 1
        body = {"vault": self.address, "recipient": recipient, "amount": amount, "seq": self._capability_seq}
        token = sha256_hex(domain_sep_bytes("mint_capability") + canonical_json_bytes(body))
        cap = MintCapability(vault_address=self.address, recipient=recipient, amount=amount, token=token)
        self._pending_capability = cap
        return cap

    # ---- operations ---------------------------------------------------

    def deposit_collateral(self, amount: Amount, secret: int | bytes, *, sender: Address) -> DepositCollateral:
        caller = canonical_address(sender, name="sender")
        with self.chain.atomic():
            snapshot = self._state
            result = self._run(snapshot, ActionParams(Action.DEPOSIT_COLLATERAL, amount=amount, secret=secret))
            self.chain.transfer(caller, self.address, amount)
            self._commit(snapshot, result.state)
            event = DepositCollateral(
                vault_address=self.address,
                amount_deposited=amount,
                vault_collateral_amount=result.effect.collateral_before,
                vault_debt_amount=result.effect.debt_before,
            )
            self.chain.emit(self.address, event)
        logger.info("Vault %s: deposited %d", self.address, amount)
        return event

    def redeem_collateral(self, amount: Amount, secret: int | bytes, *, sender: Address) -> RedeemCollateral:
        """Withdraw ``amount`` collateral plus the owner's share of accrued staking yield."""
        caller = canonical_address(sender, name="sender")
        with self.chain.atomic():
            snapshot = self._state
            result = self._run(snapshot, ActionParams(Action.REDEEM_COLLATERAL, amount=amount, secret=secret))
            effect = result.effect
            self.chain.transfer(self.address, caller, effect.payout_to_caller)
            if effect.protocol_fee_paid > 0:
                self.chain.transfer(
                    self.address, self.collaborators.registry.treasury_address(), effect.protocol_fee_paid
                )
            self._commit(snapshot, result.state)
            event = RedeemCollateral(
                vault_address=self.address,
                amount_redeemed=amount,
                vault_collateral_amount=effect.collateral_after,
                vault_debt_amount=effect.debt_before,
            )
            self.chain.emit(self.address, event)
        logger.info(
            "Vault %s: redeemed %d (payout %d, protocol fee %d)",
            self.address,
            amount,
            effect.payout_to_caller,
            effect.protocol_fee_paid,
        )
        return event

    def mint_zkusd(self, recipient: Address, amount: Amount, secret: int | bytes) -> MintZkUsd:
        dst = canonical_address(recipient, name="recipient")
        with self.chain.atomic():
            self.chain.claim_batch_slot(self.address)
            snapshot = self._state
            result = self._run(snapshot, ActionParams(Action.MINT_ZKUSD, amount=amount, secret=secret))
            # The raised flag must be persisted before the ledger calls back.
            self._commit(snapshot, result.state)
            capability = self._issue_capability(dst, amount)
            self.collaborators.token_ledger.mint(dst, amount, capability)
            if self._state.interaction_flag or self._pending_capability is not None:
                raise ProtocolStateError(ErrorCode.INVALID_CAPABILITY, "token ledger did not redeem the capability")
            event = MintZkUsd(
                vault_address=self.address,
                amount_minted=amount,
                vault_collateral_amount=result.effect.collateral_before,
                vault_debt_amount=result.effect.debt_before,
            )
            self.chain.emit(self.address, event)
        logger.info("Vault %s: minted %d zkUSD to %s (health factor %d)", self.address, amount, dst, result.effect.health_factor)
        return event

    def assert_interaction_flag(self, capability: MintCapability) -> bool:
        """Redeem the pending mint capability and lower the interaction flag."""
        with self.chain.atomic():
            snapshot = self._state
            result = self._run(snapshot, ActionParams(Action.ASSERT_INTERACTION_FLAG))
            if self._pending_capability is None or capability != self._pending_capability:
                logger.warning("Vault %s: capability mismatch", self.address)
                raise ProtocolStateError(ErrorCode.INVALID_CAPABILITY, self.address)
            self._commit(snapshot, result.state)
            self._pending_capability = None
        return True

    def burn_zkusd(self, amount: Amount, secret: int | bytes, *, sender: Address) -> BurnZkUsd:
        """Repay ``amount`` of debt from ``sender``'s zkUSD balance."""
        caller = canonical_address(sender, name="sender")
        with self.chain.atomic():
            self.chain.claim_batch_slot(self.address)
            snapshot = self._state
            result = self._run(snapshot, ActionParams(Action.BURN_ZKUSD, amount=amount, secret=secret))
            self.collaborators.token_ledger.burn(caller, amount)
            self._commit(snapshot, result.state)
            event = BurnZkUsd(
                vault_address=self.address,
                amount_burned=amount,
                vault_collateral_amount=result.effect.collateral_before,
                vault_debt_amount=result.effect.debt_before,
            )
            self.chain.emit(self.address, event)
        logger.info("Vault %s: burned %d zkUSD", self.address, amount)
        return event

    def liquidate(self, *, sender: Address) -> Liquidate:
        """Repay all debt from ``sender``'s zkUSD and hand them all the collateral."""
        caller = canonical_address(sender, name="sender")
        with self.chain.atomic():
            self.chain.claim_batch_slot(self.address)
            snapshot = self._state
            result = self._run(snapshot, ActionParams(Action.LIQUIDATE))
            effect = result.effect
            if effect.zkusd_burned > 0:
                self.collaborators.token_ledger.burn(caller, effect.zkusd_burned)
            if effect.payout_to_caller > 0:
                self.chain.transfer(self.address, caller, effect.payout_to_caller)
            self._commit(snapshot, result.state)
            event = Liquidate(
                vault_address=self.address,
                liquidator=caller,
                vault_collateral_liquidated=effect.collateral_before,
                vault_debt_repaid=effect.debt_before,
                price=effect.price,
            )
            self.chain.emit(self.address, event)
        logger.info(
            "Vault %s liquidated by %s at price %d (health factor %d)",
            self.address,
            caller,
            effect.price,
            effect.health_factor,
        )
        return event

    # ---- chain participant --------------------------------------------

    def snapshot(self) -> _ShellSnapshot:
        return self._state, self._pending_capability, self._capability_seq

    def restore(self, snapshot: _ShellSnapshot) -> None:
        self._state, self._pending_capability, self._capability_seq = snapshot

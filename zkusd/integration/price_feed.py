"""
Imperative shell around the oracle kernel.

``PriceFeedOracle`` owns the persisted ``OracleState``, resolves the sender and
the registry whitelist, pays the per-submission oracle fee out of its own MINA
balance, and appends events to the chain. Every write runs inside
``Chain.atomic()`` and raises a ``ZkUsdError`` on rejection.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from ..config import ProtocolConfig
from ..core.errors import AuthorizationError, ErrorCode, HaltError, ProtocolStateError, error_for
from ..core.oracle import engine as oracle_kernel
from ..core.oracle.types import FallbackSlot, OracleState, OracleStepResult
from ..logging_config import get_logger
from ..state.balances import Address
from ..state.canonical import canonical_address
from ..state.nonces import NonceTable
from ..state.whitelist import Whitelist
from .chain import Chain
from .registry import ProtocolRegistry
from .signatures import SignedPriceSubmission, verify_price_submission

logger = get_logger(__name__)


@dataclass(frozen=True)
class PriceSubmitted:
    submitter: Address
    price: int
    fee_paid: int


@dataclass(frozen=True)
class PriceSettled:
    price: int
    block_height: int
    submissions: int


@dataclass(frozen=True)
class FallbackPriceUpdated:
    price: int
    block_height: int
    slot: FallbackSlot


class PriceFeedOracle:
    def __init__(
        self,
        *,
        address: Address,
        registry: ProtocolRegistry,
        chain: Chain,
        config: ProtocolConfig = ProtocolConfig(),
    ) -> None:
        self.address = canonical_address(address, name="oracle_address")
        self.registry = registry
        self.chain = chain
        self._state = oracle_kernel.init_oracle_state(
            max_participants=config.max_participants,
            price_validity_blocks=config.price_validity_blocks,
        )
        self.nonces = NonceTable()
        chain.register(self)

    @property
    def state(self) -> OracleState:
        return self._state

    def _commit(self, expected: OracleState, new_state: OracleState) -> None:
        if self._state is not expected:
            raise ProtocolStateError(ErrorCode.STALE_STATE, "oracle")
        self._state = new_state

    def _accepted(self, result: OracleStepResult, *, op: str) -> OracleStepResult:
        if not result.accepted:
            assert result.rejection is not None
            logger.warning("Oracle %s rejected: %s", op, result.rejection.tag)
            raise error_for(result.rejection)
        return result

    # ---- submissions --------------------------------------------------

    def submit_price(self, price: int, whitelist: Whitelist, *, sender: Address) -> int:
        """Queue ``price`` for the next settlement. Returns the oracle fee paid (0 if unfunded)."""
        submitter = canonical_address(sender, name="sender")
        with self.chain.atomic():
            return self._submit(submitter, price, whitelist)

    def submit_signed_price(self, submission: SignedPriceSubmission, whitelist: Whitelist) -> int:
        """Like ``submit_price`` but authenticated by a BLS signature and a sequential nonce."""
        submitter = canonical_address(submission.submitter, name="submitter")
        if not verify_price_submission(submission, oracle_address=self.address, whitelist=whitelist):
            logger.warning("Oracle signed submission rejected: bad signature from %s", submitter)
            raise AuthorizationError(ErrorCode.INVALID_SIGNATURE, submitter)
        expected_nonce = self.nonces.expected_next(submitter)
        if submission.nonce != expected_nonce:
            logger.warning("Oracle signed submission rejected: nonce %d != %d", submission.nonce, expected_nonce)
            raise AuthorizationError(ErrorCode.INVALID_SIGNATURE, f"nonce {submission.nonce} != {expected_nonce}")
        with self.chain.atomic():
            fee = self._submit(submitter, submission.price, whitelist)
            self.nonces.set_last(submitter, submission.nonce)
            return fee

    def _submit(self, submitter: Address, price: int, whitelist: Whitelist) -> int:
        snapshot = self._state
        result = self._accepted(
            oracle_kernel.submit_price(
                snapshot,
                submitter=submitter,
                price=price,
                whitelist_snapshot=whitelist,
                registry_whitelist=self.registry.get_whitelist(),
            ),
            op="submit_price",
        )
        assert result.state is not None

        fee = self.registry.get_oracle_fee()
        paid = 0
        if fee > 0 and self.chain.balance_of(self.address) >= fee:
            self.chain.transfer(self.address, submitter, fee)
            paid = fee

        self._commit(snapshot, result.state)
        self.chain.emit(self.address, PriceSubmitted(submitter=submitter, price=price, fee_paid=paid))
        logger.info("Price %d submitted by %s (fee %d)", price, submitter, paid)
        return paid

    # ---- settlement ---------------------------------------------------

    def settle_price_update(self) -> int:
        """Aggregate every pending submission. Returns the aggregated price."""
        with self.chain.atomic():
            snapshot = self._state
            height = self.chain.block_height
            result = self._accepted(oracle_kernel.settle_price_update(snapshot, block_height=height), op="settle")
            assert result.state is not None and result.effect is not None
            if result.state is snapshot:
                logger.info("Settlement at height %d: nothing pending", height)
                return snapshot.aggregated_price
            self._commit(snapshot, result.state)
            self.chain.emit(
                self.address,
                PriceSettled(price=result.effect.price, block_height=height, submissions=result.effect.consumed),
            )
            logger.info("Settled %d submissions at height %d: price=%d", result.effect.consumed, height, result.effect.price)
            return result.effect.price

    def update_fallback_price(self, new_price: int, *, sender: Address) -> FallbackSlot:
        if not self.registry.is_admin(sender):
            logger.warning("Fallback update rejected: %s is not admin", sender)
            raise AuthorizationError(ErrorCode.NOT_ADMIN, canonical_address(sender, name="sender"))
        with self.chain.atomic():
            snapshot = self._state
            height = self.chain.block_height
            result = self._accepted(
                oracle_kernel.update_fallback_price(snapshot, new_price=new_price, block_height=height),
                op="update_fallback_price",
            )
            assert result.state is not None and result.effect is not None and result.effect.slot is not None
            self._commit(snapshot, result.state)
            self.chain.emit(
                self.address,
                FallbackPriceUpdated(price=new_price, block_height=height, slot=result.effect.slot),
            )
            logger.info("Fallback price %d written to %s slot at height %d", new_price, result.effect.slot.value, height)
            return result.effect.slot

    # ---- reads --------------------------------------------------------

    def get_price(self) -> int:
        """Current trusted price. Fails closed while the protocol is halted."""
        if self.registry.is_halted():
            raise HaltError(ErrorCode.EMERGENCY_HALT)
        return oracle_kernel.get_price(self._state, self.chain.block_height)

    def get_fallback_price(self) -> int:
        return oracle_kernel.get_fallback_price(self._state, self.chain.block_height)

    def has_pending_submission(self, submitter: Address) -> bool:
        return oracle_kernel.has_pending(self._state, canonical_address(submitter, name="submitter"))

    # ---- chain participant --------------------------------------------

    def snapshot(self) -> Tuple[OracleState, NonceTable]:
        return self._state, self.nonces.copy()

    def restore(self, snapshot: Tuple[OracleState, NonceTable]) -> None:
        state, nonces = snapshot
        self._state = state
        self.nonces = nonces.copy()

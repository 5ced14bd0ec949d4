"""
Protocol registry: oracle whitelist, fee schedule, treasury, emergency halt.

The vault and oracle shells only depend on the read-side ``ProtocolRegistry``
protocol. ``InMemoryProtocolRegistry`` is the reference implementation, with
admin-gated updates checked against the configured admin address.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional, Protocol

from ..core.errors import ArithmeticFault, AuthorizationError, ErrorCode
from ..core.fixed_point import U64_MAX
from ..logging_config import get_logger
from ..state.balances import Address
from ..state.canonical import canonical_address
from ..state.whitelist import Whitelist
from .chain import Chain

logger = get_logger(__name__)


class ProtocolRegistry(Protocol):
    def get_protocol_fee(self) -> int: ...

    def get_oracle_fee(self) -> int: ...

    def get_whitelist(self) -> Whitelist: ...

    def is_halted(self) -> bool: ...

    def is_admin(self, address: Address) -> bool: ...

    def treasury_address(self) -> Address: ...


@dataclass(frozen=True)
class RegistryState:
    admin: Address
    treasury: Address
    whitelist: Whitelist = Whitelist()
    protocol_fee: int = 0
    oracle_fee: int = 0
    halted: bool = False


class InMemoryProtocolRegistry:
    """Reference registry. ``protocol_fee`` is a percentage (precision 100)."""

    def __init__(
        self,
        *,
        admin: Address,
        treasury: Address,
        whitelist: Whitelist = Whitelist(),
        protocol_fee: int = 0,
        oracle_fee: int = 0,
        max_participants: int = 10,
        fee_precision: int = 100,
        chain: Optional[Chain] = None,
    ) -> None:
        self.max_participants = max_participants
        self.fee_precision = fee_precision
        self._check_whitelist(whitelist)
        self._check_protocol_fee(protocol_fee)
        self._check_oracle_fee(oracle_fee)
        self._state = RegistryState(
            admin=canonical_address(admin, name="admin"),
            treasury=canonical_address(treasury, name="treasury"),
            whitelist=whitelist,
            protocol_fee=protocol_fee,
            oracle_fee=oracle_fee,
        )
        if chain is not None:
            chain.register(self)

    # ---- reads --------------------------------------------------------

    @property
    def state(self) -> RegistryState:
        return self._state

    def get_protocol_fee(self) -> int:
        return self._state.protocol_fee

    def get_oracle_fee(self) -> int:
        return self._state.oracle_fee

    def get_whitelist(self) -> Whitelist:
        return self._state.whitelist

    def is_halted(self) -> bool:
        return self._state.halted

    def is_admin(self, address: Address) -> bool:
        return canonical_address(address, name="sender") == self._state.admin

    def treasury_address(self) -> Address:
        return self._state.treasury

    # ---- admin updates ------------------------------------------------

    def _require_admin(self, sender: Address) -> None:
        if not self.is_admin(sender):
            raise AuthorizationError(ErrorCode.NOT_ADMIN, canonical_address(sender, name="sender"))

    def _check_whitelist(self, whitelist: Whitelist) -> None:
        if not isinstance(whitelist, Whitelist):
            raise TypeError("whitelist must be a Whitelist")
        if len(whitelist) > self.max_participants:
            raise AuthorizationError(
                ErrorCode.INVALID_WHITELIST,
                f"{len(whitelist)} entries > max {self.max_participants}",
            )

    def _check_protocol_fee(self, fee: int) -> None:
        if not isinstance(fee, int) or isinstance(fee, bool) or fee < 0:
            raise TypeError("protocol_fee must be a non-negative int")
        if fee > self.fee_precision:
            raise ArithmeticFault(ErrorCode.OVERFLOW, f"protocol_fee {fee} > {self.fee_precision}")

    def _check_oracle_fee(self, fee: int) -> None:
        if not isinstance(fee, int) or isinstance(fee, bool) or fee < 0:
            raise TypeError("oracle_fee must be a non-negative int")
        if fee > U64_MAX:
            raise ArithmeticFault(ErrorCode.OVERFLOW, "oracle_fee")

    def update_oracle_whitelist(self, whitelist: Whitelist, *, sender: Address) -> None:
        self._require_admin(sender)
        self._check_whitelist(whitelist)
        self._state = replace(self._state, whitelist=whitelist)
        logger.info("Oracle whitelist updated: %d members, digest=%s", len(whitelist), whitelist.digest())

    def update_protocol_fee(self, fee: int, *, sender: Address) -> None:
        self._require_admin(sender)
        self._check_protocol_fee(fee)
        self._state = replace(self._state, protocol_fee=fee)
        logger.info("Protocol fee set to %d/%d", fee, self.fee_precision)

    def update_oracle_fee(self, fee: int, *, sender: Address) -> None:
        self._require_admin(sender)
        self._check_oracle_fee(fee)
        self._state = replace(self._state, oracle_fee=fee)
        logger.info("Oracle fee set to %d", fee)

    def stop_protocol(self, *, sender: Address) -> None:
        self._require_admin(sender)
        self._state = replace(self._state, halted=True)
        logger.warning("Protocol halted by %s", self._state.admin)

    def resume_protocol(self, *, sender: Address) -> None:
        self._require_admin(sender)
        self._state = replace(self._state, halted=False)
        logger.info("Protocol resumed by %s", self._state.admin)

    # ---- chain participant --------------------------------------------

    def snapshot(self) -> RegistryState:
        return self._state

    def restore(self, snapshot: RegistryState) -> None:
        self._state = snapshot

"""
In-memory ledger substrate for the zkUSD shells.

Holds the block height, the base-asset (MINA) balances, and the append-only
event log keyed by emitter. ``atomic()`` groups shell operations into one
all-or-nothing unit: every registered participant is snapshotted on entry and
restored if the block raises. Nested calls are savepoints.
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, FrozenSet, Iterator, List, Optional, Protocol, Set

from ..core.errors import CollateralError, ErrorCode, ProtocolStateError, ValidationError
from ..core.fixed_point import U64_MAX
from ..logging_config import get_logger
from ..state.balances import NATIVE_ASSET, Address, Amount, BalanceTable
from ..state.canonical import canonical_address

logger = get_logger(__name__)


class Participant(Protocol):
    """Anything holding state that must roll back with a failed batch."""

    def snapshot(self) -> Any: ...

    def restore(self, snapshot: Any) -> None: ...


@dataclass(frozen=True)
class EmittedEvent:
    emitter: Address
    block_height: int
    event: Any


@dataclass
class _Frame:
    balances: BalanceTable
    event_count: int
    participants: List[Any]
    batch: FrozenSet[Address]


class Chain:
    def __init__(self, *, block_height: int = 0) -> None:
        if not isinstance(block_height, int) or isinstance(block_height, bool) or block_height < 0:
            raise ValueError("block_height must be a non-negative int")
        self.block_height = block_height
        self.balances = BalanceTable()
        self._events: List[EmittedEvent] = []
        self._participants: List[Participant] = []
        self._frames: List[_Frame] = []
        self._batch: Set[Address] = set()

    # ---- block height -------------------------------------------------

    def advance_blocks(self, n: int = 1) -> int:
        if not isinstance(n, int) or isinstance(n, bool) or n < 0:
            raise ValueError("n must be a non-negative int")
        self.block_height += n
        return self.block_height

    # ---- base asset ---------------------------------------------------

    def balance_of(self, address: Address) -> Amount:
        return self.balances.get(canonical_address(address), NATIVE_ASSET)

    def fund(self, address: Address, amount: Amount) -> None:
        """Credit ``amount`` out of thin air (genesis allocations, staking rewards)."""
        if not isinstance(amount, int) or isinstance(amount, bool) or amount < 0:
            raise ValueError("amount must be a non-negative int")
        addr = canonical_address(address)
        if self.balances.get(addr, NATIVE_ASSET) + amount > U64_MAX:
            raise ValueError("balance would exceed u64")
        self.balances.add(addr, NATIVE_ASSET, amount)

    def transfer(self, sender: Address, receiver: Address, amount: Amount) -> None:
        if not isinstance(amount, int) or isinstance(amount, bool) or amount < 0:
            raise ValidationError(ErrorCode.AMOUNT_ZERO, f"invalid transfer amount {amount!r}")
        src = canonical_address(sender, name="sender")
        dst = canonical_address(receiver, name="receiver")
        have = self.balances.get(src, NATIVE_ASSET)
        if have < amount:
            raise CollateralError(ErrorCode.INSUFFICIENT_BALANCE, f"{src} holds {have} < {amount}")
        self.balances.transfer(src, dst, NATIVE_ASSET, amount)

    # ---- events -------------------------------------------------------

    def emit(self, emitter: Address, event: Any) -> None:
        self._events.append(
            EmittedEvent(emitter=canonical_address(emitter, name="emitter"), block_height=self.block_height, event=event)
        )

    def events(self, emitter: Optional[Address] = None) -> List[Any]:
        if emitter is None:
            return [e.event for e in self._events]
        addr = canonical_address(emitter, name="emitter")
        return [e.event for e in self._events if e.emitter == addr]

    def event_log(self) -> List[EmittedEvent]:
        return list(self._events)

    # ---- atomic batches -----------------------------------------------

    def register(self, participant: Participant) -> None:
        if self._frames:
            raise RuntimeError("cannot register participants inside an atomic batch")
        self._participants.append(participant)

    def claim_batch_slot(self, vault_address: Address) -> None:
        """Record a mint/burn for ``vault_address``; a second one in the same batch is rejected."""
        if not self._frames:
            raise RuntimeError("claim_batch_slot requires an open atomic batch")
        addr = canonical_address(vault_address, name="vault_address")
        if addr in self._batch:
            raise ProtocolStateError(ErrorCode.BATCH_CONFLICT, addr)
        self._batch.add(addr)

    def _savepoint(self) -> _Frame:
        return _Frame(
            balances=self.balances.copy(),
            event_count=len(self._events),
            participants=[p.snapshot() for p in self._participants],
            batch=frozenset(self._batch),
        )

    def _rollback(self, frame: _Frame) -> None:
        self.balances = frame.balances
        del self._events[frame.event_count:]
        for p, snap in zip(self._participants, frame.participants):
            p.restore(snap)
        self._batch = set(frame.batch)

    @contextmanager
    def atomic(self) -> Iterator["Chain"]:
        """Run the block as one unit.

        A nested call opens a savepoint inside the enclosing batch: if its body
        raises, only the changes made since the savepoint are undone, and batch
        slots claimed before it stay claimed.
        """
        outermost = not self._frames
        if outermost:
            self._batch = set()
        self._frames.append(self._savepoint())
        try:
            yield self
        except BaseException:
            self._rollback(self._frames[-1])
            logger.debug(
                "Atomic %s rolled back (%d participants)",
                "batch" if outermost else "savepoint",
                len(self._participants),
            )
            raise
        finally:
            self._frames.pop()
            if outermost:
                self._batch = set()

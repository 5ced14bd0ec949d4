"""Tests for zkusd/integration/chain.py and zkusd/integration/registry.py."""

import pytest

from zkusd.core.errors import ArithmeticFault, AuthorizationError, CollateralError, ErrorCode, ProtocolStateError
from zkusd.integration import Chain, InMemoryProtocolRegistry
from zkusd.state.whitelist import Whitelist

from harness import ADMIN, ALICE, BOB, TREASURY, VAULT, addr


class TestChain:
    def test_transfer(self):
        chain = Chain()
        chain.fund(ALICE, 10)
        chain.transfer(ALICE, BOB, 4)
        assert (chain.balance_of(ALICE), chain.balance_of(BOB)) == (6, 4)

    def test_insufficient(self):
        chain = Chain()
        with pytest.raises(CollateralError) as exc:
            chain.transfer(ALICE, BOB, 1)
        assert exc.value.code is ErrorCode.INSUFFICIENT_BALANCE

    def test_atomic_rolls_back_balances_and_events(self):
        chain = Chain()
        chain.fund(ALICE, 10)
        with pytest.raises(RuntimeError):
            with chain.atomic():
                chain.transfer(ALICE, BOB, 4)
                chain.emit(ALICE, "something")
                raise RuntimeError("boom")
        assert chain.balance_of(ALICE) == 10
        assert chain.events() == []

    def test_outer_failure_undoes_completed_savepoint(self):
        chain = Chain()
        chain.fund(ALICE, 10)
        with pytest.raises(RuntimeError):
            with chain.atomic():
                with chain.atomic():
                    chain.transfer(ALICE, BOB, 4)
                raise RuntimeError("boom")
        assert chain.balance_of(BOB) == 0

    def test_caught_savepoint_failure_keeps_outer_work(self):
        chain = Chain()
        chain.fund(ALICE, 10)
        registry = InMemoryProtocolRegistry(admin=ADMIN, treasury=TREASURY, chain=chain)
        with chain.atomic():
            chain.transfer(ALICE, BOB, 1)
            try:
                with chain.atomic():
                    chain.transfer(ALICE, BOB, 4)
                    chain.emit(ALICE, "inner")
                    registry.update_protocol_fee(50, sender=ADMIN)
                    raise RuntimeError("boom")
            except RuntimeError:
                pass
            chain.emit(ALICE, "outer")
        assert chain.balance_of(ALICE) == 9
        assert chain.balance_of(BOB) == 1
        assert chain.events() == ["outer"]
        assert registry.get_protocol_fee() == 0

    def test_savepoint_keeps_earlier_slots_and_releases_its_own(self):
        chain = Chain()
        other = addr(0x05)
        with chain.atomic():
            chain.claim_batch_slot(VAULT)
            try:
                with chain.atomic():
                    chain.claim_batch_slot(other)
                    raise RuntimeError("boom")
            except RuntimeError:
                pass
            with pytest.raises(ProtocolStateError) as exc:
                chain.claim_batch_slot(VAULT)
            assert exc.value.code is ErrorCode.BATCH_CONFLICT
            chain.claim_batch_slot(other)

    def test_atomic_restores_participants(self):
        chain = Chain()
        registry = InMemoryProtocolRegistry(admin=ADMIN, treasury=TREASURY, chain=chain)
        with pytest.raises(RuntimeError):
            with chain.atomic():
                registry.update_protocol_fee(50, sender=ADMIN)
                raise RuntimeError("boom")
        assert registry.get_protocol_fee() == 0

    def test_batch_slot(self):
        chain = Chain()
        with chain.atomic():
            chain.claim_batch_slot(VAULT)
            with pytest.raises(ProtocolStateError) as exc:
                chain.claim_batch_slot(VAULT)
            assert exc.value.code is ErrorCode.BATCH_CONFLICT
        with chain.atomic():
            chain.claim_batch_slot(VAULT)

    def test_batch_slot_needs_a_batch(self):
        with pytest.raises(RuntimeError):
            Chain().claim_batch_slot(VAULT)

    def test_events_by_emitter(self):
        chain = Chain(block_height=3)
        chain.emit(ALICE, "a")
        chain.emit(BOB, "b")
        assert chain.events(ALICE) == ["a"]
        assert chain.event_log()[1].block_height == 3


class TestRegistry:
    def _registry(self, **kwargs):
        return InMemoryProtocolRegistry(admin=ADMIN, treasury=TREASURY, **kwargs)

    def test_admin_gating(self):
        r = self._registry()
        for call in (
            lambda: r.update_protocol_fee(1, sender=ALICE),
            lambda: r.update_oracle_fee(1, sender=ALICE),
            lambda: r.update_oracle_whitelist(Whitelist(), sender=ALICE),
            lambda: r.stop_protocol(sender=ALICE),
            lambda: r.resume_protocol(sender=ALICE),
        ):
            with pytest.raises(AuthorizationError) as exc:
                call()
            assert exc.value.code is ErrorCode.NOT_ADMIN

    def test_halt_toggle(self):
        r = self._registry()
        r.stop_protocol(sender=ADMIN)
        assert r.is_halted()
        r.resume_protocol(sender=ADMIN)
        assert not r.is_halted()

    def test_protocol_fee_bounded_by_precision(self):
        r = self._registry()
        r.update_protocol_fee(100, sender=ADMIN)
        with pytest.raises(ArithmeticFault):
            r.update_protocol_fee(101, sender=ADMIN)

    def test_whitelist_capacity(self):
        r = self._registry(max_participants=2)
        with pytest.raises(AuthorizationError) as exc:
            r.update_oracle_whitelist(Whitelist.of([addr(0x21), addr(0x22), addr(0x23)]), sender=ADMIN)
        assert exc.value.code is ErrorCode.INVALID_WHITELIST

    def test_treasury(self):
        assert self._registry().treasury_address() == TREASURY

"""Tests for zkusd/integration/price_feed.py: the oracle shell."""

import pytest

from zkusd.core.errors import AuthorizationError, ErrorCode, HaltError, OracleError, ValidationError
from zkusd.core.oracle import FallbackSlot
from zkusd.integration import FallbackPriceUpdated, PriceSettled, PriceSubmitted
from zkusd.state.whitelist import Whitelist

from harness import ADMIN, ALICE, ONE, ORACLE, P1, P2, P3, build_protocol


@pytest.fixture
def fresh():
    return build_protocol(price=None)


class TestSubmit:
    def test_submission_is_pending_until_settled(self, fresh):
        fresh.oracle.submit_price(ONE, fresh.whitelist, sender=P1)
        assert fresh.oracle.has_pending_submission(P1)
        with pytest.raises(OracleError) as exc:
            fresh.oracle.submit_price(2 * ONE, fresh.whitelist, sender=P1)
        assert exc.value.code is ErrorCode.PENDING_ACTION_EXISTS

        fresh.oracle.settle_price_update()
        assert not fresh.oracle.has_pending_submission(P1)
        fresh.oracle.submit_price(2 * ONE, fresh.whitelist, sender=P1)

    def test_outsider(self, fresh):
        with pytest.raises(AuthorizationError) as exc:
            fresh.oracle.submit_price(ONE, fresh.whitelist, sender=ALICE)
        assert exc.value.code is ErrorCode.SENDER_NOT_WHITELISTED

    def test_stale_whitelist_snapshot(self, fresh):
        old = fresh.whitelist
        fresh.registry.update_oracle_whitelist(Whitelist.of([P1, P2]), sender=ADMIN)
        with pytest.raises(AuthorizationError) as exc:
            fresh.oracle.submit_price(ONE, old, sender=P1)
        assert exc.value.code is ErrorCode.INVALID_WHITELIST

    def test_rejection_leaves_no_trace(self, fresh):
        events_before = fresh.chain.events(ORACLE)
        with pytest.raises(AuthorizationError):
            fresh.oracle.submit_price(ONE, fresh.whitelist, sender=ALICE)
        assert fresh.oracle.state.action_log == ()
        assert fresh.chain.events(ORACLE) == events_before

    def test_pays_oracle_fee_when_funded(self, fresh):
        fresh.registry.update_oracle_fee(ONE // 10, sender=ADMIN)
        fresh.chain.fund(ORACLE, ONE)
        paid = fresh.oracle.submit_price(ONE, fresh.whitelist, sender=P1)
        assert paid == ONE // 10
        assert fresh.chain.balance_of(P1) == ONE // 10
        assert fresh.chain.balance_of(ORACLE) == ONE - ONE // 10
        assert fresh.chain.events(ORACLE)[-1] == PriceSubmitted(submitter=P1, price=ONE, fee_paid=ONE // 10)

    def test_unfunded_oracle_still_accepts(self, fresh):
        fresh.registry.update_oracle_fee(ONE, sender=ADMIN)
        assert fresh.oracle.submit_price(ONE, fresh.whitelist, sender=P1) == 0
        assert fresh.chain.balance_of(P1) == 0
        assert fresh.oracle.has_pending_submission(P1)


class TestSettle:
    def test_median_of_window(self, fresh):
        fresh.oracle.submit_price(ONE, fresh.whitelist, sender=P1)
        fresh.oracle.submit_price(5 * ONE, fresh.whitelist, sender=P2)
        fresh.oracle.submit_price(2 * ONE, fresh.whitelist, sender=P3)
        assert fresh.oracle.settle_price_update() == 2 * ONE
        assert fresh.oracle.get_price() == 2 * ONE
        assert fresh.chain.events(ORACLE)[-1] == PriceSettled(price=2 * ONE, block_height=10, submissions=3)

    def test_empty_settlement_emits_nothing(self, protocol):
        events_before = protocol.chain.events(ORACLE)
        assert protocol.oracle.settle_price_update() == ONE
        assert protocol.chain.events(ORACLE) == events_before


class TestGetPrice:
    def test_halt_fails_closed(self, protocol):
        protocol.registry.stop_protocol(sender=ADMIN)
        with pytest.raises(HaltError) as exc:
            protocol.oracle.get_price()
        assert exc.value.code is ErrorCode.EMERGENCY_HALT

    def test_expiry_falls_back(self, protocol):
        protocol.oracle.update_fallback_price(3 * ONE, sender=ADMIN)  # height 10 -> even slot
        protocol.chain.advance_blocks(11)  # height 21 reads parity(22) = even
        assert protocol.oracle.get_price() == 3 * ONE

    def test_expired_without_fallback(self, protocol):
        protocol.chain.advance_blocks(11)
        with pytest.raises(OracleError) as exc:
            protocol.oracle.get_price()
        assert exc.value.code is ErrorCode.ORACLE_EXPIRED


class TestFallback:
    def test_admin_only(self, protocol):
        with pytest.raises(AuthorizationError) as exc:
            protocol.oracle.update_fallback_price(ONE, sender=P1)
        assert exc.value.code is ErrorCode.NOT_ADMIN

    def test_even_height_writes_even_slot(self, protocol):
        assert protocol.chain.block_height % 2 == 0
        slot = protocol.oracle.update_fallback_price(2 * ONE, sender=ADMIN)
        assert slot is FallbackSlot.EVEN
        assert protocol.oracle.state.fallback_price_even == 2 * ONE
        assert protocol.oracle.state.fallback_price_odd == 0
        assert protocol.chain.events(ORACLE)[-1] == FallbackPriceUpdated(
            price=2 * ONE, block_height=10, slot=FallbackSlot.EVEN
        )

    def test_write_visible_from_next_block(self, protocol):
        protocol.oracle.update_fallback_price(2 * ONE, sender=ADMIN)
        assert protocol.oracle.get_fallback_price() == 0
        protocol.chain.advance_blocks(1)
        assert protocol.oracle.get_fallback_price() == 2 * ONE

    def test_zero_rejected(self, protocol):
        with pytest.raises(ValidationError) as exc:
            protocol.oracle.update_fallback_price(0, sender=ADMIN)
        assert exc.value.code is ErrorCode.AMOUNT_ZERO

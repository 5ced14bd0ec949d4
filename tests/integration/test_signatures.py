# Signed oracle submissions (BLS12-381 G2Basic via py_ecc).

from __future__ import annotations

import pytest

from zkusd.core.errors import AuthorizationError, ErrorCode
from zkusd.integration import InMemoryProtocolRegistry, PriceFeedOracle, address_from_privkey, sign_price_submission
from zkusd.integration.chain import Chain
from zkusd.integration.signatures import SignedPriceSubmission, verify_price_submission
from zkusd.state.whitelist import Whitelist

from harness import ADMIN, ONE, ORACLE, TREASURY

SK = 4242


@pytest.fixture(scope="module")
def submitter() -> str:
    return address_from_privkey(SK)


@pytest.fixture
def feed(submitter: str) -> PriceFeedOracle:
    chain = Chain(block_height=2)
    registry = InMemoryProtocolRegistry(
        admin=ADMIN, treasury=TREASURY, whitelist=Whitelist.of([submitter]), chain=chain
    )
    return PriceFeedOracle(address=ORACLE, registry=registry, chain=chain)


def test_address_is_a_48_byte_pubkey(submitter: str) -> None:
    assert submitter.startswith("0x")
    assert len(submitter) == 2 + 96


def test_signed_submission_accepted_then_replay_rejected(feed: PriceFeedOracle, submitter: str) -> None:
    wl = feed.registry.get_whitelist()
    signed = sign_price_submission(privkey=SK, oracle_address=ORACLE, price=ONE, nonce=1, whitelist=wl)
    assert verify_price_submission(signed, oracle_address=ORACLE, whitelist=wl)

    feed.submit_signed_price(signed, wl)
    assert feed.has_pending_submission(submitter)
    assert feed.nonces.get_last(submitter) == 1

    feed.settle_price_update()
    with pytest.raises(AuthorizationError) as exc:
        feed.submit_signed_price(signed, wl)
    assert exc.value.code is ErrorCode.INVALID_SIGNATURE
    assert not feed.has_pending_submission(submitter)


def test_tampered_price_rejected(feed: PriceFeedOracle) -> None:
    wl = feed.registry.get_whitelist()
    signed = sign_price_submission(privkey=SK, oracle_address=ORACLE, price=ONE, nonce=1, whitelist=wl)
    forged = SignedPriceSubmission(
        submitter=signed.submitter, price=2 * ONE, nonce=signed.nonce, signature=signed.signature
    )
    with pytest.raises(AuthorizationError) as exc:
        feed.submit_signed_price(forged, wl)
    assert exc.value.code is ErrorCode.INVALID_SIGNATURE
    assert feed.state.action_log == ()


def test_signature_bound_to_oracle_address(submitter: str) -> None:
    wl = Whitelist.of([submitter])
    signed = sign_price_submission(privkey=SK, oracle_address=ORACLE, price=ONE, nonce=1, whitelist=wl)
    other_oracle = "0x" + "ee" * 48
    assert not verify_price_submission(signed, oracle_address=other_oracle, whitelist=wl)


def test_malformed_signature_is_not_an_exception(submitter: str) -> None:
    wl = Whitelist.of([submitter])
    bogus = SignedPriceSubmission(submitter=submitter, price=ONE, nonce=1, signature="0x1234")
    assert not verify_price_submission(bogus, oracle_address=ORACLE, whitelist=wl)

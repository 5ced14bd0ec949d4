"""
BLS12-381 signatures for oracle price submissions (py_ecc ``G2Basic``).

Signed message:
    sha256(domain_sep("oracle_price_sig:<oracle>") || canonical_json(payload))

where ``payload`` binds the submitter, price, per-submitter nonce and the
whitelist digest the submitter saw.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from typing import Any, Dict

from py_ecc.bls import G2Basic

from ..state.balances import Address
from ..state.canonical import (
    ADDRESS_NBYTES,
    canonical_address,
    canonical_json_bytes,
    domain_sep_bytes,
    hex_to_bytes_allow_0x,
)
from ..state.whitelist import Whitelist

SIGNATURE_NBYTES = 96


@dataclass(frozen=True)
class SignedPriceSubmission:
    submitter: Address
    price: int
    nonce: int
    signature: str


def address_from_privkey(privkey: int) -> Address:
    """BLS public key of ``privkey`` as a canonical address."""
    if not isinstance(privkey, int) or isinstance(privkey, bool) or privkey <= 0:
        raise ValueError("privkey must be a positive int")
    return "0x" + G2Basic.SkToPk(privkey).hex()


def price_submission_payload(*, submitter: Address, price: int, nonce: int, whitelist: Whitelist) -> Dict[str, Any]:
    return {
        "submitter": canonical_address(submitter, name="submitter"),
        "price": price,
        "nonce": nonce,
        "whitelist": whitelist.digest(),
    }


def _message_hash(oracle_address: Address, payload: Dict[str, Any]) -> bytes:
    oracle = canonical_address(oracle_address, name="oracle_address")
    msg = domain_sep_bytes(f"oracle_price_sig:{oracle}") + canonical_json_bytes(payload)
    return hashlib.sha256(msg).digest()


def sign_price_submission(
    *, privkey: int, oracle_address: Address, price: int, nonce: int, whitelist: Whitelist
) -> SignedPriceSubmission:
    submitter = address_from_privkey(privkey)
    payload = price_submission_payload(submitter=submitter, price=price, nonce=nonce, whitelist=whitelist)
    sig = G2Basic.Sign(privkey, _message_hash(oracle_address, payload))
    return SignedPriceSubmission(submitter=submitter, price=price, nonce=nonce, signature="0x" + sig.hex())


def verify_price_submission(
    submission: SignedPriceSubmission, *, oracle_address: Address, whitelist: Whitelist
) -> bool:
    """True iff ``submission.signature`` is the submitter's signature over the payload."""
    try:
        pubkey = hex_to_bytes_allow_0x(submission.submitter, name="submitter", expected_nbytes=ADDRESS_NBYTES)
        sig = hex_to_bytes_allow_0x(submission.signature, name="signature", expected_nbytes=SIGNATURE_NBYTES)
    except (TypeError, ValueError):
        return False
    payload = price_submission_payload(
        submitter=submission.submitter, price=submission.price, nonce=submission.nonce, whitelist=whitelist
    )
    return bool(G2Basic.Verify(pubkey, _message_hash(oracle_address, payload), sig))

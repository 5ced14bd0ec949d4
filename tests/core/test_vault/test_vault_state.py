"""Tests for zkusd/core/vault/state.py: commitments and serialization."""

import json

import pytest

from zkusd.core.vault.state import (
    STATE_VAR_NAMES,
    commitment_for_secret,
    initial_state,
    secret_matches,
    state_from_dict,
    state_to_dict,
)
from zkusd.core.vault.types import VaultState


class TestCommitment:
    def test_shape(self):
        c = commitment_for_secret(42)
        assert c.startswith("0x")
        assert len(c) == 66

    def test_deterministic(self):
        assert commitment_for_secret(42) == commitment_for_secret(42)

    def test_int_and_padded_bytes_agree(self):
        assert commitment_for_secret(42) == commitment_for_secret(b"\x2a")

    def test_distinct_secrets(self):
        assert commitment_for_secret(1) != commitment_for_secret(2)

    def test_oversized_secret(self):
        with pytest.raises(ValueError):
            commitment_for_secret(1 << 256)

    def test_bool_secret(self):
        with pytest.raises(TypeError):
            commitment_for_secret(True)


class TestSecretMatches:
    def test_holder_of_secret(self):
        assert secret_matches(initial_state(7), 7)

    def test_wrong_secret(self):
        assert not secret_matches(initial_state(7), 8)

    def test_none(self):
        assert not secret_matches(initial_state(7), None)

    def test_malformed_secret_is_just_a_mismatch(self):
        assert not secret_matches(initial_state(7), -1)


class TestInitialState:
    def test_defaults(self):
        s = initial_state(7)
        assert isinstance(s, VaultState)
        assert s.collateral_amount == 0
        assert s.debt_amount == 0
        assert s.interaction_flag is False

    def test_frozen(self):
        s = initial_state(7)
        with pytest.raises(AttributeError):
            s.collateral_amount = 1  # type: ignore[misc]


class TestSerialization:
    def test_keys(self):
        assert set(state_to_dict(initial_state(7))) == set(STATE_VAR_NAMES)

    def test_json_roundtrip(self):
        s = VaultState(
            ownership_commitment=commitment_for_secret(7),
            collateral_amount=100,
            debt_amount=5,
            interaction_flag=True,
        )
        assert state_from_dict(json.loads(json.dumps(state_to_dict(s)))) == s

    def test_canonicalizes_commitment(self):
        d = state_to_dict(initial_state(7))
        d["ownership_commitment"] = d["ownership_commitment"].upper().replace("0X", "0x")
        assert state_from_dict(d) == initial_state(7)

    def test_missing_field(self):
        d = state_to_dict(initial_state(7))
        del d["debt_amount"]
        with pytest.raises(KeyError):
            state_from_dict(d)

    def test_bool_amount(self):
        d = state_to_dict(initial_state(7))
        d["collateral_amount"] = True
        with pytest.raises(TypeError):
            state_from_dict(d)

    def test_int_flag(self):
        d = state_to_dict(initial_state(7))
        d["interaction_flag"] = 1
        with pytest.raises(TypeError):
            state_from_dict(d)

"""
Unit tests for the proof envelope codec.
"""

from __future__ import annotations

import base64
import json

import pytest

from zksla.primitives.proof import Groth16Proof
from zksla.systems.zk.envelope import (
    canonical_json,
    decode_envelope,
    encode_envelope,
    mock_envelope,
)
from zksla.systems.zk.errors import VerificationError


def _b64(payload) -> str:
    return base64.b64encode(json.dumps(payload).encode("utf-8")).decode("ascii")


class TestMockEnvelope:
    def test_has_groth16_shape(self):
        env = mock_envelope()
        assert env.protocol == "groth16"
        assert env.curve == "bn128"
        assert env.pi_a[2] == "1"
        assert env.pi_c[2] == "1"
        assert env.pi_b[2] == ["1", "0"]
        assert all(len(pair) == 2 for pair in env.pi_b)

    def test_filler_is_32_byte_hex(self):
        env = mock_envelope()
        for value in (env.pi_a[0], env.pi_a[1], env.pi_b[0][0], env.pi_c[1]):
            assert len(value) == 64
            int(value, 16)

    def test_filler_is_random(self):
        assert mock_envelope().pi_a[0] != mock_envelope().pi_a[0]


class TestEncoding:
    def test_encoding_is_canonical(self):
        env = mock_envelope()
        decoded = base64.b64decode(encode_envelope(env))
        assert decoded == canonical_json(env.model_dump(mode="json"))
        assert b" " not in decoded
        assert list(json.loads(decoded)) == sorted(json.loads(decoded))

    def test_decode_restores_envelope(self):
        env = mock_envelope()
        assert decode_envelope(encode_envelope(env)) == env

    def test_extra_prover_fields_survive(self):
        payload = {
            "pi_a": ["1", "2", "1"],
            "pi_b": [["1", "2"], ["3", "4"], ["1", "0"]],
            "pi_c": ["5", "6", "1"],
            "protocol": "groth16",
            "curve": "bn128",
            "note": "kept",
        }
        env = decode_envelope(_b64(payload))
        assert json.loads(base64.b64decode(encode_envelope(env)))["note"] == "kept"


class TestMalformed:
    @pytest.mark.parametrize(
        "encoded",
        [
            "not base64 at all!!",
            "abc",
            base64.b64encode(b"\xff\xfe").decode(),
            base64.b64encode(b"{not json").decode(),
            _b64(["a", "list"]),
            _b64({"pi_a": ["1"], "pi_b": [], "pi_c": []}),
            _b64({
                "pi_a": ["1", "2", "1"],
                "pi_b": [["1"], ["3", "4"], ["1", "0"]],
                "pi_c": ["5", "6", "1"],
            }),
        ],
    )
    def test_raises_verification_error(self, encoded: str):
        with pytest.raises(VerificationError):
            decode_envelope(encoded)

    def test_groth16_model_rejects_short_pi_a(self):
        with pytest.raises(ValueError):
            Groth16Proof(pi_a=["1"], pi_b=[["1", "2"]] * 3, pi_c=["1", "2", "1"])

"""
ZK-SLA — Proof Envelope Codec

SLAProof.proof is base64 over the UTF-8 canonical JSON of a Groth16Proof.
Canonical means sorted keys and compact separators, so the same envelope
always encodes to the same string.
"""

from __future__ import annotations

import base64
import binascii
import json
import secrets
from typing import Any

from pydantic import ValidationError

from zksla.primitives.proof import BN128_CURVE, GROTH16_PROTOCOL, Groth16Proof
from zksla.systems.zk.errors import VerificationError


def canonical_json(payload: dict[str, Any]) -> bytes:
    return json.dumps(payload, sort_keys=True, separators=(",", ":")).encode("utf-8")


def encode_envelope(envelope: Groth16Proof) -> str:
    return base64.b64encode(canonical_json(envelope.model_dump(mode="json"))).decode("ascii")


def decode_envelope(encoded: str) -> Groth16Proof:
    """
    Inverse of encode_envelope. Any malformation (base64, UTF-8, JSON or
    envelope shape) raises VerificationError.
    """
    try:
        raw = base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise VerificationError(f"proof is not valid base64: {exc}") from exc
    try:
        payload = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, ValueError) as exc:
        raise VerificationError(f"proof is not valid JSON: {exc}") from exc
    if not isinstance(payload, dict):
        raise VerificationError("proof envelope is not a JSON object")
    try:
        return Groth16Proof.model_validate(payload)
    except ValidationError as exc:
        raise VerificationError(f"proof envelope has the wrong shape: {exc}") from exc


def _filler() -> str:
    return secrets.token_hex(32)


def mock_envelope() -> Groth16Proof:
    """
    A structurally valid, cryptographically meaningless Groth16 proof.

    Affine points in projective form: z = "1" for G1, ["1", "0"] for G2.
    """
    return Groth16Proof(
        pi_a=[_filler(), _filler(), "1"],
        pi_b=[[_filler(), _filler()], [_filler(), _filler()], ["1", "0"]],
        pi_c=[_filler(), _filler(), "1"],
        protocol=GROTH16_PROTOCOL,
        curve=BN128_CURVE,
    )

"""
ZK-SLA — Proof Primitives

The data model shared by the generator, the verifier and their callers.

Wire contract:
  SLAProof.proof          base64 of canonical JSON of a Groth16Proof
  SLAProof.publicSignals  decimal strings, fixed positional meaning:
                          [taskIdHash, slaDeadline, biasThreshold, complianceFlag]

Changing the signal order breaks every consumer of issued proofs.
"""

from __future__ import annotations

import enum
import re
from typing import Any

from pydantic import BaseModel, Field, model_validator

from zksla.primitives.common import ZKSLABaseModel

# BN128 (alt_bn128 / BN254) scalar field modulus. Every circuit input must be
# strictly smaller than this.
BN128_FIELD_MODULUS = (
    21888242871839275222246405745257275088548364400416034343698204186575808495617
)

# Positional meaning of PublicSignals
SIGNAL_TASK_ID_HASH = 0
SIGNAL_SLA_DEADLINE = 1
SIGNAL_BIAS_THRESHOLD = 2
SIGNAL_COMPLIANCE_FLAG = 3
PUBLIC_SIGNAL_COUNT = 4

GROTH16_PROTOCOL = "groth16"
BN128_CURVE = "bn128"

_DECIMAL_RE = re.compile(r"[0-9]+")


class ProofMode(enum.StrEnum):
    """Which proving path produced or checks a proof."""

    REAL = "real"   # Compiled circuit + snarkjs
    MOCK = "mock"   # Structural stand-in, no cryptography


# ─── Request ──────────────────────────────────────────────────────


class ProofInput(ZKSLABaseModel):
    """
    Everything the prover knows about one completed task.

    Transient: built per request and discarded after generation. All fields
    are required; defaults belong to the calling layer.
    """

    task_id: str
    completion_timestamp: int = Field(ge=0)    # Unix seconds, private
    sla_deadline: int = Field(ge=0)            # Absolute unix seconds, public
    bias_score: int = Field(ge=0, le=100)      # Private
    bias_threshold: int = Field(ge=0, le=100)  # Public
    output_data: str = Field(min_length=1, repr=False)  # Private, only its hash enters the circuit


class CircuitWitness(ZKSLABaseModel):
    """
    The six field elements fed to the circuit.

    Public: task_id_hash, sla_deadline, bias_threshold.
    Private: completion_timestamp, bias_score, output_hash.
    """

    task_id_hash: int
    sla_deadline: int
    bias_threshold: int
    completion_timestamp: int
    bias_score: int
    output_hash: int

    def to_circuit_inputs(self) -> dict[str, str]:
        """Decimal-string inputs keyed by the circuit's signal names."""
        return {
            "taskIdHash": str(self.task_id_hash),
            "slaDeadline": str(self.sla_deadline),
            "biasThreshold": str(self.bias_threshold),
            "completionTimestamp": str(self.completion_timestamp),
            "biasScore": str(self.bias_score),
            "outputHash": str(self.output_hash),
        }

    def public_signals(self, compliance_flag: str) -> list[str]:
        return [
            str(self.task_id_hash),
            str(self.sla_deadline),
            str(self.bias_threshold),
            compliance_flag,
        ]


# ─── Envelope ─────────────────────────────────────────────────────


class Groth16Proof(BaseModel):
    """
    A Groth16 proof over BN128 in snarkjs JSON shape.

    Coordinates are strings. Keys a real prover adds beyond the fixed
    shape are kept so the envelope survives a decode/encode cycle.
    """

    model_config = {"extra": "allow"}

    pi_a: list[str] = Field(min_length=3, max_length=3)
    pi_b: list[list[str]] = Field(min_length=3, max_length=3)
    pi_c: list[str] = Field(min_length=3, max_length=3)
    protocol: str = GROTH16_PROTOCOL
    curve: str = BN128_CURVE

    @model_validator(mode="after")
    def _check_pi_b_pairs(self) -> Groth16Proof:
        if any(len(pair) != 2 for pair in self.pi_b):
            raise ValueError("pi_b must be three coordinate pairs")
        return self


# ─── Proof Artifact ───────────────────────────────────────────────


class SLAProof(ZKSLABaseModel):
    """
    A self-contained proof artifact.

    ``verified`` records the generation-time outcome: predicate evaluation
    in mock mode, circuit satisfaction in real mode. The verifier never
    trusts it in real mode.
    """

    proof: str                       # Base64 canonical JSON of a Groth16Proof
    public_signals: list[str]
    proof_size_bytes: int            # len(proof)
    task_id_hash: str                # Lowercase hex, unpadded
    verified: bool


class PublicInputs(ZKSLABaseModel):
    """The public half of a proof, decoded from signals 0..2."""

    task_id_hash: str
    sla_deadline: int
    bias_threshold: int

    @classmethod
    def from_signals(cls, signals: list[str]) -> PublicInputs:
        """
        Decode by fixed position. Raises ValueError when fewer than three
        signals are present or one of them is not a decimal integer.
        """
        if len(signals) < SIGNAL_BIAS_THRESHOLD + 1:
            raise ValueError(
                f"expected at least {SIGNAL_BIAS_THRESHOLD + 1} public signals, got {len(signals)}"
            )
        for index in (SIGNAL_TASK_ID_HASH, SIGNAL_SLA_DEADLINE, SIGNAL_BIAS_THRESHOLD):
            if not _DECIMAL_RE.fullmatch(str(signals[index])):
                raise ValueError(f"public signal {index} is not a decimal integer: {signals[index]!r}")
        return cls(
            task_id_hash=str(signals[SIGNAL_TASK_ID_HASH]),
            sla_deadline=int(signals[SIGNAL_SLA_DEADLINE]),
            bias_threshold=int(signals[SIGNAL_BIAS_THRESHOLD]),
        )


def compliance_flag_of(signals: list[str]) -> str | None:
    """The published compliance flag, or None when the circuit does not publish one."""
    if len(signals) > SIGNAL_COMPLIANCE_FLAG:
        return str(signals[SIGNAL_COMPLIANCE_FLAG])
    return None


# ─── Verification ─────────────────────────────────────────────────


class VerificationKey(ZKSLABaseModel):
    """A parsed snarkjs verification key plus where it came from."""

    data: dict[str, Any]
    is_mock: bool = False
    source: str = ""


class VerificationResult(ZKSLABaseModel):
    valid: bool
    task_id_hash: str
    sla_deadline: int
    bias_threshold: int
    message: str
    mode: ProofMode

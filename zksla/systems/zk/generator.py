"""
ZK-SLA — Proof Generator

Builds a self-contained SLAProof from a ProofInput.

A proof is produced for every well-formed input, compliant or not. A breach
is reported through ``verified`` and the public compliance flag, never by
withholding the proof: an agent must not be able to suppress evidence of
its own breach.
"""

from __future__ import annotations

import time

import structlog

from zksla.primitives.proof import CircuitWitness, ProofInput, SLAProof
from zksla.systems.zk.backends import ProvingBackend
from zksla.systems.zk.envelope import encode_envelope
from zksla.systems.zk.hashing import hash_output, hash_task_id, to_hex

logger = structlog.get_logger("zksla.systems.zk.generator")


def build_witness(proof_input: ProofInput) -> CircuitWitness:
    """Commit to the private strings and lay out the six circuit inputs."""
    return CircuitWitness(
        task_id_hash=hash_task_id(proof_input.task_id),
        sla_deadline=proof_input.sla_deadline,
        bias_threshold=proof_input.bias_threshold,
        completion_timestamp=proof_input.completion_timestamp,
        bias_score=proof_input.bias_score,
        output_hash=hash_output(proof_input.output_data),
    )


class ProofGenerator:
    """
    Turns requests into proof artifacts using the backend chosen at
    construction.

    Performs no network I/O. In real mode generation runs the snarkjs
    prover and can take seconds; it is bounded by the backend's timeout
    and raises GenerationError on backend failure.
    """

    def __init__(self, backend: ProvingBackend) -> None:
        self._backend = backend
        self._logger = logger.bind(component="proof_generator", mode=backend.mode.value)

    @property
    def backend(self) -> ProvingBackend:
        return self._backend

    async def generate_proof(self, proof_input: ProofInput) -> SLAProof:
        start = time.monotonic()
        witness = build_witness(proof_input)
        result = await self._backend.generate(witness)

        encoded = encode_envelope(result.envelope)
        proof = SLAProof(
            proof=encoded,
            public_signals=result.public_signals,
            proof_size_bytes=len(encoded),
            task_id_hash=to_hex(witness.task_id_hash),
            verified=result.satisfied,
        )

        self._logger.info(
            "sla_proof_generated",
            task_id_hash=proof.task_id_hash,
            verified=proof.verified,
            proof_size_bytes=proof.proof_size_bytes,
            elapsed_ms=round((time.monotonic() - start) * 1000, 1),
        )
        return proof

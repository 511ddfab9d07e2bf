"""
ZK-SLA — Proof Verifier

Re-checks an SLAProof using only public information: the envelope, the
public signals and the verification key. The prover's ProofInput is never
consulted, so the verifier learns nothing about the agent's output or its
true completion time beyond what the signals reveal.

verify_proof never raises. Malformed artifacts and backend failures come
back as ``valid=False`` with a "Verification error: ..." message.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

import structlog

from zksla.primitives.proof import (
    PublicInputs,
    SLAProof,
    VerificationKey,
    VerificationResult,
)
from zksla.systems.zk.artifacts import read_verification_key
from zksla.systems.zk.backends import ProvingBackend
from zksla.systems.zk.envelope import decode_envelope
from zksla.systems.zk.errors import VerificationError, ZKSLAError

logger = structlog.get_logger("zksla.systems.zk.verifier")


class VerificationKeyCell:
    """
    Lazily loaded, read-once verification key.

    The first caller reads the file off the event loop; concurrent first
    callers wait on the same load instead of reading again. Once populated
    the value never changes. A missing file yields the mock key.
    """

    def __init__(self, path: Path) -> None:
        self._path = path
        self._value: VerificationKey | None = None
        self._lock = asyncio.Lock()

    @property
    def loaded(self) -> bool:
        return self._value is not None

    async def get(self) -> VerificationKey:
        if self._value is not None:
            return self._value
        async with self._lock:
            if self._value is None:
                self._value = await asyncio.to_thread(read_verification_key, self._path)
                logger.info(
                    "verification_key_loaded",
                    source=self._value.source,
                    is_mock=self._value.is_mock,
                )
            return self._value


class ProofVerifier:
    def __init__(self, backend: ProvingBackend, vkey_path: Path) -> None:
        self._backend = backend
        self._key_cell = VerificationKeyCell(vkey_path)
        self._logger = logger.bind(component="proof_verifier", mode=backend.mode.value)

    @property
    def backend(self) -> ProvingBackend:
        return self._backend

    async def verify_proof(self, proof: SLAProof) -> VerificationResult:
        try:
            key = await self._key_cell.get()
            envelope = decode_envelope(proof.proof)
            try:
                public = PublicInputs.from_signals(proof.public_signals)
            except ValueError as exc:
                raise VerificationError(f"public signals are malformed: {exc}") from exc

            verdict = await self._backend.verify(
                key=key,
                envelope=envelope,
                public_signals=proof.public_signals,
                claimed=proof.verified,
            )
        except ZKSLAError as exc:
            return self._error_result(proof, exc)
        except Exception as exc:
            # Backend faults of any kind are downgraded, never propagated.
            self._logger.exception("verification_backend_fault", task_id_hash=proof.task_id_hash)
            return self._error_result(proof, exc)

        self._logger.info(
            "sla_proof_verified",
            task_id_hash=public.task_id_hash,
            valid=verdict.valid,
        )
        return VerificationResult(
            valid=verdict.valid,
            task_id_hash=public.task_id_hash,
            sla_deadline=public.sla_deadline,
            bias_threshold=public.bias_threshold,
            message=verdict.message,
            mode=self._backend.mode,
        )

    def _error_result(self, proof: SLAProof, exc: Exception) -> VerificationResult:
        task_id_hash = _decimal_task_id_hash(proof)
        self._logger.warning(
            "sla_proof_verification_error",
            task_id_hash=task_id_hash,
            error=str(exc),
        )
        return VerificationResult(
            valid=False,
            task_id_hash=task_id_hash,
            sla_deadline=0,
            bias_threshold=0,
            message=f"Verification error: {exc}",
            mode=self._backend.mode,
        )


def _decimal_task_id_hash(proof: SLAProof) -> str:
    """
    Task id commitment in the decimal form a successful verification reports.

    Prefers public signal 0, falls back to the hex ``task_id_hash`` field and
    returns that field unchanged only when neither can be read.
    """
    if proof.public_signals and proof.public_signals[0].isdecimal():
        return proof.public_signals[0]
    try:
        return str(int(proof.task_id_hash, 16))
    except ValueError:
        return proof.task_id_hash

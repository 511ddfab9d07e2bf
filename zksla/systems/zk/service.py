"""
ZK-SLA — Proof Service

The calling layer around the proof system. It owns one generator and one
verifier sharing a single backend, validates inbound requests, applies the
request defaults, and runs the prove-then-verify flow:

  SLAProofRequest ──▶ ProofInput ──▶ generate_proof ──▶ verify_proof ──▶ ProveSLAResponse

Callers construct the service explicitly and keep it for the process
lifetime; there is no module-level instance.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

import structlog
from pydantic import Field

from zksla.config import ZKSLAConfig
from zksla.primitives.common import ZKSLABaseModel, new_id, to_unix_seconds, utc_now
from zksla.primitives.proof import (
    BN128_CURVE,
    GROTH16_PROTOCOL,
    ProofInput,
    ProofMode,
    SLAProof,
    VerificationResult,
)
from zksla.systems.zk.artifacts import CircuitArtifacts
from zksla.systems.zk.backends import ProvingBackend, select_backend
from zksla.systems.zk.generator import ProofGenerator
from zksla.systems.zk.verifier import ProofVerifier

logger = structlog.get_logger("zksla.systems.zk.service")

SERVICE_NAME = "ZK-SLA Proof Service"
SERVICE_VERSION = "1.0.0"


# ─── Request / Response ───────────────────────────────────────────


class SLAProofRequest(ZKSLABaseModel):
    """
    A caller's claim that a task finished in time.

    The deadline is ``started_at + sla_deadline_seconds``. Without
    ``started_at`` the window is measured from ``completed_at``.
    Missing or malformed fields raise pydantic.ValidationError here,
    before anything reaches the prover.
    """

    task_id: str = Field(min_length=1)
    agent_id: str = Field(min_length=1)
    task_description: str = ""
    completed_at: datetime
    started_at: datetime | None = None
    sla_deadline_seconds: int = Field(gt=0)
    output_data: str = Field(min_length=1, repr=False)
    bias_score: int | None = Field(default=None, ge=0, le=100)
    bias_threshold: int | None = Field(default=None, ge=0, le=100)

    def to_proof_input(self, bias_score: int = 0, bias_threshold: int = 5) -> ProofInput:
        """
        Build the prover's input. The arguments are the fallbacks for
        fields the caller left out.
        """
        completion_timestamp = to_unix_seconds(self.completed_at)
        window_start = (
            to_unix_seconds(self.started_at)
            if self.started_at is not None
            else completion_timestamp
        )
        return ProofInput(
            task_id=self.task_id,
            completion_timestamp=completion_timestamp,
            sla_deadline=window_start + self.sla_deadline_seconds,
            bias_score=self.bias_score if self.bias_score is not None else bias_score,
            bias_threshold=(
                self.bias_threshold if self.bias_threshold is not None else bias_threshold
            ),
            output_data=self.output_data,
        )


class ProveSLAResponse(ZKSLABaseModel):
    proof_id: str
    agent_id: str
    task_id: str
    proof: str
    public_signals: list[str]
    proof_size_bytes: int
    verified: bool
    message: str
    mode: ProofMode
    metadata: dict[str, Any] = Field(default_factory=dict)


# ─── Service ──────────────────────────────────────────────────────


class ZKSLAService:
    """
    Owns the proof system for one process.

    The backend is chosen once, here. Pass ``backend`` to override the
    artifact probe (tests, or callers that build their own backend).
    """

    def __init__(
        self,
        config: ZKSLAConfig | None = None,
        backend: ProvingBackend | None = None,
    ) -> None:
        self._config = config or ZKSLAConfig()
        self._backend = backend or select_backend(self._config.prover)
        artifacts = CircuitArtifacts.from_dir(self._config.prover.circuits_dir)
        self._generator = ProofGenerator(self._backend)
        self._verifier = ProofVerifier(self._backend, artifacts.vkey_path)
        self._logger = logger.bind(component="zksla_service", mode=self._backend.mode.value)

    @property
    def mode(self) -> ProofMode:
        return self._backend.mode

    @property
    def generator(self) -> ProofGenerator:
        return self._generator

    @property
    def verifier(self) -> ProofVerifier:
        return self._verifier

    async def generate(self, proof_input: ProofInput) -> SLAProof:
        return await self._generator.generate_proof(proof_input)

    async def verify(self, proof: SLAProof) -> VerificationResult:
        return await self._verifier.verify_proof(proof)

    async def prove_sla(self, request: SLAProofRequest) -> ProveSLAResponse:
        """
        Generate a proof for the request and immediately verify it.

        GenerationError propagates; verification problems are reported in
        the response's ``verified`` and ``message``.
        """
        defaults = self._config.defaults
        proof_input = request.to_proof_input(
            bias_score=defaults.bias_score,
            bias_threshold=defaults.bias_threshold,
        )

        proof = await self._generator.generate_proof(proof_input)
        verification = await self._verifier.verify_proof(proof)

        response = ProveSLAResponse(
            proof_id=f"proof_{new_id()}",
            agent_id=request.agent_id,
            task_id=request.task_id,
            proof=proof.proof,
            public_signals=proof.public_signals,
            proof_size_bytes=proof.proof_size_bytes,
            verified=verification.valid,
            message=verification.message,
            mode=verification.mode,
            metadata={
                "taskDescription": request.task_description or "N/A",
                "slaDeadlineSeconds": request.sla_deadline_seconds,
                "biasThreshold": proof_input.bias_threshold,
                "generatedAt": utc_now().isoformat(),
            },
        )
        self._logger.info(
            "sla_proof_issued",
            proof_id=response.proof_id,
            agent_id=request.agent_id,
            task_id_hash=proof.task_id_hash,
            verified=response.verified,
        )
        return response

    def describe(self) -> dict[str, Any]:
        """Static description of the service for discovery endpoints."""
        return {
            "name": SERVICE_NAME,
            "version": SERVICE_VERSION,
            "description": "Generate Zero-Knowledge proofs for SLA compliance",
            "mode": self._backend.mode.value,
            "request": {
                "taskId": "string (required)",
                "agentId": "string (required)",
                "taskDescription": "string (optional)",
                "completedAt": "ISO timestamp (required)",
                "startedAt": "ISO timestamp (optional, defaults to completedAt)",
                "slaDeadlineSeconds": "integer > 0 (required)",
                "outputData": "string (required, hashed, never revealed)",
                "biasScore": f"integer 0-100 (optional, default {self._config.defaults.bias_score})",
                "biasThreshold": (
                    f"integer 0-100 (optional, default {self._config.defaults.bias_threshold})"
                ),
            },
            "publicSignals": ["taskIdHash", "slaDeadline", "biasThreshold", "complianceFlag"],
            "cryptography": {
                "provingSystem": f"{GROTH16_PROTOCOL} (snarkjs)",
                "curve": BN128_CURVE,
                "commitment": "SHA-256 truncated to 252 bits",
            },
        }

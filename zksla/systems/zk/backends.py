"""
ZK-SLA — Proving Backends

Two interchangeable backends behind one interface:

  SnarkjsBackend  Runs the compiled Groth16 circuit through the snarkjs CLI.
                  Used when the circuit program, proving key and
                  verification key are all present.
  MockBackend     Evaluates the compliance predicate in Python and emits a
                  structurally valid but meaningless proof. Lets the rest of
                  the system run before a trusted setup exists.

select_backend() probes the artifacts once; generator and verifier hold the
resulting backend and never branch on mode themselves.
"""

from __future__ import annotations

import asyncio
import contextlib
import json
import shlex
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING, Any

import structlog
from pydantic import BaseModel, ValidationError

from zksla.primitives.proof import (
    CircuitWitness,
    Groth16Proof,
    ProofMode,
    VerificationKey,
    compliance_flag_of,
)
from zksla.systems.zk.artifacts import CircuitArtifacts
from zksla.systems.zk.compliance import evaluate_witness
from zksla.systems.zk.envelope import mock_envelope
from zksla.systems.zk.errors import GenerationError, VerificationError

if TYPE_CHECKING:
    from zksla.config import ProverConfig

logger = structlog.get_logger("zksla.systems.zk.backends")


class BackendProof(BaseModel):
    """What a backend hands back to the generator."""

    envelope: Groth16Proof
    public_signals: list[str]
    satisfied: bool


class BackendVerdict(BaseModel):
    valid: bool
    message: str


class ProvingBackend(ABC):
    """Interface shared by the real and mock proving paths."""

    mode: ProofMode

    @abstractmethod
    async def generate(self, witness: CircuitWitness) -> BackendProof:
        """Produce an envelope and public signals for one witness."""

    @abstractmethod
    async def verify(
        self,
        key: VerificationKey,
        envelope: Groth16Proof,
        public_signals: list[str],
        claimed: bool,
    ) -> BackendVerdict:
        """
        Check an envelope against its public signals.

        ``claimed`` is the artifact's generation-time verified flag. Only the
        mock backend may rely on it.
        """


# ─── Mock ─────────────────────────────────────────────────────────


class MockBackend(ProvingBackend):
    """
    Development stand-in for the circuit.

    Verification trusts the generator's verified flag: without the circuit
    there is nothing to re-derive it from. Results are tagged [DEV MODE].
    """

    mode = ProofMode.MOCK

    def __init__(self) -> None:
        self._logger = logger.bind(component="mock_backend")

    async def generate(self, witness: CircuitWitness) -> BackendProof:
        report = evaluate_witness(witness)
        if not report.compliant:
            self._logger.info("mock_witness_not_compliant", failed=report.failed_clauses)
        return BackendProof(
            envelope=mock_envelope(),
            public_signals=witness.public_signals(report.flag),
            satisfied=report.compliant,
        )

    async def verify(
        self,
        key: VerificationKey,
        envelope: Groth16Proof,
        public_signals: list[str],
        claimed: bool,
    ) -> BackendVerdict:
        if claimed:
            message = "[DEV MODE] Mock ZK proof accepted: Constraints satisfied locally"
        else:
            message = "[DEV MODE] Mock ZK proof rejected: Constraints not satisfied"
        return BackendVerdict(valid=claimed, message=message)


# ─── snarkjs ──────────────────────────────────────────────────────


class SnarkjsBackend(ProvingBackend):
    """
    Groth16 over BN128 via the snarkjs command line.

    Every call works in its own temporary directory, so concurrent proofs
    never share files. The prover subprocess is killed on timeout or
    cancellation; no partial proof is ever returned.
    """

    mode = ProofMode.REAL

    def __init__(
        self,
        artifacts: CircuitArtifacts,
        snarkjs_bin: str = "snarkjs",
        proving_timeout_s: float = 120.0,
        verify_timeout_s: float = 30.0,
    ) -> None:
        self._artifacts = artifacts
        self._command = shlex.split(snarkjs_bin)
        self._proving_timeout_s = proving_timeout_s
        self._verify_timeout_s = verify_timeout_s
        self._logger = logger.bind(component="snarkjs_backend")

    async def _run(self, args: list[str], cwd: Path, timeout: float) -> tuple[int, str]:
        """Run snarkjs, returning (returncode, combined output)."""
        proc = await asyncio.create_subprocess_exec(
            *self._command,
            *args,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.STDOUT,
            cwd=str(cwd),
        )
        try:
            stdout, _ = await asyncio.wait_for(proc.communicate(), timeout=timeout)
        except (asyncio.TimeoutError, asyncio.CancelledError):
            with contextlib.suppress(ProcessLookupError):
                proc.kill()
            await proc.communicate()
            raise
        output = stdout.decode("utf-8", errors="replace")
        returncode = proc.returncode if proc.returncode is not None else -1
        return returncode, output

    async def generate(self, witness: CircuitWitness) -> BackendProof:
        with tempfile.TemporaryDirectory(prefix="zksla-prove-") as tmp:
            workdir = Path(tmp)
            _write_json(workdir / "input.json", witness.to_circuit_inputs())

            try:
                returncode, output = await self._run(
                    [
                        "groth16",
                        "fullprove",
                        "input.json",
                        str(self._artifacts.wasm_path),
                        str(self._artifacts.zkey_path),
                        "proof.json",
                        "public.json",
                    ],
                    cwd=workdir,
                    timeout=self._proving_timeout_s,
                )
            except asyncio.TimeoutError as exc:
                raise GenerationError(
                    f"Proof generation timed out after {self._proving_timeout_s}s"
                ) from exc
            except FileNotFoundError as exc:
                raise GenerationError(
                    f"snarkjs executable not found: {self._command[0]!r}"
                ) from exc

            if returncode != 0:
                self._logger.error("snarkjs_fullprove_failed", returncode=returncode)
                raise GenerationError("Failed to generate ZK proof", diagnostic=output.strip())

            try:
                envelope = Groth16Proof.model_validate(_read_json(workdir / "proof.json"))
                public_signals = [str(s) for s in _read_json(workdir / "public.json")]
            except (OSError, ValueError, TypeError, ValidationError) as exc:
                raise GenerationError(
                    "snarkjs produced no usable proof", diagnostic=str(exc)
                ) from exc

        # Circuits that assert compliance fail witness generation instead;
        # circuits that output the flag publish it at index 3.
        flag = compliance_flag_of(public_signals)
        return BackendProof(
            envelope=envelope,
            public_signals=public_signals,
            satisfied=flag != "0",
        )

    async def verify(
        self,
        key: VerificationKey,
        envelope: Groth16Proof,
        public_signals: list[str],
        claimed: bool,
    ) -> BackendVerdict:
        if key.is_mock:
            raise VerificationError(
                "verification key unavailable; a real proof cannot be checked against the mock key"
            )

        with tempfile.TemporaryDirectory(prefix="zksla-verify-") as tmp:
            workdir = Path(tmp)
            _write_json(workdir / "verification_key.json", key.data)
            _write_json(workdir / "public.json", public_signals)
            _write_json(workdir / "proof.json", envelope.model_dump(mode="json"))

            try:
                returncode, output = await self._run(
                    ["groth16", "verify", "verification_key.json", "public.json", "proof.json"],
                    cwd=workdir,
                    timeout=self._verify_timeout_s,
                )
            except asyncio.TimeoutError as exc:
                raise VerificationError(
                    f"snarkjs verify timed out after {self._verify_timeout_s}s"
                ) from exc
            except FileNotFoundError as exc:
                raise VerificationError(
                    f"snarkjs executable not found: {self._command[0]!r}"
                ) from exc

        if returncode == 0 and "OK" in output:
            satisfied = True
        elif "Invalid proof" in output:
            satisfied = False
        else:
            raise VerificationError(f"snarkjs verify failed: {output.strip()}")

        if not satisfied:
            return BackendVerdict(
                valid=False,
                message="ZK proof verification failed: Constraints not satisfied",
            )
        if compliance_flag_of(public_signals) == "0":
            return BackendVerdict(
                valid=False,
                message="ZK proof verified but the circuit reports an SLA breach",
            )
        return BackendVerdict(
            valid=True,
            message="ZK proof verified: Agent proved SLA compliance without revealing internals",
        )


def _write_json(path: Path, payload: Any) -> None:
    path.write_text(json.dumps(payload), encoding="utf-8")


def _read_json(path: Path) -> Any:
    return json.loads(path.read_text(encoding="utf-8"))


# ─── Selection ────────────────────────────────────────────────────


def select_backend(config: ProverConfig) -> ProvingBackend:
    """
    Probe the circuit artifacts once and build the matching backend.
    """
    if config.force_mock:
        logger.info("zk_backend_selected", mode=ProofMode.MOCK.value, reason="force_mock")
        return MockBackend()

    artifacts = CircuitArtifacts.from_dir(config.circuits_dir)
    probe = artifacts.probe()
    if probe.mode == ProofMode.REAL:
        logger.info(
            "zk_backend_selected",
            mode=probe.mode.value,
            circuits_dir=str(artifacts.circuits_dir),
        )
        return SnarkjsBackend(
            artifacts,
            snarkjs_bin=config.snarkjs_bin,
            proving_timeout_s=config.proving_timeout_s,
            verify_timeout_s=config.verify_timeout_s,
        )

    logger.warning(
        "zk_circuit_artifacts_missing",
        mode=probe.mode.value,
        missing=probe.missing,
    )
    return MockBackend()

"""
ZK-SLA — Circuit Artifacts

Locates the compiled circuit and its keys, and decides which proving mode
is available. The mode is resolved once, when a backend is built; nothing
downstream probes the filesystem again.

Layout under the circuits directory:
  sla_proof_js/sla_proof.wasm   compiled circuit program (witness generator)
  sla_proof.zkey                Groth16 proving key
  verification_key.json         Groth16 verification key
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pydantic import BaseModel

from zksla.primitives.proof import (
    BN128_CURVE,
    GROTH16_PROTOCOL,
    PUBLIC_SIGNAL_COUNT,
    ProofMode,
    VerificationKey,
)
from zksla.systems.zk.errors import ArtifactError

WASM_RELPATH = Path("sla_proof_js") / "sla_proof.wasm"
ZKEY_RELPATH = Path("sla_proof.zkey")
VKEY_RELPATH = Path("verification_key.json")


class ArtifactProbe(BaseModel):
    mode: ProofMode
    missing: list[str]


class CircuitArtifacts(BaseModel):
    """Absolute paths of the three artifacts a real proof needs."""

    circuits_dir: Path
    wasm_path: Path
    zkey_path: Path
    vkey_path: Path

    @classmethod
    def from_dir(cls, circuits_dir: Path) -> CircuitArtifacts:
        circuits_dir = Path(circuits_dir)
        return cls(
            circuits_dir=circuits_dir,
            wasm_path=circuits_dir / WASM_RELPATH,
            zkey_path=circuits_dir / ZKEY_RELPATH,
            vkey_path=circuits_dir / VKEY_RELPATH,
        )

    def probe(self) -> ArtifactProbe:
        """REAL only when the program, proving key and verification key all exist."""
        missing = [
            str(path)
            for path in (self.wasm_path, self.zkey_path, self.vkey_path)
            if not path.is_file()
        ]
        mode = ProofMode.MOCK if missing else ProofMode.REAL
        return ArtifactProbe(mode=mode, missing=missing)


def mock_verification_key() -> VerificationKey:
    """
    Stand-in key used when verification_key.json is absent.

    Zero coordinates: nothing can be checked against it, and the real
    backend refuses it.
    """
    zero_g2 = [["0", "0"], ["0", "0"], ["0", "0"]]
    return VerificationKey(
        data={
            "protocol": GROTH16_PROTOCOL,
            "curve": BN128_CURVE,
            "nPublic": PUBLIC_SIGNAL_COUNT,
            "vk_alpha_1": ["0", "0", "0"],
            "vk_beta_2": zero_g2,
            "vk_gamma_2": zero_g2,
            "vk_delta_2": zero_g2,
            "vk_alphabeta_12": [],
            "IC": [],
        },
        is_mock=True,
        source="mock",
    )


def read_verification_key(path: Path) -> VerificationKey:
    """
    Read and parse a snarkjs verification key.

    Returns the mock key when the file does not exist. Raises ArtifactError
    when it exists but is unreadable or not a JSON object.
    """
    if not path.is_file():
        return mock_verification_key()
    try:
        data: Any = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        raise ArtifactError(f"Cannot read verification key {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ArtifactError(f"Verification key {path} is not a JSON object")
    return VerificationKey(data=data, is_mock=False, source=str(path))

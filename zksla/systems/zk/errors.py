"""
ZK-SLA -- Proof System Error Hierarchy

Namespace: zksla.systems.zk.errors

Request validation is not represented here: malformed requests are rejected
by pydantic (``pydantic.ValidationError``) when ProofInput or SLAProofRequest
is constructed, before anything reaches the proof system.

Propagation:
  GenerationError    surfaces to the caller of generate_proof
  VerificationError  absorbed by verify_proof into valid=False
  ArtifactError      raised while loading circuit artifacts; absorbed like
                     VerificationError when it happens during verification

An SLA breach is never an error. A non-compliant agent still receives a
proof; the breach is carried by the compliance flag.
"""

from __future__ import annotations


class ZKSLAError(RuntimeError):
    """Base for all proof system errors."""


class GenerationError(ZKSLAError):
    """
    The proving backend failed to produce a proof.

    Causes: unsatisfiable witness, prover crash, missing output files,
    timeout. ``diagnostic`` holds the backend's own output when available.
    """

    def __init__(self, message: str, diagnostic: str = "") -> None:
        super().__init__(message)
        self.diagnostic = diagnostic

    def __str__(self) -> str:
        base = super().__str__()
        if self.diagnostic:
            return f"{base}: {self.diagnostic}"
        return base


class VerificationError(ZKSLAError):
    """The proof envelope could not be decoded or the backend could not check it."""


class ArtifactError(ZKSLAError):
    """A circuit artifact exists but cannot be read or parsed."""

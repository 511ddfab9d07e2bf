"""
ZK-SLA — Proof System

Lets an agent prove it finished a task before its SLA deadline and within
its bias tolerance, without revealing its output or its true completion time.
"""

from zksla.systems.zk.generator import ProofGenerator
from zksla.systems.zk.service import SLAProofRequest, ZKSLAService
from zksla.systems.zk.verifier import ProofVerifier

__all__ = ["ProofGenerator", "ProofVerifier", "SLAProofRequest", "ZKSLAService"]

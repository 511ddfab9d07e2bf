"""
ZK-SLA — Compliance Predicate

The single definition of "SLA-compliant":

    time_valid   = completion_timestamp <= sla_deadline
    bias_valid   = bias_score <= bias_threshold
    output_valid = output_hash != 0
    compliant    = time_valid AND bias_valid AND output_valid

The circuit's constraints must encode exactly this conjunction over the same
field elements. The mock backend evaluates it directly.
"""

from __future__ import annotations

from zksla.primitives.common import ZKSLABaseModel
from zksla.primitives.proof import CircuitWitness


class ComplianceReport(ZKSLABaseModel):
    """Outcome of each clause. Private: never published beyond ``flag``."""

    time_valid: bool
    bias_valid: bool
    output_valid: bool

    @property
    def compliant(self) -> bool:
        return self.time_valid and self.bias_valid and self.output_valid

    @property
    def flag(self) -> str:
        """Public signal 3."""
        return "1" if self.compliant else "0"

    @property
    def failed_clauses(self) -> list[str]:
        failed: list[str] = []
        if not self.time_valid:
            failed.append("deadline")
        if not self.bias_valid:
            failed.append("bias")
        if not self.output_valid:
            failed.append("output")
        return failed


def evaluate_compliance(
    completion_timestamp: int,
    sla_deadline: int,
    bias_score: int,
    bias_threshold: int,
    output_hash: int,
) -> ComplianceReport:
    return ComplianceReport(
        time_valid=completion_timestamp <= sla_deadline,
        bias_valid=bias_score <= bias_threshold,
        output_valid=output_hash != 0,
    )


def evaluate_witness(witness: CircuitWitness) -> ComplianceReport:
    """Apply the predicate to the same six inputs the circuit receives."""
    return evaluate_compliance(
        completion_timestamp=witness.completion_timestamp,
        sla_deadline=witness.sla_deadline,
        bias_score=witness.bias_score,
        bias_threshold=witness.bias_threshold,
        output_hash=witness.output_hash,
    )

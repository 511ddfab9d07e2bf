"""
ZK-SLA — zero-knowledge proofs of SLA compliance for autonomous agents.
"""

__version__ = "1.0.0"

"""
ZK-SLA — Commitments

Turns arbitrary strings into BN128 field elements.

SHA-256 is taken over the UTF-8 bytes and the hex digest is truncated to
63 characters (252 bits). 2**252 is below the BN128 scalar modulus, so the
result always fits without reduction.
"""

from __future__ import annotations

import hashlib

from zksla.primitives.proof import BN128_FIELD_MODULUS

FIELD_HEX_CHARS = 63


def truncate_to_field(hex_digest: str) -> int:
    """Interpret the leading 252 bits of a hex digest as a field element."""
    return int(hex_digest[:FIELD_HEX_CHARS], 16)


def _sha256_field(data: str) -> int:
    return truncate_to_field(hashlib.sha256(data.encode("utf-8")).hexdigest())


def hash_task_id(task_id: str) -> int:
    """
    Commitment to a task identifier.

    Depends on ``task_id`` alone, so every proof for the same task carries
    the same public signal 0.
    """
    return _sha256_field(task_id)


def hash_output(output_data: str) -> int:
    """
    Commitment to the agent's output. Never published: only its
    non-zero-ness (mock) or equality with the private witness (real)
    is checked.
    """
    return _sha256_field(output_data)


def is_field_element(value: int) -> bool:
    return 0 <= value < BN128_FIELD_MODULUS


def to_hex(value: int) -> str:
    """Lowercase hex without prefix or padding, as used for SLAProof.taskIdHash."""
    return format(value, "x")

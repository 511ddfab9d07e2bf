"""
Unit tests for ZK-SLA commitments.

Tests truncation to the BN128 field, determinism and independence of the
task id commitment.
"""

from __future__ import annotations

import hashlib

import pytest

from zksla.primitives.proof import BN128_FIELD_MODULUS
from zksla.systems.zk.hashing import (
    hash_output,
    hash_task_id,
    is_field_element,
    to_hex,
    truncate_to_field,
)


class TestTruncation:
    def test_uses_first_63_hex_chars_of_sha256(self):
        digest = hashlib.sha256(b"t1").hexdigest()
        assert hash_task_id("t1") == int(digest[:63], 16)

    def test_truncate_max_digest_fits_field(self):
        assert truncate_to_field("f" * 64) == 2**252 - 1
        assert truncate_to_field("f" * 64) < BN128_FIELD_MODULUS

    @pytest.mark.parametrize("value", ["", "a", "task-123", "ünïcødé ✓", "x" * 10_000])
    def test_commitments_are_field_elements(self, value: str):
        assert is_field_element(hash_task_id(value))
        assert is_field_element(hash_output(value))

    def test_utf8_bytes_are_hashed(self):
        expected = hashlib.sha256("ünïcødé".encode("utf-8")).hexdigest()[:63]
        assert hash_output("ünïcødé") == int(expected, 16)


class TestDeterminism:
    def test_task_id_hash_is_stable(self):
        assert hash_task_id("dup") == hash_task_id("dup")

    def test_distinct_task_ids_differ(self):
        assert hash_task_id("t1") != hash_task_id("t2")

    def test_task_and_output_share_the_hash_function(self):
        # Same bytes, same commitment: the two differ only in what they commit to.
        assert hash_task_id("same") == hash_output("same")

    def test_empty_output_still_commits_to_nonzero(self):
        assert hash_output("") != 0


class TestHelpers:
    def test_to_hex_is_lowercase_unpadded(self):
        assert to_hex(255) == "ff"
        assert to_hex(0x0ABC) == "abc"

    def test_is_field_element_bounds(self):
        assert is_field_element(0)
        assert is_field_element(BN128_FIELD_MODULUS - 1)
        assert not is_field_element(BN128_FIELD_MODULUS)
        assert not is_field_element(-1)

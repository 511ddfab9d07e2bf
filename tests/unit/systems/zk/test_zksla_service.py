"""
Unit tests for the ZK-SLA service: request validation, defaults and the
prove-then-verify flow.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from zksla.config import ProverConfig, RequestDefaults, ZKSLAConfig
from zksla.primitives.proof import ProofMode
from zksla.systems.zk.backends import MockBackend
from zksla.systems.zk.hashing import hash_task_id
from zksla.systems.zk.service import SLAProofRequest, ZKSLAService

COMPLETED = datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


def make_request(**kwargs) -> SLAProofRequest:
    defaults = {
        "task_id": "task-0001",
        "agent_id": "agent-7",
        "completed_at": COMPLETED,
        "sla_deadline_seconds": 30,
        "output_data": "summary of the work",
    }
    return SLAProofRequest(**{**defaults, **kwargs})


@pytest.fixture
def service(tmp_path) -> ZKSLAService:
    config = ZKSLAConfig(prover=ProverConfig(circuits_dir=tmp_path))
    return ZKSLAService(config)


# ─── Request Validation ──────────────────────────────────────────


class TestRequestValidation:
    @pytest.mark.parametrize("missing", ["task_id", "agent_id", "completed_at", "sla_deadline_seconds", "output_data"])
    def test_missing_required_field_rejected(self, missing):
        payload = {
            "task_id": "t1",
            "agent_id": "a1",
            "completed_at": COMPLETED,
            "sla_deadline_seconds": 30,
            "output_data": "ok",
        }
        del payload[missing]
        with pytest.raises(ValidationError):
            SLAProofRequest(**payload)

    @pytest.mark.parametrize("field,value", [
        ("output_data", ""),
        ("task_id", ""),
        ("sla_deadline_seconds", 0),
        ("bias_score", 101),
        ("bias_threshold", -1),
    ])
    def test_invalid_values_rejected(self, field, value):
        with pytest.raises(ValidationError):
            make_request(**{field: value})

    def test_accepts_camel_case_json(self):
        request = SLAProofRequest.model_validate({
            "taskId": "t1",
            "agentId": "a1",
            "completedAt": "2026-01-01T12:00:00Z",
            "slaDeadlineSeconds": 30,
            "outputData": "ok",
        })
        assert request.completed_at == COMPLETED


# ─── Request Conversion ──────────────────────────────────────────


class TestToProofInput:
    def test_window_measured_from_completion_by_default(self):
        proof_input = make_request().to_proof_input()
        assert proof_input.completion_timestamp == int(COMPLETED.timestamp())
        assert proof_input.sla_deadline == int(COMPLETED.timestamp()) + 30

    def test_window_measured_from_start_when_given(self):
        started = COMPLETED - timedelta(seconds=100)
        proof_input = make_request(started_at=started).to_proof_input()
        assert proof_input.sla_deadline == int(started.timestamp()) + 30
        assert proof_input.completion_timestamp > proof_input.sla_deadline

    def test_defaults_fill_missing_bias_fields(self):
        proof_input = make_request().to_proof_input(bias_score=1, bias_threshold=9)
        assert proof_input.bias_score == 1
        assert proof_input.bias_threshold == 9

    def test_explicit_zero_bias_is_kept(self):
        proof_input = make_request(bias_score=0, bias_threshold=0).to_proof_input(
            bias_score=3, bias_threshold=9
        )
        assert proof_input.bias_score == 0
        assert proof_input.bias_threshold == 0

    def test_naive_datetime_is_utc(self):
        naive = COMPLETED.replace(tzinfo=None)
        assert make_request(completed_at=naive).to_proof_input().completion_timestamp == int(
            COMPLETED.timestamp()
        )


# ─── Prove SLA ───────────────────────────────────────────────────


class TestProveSLA:
    @pytest.mark.asyncio
    async def test_on_time_request_is_verified(self, service):
        response = await service.prove_sla(make_request())
        assert response.verified is True
        assert response.mode == ProofMode.MOCK
        assert response.message.startswith("[DEV MODE]")
        assert response.proof_id.startswith("proof_")
        assert response.public_signals[0] == str(hash_task_id("task-0001"))
        assert response.proof_size_bytes == len(response.proof)

    @pytest.mark.asyncio
    async def test_late_request_is_proved_but_not_verified(self, service):
        started = COMPLETED - timedelta(seconds=300)
        response = await service.prove_sla(make_request(started_at=started))
        assert response.verified is False
        assert response.public_signals[3] == "0"

    @pytest.mark.asyncio
    async def test_default_bias_threshold_applies(self, tmp_path):
        config = ZKSLAConfig(
            prover=ProverConfig(circuits_dir=tmp_path),
            defaults=RequestDefaults(bias_threshold=2),
        )
        service = ZKSLAService(config)
        response = await service.prove_sla(make_request(bias_score=3))
        assert response.verified is False
        assert response.public_signals[2] == "2"
        assert response.metadata["biasThreshold"] == 2

    @pytest.mark.asyncio
    async def test_metadata(self, service):
        response = await service.prove_sla(make_request(task_description="nightly report"))
        assert response.metadata["taskDescription"] == "nightly report"
        assert response.metadata["slaDeadlineSeconds"] == 30
        assert "generatedAt" in response.metadata
        wire = response.model_dump(by_alias=True)
        assert "proofId" in wire and "publicSignals" in wire

    @pytest.mark.asyncio
    async def test_proof_ids_are_unique(self, service):
        first = await service.prove_sla(make_request())
        second = await service.prove_sla(make_request())
        assert first.proof_id != second.proof_id

    @pytest.mark.asyncio
    async def test_verify_round_trip_through_service(self, service):
        request = make_request()
        proof = await service.generate(
            request.to_proof_input(bias_score=0, bias_threshold=5)
        )
        result = await service.verify(proof)
        assert result.valid == proof.verified


# ─── Construction ────────────────────────────────────────────────


class TestConstruction:
    def test_missing_artifacts_select_mock(self, service):
        assert service.mode == ProofMode.MOCK
        assert isinstance(service.generator.backend, MockBackend)
        assert service.generator.backend is service.verifier.backend

    def test_injected_backend_is_used(self, tmp_path):
        backend = MockBackend()
        service = ZKSLAService(ZKSLAConfig(prover=ProverConfig(circuits_dir=tmp_path)), backend=backend)
        assert service.generator.backend is backend

    def test_describe(self, service):
        info = service.describe()
        assert info["mode"] == "mock"
        assert info["publicSignals"] == ["taskIdHash", "slaDeadline", "biasThreshold", "complianceFlag"]
        assert info["cryptography"]["curve"] == "bn128"
        assert "default 5" in info["request"]["biasThreshold"]

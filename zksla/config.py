"""
ZK-SLA — Configuration System

All configuration is Pydantic-validated and loaded from:
1. default.yaml (defaults)
2. Environment variables (overrides)
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

# Compiled circuit artifacts live beside the proof system module.
DEFAULT_CIRCUITS_DIR = Path(__file__).parent / "systems" / "zk" / "circuits" / "compiled"


# ─── Sub-configs ──────────────────────────────────────────────────


class LoggingConfig(BaseModel):
    level: str = "INFO"
    format: str = "console"  # "console" | "json"


class ProverConfig(BaseModel):
    circuits_dir: Path = DEFAULT_CIRCUITS_DIR
    snarkjs_bin: str = "snarkjs"
    # Real-mode proving is CPU bound and can take seconds.
    proving_timeout_s: float = Field(default=120.0, gt=0)
    verify_timeout_s: float = Field(default=30.0, gt=0)
    # Skip the artifact probe and always use the mock backend.
    force_mock: bool = False


class RequestDefaults(BaseModel):
    """Defaults the calling layer applies before anything reaches the prover."""

    bias_score: int = Field(default=0, ge=0, le=100)
    bias_threshold: int = Field(default=5, ge=0, le=100)


# ─── Root Config ──────────────────────────────────────────────────


class ZKSLAConfig(BaseSettings):
    """
    Root configuration. Loads from YAML, overridable by env vars.
    """

    model_config = SettingsConfigDict(
        env_prefix="ZKSLA_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    prover: ProverConfig = Field(default_factory=ProverConfig)
    defaults: RequestDefaults = Field(default_factory=RequestDefaults)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # YAML values arrive as init kwargs; ZKSLA_<SECTION>__<KEY> must win over them.
        return env_settings, init_settings, dotenv_settings, file_secret_settings


def load_config(config_path: str | Path | None = None) -> ZKSLAConfig:
    """
    Load configuration from YAML file, then apply environment variable overrides.
    """
    raw: dict[str, Any] = {}

    if config_path:
        path = Path(config_path)
        if path.exists():
            with open(path) as f:
                raw = yaml.safe_load(f) or {}

    if circuits_dir := os.environ.get("ZKSLA_CIRCUITS_DIR"):
        raw.setdefault("prover", {})["circuits_dir"] = circuits_dir
    if snarkjs_bin := os.environ.get("ZKSLA_SNARKJS_BIN"):
        raw.setdefault("prover", {})["snarkjs_bin"] = snarkjs_bin
    if force_mock := os.environ.get("ZKSLA_FORCE_MOCK"):
        raw.setdefault("prover", {})["force_mock"] = force_mock.lower() in ("true", "1", "yes")
    if log_level := os.environ.get("ZKSLA_LOG_LEVEL"):
        raw.setdefault("logging", {})["level"] = log_level

    return ZKSLAConfig(**raw)

"""
ZK-SLA — Common Primitives

Shared base classes and utilities used across the package.
"""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel
from pydantic.alias_generators import to_camel
from ulid import ULID


def new_id() -> str:
    """Generate a new ULID string. Time-sortable, globally unique."""
    return str(ULID())


def utc_now() -> datetime:
    """Current UTC time, timezone-aware."""
    return datetime.now(timezone.utc)


def to_unix_seconds(moment: datetime) -> int:
    """Whole unix seconds for a datetime. Naive datetimes are taken as UTC."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return int(moment.timestamp() // 1)


# ─── Base Models ──────────────────────────────────────────────────


class ZKSLABaseModel(BaseModel):
    """
    Base model for all ZK-SLA primitives.

    Python attributes are snake_case; the wire format is camelCase.
    Dump with ``by_alias=True`` to get the wire shape.
    """

    model_config = {
        "populate_by_name": True,
        "from_attributes": True,
        "alias_generator": to_camel,
    }

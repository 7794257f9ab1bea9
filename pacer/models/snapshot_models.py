"""PACER — Snapshot Models.

`MetricsSnapshotRecord` mirrors the append-only table the sync jobs write to.
`Snapshot` is the validated, typed view the engines consume.
"""

import datetime as dt
import uuid
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, model_validator
from sqlmodel import SQLModel, Field

from pacer.core.platform_registry import Platform
from pacer.models.platform_metrics import PlatformMetrics


# ─────────────────────────────────────────────
# DATABASE MODEL: written only by external sync jobs
# ─────────────────────────────────────────────


class MetricsSnapshotRecord(SQLModel, table=True):
    """Immutable measurement row.

    Several rows may exist for the same (client_id, date, platform): resyncs
    under a different integration_id, or rows that pre-date the uniqueness
    constraint. Never modify this data.
    """

    __tablename__ = "metrics_snapshots"

    id: str = Field(
        default_factory=lambda: str(uuid.uuid4()), primary_key=True
    )
    client_id: str = Field(index=True)
    integration_id: str = Field(default="", index=True)
    platform: str = Field(index=True, description="facebook_ads | woocommerce | ...")
    metric_type: str = Field(default="", description="e.g. ecommerce, traffic, email")
    date: dt.date = Field(index=True)
    metrics_json: str = Field(default="{}", description="Raw metrics JSON payload")
    created_at: dt.datetime = Field(
        default_factory=lambda: dt.datetime.now(dt.timezone.utc)
    )


# ─────────────────────────────────────────────
# DOMAIN MODELS
# ─────────────────────────────────────────────


class Snapshot(BaseModel):
    """One validated measurement for a client/platform/day."""

    model_config = ConfigDict(frozen=True)

    id: str = ""
    client_id: str
    integration_id: str = ""
    platform: Platform
    metric_type: str = ""
    date: dt.date
    metrics: PlatformMetrics
    created_at: dt.datetime

    @model_validator(mode="before")
    @classmethod
    def _tag_metrics(cls, data: Any) -> Any:
        """Route the raw metrics map to the platform's payload model."""
        if not isinstance(data, dict) or "platform" not in data:
            return data
        metrics = data.get("metrics")
        if isinstance(metrics, BaseModel):
            return data
        platform = Platform(data["platform"]).value
        payload = dict(metrics) if isinstance(metrics, dict) else {}
        payload["platform"] = platform
        return {**data, "metrics": payload}


class ReconciledDay(BaseModel):
    """The single canonical snapshot chosen for a (date, platform) pair."""

    model_config = ConfigDict(frozen=True)

    date: dt.date
    platform: Platform
    metrics: PlatformMetrics
    snapshot_id: str = ""
    candidates: int = 1
    """How many snapshots competed for this slot."""
    created_at: Optional[dt.datetime] = None

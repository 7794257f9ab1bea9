"""PACER — Snapshot Store.

Read-only access to the tables the sync jobs and the admin UI write:
metrics_snapshots, clients and goals. This is the validation boundary where
raw JSON payloads become typed Snapshot models.
"""

import datetime as dt
import json
from typing import Iterable, List, Optional

from sqlmodel import Session, select

from pacer.core.platform_registry import Platform
from pacer.models.goal_models import ClientRecord, Goal, GoalRecord
from pacer.models.platform_metrics import safe_float
from pacer.models.snapshot_models import MetricsSnapshotRecord, Snapshot
from pacer.core.logging import get_logger

logger = get_logger("connectors.snapshot_store")

AGGREGATE_METRIC_TYPES = {"ecommerce_aggregate"}

_KNOWN_PLATFORMS = {p.value for p in Platform}


def _decode_metrics(record: MetricsSnapshotRecord) -> dict:
    """Parse the JSON payload; an undecodable payload reads as all-zero."""
    try:
        payload = json.loads(record.metrics_json or "{}")
    except (TypeError, ValueError) as e:
        logger.warning(
            f"Snapshot {record.id} has unreadable metrics JSON, treating as empty: {e}",
            extra={"client_id": record.client_id, "platform": record.platform},
        )
        return {}
    if not isinstance(payload, dict):
        logger.warning(
            f"Snapshot {record.id} metrics is a {type(payload).__name__}, not an object",
            extra={"client_id": record.client_id, "platform": record.platform},
        )
        return {}
    return payload


def to_snapshot(record: MetricsSnapshotRecord) -> Optional[Snapshot]:
    """Convert a row into a Snapshot, or None when its platform is unknown."""
    if record.platform not in _KNOWN_PLATFORMS:
        logger.warning(
            f"Skipping snapshot {record.id}: unknown platform '{record.platform}'",
            extra={"client_id": record.client_id, "platform": record.platform},
        )
        return None
    return Snapshot(
        id=record.id,
        client_id=record.client_id,
        integration_id=record.integration_id,
        platform=record.platform,
        metric_type=record.metric_type,
        date=record.date,
        metrics=_decode_metrics(record),
        created_at=record.created_at,
    )


class SnapshotStore:
    """Read-only queries over the sync tables."""

    def __init__(self, session: Session):
        self.session = session

    def query_snapshots(
        self,
        client_id: str,
        date_from: dt.date,
        date_to: dt.date,
        platforms: Optional[Iterable[Platform]] = None,
        include_aggregates: bool = False,
    ) -> List[Snapshot]:
        """All snapshots of a client in [date_from, date_to]; no ordering implied."""
        query = select(MetricsSnapshotRecord).where(
            MetricsSnapshotRecord.client_id == client_id,
            MetricsSnapshotRecord.date >= date_from,
            MetricsSnapshotRecord.date <= date_to,
        )
        if platforms is not None:
            wanted = [Platform(p).value for p in platforms]
            query = query.where(MetricsSnapshotRecord.platform.in_(wanted))  # type: ignore[attr-defined]
        if not include_aggregates:
            query = query.where(
                MetricsSnapshotRecord.metric_type.not_in(AGGREGATE_METRIC_TYPES)  # type: ignore[attr-defined]
            )

        rows = self.session.exec(query).all()
        snapshots = [s for s in (to_snapshot(r) for r in rows) if s is not None]
        logger.info(
            f"Read {len(snapshots)} snapshots for {date_from} → {date_to}",
            extra={"client_id": client_id},
        )
        return snapshots

    def get_monthly_expenses(self, client_id: str) -> float:
        """Fixed monthly operating costs; 0 for an unknown client."""
        client = self.session.get(ClientRecord, client_id)
        if client is None:
            logger.warning(
                "Client not found, using 0 monthly expenses",
                extra={"client_id": client_id},
            )
            return 0.0
        return safe_float(client.monthly_expenses)

    def list_goals(self, client_id: str, status: Optional[str] = "active") -> List[Goal]:
        """Goals of a client, newest first."""
        query = select(GoalRecord).where(GoalRecord.client_id == client_id)
        if status is not None:
            query = query.where(GoalRecord.status == status)
        query = query.order_by(GoalRecord.created_at.desc())  # type: ignore[attr-defined]
        return [
            Goal.model_validate(r.model_dump()) for r in self.session.exec(query).all()
        ]

    def list_active_clients(self) -> List[ClientRecord]:
        return list(
            self.session.exec(
                select(ClientRecord)
                .where(ClientRecord.status == "active")
                .order_by(ClientRecord.name)
            ).all()
        )

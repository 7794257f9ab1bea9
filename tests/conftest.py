"""Shared pytest fixtures: snapshot factories and an in-memory database."""

from __future__ import annotations

import datetime as dt
import json
from typing import Any, Callable

import pytest
from sqlmodel import Session

from pacer.connectors.snapshot_store import SnapshotStore
from pacer.database import create_db_engine, init_db
from pacer.models.goal_models import ClientRecord, GoalRecord
from pacer.models.snapshot_models import MetricsSnapshotRecord, Snapshot

CLIENT_ID = "client-1"
BASE_CREATED = dt.datetime(2025, 1, 1, 12, 0, tzinfo=dt.timezone.utc)


@pytest.fixture
def make_snapshot() -> Callable[..., Snapshot]:
    """Build a validated Snapshot with sensible defaults."""
    counter = {"n": 0}

    def _make(
        platform: str,
        date: dt.date,
        metrics: dict[str, Any] | None = None,
        *,
        created_at: dt.datetime | None = None,
        snapshot_id: str | None = None,
        integration_id: str = "int-1",
        client_id: str = CLIENT_ID,
    ) -> Snapshot:
        counter["n"] += 1
        return Snapshot(
            id=snapshot_id or f"snap-{counter['n']:03d}",
            client_id=client_id,
            integration_id=integration_id,
            platform=platform,
            metric_type="daily",
            date=date,
            metrics=metrics or {},
            created_at=created_at or BASE_CREATED,
        )

    return _make


@pytest.fixture
def engine():
    """In-memory SQLite shared across threads for TestClient requests."""
    engine = create_db_engine("sqlite://")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def store(session: Session) -> SnapshotStore:
    return SnapshotStore(session)


@pytest.fixture
def add_snapshot(session: Session) -> Callable[..., MetricsSnapshotRecord]:
    """Insert a raw metrics_snapshots row."""

    def _add(
        platform: str,
        date: dt.date,
        metrics: Any = None,
        *,
        client_id: str = CLIENT_ID,
        integration_id: str = "int-1",
        metric_type: str = "daily",
        created_at: dt.datetime | None = None,
        raw_json: str | None = None,
    ) -> MetricsSnapshotRecord:
        record = MetricsSnapshotRecord(
            client_id=client_id,
            integration_id=integration_id,
            platform=platform,
            metric_type=metric_type,
            date=date,
            metrics_json=raw_json if raw_json is not None else json.dumps(metrics or {}),
            created_at=created_at or BASE_CREATED,
        )
        session.add(record)
        session.commit()
        return record

    return _add


@pytest.fixture
def add_client(session: Session) -> Callable[..., ClientRecord]:
    def _add(
        client_id: str = CLIENT_ID,
        name: str = "Acme",
        monthly_expenses: float | None = 0,
        status: str = "active",
    ) -> ClientRecord:
        record = ClientRecord(
            id=client_id, name=name, status=status, monthly_expenses=monthly_expenses
        )
        session.add(record)
        session.commit()
        return record

    return _add


@pytest.fixture
def add_goal(session: Session) -> Callable[..., GoalRecord]:
    def _add(
        metric_type: str,
        target_value: float,
        start_date: dt.date,
        end_date: dt.date,
        *,
        client_id: str = CLIENT_ID,
        status: str = "active",
        label: str | None = None,
    ) -> GoalRecord:
        record = GoalRecord(
            client_id=client_id,
            metric_type=metric_type,
            target_value=target_value,
            start_date=start_date,
            end_date=end_date,
            status=status,
            label=label,
        )
        session.add(record)
        session.commit()
        return record

    return _add

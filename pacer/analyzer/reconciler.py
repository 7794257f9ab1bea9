"""PACER — Reconciler.

Collapses every group of snapshots sharing a (date, platform) pair into one
canonical ReconciledDay.

Both platform styles keep the snapshot with the largest indicator values:
- cumulative (woocommerce, wordpress): later syncs of the day see a larger
  running total
- flow (facebook_ads and the rest): later syncs have observed more spend or
  impressions
Indicators are compared in policy order (spend, then impressions). Ties fall
to the latest created_at, then to the snapshot id, so the outcome never
depends on input order.
"""

import datetime as dt
from collections import defaultdict
from typing import Dict, Iterable, List, Tuple

from pacer.core.platform_registry import Platform, get_policy
from pacer.models.snapshot_models import ReconciledDay, Snapshot
from pacer.core.logging import get_logger

logger = get_logger("analyzer.reconciler")

ReconciledMap = Dict[Tuple[dt.date, Platform], ReconciledDay]


def _as_utc(ts: dt.datetime) -> dt.datetime:
    """Naive timestamps (SQLite drops tzinfo) are read as UTC."""
    if ts.tzinfo is None:
        return ts.replace(tzinfo=dt.timezone.utc)
    return ts.astimezone(dt.timezone.utc)


def indicator_values(snapshot: Snapshot) -> Tuple[float, ...]:
    """Indicator fields in policy order, compared lexicographically.

    Every candidate of a group is ranked on the same fields, so a later
    indicator only decides between snapshots whose earlier ones are equal
    (typically both absent, i.e. 0).
    """
    return tuple(
        snapshot.metrics.value(field)
        for field in get_policy(snapshot.platform).indicator_fields
    )


def _rank(snapshot: Snapshot) -> tuple:
    return (
        indicator_values(snapshot),
        _as_utc(snapshot.created_at),
        snapshot.id,
        snapshot.integration_id,
    )


def select_canonical(candidates: List[Snapshot]) -> Snapshot:
    """Pick the winning snapshot of one (date, platform) group."""
    return max(candidates, key=_rank)


def reconcile(snapshots: Iterable[Snapshot]) -> ReconciledMap:
    """Return at most one ReconciledDay per (date, platform).

    Pairs with no snapshot are simply absent; zero-filling is the series
    builder's job.
    """
    groups: Dict[Tuple[dt.date, Platform], List[Snapshot]] = defaultdict(list)
    for s in snapshots:
        groups[(s.date, s.platform)].append(s)

    reconciled: ReconciledMap = {}
    duplicates = 0
    for key, candidates in groups.items():
        winner = select_canonical(candidates)
        duplicates += len(candidates) - 1
        reconciled[key] = ReconciledDay(
            date=winner.date,
            platform=winner.platform,
            metrics=winner.metrics,
            snapshot_id=winner.id,
            candidates=len(candidates),
            created_at=winner.created_at,
        )

    logger.debug(
        f"Reconciled {sum(len(c) for c in groups.values())} snapshots into "
        f"{len(reconciled)} days ({duplicates} duplicates collapsed)"
    )
    return reconciled


def duplicates_collapsed(reconciled: ReconciledMap) -> int:
    """Number of snapshots discarded while reconciling."""
    return sum(r.candidates - 1 for r in reconciled.values())

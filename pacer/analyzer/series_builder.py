"""PACER — Daily Series Builder.

Expands a reconciled map into one entry per calendar day. Missing
(date, platform) slots become all-zero payloads, so the series length depends
only on the date range.
"""

import datetime as dt
from typing import Any, Dict, Iterable, List

from pacer.analyzer.reconciler import ReconciledMap
from pacer.core.errors import InvalidArgument
from pacer.core.platform_registry import Platform, get_policy
from pacer.models.platform_metrics import zero_metrics
from pacer.models.series_models import DailySeries, DailySeriesEntry
from pacer.core.logging import get_logger

logger = get_logger("analyzer.series")


def days_between(start: dt.date, end: dt.date) -> int:
    return (end - start).days


def _unique_platforms(platforms: Iterable[Platform]) -> List[Platform]:
    seen: List[Platform] = []
    for p in platforms:
        p = Platform(p)
        if p not in seen:
            seen.append(p)
    return seen


def build_daily_series(
    reconciled: ReconciledMap,
    start: dt.date,
    end: dt.date,
    platforms: Iterable[Platform],
) -> DailySeries:
    """Build a zero-filled series over [start, end] inclusive."""
    if end < start:
        raise InvalidArgument(
            f"end ({end.isoformat()}) is before start ({start.isoformat()})",
            argument="end",
        )

    wanted = _unique_platforms(platforms)
    zeros = {p: zero_metrics(p) for p in wanted}

    days: List[DailySeriesEntry] = []
    for offset in range(days_between(start, end) + 1):
        date = start + dt.timedelta(days=offset)
        metrics = {}
        observed = []
        for p in wanted:
            found = reconciled.get((date, p))
            if found is not None:
                metrics[p] = found.metrics
                observed.append(p)
            else:
                metrics[p] = zeros[p]
        days.append(DailySeriesEntry(date=date, metrics=metrics, observed=observed))

    logger.debug(
        f"Built {len(days)}-day series {start} → {end} for "
        f"{[p.value for p in wanted]}"
    )
    return DailySeries(start=start, end=end, platforms=wanted, days=days)


# ─────────────────────────────────────────────
# ROW VIEW: fixed column order for exports
# ─────────────────────────────────────────────


def column_names(platforms: Iterable[Platform]) -> List[str]:
    """`date`, then `platform.field` per platform in strategy-table order."""
    columns = ["date"]
    for p in _unique_platforms(platforms):
        columns.extend(f"{p.value}.{name}" for name in get_policy(p).field_names)
    return columns


def to_rows(series: DailySeries) -> List[Dict[str, Any]]:
    """One dict per day, keys in column order, values in stored units."""
    rows: List[Dict[str, Any]] = []
    for entry in series.days:
        row: Dict[str, Any] = {"date": entry.date.isoformat()}
        for p in series.platforms:
            for name in get_policy(p).field_names:
                row[f"{p.value}.{name}"] = entry.value(name, platform=p)
        rows.append(row)
    return rows

"""PACER — Aggregator.

Pure reducers over a DailySeries: sums, non-zero averages, derived ratios,
point-in-time values and product rankings.

Every reducer is total. A zero denominator, an empty series or a date outside
the range yields 0 (or an empty list), never NaN or Infinity.
"""

import datetime as dt
import math
from collections import OrderedDict
from typing import Iterable, List, Optional, Tuple, Union

from pacer.core.errors import InvalidArgument
from pacer.core.platform_registry import (
    RATIO_DEFINITIONS,
    Aggregation,
    Platform,
    get_policy,
)
from pacer.models.platform_metrics import ProductEntry, zero_metrics
from pacer.models.report_models import AggregatedMetrics, DayValues, PeriodSpec
from pacer.models.series_models import DailySeries, DailySeriesEntry
from pacer.core.logging import get_logger

logger = get_logger("analyzer.aggregator")

_PLATFORM_VALUES = {p.value for p in Platform}


def resolve_field(
    ref: str, platform: Optional[Platform] = None
) -> Tuple[str, Optional[Platform]]:
    """Split `facebook_ads.spend` into ("spend", FACEBOOK_ADS)."""
    if platform is None and "." in ref:
        prefix, field = ref.split(".", 1)
        if prefix in _PLATFORM_VALUES:
            return field, Platform(prefix)
    return ref, Platform(platform) if platform is not None else None


def _values(
    series: DailySeries, field: str, platform: Optional[Platform]
) -> List[float]:
    field, platform = resolve_field(field, platform)
    return [d.value(field, platform) for d in series.days]


def sum_field(
    series: DailySeries, field: str, platform: Optional[Platform] = None
) -> float:
    """Plain arithmetic sum across all days."""
    return math.fsum(_values(series, field, platform))


def average_field(
    series: DailySeries, field: str, platform: Optional[Platform] = None
) -> float:
    """Mean over the days where the field is non-zero; 0 if there are none."""
    non_zero = [v for v in _values(series, field, platform) if v != 0]
    if not non_zero:
        return 0.0
    return math.fsum(non_zero) / len(non_zero)


def max_field(
    series: DailySeries, field: str, platform: Optional[Platform] = None
) -> float:
    """Largest single-day value; 0 for an empty series."""
    return max(_values(series, field, platform), default=0.0)


def latest_field(
    series: DailySeries, field: str, platform: Optional[Platform] = None
) -> float:
    """Value on the last day that observed a platform tracking the field."""
    field, platform = resolve_field(field, platform)
    for entry in reversed(series.days):
        if platform is not None:
            if entry.has_data(platform):
                return entry.value(field, platform)
        elif any(field in get_policy(p).field_names for p in entry.observed):
            return entry.value(field)
    return 0.0


def derived_ratio(numerator: float, denominator: float, scale: float = 1.0) -> float:
    """numerator / denominator * scale, or 0 when that is undefined."""
    if denominator == 0 or not math.isfinite(denominator):
        return 0.0
    result = numerator / denominator * scale
    return result if math.isfinite(result) else 0.0


def named_ratio(series: DailySeries, name: str) -> float:
    """Ratio from RATIO_DEFINITIONS over the series' summed fields."""
    if name not in RATIO_DEFINITIONS:
        raise InvalidArgument(f"Unknown ratio: {name}", argument="ratios")
    numerator, denominator, scale = RATIO_DEFINITIONS[name]
    return derived_ratio(
        sum_field(series, numerator), sum_field(series, denominator), scale
    )


# ─────────────────────────────────────────────
# POINT IN TIME
# ─────────────────────────────────────────────


def point_in_time(series: DailySeries, date: dt.date) -> DailySeriesEntry:
    """The day's reconciled values; an all-zero entry outside the range."""
    entry = series.day(date)
    if entry is not None:
        return entry
    return DailySeriesEntry(
        date=date, metrics={p: zero_metrics(p) for p in series.platforms}
    )


def day_values(
    series: DailySeries, date: dt.date, top_products_limit: Optional[int] = 10
) -> DayValues:
    """Flatten one day into `platform.field` keyed values."""
    entry = point_in_time(series, date)
    values = {}
    for p in series.platforms:
        for name in get_policy(p).field_names:
            values[f"{p.value}.{name}"] = entry.value(name, platform=p)
    return DayValues(
        date=date,
        has_data=entry.has_data(),
        values=values,
        top_products=merge_products([entry], limit=top_products_limit),
    )


# ─────────────────────────────────────────────
# PRODUCTS
# ─────────────────────────────────────────────


def merge_products(
    source: Union[DailySeries, Iterable[DailySeriesEntry]],
    platform: Optional[Platform] = None,
    limit: Optional[int] = None,
) -> List[ProductEntry]:
    """Sum quantity and revenue per product name, highest revenue first.

    Equal revenues are ordered by name so rankings are stable.
    """
    entries = source.days if isinstance(source, DailySeries) else source
    merged: "OrderedDict[str, List[float]]" = OrderedDict()
    for entry in entries:
        for product in entry.products(platform):
            totals = merged.setdefault(product.name, [0.0, 0.0])
            totals[0] += product.quantity
            totals[1] += product.revenue

    ranked = sorted(
        (
            ProductEntry(name=name, quantity=qty, revenue=revenue)
            for name, (qty, revenue) in merged.items()
        ),
        key=lambda p: (-p.revenue, p.name),
    )
    return ranked[:limit] if limit is not None else ranked


# ─────────────────────────────────────────────
# PERIOD BUNDLE
# ─────────────────────────────────────────────


def _default_spec(series: DailySeries, spec: PeriodSpec) -> PeriodSpec:
    """Reduce every tracked field by its strategy-table semantics."""
    sums, averages = [], []
    tracked = set()
    for p in series.platforms:
        for definition in get_policy(p).fields:
            ref = f"{p.value}.{definition.name}"
            tracked.add(ref)
            if definition.aggregation == Aggregation.SUM:
                sums.append(ref)
            elif definition.aggregation == Aggregation.AVERAGE:
                averages.append(ref)
    ratios = [
        name
        for name, (num, den, _) in RATIO_DEFINITIONS.items()
        if num in tracked and den in tracked
    ]
    return spec.model_copy(
        update={"sum_fields": sums, "average_fields": averages, "ratios": ratios}
    )


def _latest_refs(series: DailySeries) -> List[str]:
    return [
        f"{p.value}.{d.name}"
        for p in series.platforms
        for d in get_policy(p).fields
        if d.aggregation == Aggregation.LATEST
    ]


def aggregate_period(
    series: DailySeries, spec: Optional[PeriodSpec] = None
) -> AggregatedMetrics:
    """Reduce a series into the bundle a view asked for."""
    spec = spec or PeriodSpec()
    default_mode = not (spec.sum_fields or spec.average_fields or spec.ratios)
    if default_mode:
        spec = _default_spec(series, spec)

    limit = spec.top_products_limit
    result = AggregatedMetrics(
        start=series.start,
        end=series.end,
        days=len(series.days),
        days_with_data=sum(1 for d in series.days if d.has_data()),
        sums={ref: sum_field(series, ref) for ref in spec.sum_fields},
        averages={ref: average_field(series, ref) for ref in spec.average_fields},
        latest=(
            {ref: latest_field(series, ref) for ref in _latest_refs(series)}
            if default_mode
            else {}
        ),
        ratios={name: named_ratio(series, name) for name in spec.ratios},
        top_products=merge_products(series, limit=limit),
    )

    if series.days:
        result.first_day = day_values(series, series.days[0].date, limit)
        result.last_day = day_values(series, series.days[-1].date, limit)
    if spec.today is not None:
        result.today = day_values(series, spec.today, limit)
        result.yesterday = day_values(
            series, spec.today - dt.timedelta(days=1), limit
        )
    return result

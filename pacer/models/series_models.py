"""PACER — Daily Series Models."""

import datetime as dt
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from pacer.core.platform_registry import Platform
from pacer.models.platform_metrics import PlatformMetrics, ProductEntry


class DailySeriesEntry(BaseModel):
    """Reconciled (or zero-filled) values of every platform for one day."""

    model_config = ConfigDict(frozen=True)

    date: dt.date
    metrics: Dict[Platform, PlatformMetrics] = Field(default_factory=dict)
    observed: List[Platform] = Field(default_factory=list)
    """Platforms that had a reconciled snapshot on this day."""

    def value(self, field: str, platform: Optional[Platform] = None) -> float:
        """Field value summed across platforms (or read from one platform)."""
        if platform is not None:
            metrics = self.metrics.get(Platform(platform))
            return metrics.value(field) if metrics is not None else 0.0
        return sum((m.value(field) for m in self.metrics.values()), 0.0)

    def products(self, platform: Optional[Platform] = None) -> List[ProductEntry]:
        if platform is not None:
            metrics = self.metrics.get(Platform(platform))
            return metrics.products if metrics is not None else []
        return [p for m in self.metrics.values() for p in m.products]

    def has_data(self, platform: Optional[Platform] = None) -> bool:
        if platform is None:
            return bool(self.observed)
        return Platform(platform) in self.observed


class DailySeries(BaseModel):
    """Exactly one entry per calendar day of [start, end], ascending.

    An empty series is written as `end == start - 1 day`, never with a wider
    gap, so `(end - start).days + 1` is always the number of days.
    """

    model_config = ConfigDict(frozen=True)

    start: dt.date
    end: dt.date
    platforms: List[Platform] = Field(default_factory=list)
    days: List[DailySeriesEntry] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_days(self) -> "DailySeries":
        expected = (self.end - self.start).days + 1
        if expected < 0 or len(self.days) != expected:
            raise ValueError(
                f"{len(self.days)} days do not cover {self.start} → {self.end}"
            )
        return self

    @property
    def is_empty(self) -> bool:
        return not self.days

    def __len__(self) -> int:
        return len(self.days)

    def day(self, date: dt.date) -> Optional[DailySeriesEntry]:
        """Entry for a date, or None when it falls outside the range."""
        if date < self.start or date > self.end:
            return None
        return self.days[(date - self.start).days]

    def restrict(self, platforms: List[Platform]) -> "DailySeries":
        """Same days, keeping only the given platforms."""
        keep = [Platform(p) for p in platforms if Platform(p) in self.platforms]
        days = [
            DailySeriesEntry(
                date=d.date,
                metrics={p: d.metrics[p] for p in keep},
                observed=[p for p in d.observed if p in keep],
            )
            for d in self.days
        ]
        return DailySeries(start=self.start, end=self.end, platforms=keep, days=days)

    def window(self, start: dt.date, end: dt.date) -> "DailySeries":
        """Sub-series clipped to [start, end] ∩ [self.start, self.end].

        An empty intersection yields an empty series starting at the clipped
        start.
        """
        lo = max(start, self.start)
        hi = min(end, self.end)
        if hi < lo:
            hi = lo - dt.timedelta(days=1)
        days = [d for d in self.days if lo <= d.date <= hi]
        return DailySeries(
            start=lo,
            end=hi,
            platforms=list(self.platforms),
            days=days,
        )

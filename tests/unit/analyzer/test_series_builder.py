"""Unit tests for daily series construction."""

from __future__ import annotations

import datetime as dt

import pytest

from pacer.analyzer.reconciler import reconcile
from pacer.analyzer.series_builder import build_daily_series, column_names, to_rows
from pacer.core.errors import InvalidArgument
from pacer.core.platform_registry import Platform
from pacer.models.series_models import DailySeries

START = dt.date(2025, 1, 1)
END = dt.date(2025, 1, 31)
PLATFORMS = [Platform.FACEBOOK_ADS, Platform.WOOCOMMERCE]


def test_series_has_one_entry_per_day_without_data() -> None:
    """An empty reconciled map still yields every calendar day."""
    series = build_daily_series({}, START, END, PLATFORMS)

    assert len(series) == 31
    assert [d.date for d in series.days][:2] == [START, START + dt.timedelta(days=1)]
    assert series.days[-1].date == END
    assert all(not d.has_data() for d in series.days)
    assert all(d.value("spend") == 0 for d in series.days)


def test_single_day_range() -> None:
    series = build_daily_series({}, START, START, PLATFORMS)

    assert len(series) == 1


def test_inverted_range_is_rejected() -> None:
    with pytest.raises(InvalidArgument):
        build_daily_series({}, END, START, PLATFORMS)


def test_reconciled_values_land_on_their_day(make_snapshot) -> None:
    """Observed platforms are flagged; others on the same day are zero."""
    day = dt.date(2025, 1, 5)
    reconciled = reconcile([make_snapshot("woocommerce", day, {"total_revenue": 80})])

    series = build_daily_series(reconciled, START, END, PLATFORMS)

    entry = series.day(day)
    assert entry is not None
    assert entry.value("total_revenue", Platform.WOOCOMMERCE) == 80
    assert entry.has_data(Platform.WOOCOMMERCE)
    assert not entry.has_data(Platform.FACEBOOK_ADS)
    assert entry.value("spend", Platform.FACEBOOK_ADS) == 0


def test_platforms_outside_request_are_ignored(make_snapshot) -> None:
    reconciled = reconcile([make_snapshot("mailerlite", START, {"campaigns_sent": 3})])

    series = build_daily_series(reconciled, START, START, PLATFORMS)

    assert not series.days[0].has_data()


def test_day_lookup_outside_range_returns_none() -> None:
    series = build_daily_series({}, START, END, PLATFORMS)

    assert series.day(END + dt.timedelta(days=1)) is None


def test_rows_follow_column_order(make_snapshot) -> None:
    """Row keys match the fixed column list exactly."""
    reconciled = reconcile([make_snapshot("facebook_ads", START, {"spend": 12.5})])
    series = build_daily_series(reconciled, START, START + dt.timedelta(days=2), PLATFORMS)

    rows = to_rows(series)

    assert len(rows) == 3
    assert list(rows[0]) == column_names(PLATFORMS)
    assert rows[0]["date"] == "2025-01-01"
    assert rows[0]["facebook_ads.spend"] == 12.5
    assert rows[1]["facebook_ads.spend"] == 0


def test_column_names_start_with_date() -> None:
    columns = column_names([Platform.WOOCOMMERCE])

    assert columns[0] == "date"
    assert columns[1] == "woocommerce.total_revenue"


def test_restrict_keeps_only_requested_platforms(make_snapshot) -> None:
    reconciled = reconcile(
        [
            make_snapshot("facebook_ads", START, {"spend": 10}),
            make_snapshot("woocommerce", START, {"total_revenue": 30}),
        ]
    )
    series = build_daily_series(reconciled, START, START, PLATFORMS)

    fb_only = series.restrict([Platform.FACEBOOK_ADS])

    assert fb_only.platforms == [Platform.FACEBOOK_ADS]
    assert fb_only.days[0].value("total_revenue") == 0
    assert fb_only.days[0].value("spend") == 10


def test_window_clips_to_overlap() -> None:
    series = build_daily_series({}, START, END, PLATFORMS)

    clipped = series.window(dt.date(2024, 12, 20), dt.date(2025, 1, 3))

    assert (clipped.start, clipped.end) == (START, dt.date(2025, 1, 3))
    assert len(clipped) == 3


def test_window_without_overlap_is_a_canonical_empty_range() -> None:
    """A disjoint window is empty with end exactly one day before start."""
    series = build_daily_series({}, START, END, PLATFORMS)

    empty = series.window(dt.date(2025, 3, 1), dt.date(2025, 3, 31))

    assert empty.is_empty
    assert empty.start == dt.date(2025, 3, 1)
    assert empty.end == dt.date(2025, 2, 28)
    assert (empty.end - empty.start).days + 1 == len(empty) == 0


def test_series_rejects_days_that_do_not_cover_the_range() -> None:
    with pytest.raises(ValueError):
        DailySeries(start=START, end=END, platforms=PLATFORMS, days=[])

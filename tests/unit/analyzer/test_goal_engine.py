"""Unit tests for goal progress and pacing."""

from __future__ import annotations

import datetime as dt
import math

import pytest

from pacer.analyzer.goal_engine import compute_goal_progress
from pacer.analyzer.reconciler import reconcile
from pacer.analyzer.series_builder import build_daily_series
from pacer.core.errors import InvalidArgument
from pacer.core.platform_registry import Platform
from pacer.models.goal_models import Goal

JAN_1 = dt.date(2025, 1, 1)
JAN_31 = dt.date(2025, 1, 31)
PLATFORMS = [Platform.WOOCOMMERCE, Platform.FACEBOOK_ADS]


def _goal(metric_type: str, target: float, start=JAN_1, end=JAN_31) -> Goal:
    return Goal(
        id="goal-1",
        client_id="client-1",
        metric_type=metric_type,
        target_value=target,
        start_date=start,
        end_date=end,
    )


def _series(snapshots, start=JAN_1, end=JAN_31):
    series = build_daily_series(reconcile(snapshots), start, end, PLATFORMS)
    return series, series.restrict([Platform.FACEBOOK_ADS])


def test_orders_goal_behind_pace(make_snapshot) -> None:
    """80 of 200 orders halfway through the month is 40% against 50% expected."""
    snapshots = [
        make_snapshot("woocommerce", JAN_1 + dt.timedelta(days=i), {"total_orders": 10})
        for i in range(8)
    ]
    series, fb = _series(snapshots)

    progress = compute_goal_progress(
        _goal("orders", 200), series, fb, 0, dt.date(2025, 1, 16)
    )

    assert progress.current_value == 80
    assert progress.expected_progress == 50.0
    assert progress.progress_percentage == 40.0
    assert progress.is_on_track is False
    assert progress.is_completed is False
    assert progress.days_remaining == 15


def test_progress_is_not_clamped(make_snapshot) -> None:
    series, fb = _series(
        [make_snapshot("woocommerce", JAN_1, {"total_revenue": 150})]
    )

    progress = compute_goal_progress(
        _goal("revenue", 100), series, fb, 0, dt.date(2025, 1, 10)
    )

    assert progress.progress_percentage == 150.0
    assert progress.is_completed is True
    assert progress.daily_target == 0


def test_daily_target_spreads_remaining_value(make_snapshot) -> None:
    """1000 target, 400 achieved, 6 days left gives 100 per day."""
    series, fb = _series(
        [make_snapshot("woocommerce", JAN_1, {"total_revenue": 400})]
    )

    progress = compute_goal_progress(
        _goal("revenue", 1000), series, fb, 0, dt.date(2025, 1, 25)
    )

    assert progress.days_remaining == 6
    assert progress.daily_target == 100


def test_goal_after_end_date(make_snapshot) -> None:
    """Past the window nothing remains and the full period is expected."""
    series, fb = _series([])

    progress = compute_goal_progress(
        _goal("revenue", 1000), series, fb, 0, dt.date(2025, 3, 1)
    )

    assert progress.days_remaining == 0
    assert progress.daily_target == 0
    assert progress.expected_progress == 100.0


def test_goal_before_start_is_on_track_at_zero(make_snapshot) -> None:
    series, fb = _series([])

    progress = compute_goal_progress(
        _goal("revenue", 1000), series, fb, 0, dt.date(2024, 12, 20)
    )

    assert progress.expected_progress == 0.0
    assert progress.is_on_track is True


def test_products_goal_uses_largest_day(make_snapshot) -> None:
    series, fb = _series(
        [
            make_snapshot("woocommerce", JAN_1, {"total_products": 4}),
            make_snapshot("woocommerce", JAN_1 + dt.timedelta(days=1), {"total_products": 7}),
            make_snapshot("woocommerce", JAN_1 + dt.timedelta(days=2), {"total_products": 5}),
        ]
    )

    progress = compute_goal_progress(
        _goal("products", 10), series, fb, 0, dt.date(2025, 1, 5)
    )

    assert progress.current_value == 7


def test_roas_goal_and_profit_figures(make_snapshot) -> None:
    series, fb = _series(
        [
            make_snapshot("woocommerce", JAN_1, {"total_revenue": 600}),
            make_snapshot("facebook_ads", JAN_1, {"spend": 150}),
            make_snapshot("facebook_ads", JAN_1 + dt.timedelta(days=1), {"spend": 50}),
        ]
    )

    progress = compute_goal_progress(
        _goal("roas", 4), series, fb, 250, dt.date(2025, 1, 2)
    )

    assert progress.current_value == 3.0
    assert progress.facebook_spend == 200
    assert progress.gross_profit == 3.0 - 200
    assert progress.net_profit == 3.0 - 200 - 250
    assert progress.today_change == 0


def test_roas_display_field_divides_goal_value_by_spend(make_snapshot) -> None:
    """An orders goal still reports orders / spend as its roas figure."""
    series, fb = _series(
        [
            make_snapshot("woocommerce", JAN_1, {"total_orders": 20}),
            make_snapshot("facebook_ads", JAN_1, {"spend": 10}),
        ]
    )

    progress = compute_goal_progress(
        _goal("orders", 100), series, fb, 0, dt.date(2025, 1, 2)
    )

    assert progress.roas == 2.0


def test_zero_spend_gives_zero_roas(make_snapshot) -> None:
    series, fb = _series([make_snapshot("woocommerce", JAN_1, {"total_revenue": 10})])

    progress = compute_goal_progress(
        _goal("revenue", 100), series, fb, 0, dt.date(2025, 1, 2)
    )

    assert progress.roas == 0
    assert math.isfinite(progress.net_profit)


def test_today_change_is_that_day_only(make_snapshot) -> None:
    today = dt.date(2025, 1, 10)
    series, fb = _series(
        [
            make_snapshot("woocommerce", JAN_1, {"total_revenue": 500}),
            make_snapshot("woocommerce", today, {"total_revenue": 35}),
        ]
    )

    progress = compute_goal_progress(_goal("revenue", 1000), series, fb, 0, today)

    assert progress.today_change == 35
    assert progress.current_value == 535


def test_custom_goal_has_zero_value(make_snapshot) -> None:
    series, fb = _series([make_snapshot("woocommerce", JAN_1, {"total_revenue": 500})])

    progress = compute_goal_progress(
        _goal("custom", 10), series, fb, 0, dt.date(2025, 1, 2)
    )

    assert progress.current_value == 0


def test_series_wider_than_goal_is_clipped(make_snapshot) -> None:
    """Revenue outside the goal window must not count."""
    series, fb = _series(
        [
            make_snapshot("woocommerce", dt.date(2024, 12, 31), {"total_revenue": 999}),
            make_snapshot("woocommerce", JAN_1, {"total_revenue": 10}),
        ],
        start=dt.date(2024, 12, 1),
    )

    progress = compute_goal_progress(
        _goal("revenue", 100), series, fb, 0, dt.date(2025, 1, 2)
    )

    assert progress.current_value == 10


@pytest.mark.parametrize("target", [0, -5, float("nan")])
def test_non_positive_target_is_rejected(target) -> None:
    series, fb = _series([])

    with pytest.raises(InvalidArgument):
        compute_goal_progress(_goal("revenue", target), series, fb, 0, JAN_1)


def test_inverted_goal_window_is_rejected() -> None:
    series, fb = _series([])

    with pytest.raises(InvalidArgument):
        compute_goal_progress(
            _goal("revenue", 10, start=JAN_31, end=JAN_1), series, fb, 0, JAN_1
        )

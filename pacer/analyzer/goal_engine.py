"""PACER — Goal Progress Engine.

Derives progress, pacing and profit figures for a goal from its reconciled
series. Nothing here writes the goal's status; completion is advisory.

Current value by metric type:
- revenue, orders, conversions: sum over the goal window
- products: largest single-day value (a day's count is already distinct
  products, so summing would count repeats)
- roas: window revenue / window Facebook spend
- custom: not derivable from snapshots, stays 0
"""

import datetime as dt
import math
from typing import Dict

from pacer.analyzer.aggregator import (
    derived_ratio,
    max_field,
    point_in_time,
    sum_field,
)
from pacer.core.errors import InvalidArgument
from pacer.core.platform_registry import Platform
from pacer.models.goal_models import Goal, GoalMetricType, GoalProgress
from pacer.models.series_models import DailySeries
from pacer.core.logging import get_logger

logger = get_logger("analyzer.goal")

ON_TRACK_TOLERANCE = 0.90  # On track at 90% of time-elapsed progress

GOAL_METRIC_FIELDS: Dict[GoalMetricType, str] = {
    GoalMetricType.REVENUE: "total_revenue",
    GoalMetricType.ORDERS: "total_orders",
    GoalMetricType.PRODUCTS: "total_products",
    GoalMetricType.CONVERSIONS: "conversions",
}

REVENUE_FIELD = "total_revenue"
SPEND_FIELD = "spend"


def _validate(goal: Goal, monthly_expenses: float) -> None:
    if not goal.target_value > 0:
        raise InvalidArgument(
            f"Goal {goal.id or '<new>'} target_value must be > 0, got {goal.target_value}",
            argument="target_value",
        )
    if goal.end_date < goal.start_date:
        raise InvalidArgument(
            f"Goal {goal.id or '<new>'} ends ({goal.end_date}) before it starts "
            f"({goal.start_date})",
            argument="end_date",
        )
    if not math.isfinite(monthly_expenses):
        raise InvalidArgument(
            "monthly_expenses must be a finite number", argument="monthly_expenses"
        )


def current_value(
    goal: Goal, series: DailySeries, facebook_series: DailySeries
) -> float:
    """Goal metric over the window, per the metric-type rules above."""
    if goal.metric_type == GoalMetricType.PRODUCTS:
        return max_field(series, GOAL_METRIC_FIELDS[goal.metric_type])
    if goal.metric_type == GoalMetricType.ROAS:
        return derived_ratio(
            sum_field(series, REVENUE_FIELD),
            sum_field(facebook_series, SPEND_FIELD, Platform.FACEBOOK_ADS),
        )
    field = GOAL_METRIC_FIELDS.get(goal.metric_type)
    if field is None:
        return 0.0
    return sum_field(series, field)


def today_change(
    goal: Goal, series: DailySeries, facebook_series: DailySeries, today: dt.date
) -> float:
    """The single day's value of the goal metric, not cumulative."""
    day = point_in_time(series, today)
    if goal.metric_type == GoalMetricType.ROAS:
        fb_day = point_in_time(facebook_series, today)
        return derived_ratio(
            day.value(REVENUE_FIELD),
            fb_day.value(SPEND_FIELD, Platform.FACEBOOK_ADS),
        )
    field = GOAL_METRIC_FIELDS.get(goal.metric_type)
    return day.value(field) if field is not None else 0.0


def compute_goal_progress(
    goal: Goal,
    series: DailySeries,
    facebook_series: DailySeries,
    monthly_expenses: float,
    today: dt.date,
) -> GoalProgress:
    """Compute a goal's progress as of `today`.

    Both series are clipped to the goal window, so callers may pass a wider
    range.

    Raises:
        InvalidArgument: non-positive target, inverted window or non-finite
            expenses.
    """
    _validate(goal, monthly_expenses)

    series = series.window(goal.start_date, goal.end_date)
    facebook_series = facebook_series.window(goal.start_date, goal.end_date)
    target = goal.target_value

    value = current_value(goal, series, facebook_series)
    progress = (value / target) * 100 if target > 0 else 0.0

    days_remaining = max(0, (goal.end_date - today).days)
    remaining = max(0.0, target - value)
    daily_target = remaining / days_remaining if days_remaining > 0 else 0.0

    total_days = (goal.end_date - goal.start_date).days
    elapsed = min(max((today - goal.start_date).days, 0), total_days)
    expected = (elapsed / total_days) * 100 if total_days > 0 else 0.0
    is_on_track = progress >= expected * ON_TRACK_TOLERANCE

    facebook_spend = sum_field(facebook_series, SPEND_FIELD, Platform.FACEBOOK_ADS)
    # Divides the goal's own value by spend whatever the metric type.
    roas = derived_ratio(value, facebook_spend)
    gross_profit = value - facebook_spend
    net_profit = gross_profit - monthly_expenses

    logger.debug(
        f"Goal {goal.id} ({goal.metric_type.value}): {value:.2f}/{target:.2f} "
        f"= {progress:.1f}% vs expected {expected:.1f}%",
        extra={"goal_id": goal.id, "client_id": goal.client_id},
    )

    return GoalProgress(
        **goal.model_dump(),
        current_value=value,
        progress_percentage=progress,
        expected_progress=expected,
        is_on_track=is_on_track,
        is_completed=progress >= 100,
        days_remaining=days_remaining,
        daily_target=daily_target,
        today_change=today_change(goal, series, facebook_series, today),
        facebook_spend=facebook_spend,
        roas=roas,
        gross_profit=gross_profit,
        net_profit=net_profit,
        evaluated_on=today,
    )

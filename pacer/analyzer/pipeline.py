"""PACER — Report Pipeline Orchestrator.

Runs the full data flow for each view:
  query snapshots → reconcile → build daily series → aggregate / goal engine

Every step after the query is a pure function of its inputs; the store is the
only thing touched.
"""

import calendar
import datetime as dt
import time
from typing import List, Optional

from pacer.config import settings
from pacer.analyzer.aggregator import (
    aggregate_period,
    average_field,
    day_values,
    derived_ratio,
    latest_field,
    merge_products,
    point_in_time,
    sum_field,
)
from pacer.analyzer.goal_engine import compute_goal_progress
from pacer.analyzer.reconciler import duplicates_collapsed, reconcile
from pacer.analyzer.series_builder import build_daily_series, column_names, to_rows
from pacer.connectors.snapshot_store import SnapshotStore
from pacer.core.errors import InvalidArgument
from pacer.core.platform_registry import COMMERCE_PLATFORMS, Platform
from pacer.models.goal_models import GoalProgress
from pacer.models.report_models import (
    AggregatedMetrics,
    AnalyticsSummary,
    ClientReport,
    CommerceSummary,
    EmailSummary,
    FacebookAdsSummary,
    MonthlyReport,
    PeriodSpec,
)
from pacer.models.series_models import DailySeries
from pacer.core.logging import get_logger

logger = get_logger("analyzer.pipeline")

DATE_RANGE_DAYS = {"7d": 7, "30d": 30, "90d": 90}

REPORT_PLATFORMS = [
    Platform.WOOCOMMERCE,
    Platform.WORDPRESS,
    Platform.FACEBOOK_ADS,
    Platform.GOOGLE_ANALYTICS,
    Platform.MAILERLITE,
]
MONTHLY_PLATFORMS = [Platform.FACEBOOK_ADS, Platform.WOOCOMMERCE]
GOAL_PLATFORMS = COMMERCE_PLATFORMS + [Platform.FACEBOOK_ADS]


def _validate_date(d: Optional[str]) -> Optional[dt.date]:
    """Return the parsed date if valid YYYY-MM-DD, else None."""
    if not d:
        return None
    try:
        return dt.datetime.strptime(d, "%Y-%m-%d").date()
    except ValueError:
        return None


def resolve_dates(
    date_range: Optional[str] = None,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    today: Optional[dt.date] = None,
) -> tuple[dt.date, dt.date]:
    """Resolve date parameters into an inclusive (start, end) pair."""
    today = today or dt.date.today()

    start = _validate_date(start_date)
    end = _validate_date(end_date)
    if start and end:
        return start, end

    days = DATE_RANGE_DAYS.get(date_range or "")
    if days is None:
        days = DATE_RANGE_DAYS.get(settings.default_date_range, 30)
    return today - dt.timedelta(days=days), today


def month_bounds(month: str) -> tuple[dt.date, dt.date]:
    """First and last calendar day of a `YYYY-MM` month."""
    try:
        first = dt.datetime.strptime(month, "%Y-%m").date()
    except ValueError as e:
        raise InvalidArgument(f"month must be YYYY-MM, got '{month}'", "month") from e
    last_day = calendar.monthrange(first.year, first.month)[1]
    return first, first.replace(day=last_day)


def load_series(
    store: SnapshotStore,
    client_id: str,
    start: dt.date,
    end: dt.date,
    platforms: List[Platform],
) -> tuple[DailySeries, int, int]:
    """Query, reconcile and zero-fill. Returns (series, read, collapsed)."""
    if end < start:
        raise InvalidArgument(f"end ({end}) is before start ({start})", "end")
    snapshots = store.query_snapshots(client_id, start, end, platforms)
    reconciled = reconcile(snapshots)
    series = build_daily_series(reconciled, start, end, platforms)
    return series, len(snapshots), duplicates_collapsed(reconciled)


# ─────────────────────────────────────────────
# CLIENT REPORT
# ─────────────────────────────────────────────


def _days_with_data(series: DailySeries, platforms: List[Platform]) -> int:
    return sum(1 for d in series.days if any(d.has_data(p) for p in platforms))


def _commerce_summary(
    series: DailySeries, today: dt.date, limit: int
) -> Optional[CommerceSummary]:
    observed = _days_with_data(series, COMMERCE_PLATFORMS)
    if observed == 0:
        return None

    revenue = sum_field(series, "total_revenue")
    orders = sum_field(series, "total_orders")
    today_entry = point_in_time(series, today)
    yesterday_entry = point_in_time(series, today - dt.timedelta(days=1))
    first = day_values(series, series.start, limit)
    last = day_values(series, series.end, limit)
    woo = Platform.WOOCOMMERCE

    return CommerceSummary(
        total_revenue=revenue,
        total_orders=orders,
        average_order_value=derived_ratio(revenue, orders),
        total_products=latest_field(series, "total_products", woo),
        completed_orders=latest_field(series, "completed_orders", woo),
        processing_orders=latest_field(series, "processing_orders", woo),
        pending_orders=latest_field(series, "pending_orders", woo),
        top_products=merge_products(series, limit=limit),
        today_revenue=today_entry.value("total_revenue"),
        today_orders=today_entry.value("total_orders"),
        today_top_products=merge_products([today_entry], limit=limit),
        yesterday_revenue=yesterday_entry.value("total_revenue"),
        yesterday_orders=yesterday_entry.value("total_orders"),
        yesterday_top_products=merge_products([yesterday_entry], limit=limit),
        first_day_date=first.date,
        first_day_revenue=first.values.get("woocommerce.total_revenue", 0.0),
        first_day_orders=first.values.get("woocommerce.total_orders", 0.0),
        first_day_top_products=first.top_products,
        last_day_date=last.date,
        last_day_revenue=last.values.get("woocommerce.total_revenue", 0.0),
        last_day_orders=last.values.get("woocommerce.total_orders", 0.0),
        last_day_top_products=last.top_products,
        days_with_data=observed,
    )


def _facebook_summary(series: DailySeries) -> Optional[FacebookAdsSummary]:
    fb = Platform.FACEBOOK_ADS
    observed = _days_with_data(series, [fb])
    if observed == 0:
        return None

    spend = sum_field(series, "spend", fb)
    impressions = sum_field(series, "impressions", fb)
    clicks = sum_field(series, "clicks", fb)
    conversions = sum_field(series, "conversions", fb)
    return FacebookAdsSummary(
        spend=spend,
        impressions=impressions,
        clicks=clicks,
        link_clicks=sum_field(series, "link_clicks", fb),
        conversions=conversions,
        ctr=derived_ratio(clicks, impressions, 100),
        cpc=derived_ratio(spend, clicks),
        cpm=derived_ratio(spend, impressions, 1000),
        roas=derived_ratio(sum_field(series, "total_revenue"), spend),
        conversion_rate=derived_ratio(
            conversions, sum_field(series, "landing_page_views", fb), 100
        ),
        days_with_data=observed,
    )


def _analytics_summary(series: DailySeries) -> Optional[AnalyticsSummary]:
    ga = Platform.GOOGLE_ANALYTICS
    observed = _days_with_data(series, [ga])
    if observed == 0:
        return None
    return AnalyticsSummary(
        users=sum_field(series, "users", ga),
        sessions=sum_field(series, "sessions", ga),
        pageviews=sum_field(series, "pageviews", ga),
        new_users=sum_field(series, "new_users", ga),
        conversions=sum_field(series, "conversions", ga),
        bounce_rate=average_field(series, "bounce_rate", ga),
        avg_session_duration=average_field(series, "avg_session_duration", ga),
        days_with_data=observed,
    )


def _email_summary(series: DailySeries) -> Optional[EmailSummary]:
    ml = Platform.MAILERLITE
    observed = _days_with_data(series, [ml])
    if observed == 0:
        return None
    return EmailSummary(
        total_subscribers=latest_field(series, "total_subscribers", ml),
        active_subscribers=latest_field(series, "active_subscribers", ml),
        unsubscribed=latest_field(series, "unsubscribed", ml),
        campaigns_sent=latest_field(series, "campaigns_sent", ml),
        open_rate=average_field(series, "open_rate", ml),
        click_rate=average_field(series, "click_rate", ml),
        unsubscribe_rate=average_field(series, "unsubscribe_rate", ml),
        days_with_data=observed,
    )


def build_client_report(
    store: SnapshotStore,
    client_id: str,
    start: dt.date,
    end: dt.date,
    today: Optional[dt.date] = None,
) -> ClientReport:
    """Period report with one block per platform that has data."""
    started = time.monotonic()
    today = today or dt.date.today()
    limit = settings.top_products_limit

    series, read, collapsed = load_series(
        store, client_id, start, end, REPORT_PLATFORMS
    )
    report = ClientReport(
        client_id=client_id,
        currency=settings.currency,
        start=start,
        end=end,
        generated_at=dt.datetime.now(dt.timezone.utc).isoformat(),
        snapshots_read=read,
        duplicates_collapsed=collapsed,
        commerce=_commerce_summary(series, today, limit),
        facebook_ads=_facebook_summary(series),
        analytics=_analytics_summary(series),
        email=_email_summary(series),
    )

    logger.info(
        f"Report built: {start} → {end}, {read} snapshots, {collapsed} duplicates",
        extra={
            "client_id": client_id,
            "duration_ms": round((time.monotonic() - started) * 1000, 1),
        },
    )
    return report


# ─────────────────────────────────────────────
# MONTHLY ROWS
# ─────────────────────────────────────────────


def build_monthly_rows(
    store: SnapshotStore, client_id: str, month: str
) -> MonthlyReport:
    """One zero-filled row per day of the month, fixed column order."""
    start, end = month_bounds(month)
    series, read, _ = load_series(store, client_id, start, end, MONTHLY_PLATFORMS)

    rows = to_rows(series)
    for row, entry in zip(rows, series.days):
        row["facebook_ads.roas"] = derived_ratio(
            entry.value("total_revenue"),
            entry.value("spend", Platform.FACEBOOK_ADS),
        )

    logger.info(
        f"Monthly rows built for {month}: {len(rows)} days from {read} snapshots",
        extra={"client_id": client_id},
    )
    return MonthlyReport(
        client_id=client_id,
        month=month,
        currency=settings.currency,
        columns=column_names(MONTHLY_PLATFORMS) + ["facebook_ads.roas"],
        rows=rows,
    )


# ─────────────────────────────────────────────
# GOALS
# ─────────────────────────────────────────────


def compute_client_goals(
    store: SnapshotStore,
    client_id: str,
    today: Optional[dt.date] = None,
) -> List[GoalProgress]:
    """Progress of every active goal of a client.

    A goal that breaks the engine contract (non-positive target, inverted
    window) is logged and left out so the remaining goals still render.
    """
    today = today or dt.date.today()
    monthly_expenses = store.get_monthly_expenses(client_id)

    results: List[GoalProgress] = []
    for goal in store.list_goals(client_id, status="active"):
        try:
            series, _, _ = load_series(
                store, client_id, goal.start_date, goal.end_date, GOAL_PLATFORMS
            )
            facebook_series = series.restrict([Platform.FACEBOOK_ADS])
            results.append(
                compute_goal_progress(
                    goal, series, facebook_series, monthly_expenses, today
                )
            )
        except InvalidArgument as e:
            logger.warning(
                f"Skipping goal {goal.id}: {e}",
                extra={"client_id": client_id, "goal_id": goal.id},
            )

    logger.info(
        f"Computed progress for {len(results)} goals",
        extra={"client_id": client_id},
    )
    return results


# ─────────────────────────────────────────────
# CUSTOM AGGREGATION
# ─────────────────────────────────────────────


def aggregate_client_period(
    store: SnapshotStore,
    client_id: str,
    start: dt.date,
    end: dt.date,
    platforms: Optional[List[Platform]] = None,
    spec: Optional[PeriodSpec] = None,
) -> AggregatedMetrics:
    """Reduce a client's series with a caller-supplied PeriodSpec."""
    series, read, _ = load_series(
        store, client_id, start, end, list(platforms or REPORT_PLATFORMS)
    )
    result = aggregate_period(series, spec)
    logger.info(
        f"Aggregated {result.days} days ({result.days_with_data} with data) "
        f"from {read} snapshots",
        extra={"client_id": client_id},
    )
    return result

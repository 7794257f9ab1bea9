"""PACER — Report Output Models."""

import datetime as dt
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from pacer.models.platform_metrics import ProductEntry


# ─────────────────────────────────────────────
# AGGREGATION BUNDLE
# ─────────────────────────────────────────────


class PeriodSpec(BaseModel):
    """What a view wants reduced out of a daily series.

    Field references are either plain (`spend`, summed over every platform in
    the series) or qualified (`facebook_ads.spend`). With no fields named at
    all, every tracked field is reduced per the platform strategy table.
    """

    sum_fields: List[str] = []
    average_fields: List[str] = []
    ratios: List[str] = []
    """Names from RATIO_DEFINITIONS: ctr, cpc, cpm, roas, aov, ..."""
    today: Optional[dt.date] = None
    top_products_limit: Optional[int] = 10


class DayValues(BaseModel):
    """Point-in-time values of one day, not aggregated."""

    date: dt.date
    has_data: bool = False
    values: Dict[str, float] = {}
    top_products: List[ProductEntry] = []


class AggregatedMetrics(BaseModel):
    """Sums, averages, ratios and point-in-time values of a period."""

    start: dt.date
    end: dt.date
    days: int = 0
    days_with_data: int = 0
    sums: Dict[str, float] = {}
    averages: Dict[str, float] = {}
    latest: Dict[str, float] = {}
    ratios: Dict[str, float] = {}
    top_products: List[ProductEntry] = []
    first_day: Optional[DayValues] = None
    last_day: Optional[DayValues] = None
    today: Optional[DayValues] = None
    yesterday: Optional[DayValues] = None


# ─────────────────────────────────────────────
# CLIENT REPORT: per-platform blocks
# ─────────────────────────────────────────────


class CommerceSummary(BaseModel):
    """WooCommerce / WordPress block."""

    total_revenue: float = 0.0
    total_orders: float = 0.0
    average_order_value: float = 0.0
    total_products: float = 0.0
    completed_orders: float = 0.0
    processing_orders: float = 0.0
    pending_orders: float = 0.0
    top_products: List[ProductEntry] = []
    today_revenue: float = 0.0
    today_orders: float = 0.0
    today_top_products: List[ProductEntry] = []
    yesterday_revenue: float = 0.0
    yesterday_orders: float = 0.0
    yesterday_top_products: List[ProductEntry] = []
    first_day_date: Optional[dt.date] = None
    first_day_revenue: float = 0.0
    first_day_orders: float = 0.0
    first_day_top_products: List[ProductEntry] = []
    last_day_date: Optional[dt.date] = None
    last_day_revenue: float = 0.0
    last_day_orders: float = 0.0
    last_day_top_products: List[ProductEntry] = []
    days_with_data: int = 0


class FacebookAdsSummary(BaseModel):
    """Meta Ads block; ROAS is measured against commerce revenue."""

    spend: float = 0.0
    impressions: float = 0.0
    clicks: float = 0.0
    link_clicks: float = 0.0
    conversions: float = 0.0
    ctr: float = 0.0
    cpc: float = 0.0
    cpm: float = 0.0
    roas: float = 0.0
    conversion_rate: float = 0.0
    days_with_data: int = 0


class AnalyticsSummary(BaseModel):
    """Google Analytics block."""

    users: float = 0.0
    sessions: float = 0.0
    pageviews: float = 0.0
    new_users: float = 0.0
    conversions: float = 0.0
    bounce_rate: float = 0.0
    avg_session_duration: float = 0.0
    days_with_data: int = 0


class EmailSummary(BaseModel):
    """MailerLite block: latest counters, averaged rates."""

    total_subscribers: float = 0.0
    active_subscribers: float = 0.0
    unsubscribed: float = 0.0
    campaigns_sent: float = 0.0
    open_rate: float = 0.0
    click_rate: float = 0.0
    unsubscribe_rate: float = 0.0
    days_with_data: int = 0


class ClientReport(BaseModel):
    """Period report for one client."""

    client_id: str
    currency: str = "RON"
    start: dt.date
    end: dt.date
    generated_at: str = ""
    snapshots_read: int = 0
    duplicates_collapsed: int = 0
    commerce: Optional[CommerceSummary] = None
    facebook_ads: Optional[FacebookAdsSummary] = None
    analytics: Optional[AnalyticsSummary] = None
    email: Optional[EmailSummary] = None


class MonthlyReport(BaseModel):
    """One zero-filled row per calendar day, columns in fixed order."""

    client_id: str
    month: str
    currency: str = "RON"
    columns: List[str] = []
    rows: List[Dict[str, Any]] = Field(default_factory=list)

"""PACER — Platform Strategy Table.

Defines how each data source is reconciled and aggregated.
The reconciler and aggregator consult this table instead of branching on
platform names, so adding a source means registering one PlatformPolicy here.
"""

from enum import Enum
from typing import Dict, List, Tuple


class Platform(str, Enum):
    """Data sources written by the external sync jobs."""

    FACEBOOK_ADS = "facebook_ads"
    GOOGLE_ANALYTICS = "google_analytics"
    WOOCOMMERCE = "woocommerce"
    MAILERLITE = "mailerlite"
    WORDPRESS = "wordpress"


class ReconciliationStyle(str, Enum):
    """What same-day duplicate snapshots of a platform represent."""

    CUMULATIVE = "cumulative"  # Running total for the day: woocommerce, wordpress
    FLOW = "flow"  # Accumulating measurement: spend, impressions


class Aggregation(str, Enum):
    """How a field reduces across the days of a period."""

    SUM = "sum"  # Volumes and money: spend, revenue, orders
    AVERAGE = "average"  # Rates reported by the source: ctr, bounce rate
    LATEST = "latest"  # Running totals: subscribers, posts


class FieldDefinition:
    """Describes a single tracked numeric field."""

    def __init__(
        self,
        name: str,
        aggregation: Aggregation = Aggregation.SUM,
        unit: str = "count",
        description: str = "",
    ):
        self.name = name
        self.aggregation = aggregation
        self.unit = unit
        self.description = description

    def __repr__(self) -> str:
        return f"<Field {self.name} ({self.aggregation.value})>"


class PlatformPolicy:
    """Reconciliation comparator and aggregation semantics for one platform."""

    def __init__(
        self,
        platform: Platform,
        style: ReconciliationStyle,
        indicator_fields: Tuple[str, ...],
        fields: List[FieldDefinition],
        has_products: bool = False,
    ):
        self.platform = platform
        self.style = style
        self.indicator_fields = indicator_fields
        self.fields = fields
        self.has_products = has_products

    @property
    def field_names(self) -> List[str]:
        return [f.name for f in self.fields]

    def field(self, name: str) -> FieldDefinition | None:
        for f in self.fields:
            if f.name == name:
                return f
        return None

    def __repr__(self) -> str:
        return f"<PlatformPolicy {self.platform.value} ({self.style.value})>"


# ─────────────────────────────────────────────
# STRATEGY TABLE: one policy per platform
# Field order is the column order of daily rows.
# ─────────────────────────────────────────────

SUM = Aggregation.SUM
AVG = Aggregation.AVERAGE
LATEST = Aggregation.LATEST

PLATFORM_POLICIES: Dict[Platform, PlatformPolicy] = {
    Platform.FACEBOOK_ADS: PlatformPolicy(
        Platform.FACEBOOK_ADS,
        ReconciliationStyle.FLOW,
        indicator_fields=("spend", "impressions"),
        fields=[
            FieldDefinition("spend", SUM, "currency", "Total amount spent"),
            FieldDefinition("impressions", SUM, "count", "Times ads were shown"),
            FieldDefinition("clicks", SUM, "count", "Total clicks"),
            FieldDefinition("link_clicks", SUM, "count", "Inline link clicks"),
            FieldDefinition(
                "landing_page_views", SUM, "count", "Landing page views"
            ),
            FieldDefinition("conversions", SUM, "count", "Purchase conversions"),
            FieldDefinition("ctr", AVG, "%", "Click-through rate from Meta"),
            FieldDefinition("cpc", AVG, "currency", "Cost per click from Meta"),
            FieldDefinition("cpm", AVG, "currency", "Cost per mille from Meta"),
            FieldDefinition("cost_per_link_click", AVG, "currency"),
            FieldDefinition("landing_page_view_rate", AVG, "%"),
            FieldDefinition("conversion_rate", AVG, "%"),
        ],
    ),
    Platform.GOOGLE_ANALYTICS: PlatformPolicy(
        Platform.GOOGLE_ANALYTICS,
        ReconciliationStyle.FLOW,
        indicator_fields=("sessions", "pageviews"),
        fields=[
            FieldDefinition("users", SUM, "count", "Active users"),
            FieldDefinition("sessions", SUM, "count", "Sessions"),
            FieldDefinition("pageviews", SUM, "count", "Screen page views"),
            FieldDefinition("bounce_rate", AVG, "%", "Bounce rate"),
            FieldDefinition(
                "avg_session_duration", AVG, "seconds", "Average session duration"
            ),
            FieldDefinition("new_users", SUM, "count", "New users"),
            FieldDefinition("conversions", SUM, "count", "Conversions"),
        ],
    ),
    Platform.WOOCOMMERCE: PlatformPolicy(
        Platform.WOOCOMMERCE,
        ReconciliationStyle.CUMULATIVE,
        indicator_fields=("total_revenue",),
        fields=[
            FieldDefinition(
                "total_revenue", SUM, "currency", "Completed + processing revenue"
            ),
            FieldDefinition("total_orders", SUM, "count", "Completed + processing"),
            FieldDefinition("total_products", LATEST, "count", "Distinct products"),
            FieldDefinition("completed_orders", SUM, "count"),
            FieldDefinition("processing_orders", SUM, "count"),
            FieldDefinition("pending_orders", SUM, "count"),
            FieldDefinition("on_hold_orders", SUM, "count"),
            FieldDefinition("cancelled_orders", SUM, "count"),
            FieldDefinition("refunded_orders", SUM, "count"),
            FieldDefinition("failed_orders", SUM, "count"),
        ],
        has_products=True,
    ),
    Platform.MAILERLITE: PlatformPolicy(
        Platform.MAILERLITE,
        ReconciliationStyle.FLOW,
        indicator_fields=("campaigns_sent", "total_subscribers"),
        fields=[
            FieldDefinition("total_subscribers", LATEST, "count"),
            FieldDefinition("active_subscribers", LATEST, "count"),
            FieldDefinition("unsubscribed", LATEST, "count"),
            FieldDefinition("bounced", LATEST, "count"),
            FieldDefinition("total_campaigns", LATEST, "count"),
            FieldDefinition("campaigns_sent", LATEST, "count"),
            FieldDefinition("open_rate", AVG, "%"),
            FieldDefinition("click_rate", AVG, "%"),
            FieldDefinition("unsubscribe_rate", AVG, "%"),
        ],
    ),
    Platform.WORDPRESS: PlatformPolicy(
        Platform.WORDPRESS,
        ReconciliationStyle.CUMULATIVE,
        indicator_fields=("total_posts",),
        fields=[
            FieldDefinition("total_posts", LATEST, "count"),
            FieldDefinition("total_pages", LATEST, "count"),
            FieldDefinition("total_comments", LATEST, "count"),
            FieldDefinition("published_posts", LATEST, "count"),
            FieldDefinition("draft_posts", LATEST, "count"),
            FieldDefinition("total_users", LATEST, "count"),
        ],
    ),
}


# ─────────────────────────────────────────────
# DERIVED RATIOS: numerator, denominator, scale
# Operands are `platform.field` references summed over the period, so a field
# shared by several platforms (conversions) is read from one source only.
# ─────────────────────────────────────────────

RATIO_DEFINITIONS: Dict[str, Tuple[str, str, float]] = {
    "ctr": ("facebook_ads.clicks", "facebook_ads.impressions", 100.0),
    "cpc": ("facebook_ads.spend", "facebook_ads.clicks", 1.0),
    "cpm": ("facebook_ads.spend", "facebook_ads.impressions", 1000.0),
    "roas": ("woocommerce.total_revenue", "facebook_ads.spend", 1.0),
    "aov": ("woocommerce.total_revenue", "woocommerce.total_orders", 1.0),
    "conversion_rate": (
        "facebook_ads.conversions", "facebook_ads.landing_page_views", 100.0
    ),
    "cost_per_link_click": ("facebook_ads.spend", "facebook_ads.link_clicks", 1.0),
    "landing_page_view_rate": (
        "facebook_ads.landing_page_views", "facebook_ads.link_clicks", 100.0
    ),
}


# ─────────────────────────────────────────────
# HELPERS
# ─────────────────────────────────────────────

COMMERCE_PLATFORMS = [
    p for p, policy in PLATFORM_POLICIES.items()
    if policy.style == ReconciliationStyle.CUMULATIVE
]


def get_policy(platform: Platform) -> PlatformPolicy:
    """Look up the policy for a platform."""
    return PLATFORM_POLICIES[Platform(platform)]


def platforms_with_field(field: str) -> list[Platform]:
    """Return every platform that tracks the given field."""
    return [p for p, policy in PLATFORM_POLICIES.items() if field in policy.field_names]


def aggregation_for(field: str, platform: Platform | None = None) -> Aggregation:
    """Aggregation semantic of a field, defaulting to SUM for unknown fields."""
    candidates = [platform] if platform is not None else platforms_with_field(field)
    for p in candidates:
        definition = get_policy(p).field(field)
        if definition is not None:
            return definition.aggregation
    return Aggregation.SUM

"""PACER — Per-Platform Metric Payloads.

Each sync job writes a differently shaped `metrics` JSON object. These models
give every platform its own typed payload with explicit zero defaults, joined
into one discriminated union on `platform`.

Coercion is lenient: numeric strings are parsed, anything that is
not a finite number becomes 0, so a noisy payload can never fail a report.
"""

import math
from typing import Annotated, Any, Dict, List, Literal, Union

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field
from pydantic.alias_generators import to_camel

from pacer.core.platform_registry import Platform, get_policy


def safe_float(value: Any) -> float:
    """Convert a value to a finite float, falling back to 0."""
    try:
        result = float(value)
    except (TypeError, ValueError):
        return 0.0
    return result if math.isfinite(result) else 0.0


def _safe_str(value: Any) -> str:
    return "" if value is None else str(value)


def _coerce_products(value: Any) -> list:
    """Drop anything that is not a product-like entry."""
    if not isinstance(value, list):
        return []
    return [v for v in value if isinstance(v, (dict, ProductEntry))]


SafeFloat = Annotated[float, BeforeValidator(safe_float)]
SafeStr = Annotated[str, BeforeValidator(_safe_str)]


class ProductEntry(BaseModel):
    """One product line from a commerce snapshot."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    name: SafeStr = ""
    quantity: SafeFloat = 0.0
    revenue: SafeFloat = 0.0


class _PlatformMetrics(BaseModel):
    """Shared behaviour for all platform payloads."""

    model_config = ConfigDict(frozen=True, extra="allow", populate_by_name=True)

    def value(self, field: str) -> float:
        """Numeric value of a tracked field; 0 for anything untracked."""
        if field not in get_policy(self.platform).field_names:  # type: ignore[attr-defined]
            return 0.0
        return getattr(self, field)

    @property
    def products(self) -> List[ProductEntry]:
        return []


class FacebookAdsMetrics(_PlatformMetrics):
    """Daily Meta Ads account totals."""

    platform: Literal["facebook_ads"] = "facebook_ads"
    spend: SafeFloat = 0.0
    impressions: SafeFloat = 0.0
    clicks: SafeFloat = 0.0
    link_clicks: SafeFloat = 0.0
    landing_page_views: SafeFloat = 0.0
    conversions: SafeFloat = 0.0
    ctr: SafeFloat = 0.0
    cpc: SafeFloat = 0.0
    cpm: SafeFloat = 0.0
    cost_per_link_click: SafeFloat = 0.0
    landing_page_view_rate: SafeFloat = 0.0
    conversion_rate: SafeFloat = 0.0


class GoogleAnalyticsMetrics(_PlatformMetrics):
    """GA4 property report."""

    model_config = ConfigDict(alias_generator=to_camel)

    platform: Literal["google_analytics"] = "google_analytics"
    users: SafeFloat = 0.0
    sessions: SafeFloat = 0.0
    pageviews: SafeFloat = 0.0
    bounce_rate: SafeFloat = 0.0
    avg_session_duration: SafeFloat = 0.0
    new_users: SafeFloat = 0.0
    conversions: SafeFloat = 0.0


class WooCommerceMetrics(_PlatformMetrics):
    """Store orders for one day (completed + processing count as sales)."""

    model_config = ConfigDict(alias_generator=to_camel)

    platform: Literal["woocommerce"] = "woocommerce"
    total_revenue: SafeFloat = 0.0
    total_orders: SafeFloat = 0.0
    total_products: SafeFloat = 0.0
    completed_orders: SafeFloat = 0.0
    processing_orders: SafeFloat = 0.0
    pending_orders: SafeFloat = 0.0
    on_hold_orders: SafeFloat = 0.0
    cancelled_orders: SafeFloat = 0.0
    refunded_orders: SafeFloat = 0.0
    failed_orders: SafeFloat = 0.0
    top_products: Annotated[
        List[ProductEntry], BeforeValidator(_coerce_products)
    ] = Field(default_factory=list)

    @property
    def products(self) -> List[ProductEntry]:
        return list(self.top_products)


class MailerLiteMetrics(_PlatformMetrics):
    """Subscriber and campaign figures."""

    model_config = ConfigDict(alias_generator=to_camel)

    platform: Literal["mailerlite"] = "mailerlite"
    total_subscribers: SafeFloat = 0.0
    active_subscribers: SafeFloat = 0.0
    unsubscribed: SafeFloat = 0.0
    bounced: SafeFloat = 0.0
    total_campaigns: SafeFloat = 0.0
    campaigns_sent: SafeFloat = 0.0
    open_rate: SafeFloat = 0.0
    click_rate: SafeFloat = 0.0
    unsubscribe_rate: SafeFloat = 0.0


class WordPressMetrics(_PlatformMetrics):
    """Site content counters."""

    model_config = ConfigDict(alias_generator=to_camel)

    platform: Literal["wordpress"] = "wordpress"
    total_posts: SafeFloat = 0.0
    total_pages: SafeFloat = 0.0
    total_comments: SafeFloat = 0.0
    published_posts: SafeFloat = 0.0
    draft_posts: SafeFloat = 0.0
    total_users: SafeFloat = 0.0


PlatformMetrics = Annotated[
    Union[
        FacebookAdsMetrics,
        GoogleAnalyticsMetrics,
        WooCommerceMetrics,
        MailerLiteMetrics,
        WordPressMetrics,
    ],
    Field(discriminator="platform"),
]

METRICS_MODELS: Dict[Platform, type[_PlatformMetrics]] = {
    Platform.FACEBOOK_ADS: FacebookAdsMetrics,
    Platform.GOOGLE_ANALYTICS: GoogleAnalyticsMetrics,
    Platform.WOOCOMMERCE: WooCommerceMetrics,
    Platform.MAILERLITE: MailerLiteMetrics,
    Platform.WORDPRESS: WordPressMetrics,
}


def parse_metrics(platform: Platform, payload: Any) -> _PlatformMetrics:
    """Validate a raw payload into the platform's model.

    The payload's own `platform` key, if any, is ignored in favour of the
    snapshot's platform column.
    """
    data = dict(payload) if isinstance(payload, dict) else {}
    data["platform"] = Platform(platform).value
    return METRICS_MODELS[Platform(platform)].model_validate(data)


def zero_metrics(platform: Platform) -> _PlatformMetrics:
    """All-zero payload with an empty product list."""
    return METRICS_MODELS[Platform(platform)]()

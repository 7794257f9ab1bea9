"""PACER — Goal Models.

Goals are owned by the database layer; this service only reads them and
derives a fresh GoalProgress on every request.
"""

import datetime as dt
import uuid
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict
from sqlmodel import SQLModel, Field


class GoalMetricType(str, Enum):
    REVENUE = "revenue"
    ORDERS = "orders"
    PRODUCTS = "products"
    CONVERSIONS = "conversions"
    ROAS = "roas"
    CUSTOM = "custom"


class GoalPeriod(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class GoalStatus(str, Enum):
    """Set by a human or an external process, never by this service."""

    ACTIVE = "active"
    COMPLETED = "completed"
    FAILED = "failed"
    ARCHIVED = "archived"


# ─────────────────────────────────────────────
# DATABASE MODELS
# ─────────────────────────────────────────────


class GoalRecord(SQLModel, table=True):
    """Persisted goal row."""

    __tablename__ = "goals"

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    client_id: str = Field(index=True)
    metric_type: str = Field(description="revenue | orders | products | ...")
    target_value: float
    period: str = Field(default="monthly")
    start_date: dt.date
    end_date: dt.date
    label: Optional[str] = None
    description: Optional[str] = None
    status: str = Field(default="active", index=True)
    created_at: dt.datetime = Field(
        default_factory=lambda: dt.datetime.now(dt.timezone.utc)
    )


class ClientRecord(SQLModel, table=True):
    """Client row; only the fields the engines need."""

    __tablename__ = "clients"

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    name: str = ""
    status: str = Field(default="active", index=True)
    monthly_expenses: Optional[float] = Field(
        default=0, description="Fixed monthly costs: salaries, rent, utilities"
    )


# ─────────────────────────────────────────────
# DOMAIN MODELS
# ─────────────────────────────────────────────


class Goal(BaseModel):
    """A client objective over a date window.

    Range checks on target_value and the dates belong to the engine boundary,
    which rejects them as InvalidArgument.
    """

    model_config = ConfigDict(frozen=True)

    id: str = ""
    client_id: str
    metric_type: GoalMetricType
    target_value: float
    period: GoalPeriod = GoalPeriod.MONTHLY
    start_date: dt.date
    end_date: dt.date
    label: Optional[str] = None
    description: Optional[str] = None
    status: GoalStatus = GoalStatus.ACTIVE


class GoalProgress(Goal):
    """Goal plus its derived pacing and profit figures. Never persisted."""

    current_value: float = 0.0
    progress_percentage: float = 0.0
    """Not clamped: an overachieved goal reports more than 100."""
    expected_progress: float = 0.0
    is_on_track: bool = False
    is_completed: bool = False
    """Advisory only; the persisted status is left untouched."""
    days_remaining: int = 0
    daily_target: float = 0.0
    today_change: float = 0.0
    facebook_spend: float = 0.0
    roas: float = 0.0
    gross_profit: float = 0.0
    net_profit: float = 0.0
    evaluated_on: Optional[dt.date] = None
